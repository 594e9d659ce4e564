from __future__ import annotations


class UpdateError(RuntimeError):
    """Base class for failures reported to the user with an exit code."""

    exit_code = 1


class UsageError(UpdateError):
    exit_code = 2


class SourceNotFound(UpdateError):
    exit_code = 3


class ImageNotFound(UpdateError):
    exit_code = 4


class OfflineWriteFailure(UpdateError):
    exit_code = 5


class MountedWriteFailure(UpdateError):
    exit_code = 6


class MountUnavailable(UpdateError):
    """The image could not be loop-mounted; selects the mtools fallback.

    Raised by the mount probe only, and always handled by the updater.
    """
