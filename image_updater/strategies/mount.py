from __future__ import annotations

import logging

from ..context import UpdateContext, UpdateResult
from ..errors import MountedWriteFailure
from ..lib.command import CommandError

logger = logging.getLogger(__name__)


class MountStrategy:
    """Copy through an already active loopback mount of the image."""

    strategy_id = "mount"

    def run(self, ctx: UpdateContext) -> UpdateResult:
        tools = ctx.tools
        target_dir = ctx.mounted_dest_dir

        try:
            tools.make_dir(target_dir)
            tools.copy_file(ctx.source, target_dir)
            tools.sync()
        except CommandError as e:
            # Still give the image back; the copy error is what gets reported.
            self._release(ctx, strict=False)
            raise MountedWriteFailure(f"Failed to copy '{ctx.source}' into {ctx.image}: {e}") from e

        self._release(ctx, strict=True)

        logger.info("Copied %s to %s:%s via mount", ctx.source, ctx.image, ctx.dest_path)
        print("Successfully copied using mount")
        return UpdateResult(method=self.strategy_id, source=ctx.source, image=ctx.image, dest=ctx.dest_path)

    def _release(self, ctx: UpdateContext, *, strict: bool) -> None:
        """Unmount, flush and drop the scratch dir."""

        if not ctx.tools.umount(ctx.mount_dir):
            if strict:
                raise MountedWriteFailure(f"Failed to unmount {ctx.mount_dir}; {ctx.image} may be inconsistent")
            logger.error("Failed to unmount %s", ctx.mount_dir)
            return

        ctx.tools.sync()
        if not ctx.remove_scratch_dir() and strict:
            raise MountedWriteFailure(f"{ctx.mount_dir} is still mounted after unmount")
