from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Protocol, Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)


class ImageTools(Protocol):
    """External utilities the updater delegates to.

    Everything that touches the kernel, needs privileges or edits FAT
    structures goes through here, so the decision logic in the updater can
    run against a fake.
    """

    def mount(self, image: Path, target: Path) -> bool:
        ...

    def is_mountpoint(self, path: Path) -> bool:
        ...

    def umount(self, path: Path) -> bool:
        ...

    def sync(self) -> None:
        ...

    def make_dir(self, path: Path) -> None:
        ...

    def copy_file(self, source: Path, dest_dir: Path) -> None:
        ...

    def offline_mkdir(self, image: Path, path: str) -> bool:
        ...

    def offline_copy(self, image: Path, source: Path, dest_dir: str) -> None:
        ...


def mtools_path(path: str) -> str:
    """Turn an in-image POSIX path into an mtools drive path (``::/sbin``)."""

    return "::/" + path.strip("/")


class SystemTools:
    """ImageTools backed by mount/mountpoint/umount/sync/cp and mtools."""

    def __init__(self, *, use_sudo: bool = True, dry_run: bool = False) -> None:
        self.use_sudo = use_sudo
        self.dry_run = dry_run

    def _priv(self, argv: Sequence[str]) -> List[str]:
        return ["sudo", *argv] if self.use_sudo else list(argv)

    def mount(self, image: Path, target: Path) -> bool:
        r = run_cmd(self._priv(["mount", str(image), str(target)]), check=False, dry_run=self.dry_run)
        if not r.ok:
            logger.info("mount %s on %s failed (%d)", image, target, r.returncode)
        return r.ok

    def is_mountpoint(self, path: Path) -> bool:
        r = run_cmd(["mountpoint", "-q", str(path)], check=False, dry_run=self.dry_run)
        return r.ok

    def umount(self, path: Path) -> bool:
        return run_cmd(self._priv(["umount", str(path)]), check=False, dry_run=self.dry_run).ok

    def sync(self) -> None:
        r = run_cmd(["sync"], check=False, dry_run=self.dry_run)
        if not r.ok:
            logger.warning("sync failed (%d)", r.returncode)

    def make_dir(self, path: Path) -> None:
        run_cmd(self._priv(["mkdir", "-p", str(path)]), dry_run=self.dry_run)

    def copy_file(self, source: Path, dest_dir: Path) -> None:
        # Trailing slash makes cp refuse to create a file named like the dir.
        run_cmd(self._priv(["cp", str(source), f"{dest_dir}/"]), dry_run=self.dry_run)

    def offline_mkdir(self, image: Path, path: str) -> bool:
        return run_cmd(
            ["mmd", "-i", str(image), mtools_path(path)],
            check=False,
            dry_run=self.dry_run,
        ).ok

    def offline_copy(self, image: Path, source: Path, dest_dir: str) -> None:
        dest = mtools_path(dest_dir).rstrip("/") + "/"
        run_cmd(["mcopy", "-i", str(image), "-o", str(source), dest], dry_run=self.dry_run)
