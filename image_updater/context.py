from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from .lib.tools import ImageTools

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpdateContext:
    source: Path
    image: Path
    mount_dir: Path
    dest_dir: str
    tools: ImageTools
    dry_run: bool = False

    @property
    def dest_path(self) -> str:
        """In-image path of the copied file."""
        return f"{self.dest_dir.rstrip('/')}/{self.source.name}"

    @property
    def mounted_dest_dir(self) -> Path:
        return self.mount_dir / self.dest_dir.lstrip("/")

    def create_scratch_dir(self) -> None:
        if self.dry_run:
            logger.info("Would create scratch dir %s", self.mount_dir)
            return
        self.mount_dir.mkdir(parents=True, exist_ok=True)

    def remove_scratch_dir(self) -> bool:
        """Remove the scratch mount dir.

        Returns False (and leaves it alone) while something is still mounted
        there; removing it then would delete files inside the image.
        """

        if self.dry_run:
            logger.info("Would remove scratch dir %s", self.mount_dir)
            return True
        if not self.mount_dir.exists():
            return True
        if self.tools.is_mountpoint(self.mount_dir):
            logger.warning("Scratch dir %s is still a mountpoint, not removing", self.mount_dir)
            return False
        if self.mount_dir.is_dir():
            shutil.rmtree(self.mount_dir)
        else:
            self.mount_dir.unlink()
        return True


@dataclass(frozen=True)
class UpdateResult:
    method: str  # mount|mtools
    source: Path
    image: Path
    dest: str
