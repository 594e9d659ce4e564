from __future__ import annotations

import logging

from ..context import UpdateContext, UpdateResult
from ..errors import OfflineWriteFailure
from ..lib.command import CommandError

logger = logging.getLogger(__name__)


class OfflineStrategy:
    """Edit the FAT image directly with mtools, without mounting it."""

    strategy_id = "mtools"

    def run(self, ctx: UpdateContext) -> UpdateResult:
        tools = ctx.tools
        print("Mount failed, using mtools instead...")

        # The probe may have left a half-done mount behind.
        if not tools.umount(ctx.mount_dir):
            logger.debug("Nothing to unmount at %s", ctx.mount_dir)
        if not ctx.remove_scratch_dir():
            raise OfflineWriteFailure(
                f"{ctx.mount_dir} is still mounted; refusing to edit {ctx.image} offline"
            )

        # mmd has no -p; make each level, an existing one just fails.
        parts = [p for p in ctx.dest_dir.split("/") if p]
        for i in range(1, len(parts) + 1):
            d = "/" + "/".join(parts[:i])
            if not tools.offline_mkdir(ctx.image, d):
                logger.debug("mmd %s failed, assuming it already exists", d)

        try:
            tools.offline_copy(ctx.image, ctx.source, ctx.dest_dir)
        except CommandError as e:
            raise OfflineWriteFailure(f"Failed to copy '{ctx.source}' into {ctx.image}: {e}") from e

        logger.info("Copied %s to %s:%s via mtools", ctx.source, ctx.image, ctx.dest_path)
        print("Successfully copied using mtools")
        return UpdateResult(method=self.strategy_id, source=ctx.source, image=ctx.image, dest=ctx.dest_path)
