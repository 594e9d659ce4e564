from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Protocol, Union

from .config import UpdaterConfig
from .context import UpdateContext, UpdateResult
from .errors import ImageNotFound, MountUnavailable, SourceNotFound
from .lib.tools import ImageTools, SystemTools
from .strategies import MountStrategy, OfflineStrategy

logger = logging.getLogger(__name__)


class Strategy(Protocol):
    """One way of getting the source file into the image."""

    strategy_id: str

    def run(self, ctx: UpdateContext) -> UpdateResult:
        ...


def validate_inputs(source: Path, image: Path) -> None:
    """Check the preconditions; nothing has been touched if this raises."""

    if not source.is_file():
        raise SourceNotFound(f"File '{source}' doesn't exist!")
    if not image.is_file():
        raise ImageNotFound(f"{image} doesn't exist! Please 'make disk_img'")


def probe_mount(ctx: UpdateContext) -> None:
    """Try to loop-mount the image on the scratch dir.

    The mount command's exit status alone is not trusted: without loop
    devices it can report success while nothing is mounted, so the scratch
    dir must also be an active mountpoint afterwards.
    """

    try:
        ctx.create_scratch_dir()
    except OSError as e:
        raise MountUnavailable(f"cannot create scratch dir {ctx.mount_dir}: {e}") from e
    if not ctx.tools.mount(ctx.image, ctx.mount_dir):
        raise MountUnavailable(f"mount of {ctx.image} on {ctx.mount_dir} failed")
    if not ctx.tools.is_mountpoint(ctx.mount_dir):
        raise MountUnavailable(f"{ctx.mount_dir} is not an active mountpoint after mount")


def select_strategy(ctx: UpdateContext) -> Strategy:
    try:
        probe_mount(ctx)
    except MountUnavailable as e:
        logger.info("Falling back to offline FAT editing: %s", e)
        return OfflineStrategy()
    return MountStrategy()


def update(
    source: Union[str, Path],
    *,
    config: Optional[UpdaterConfig] = None,
    tools: Optional[ImageTools] = None,
) -> UpdateResult:
    """Copy ``source`` into ``<image>:<dest_dir>/``, replacing any existing file."""

    cfg = config or UpdaterConfig()
    src = Path(source)
    image = cfg.image_path

    validate_inputs(src, image)

    ctx = UpdateContext(
        source=src,
        image=image,
        mount_dir=cfg.mount_dir,
        dest_dir=cfg.dest_dir,
        tools=tools or SystemTools(use_sudo=cfg.use_sudo, dry_run=cfg.dry_run),
        dry_run=cfg.dry_run,
    )

    print(f"Write file '{src}' into {image}")
    strategy = select_strategy(ctx)
    logger.info("Using strategy %s", strategy.strategy_id)
    return strategy.run(ctx)
