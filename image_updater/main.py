from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from .config import UpdaterConfig, load_config
from .errors import UpdateError, UsageError
from .lib.tools import ImageTools
from .logging_utils import configure_logging
from .updater import update

logger = logging.getLogger(__name__)

PROG = "image-updater"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog=PROG, description="Copy a file into /sbin of a FAT disk image")
    p.add_argument("files", nargs="*", metavar="FILE", help="File to copy into the image (exactly one)")
    p.add_argument("--image", default=None, help="Disk image (default: ./disk.img)")
    p.add_argument("--mount-dir", default=None, help="Scratch mount point (default: ./mnt)")
    p.add_argument("--dest-dir", default=None, help="Directory inside the image (default: /sbin)")
    p.add_argument("--config", default=None, help="YAML config file")
    p.add_argument("--no-sudo", action="store_true", help="Run privileged commands without sudo")
    p.add_argument("--dry-run", action="store_true", help="Log commands without running them")
    p.add_argument("--log", default=None, help="Also write the log to this file")
    p.add_argument("-v", "--verbose", action="count", default=0, help="-v for INFO, -vv for DEBUG")
    return p


def _level(verbose: int) -> int:
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return logging.WARNING


def main(argv: Optional[list[str]] = None, *, tools: Optional[ImageTools] = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)

    configure_logging(log_path=args.log, level=_level(args.verbose))

    try:
        if len(args.files) != 1:
            raise UsageError(f"Usage: {PROG} [userapp path]")

        cfg = load_config(args.config) if args.config else UpdaterConfig()
        cfg = cfg.with_overrides(
            image=args.image,
            mount_dir=args.mount_dir,
            dest_dir=args.dest_dir,
            use_sudo=False if args.no_sudo else None,
            dry_run=True if args.dry_run else None,
        )

        update(args.files[0], config=cfg, tools=tools)
    except UpdateError as e:
        logger.debug("Update failed", exc_info=True)
        print(str(e), file=sys.stderr)
        return e.exit_code
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
