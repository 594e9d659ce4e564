from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple

FALLBACK_LOG_NAME = "image-updater.log"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"


def _open_log_file(log_path: str) -> Tuple[logging.Handler, str]:
    try:
        Path(log_path).parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(log_path), log_path
    except OSError:
        fallback = str(Path.cwd() / FALLBACK_LOG_NAME)
        return logging.FileHandler(fallback), fallback


def configure_logging(
    log_path: Optional[str] = None,
    level: int = logging.WARNING,
    also_console: bool = True,
) -> Optional[str]:
    """Configure the root logger: stderr console plus an optional log file.

    An unwritable log path falls back to the working directory; repeated
    calls only adjust the level. Returns the log file in use, if any.
    """

    root = logging.getLogger()
    root.setLevel(level)

    if getattr(root, "_image_updater_configured", False):
        return getattr(root, "_image_updater_log_path", None)

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)
    handlers: list[logging.Handler] = []

    chosen_path: Optional[str] = None
    if log_path:
        file_handler, chosen_path = _open_log_file(log_path)
        handlers.append(file_handler)
    if also_console:
        handlers.append(logging.StreamHandler())

    for h in handlers:
        h.setFormatter(fmt)
        root.addHandler(h)

    setattr(root, "_image_updater_configured", True)
    setattr(root, "_image_updater_log_path", chosen_path)

    logging.getLogger(__name__).info("Logging initialized (requested=%s, actual=%s)", log_path, chosen_path)
    return chosen_path
