from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

from .errors import UpdateError

DEFAULT_IMAGE_PATH = "./disk.img"
DEFAULT_MOUNT_DIR = "./mnt"
DEFAULT_DEST_DIR = "/sbin"


@dataclass(frozen=True)
class UpdaterConfig:
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def image_path(self) -> Path:
        return Path(self.raw.get("image") or DEFAULT_IMAGE_PATH)

    @property
    def mount_dir(self) -> Path:
        return Path(self.raw.get("mount_dir") or DEFAULT_MOUNT_DIR)

    @property
    def dest_dir(self) -> str:
        d = str(self.raw.get("dest_dir") or DEFAULT_DEST_DIR)
        return "/" + d.strip("/")

    @property
    def use_sudo(self) -> bool:
        v = self.raw.get("use_sudo")
        if v is None:
            return True
        if not isinstance(v, bool):
            raise UpdateError(f"use_sudo must be true or false, got {v!r}")
        return v

    @property
    def dry_run(self) -> bool:
        return bool(self.raw.get("dry_run", False))

    def with_overrides(self, **overrides: Any) -> "UpdaterConfig":
        """Return a copy with the non-None overrides applied (CLI wins over file)."""

        raw = dict(self.raw)
        raw.update({k: v for k, v in overrides.items() if v is not None})
        return UpdaterConfig(raw=raw)


def load_config(path: str) -> UpdaterConfig:
    p = Path(path)
    if not p.exists():
        raise UpdateError(f"Config file '{path}' doesn't exist!")

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise UpdateError("config must be YAML")

    try:
        import yaml  # type: ignore
    except Exception as e:  # pragma: no cover
        raise RuntimeError("PyYAML is required to read the updater config") from e

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise UpdateError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise UpdateError(f"{path} must contain a mapping/object")

    cfg = UpdaterConfig(raw=raw)
    cfg.use_sudo  # rejects non-boolean values early
    return cfg
