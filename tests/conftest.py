import logging
import shutil
from pathlib import Path

import pytest

from image_updater.config import UpdaterConfig
from image_updater.lib.command import CommandError


class FakeTools:
    """In-memory FAT image behind the ImageTools interface.

    ``files`` maps in-image paths to content, ``dirs`` holds in-image
    directories. Mounting materializes the image into the real scratch dir
    and unmounting commits whatever is there back into the image.
    """

    def __init__(self, *, mount_ok=True, mount_active=True):
        self.mount_ok = mount_ok
        self.mount_active = mount_active
        self.umount_fails = False
        self.copy_fails = False
        self.offline_copy_fails = False
        self.files = {}
        self.dirs = {"/"}
        self.mounted_at = None
        self.calls = []

    def mount(self, image, target):
        self.calls.append("mount")
        if self.mount_ok and self.mount_active:
            for d in sorted(self.dirs):
                (target / d.lstrip("/")).mkdir(parents=True, exist_ok=True)
            for p, data in self.files.items():
                (target / p.lstrip("/")).write_bytes(data)
            self.mounted_at = target
        return self.mount_ok

    def is_mountpoint(self, path):
        return self.mounted_at is not None and Path(path) == self.mounted_at

    def umount(self, path):
        self.calls.append("umount")
        if self.umount_fails or self.mounted_at is None or Path(path) != self.mounted_at:
            return False
        root = self.mounted_at
        self.dirs = {"/"}
        self.files = {}
        for item in root.rglob("*"):
            rel = "/" + item.relative_to(root).as_posix()
            if item.is_dir():
                self.dirs.add(rel)
            else:
                self.files[rel] = item.read_bytes()
        for child in root.iterdir():
            if child.is_dir():
                shutil.rmtree(child)
            else:
                child.unlink()
        self.mounted_at = None
        return True

    def sync(self):
        self.calls.append("sync")

    def make_dir(self, path):
        self.calls.append("mkdir")
        path.mkdir(parents=True, exist_ok=True)

    def copy_file(self, source, dest_dir):
        self.calls.append("cp")
        if self.copy_fails:
            raise CommandError(["cp", str(source), str(dest_dir)], 1, "cp: No space left on device")
        shutil.copyfile(source, dest_dir / source.name)

    def offline_mkdir(self, image, path):
        self.calls.append("mmd")
        parent = path.rstrip("/").rsplit("/", 1)[0] or "/"
        if path in self.dirs or parent not in self.dirs:
            return False
        self.dirs.add(path)
        return True

    def offline_copy(self, image, source, dest_dir):
        self.calls.append("mcopy")
        if self.offline_copy_fails or dest_dir not in self.dirs:
            raise CommandError(["mcopy", "-i", str(image)], 1, "init: non DOS media")
        self.files[f"{dest_dir.rstrip('/')}/{source.name}"] = source.read_bytes()


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for attr in ("_image_updater_configured", "_image_updater_log_path"):
        if hasattr(root, attr):
            delattr(root, attr)


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Working directory holding disk.img and app.bin."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "disk.img").write_bytes(b"\xeb\x3c\x90MSDOS5.0" + b"\x00" * 502)
    (tmp_path / "app.bin").write_bytes(b"\x7fELF\x02\x01\x01" + bytes(range(64)))
    return tmp_path


@pytest.fixture
def config(workspace):
    return UpdaterConfig(raw={"image": str(workspace / "disk.img"), "mount_dir": str(workspace / "mnt")})


@pytest.fixture
def fake_tools():
    return FakeTools()


@pytest.fixture
def offline_tools():
    """Environment without loop devices."""
    return FakeTools(mount_ok=False)


@pytest.fixture
def make_tools():
    return FakeTools
