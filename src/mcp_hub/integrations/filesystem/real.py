"""Real package filesystem backed by pathlib and shutil."""

import json
import os
import shutil
import stat
from pathlib import Path
from typing import Any

from mcp_hub.integrations.filesystem.abc import PackageFilesystem

LOCK_FILE_NAME = "packages-lock.json"
MANIFEST_FILE_NAME = "package.json"


class RealPackageFilesystem(PackageFilesystem):
    """Production implementation operating on <project>/Packages."""

    def __init__(self, packages_root: Path) -> None:
        self._packages_root = packages_root

    @property
    def packages_root(self) -> Path:
        return self._packages_root

    def ensure_packages_root(self) -> None:
        self._packages_root.mkdir(parents=True, exist_ok=True)

    def directory_exists(self, name: str) -> bool:
        return (self._packages_root / name).is_dir()

    def list_directories(self) -> list[str]:
        if not self._packages_root.is_dir():
            return []
        return sorted(
            entry.name
            for entry in self._packages_root.iterdir()
            if entry.is_dir() and not entry.name.startswith(".")
        )

    def read_manifest_name(self, name: str) -> str | None:
        manifest = self._packages_root / name / MANIFEST_FILE_NAME
        if not manifest.is_file():
            return None
        data = json.loads(manifest.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"{manifest} does not contain a JSON object")
        declared = data.get("name")
        return declared if isinstance(declared, str) else None

    def read_lock_file(self) -> dict[str, Any] | None:
        lock_file = self._packages_root / LOCK_FILE_NAME
        if not lock_file.is_file():
            return None
        data = json.loads(lock_file.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"{lock_file} does not contain a JSON object")
        return data

    def is_git_checkout(self, name: str) -> bool:
        return (self._packages_root / name / ".git").exists()

    def clear_read_only(self, name: str) -> None:
        root = self._packages_root / name
        for dirpath, dirnames, filenames in os.walk(root):
            for entry in [*dirnames, *filenames]:
                path = Path(dirpath) / entry
                path.chmod(path.stat().st_mode | stat.S_IWRITE)
        root.chmod(root.stat().st_mode | stat.S_IWRITE)

    def delete_directory(self, name: str) -> None:
        shutil.rmtree(self._packages_root / name)

    def rename_directory(self, name: str, new_name: str) -> None:
        target = self._packages_root / new_name
        if target.exists():
            raise FileExistsError(f"{target} already exists")
        (self._packages_root / name).rename(target)

    def delete_meta_file(self, name: str) -> None:
        (self._packages_root / f"{name}.meta").unlink(missing_ok=True)
