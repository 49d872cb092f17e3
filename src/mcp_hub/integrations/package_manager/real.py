"""Unity Package Manager implementation backed by the project's manifest files.

Unity resolves Packages/manifest.json on the next editor refresh and records
the result in Packages/packages-lock.json. Adding or removing a package edits
the manifest; listing reads the lock file, falling back to the manifest when
the project has never been resolved.
"""

import json
import logging
from pathlib import Path
from typing import Any

from mcp_hub.core.errors import PackageManagerError
from mcp_hub.integrations.package_manager.abc import PackageManager
from mcp_hub.models.package import InstalledPackage

logger = logging.getLogger(__name__)

BUILTIN_PREFIX = "com.unity.modules."
# Sources the reconciliation engine detects on disk instead
ON_DISK_SOURCES = frozenset({"embedded", "local"})


class UnityManifestPackageManager(PackageManager):
    """Production implementation editing Packages/manifest.json."""

    def __init__(self, project_root: Path) -> None:
        self._project_root = project_root

    @property
    def manifest_path(self) -> Path:
        return self._project_root / "Packages" / "manifest.json"

    @property
    def lock_path(self) -> Path:
        return self._project_root / "Packages" / "packages-lock.json"

    async def list_packages(self, *, include_builtin: bool) -> list[InstalledPackage]:
        if self.lock_path.exists():
            dependencies = self._read_json(self.lock_path).get("dependencies", {})
        else:
            logger.debug("No lock file at %s, listing from manifest", self.lock_path)
            dependencies = {
                name: {"version": ref, "source": _source_for_ref(ref)}
                for name, ref in self._read_manifest().get("dependencies", {}).items()
            }

        packages: list[InstalledPackage] = []
        for name, info in sorted(dependencies.items()):
            if not isinstance(info, dict):
                continue
            source = info.get("source")
            if source in ON_DISK_SOURCES:
                continue
            if _is_builtin(name, source) and not include_builtin:
                continue
            packages.append(self._to_installed_package(name, info))
        return packages

    async def add(self, package_id: str, package_ref: str) -> InstalledPackage:
        manifest = self._read_manifest()
        dependencies = manifest.setdefault("dependencies", {})
        manifest_value, version = _split_ref(package_id, package_ref)
        dependencies[package_id] = manifest_value
        self._write_manifest(manifest)
        logger.info("Added %s (%s) to %s", package_id, manifest_value, self.manifest_path)
        return InstalledPackage(
            name=package_id,
            version=version,
            source=_source_for_ref(manifest_value),
        )

    async def remove(self, package_id: str) -> None:
        manifest = self._read_manifest()
        dependencies = manifest.get("dependencies", {})
        if package_id not in dependencies:
            raise PackageManagerError(f"Package {package_id} is not listed in {self.manifest_path}")
        del dependencies[package_id]
        self._write_manifest(manifest)
        logger.info("Removed %s from %s", package_id, self.manifest_path)

    def _read_manifest(self) -> dict[str, Any]:
        if not self.manifest_path.exists():
            raise PackageManagerError(f"Package manifest not found at {self.manifest_path}")
        return self._read_json(self.manifest_path)

    def _read_json(self, path: Path) -> dict[str, Any]:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise PackageManagerError(f"Cannot read {path}: {e}") from e
        if not isinstance(data, dict):
            raise PackageManagerError(f"Expected a JSON object in {path}")
        return data

    def _write_manifest(self, manifest: dict[str, Any]) -> None:
        try:
            self.manifest_path.write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")
        except OSError as e:
            raise PackageManagerError(f"Cannot write {self.manifest_path}: {e}") from e

    def _to_installed_package(self, name: str, info: dict[str, Any]) -> InstalledPackage:
        package_json = self._read_cached_package_json(name)
        version = package_json.get("version") or str(info.get("version", ""))
        return InstalledPackage(
            name=name,
            version=version,
            display_name=package_json.get("displayName"),
            description=package_json.get("description"),
            author=_author_name(package_json.get("author")),
            source=info.get("source"),
        )

    def _read_cached_package_json(self, name: str) -> dict[str, Any]:
        """Read package.json from Library/PackageCache/<name>@<hash>, if resolved."""
        cache_root = self._project_root / "Library" / "PackageCache"
        if not cache_root.is_dir():
            return {}
        for candidate in sorted(cache_root.glob(f"{name}@*")):
            package_file = candidate / "package.json"
            if not package_file.is_file():
                continue
            try:
                data = json.loads(package_file.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                logger.warning("Skipping unreadable %s: %s", package_file, e)
                continue
            if isinstance(data, dict):
                return data
        return {}


def _is_builtin(name: str, source: str | None) -> bool:
    return source == "builtin" or name.startswith(BUILTIN_PREFIX)


def _source_for_ref(ref: str) -> str:
    if ref.startswith("file:"):
        return "local"
    if "://" in ref or ref.startswith("git@") or ref.endswith(".git"):
        return "git"
    return "registry"


def _split_ref(package_id: str, package_ref: str) -> tuple[str, str]:
    """Split a package ref into (manifest value, reported version).

    ``com.foo.bar@1.2.0`` records ``1.2.0``; a Git URL is recorded verbatim and
    reports its ``#revision`` fragment when present.
    """
    if _source_for_ref(package_ref) == "git":
        _, _, revision = package_ref.partition("#")
        return package_ref, revision or package_ref
    name, sep, version = package_ref.partition("@")
    if sep and name == package_id and version:
        return version, version
    return package_ref, package_ref


def _author_name(author: Any) -> str | None:
    if isinstance(author, dict):
        name = author.get("name")
        return str(name) if name else None
    if isinstance(author, str) and author:
        return author
    return None
