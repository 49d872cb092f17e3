"""Merge registry entries with live installation state.

Every call to get_extensions() rebuilds the full list from scratch: the
package manager listing is the authority for package-manager installs, and
the Packages/ directory is probed for local clones, including clones that
still sit under a legacy directory name.
"""

import logging
from typing import Any

from mcp_hub.core.errors import PackageManagerError
from mcp_hub.core.registry_store import RegistryStore
from mcp_hub.integrations.filesystem.abc import PackageFilesystem
from mcp_hub.integrations.package_manager.abc import PackageManager
from mcp_hub.models.extension import LOCAL_VERSION, ExtensionState, InstallKind
from mcp_hub.models.package import InstalledPackage
from mcp_hub.models.registry import ExtensionCategory

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION_PREFIX = "com.miao.mcp"
EMBEDDED_SOURCE = "embedded"


class _DirectoryProbe:
    """Resolves extension ids to directories under Packages/.

    Manifest names are read at most once per probe, so one probe should be
    used for a single reconciliation pass and then discarded.
    """

    def __init__(self, filesystem: PackageFilesystem, registry: RegistryStore) -> None:
        self._filesystem = filesystem
        self._registry = registry
        self._manifest_owners: dict[str, list[str]] | None = None
        self._lock_dependencies: dict[str, Any] | None = None

    def find_directory(self, extension_id: str) -> str | None:
        """Canonical directory, then legacy aliases in order, then a manifest scan."""
        if self._filesystem.directory_exists(extension_id):
            return extension_id

        for alias in self._registry.aliases_for(extension_id):
            if self._filesystem.directory_exists(alias):
                logger.info("Found %s under legacy directory name %s", extension_id, alias)
                return alias

        owners = self._scan_manifests().get(extension_id, [])
        if not owners:
            return None
        if len(owners) > 1:
            logger.warning(
                "Multiple package directories declare %s (%s); using %s",
                extension_id,
                ", ".join(owners),
                owners[0],
            )
        return owners[0]

    def is_embedded_in_lock_file(self, extension_id: str) -> bool:
        info = self._lock_file_dependencies().get(extension_id)
        return isinstance(info, dict) and info.get("source") == EMBEDDED_SOURCE

    def _scan_manifests(self) -> dict[str, list[str]]:
        if self._manifest_owners is not None:
            return self._manifest_owners

        owners: dict[str, list[str]] = {}
        for directory in self._filesystem.list_directories():
            try:
                declared = self._filesystem.read_manifest_name(directory)
            except (OSError, ValueError) as e:
                logger.warning("Skipping unreadable package.json in %s: %s", directory, e)
                continue
            if declared is not None:
                owners.setdefault(declared, []).append(directory)
        self._manifest_owners = owners
        return owners

    def _lock_file_dependencies(self) -> dict[str, Any]:
        if self._lock_dependencies is not None:
            return self._lock_dependencies

        try:
            lock_file = self._filesystem.read_lock_file()
        except (OSError, ValueError) as e:
            logger.warning("Error reading packages-lock.json: %s", e)
            lock_file = None
        dependencies = lock_file.get("dependencies") if lock_file else None
        self._lock_dependencies = dependencies if isinstance(dependencies, dict) else {}
        return self._lock_dependencies


class ReconciliationEngine:
    """Produces one ExtensionState per known or installed extension."""

    def __init__(
        self,
        *,
        registry: RegistryStore,
        package_manager: PackageManager,
        filesystem: PackageFilesystem,
        extension_prefix: str | None = DEFAULT_EXTENSION_PREFIX,
    ) -> None:
        """Create ReconciliationEngine.

        Args:
            registry: Known extensions
            package_manager: Source of the live package listing
            filesystem: Packages/ directory used to detect local clones
            extension_prefix: Unregistered packages whose name starts with this
                prefix are listed as Community extensions; None lists none
        """
        self._registry = registry
        self._package_manager = package_manager
        self._filesystem = filesystem
        self._extension_prefix = extension_prefix
        self._snapshot: list[ExtensionState] | None = None

    @property
    def snapshot(self) -> list[ExtensionState] | None:
        """The list produced by the most recent pass, or None after invalidate()."""
        return self._snapshot

    def invalidate(self) -> None:
        self._snapshot = None

    async def get_extensions(self) -> list[ExtensionState]:
        listing = await self._list_installed()
        probe = _DirectoryProbe(self._filesystem, self._registry)

        states: list[ExtensionState] = []
        for entry in self._registry.entries():
            state = ExtensionState.from_registry(entry)
            installed = listing.get(entry.id)
            if installed is not None:
                # A package-manager install wins over anything found on disk
                state.mark_installed(installed.version, InstallKind.PACKAGE_MANAGER)
            elif self._detect_local(probe, entry.id):
                state.mark_installed(LOCAL_VERSION, InstallKind.LOCAL_CLONE)
            states.append(state)

        if self._extension_prefix is not None:
            for name, package in listing.items():
                if name in self._registry or not name.startswith(self._extension_prefix):
                    continue
                logger.debug("Listing unregistered package %s as a community extension", name)
                states.append(ExtensionState.from_installed_package(package))

        self._snapshot = states
        return states

    async def installed_extensions(self) -> list[ExtensionState]:
        return [state for state in await self.get_extensions() if state.is_installed]

    async def extensions_with_updates(self) -> list[ExtensionState]:
        return [state for state in await self.get_extensions() if state.has_update]

    async def extensions_by_category(self, category: ExtensionCategory) -> list[ExtensionState]:
        return [state for state in await self.get_extensions() if state.category == category]

    async def get_extension(self, extension_id: str) -> ExtensionState | None:
        for state in await self.get_extensions():
            if state.id == extension_id:
                return state
        return None

    async def is_installed(self, extension_id: str) -> bool:
        state = await self.get_extension(extension_id)
        return state is not None and state.is_installed

    def find_package_directory(self, extension_id: str) -> str | None:
        """Resolve the on-disk directory of a local install, if any."""
        return _DirectoryProbe(self._filesystem, self._registry).find_directory(extension_id)

    def is_local_package(self, extension_id: str) -> bool:
        """Whether the extension is installed as a local package on disk."""
        return self._detect_local(_DirectoryProbe(self._filesystem, self._registry), extension_id)

    async def _list_installed(self) -> dict[str, InstalledPackage]:
        try:
            packages = await self._package_manager.list_packages(include_builtin=True)
        except PackageManagerError as e:
            logger.warning("Package listing failed, treating as empty: %s", e)
            return {}
        return {package.name: package for package in packages}

    def _detect_local(self, probe: _DirectoryProbe, extension_id: str) -> bool:
        if probe.find_directory(extension_id) is not None:
            return True
        return probe.is_embedded_in_lock_file(extension_id)
