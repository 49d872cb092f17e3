"""Install, uninstall and update extensions.

Two installation paths exist. Packages whose URL points at one of the local
source hosts are cloned with git into Packages/<id> and picked up by the host
as embedded packages. Everything else goes through the package manager.
"""

import logging
from collections.abc import Awaitable, Callable
from enum import StrEnum

from mcp_hub.core.errors import (
    DirectoryRemovalError,
    DirectoryRenameError,
    DirectoryResolutionError,
    ExtensionNotFoundError,
    GitOperationError,
)
from mcp_hub.core.events import EventBus, ExtensionsChanged, OperationCompleted
from mcp_hub.core.reconciliation import ReconciliationEngine
from mcp_hub.core.registry_store import RegistryStore
from mcp_hub.integrations.filesystem.abc import PackageFilesystem
from mcp_hub.integrations.git.abc import Git, GitResult
from mcp_hub.integrations.package_manager.abc import PackageManager
from mcp_hub.models.extension import LOCAL_VERSION, ExtensionState, InstallKind
from mcp_hub.models.registry import RegistryEntry

logger = logging.getLogger(__name__)

DEFAULT_LOCAL_SOURCE_PREFIXES: tuple[str, ...] = ("github.com/MiAO-AI-Lab",)
# Updates clone into a hidden sibling first; the host ignores dot directories
STAGING_PREFIX = "."


class Operation(StrEnum):
    INSTALL = "install"
    UNINSTALL = "uninstall"
    UPDATE = "update"


class InstallCoordinator:
    """Routes extension operations to the package manager or to git.

    Every attempt emits OperationCompleted; every success also updates the
    given state in place and emits ExtensionsChanged. Failures are re-raised
    to the caller and never retried.
    """

    def __init__(
        self,
        *,
        registry: RegistryStore,
        reconciliation: ReconciliationEngine,
        package_manager: PackageManager,
        git: Git,
        filesystem: PackageFilesystem,
        events: EventBus,
        local_source_prefixes: tuple[str, ...] = DEFAULT_LOCAL_SOURCE_PREFIXES,
    ) -> None:
        self._registry = registry
        self._reconciliation = reconciliation
        self._package_manager = package_manager
        self._git = git
        self._filesystem = filesystem
        self._events = events
        self._local_source_prefixes = tuple(prefix.lower() for prefix in local_source_prefixes)

    def is_local_source(self, entry: RegistryEntry) -> bool:
        """Whether the entry is installed by cloning rather than via the package manager."""
        url = entry.package_url.lower()
        return any(prefix in url for prefix in self._local_source_prefixes)

    async def install(self, state: ExtensionState) -> ExtensionState:
        async def action() -> None:
            entry = self._require_entry(state.id)
            if self.is_local_source(entry):
                await self._install_local(entry, state)
            else:
                package = await self._package_manager.add(entry.id, entry.package_url)
                state.mark_installed(package.version, InstallKind.PACKAGE_MANAGER)

        await self._run(state, Operation.INSTALL, action)
        return state

    async def uninstall(self, state: ExtensionState) -> ExtensionState:
        async def action() -> None:
            if state.install_kind != InstallKind.PACKAGE_MANAGER and (
                self._reconciliation.is_local_package(state.id)
            ):
                self._remove_local(state.id)
            else:
                await self._package_manager.remove(state.id)
            state.mark_uninstalled()

        await self._run(state, Operation.UNINSTALL, action)
        return state

    async def update(self, state: ExtensionState) -> ExtensionState:
        async def action() -> None:
            entry = self._require_entry(state.id)
            if self.is_local_source(entry):
                await self._update_local(entry, state)
            else:
                package = await self._package_manager.add(entry.id, entry.package_url)
                state.mark_installed(package.version, InstallKind.PACKAGE_MANAGER)

        await self._run(state, Operation.UPDATE, action)
        return state

    async def _run(
        self,
        state: ExtensionState,
        operation: Operation,
        action: Callable[[], Awaitable[None]],
    ) -> None:
        logger.info("Starting %s of %s", operation, state.id)
        try:
            await action()
        except Exception as e:
            logger.error("Failed to %s %s: %s", operation, state.id, e)
            self._events.emit(
                OperationCompleted(
                    extension_id=state.id, operation=operation, success=False, error=str(e)
                )
            )
            raise

        logger.info("Completed %s of %s", operation, state.id)
        self._events.emit(
            OperationCompleted(extension_id=state.id, operation=operation, success=True)
        )
        self._events.emit(ExtensionsChanged())

    def _require_entry(self, extension_id: str) -> RegistryEntry:
        entry = self._registry.get(extension_id)
        if entry is None:
            raise ExtensionNotFoundError(extension_id)
        return entry

    async def _install_local(self, entry: RegistryEntry, state: ExtensionState) -> None:
        existing = self._reconciliation.find_package_directory(entry.id)
        if existing is not None:
            logger.info("%s is already present in Packages/%s, skipping clone", entry.id, existing)
        else:
            await self._clone(entry, entry.id)
        state.mark_installed(LOCAL_VERSION, InstallKind.LOCAL_CLONE)

    async def _update_local(self, entry: RegistryEntry, state: ExtensionState) -> None:
        """Clone into a staging directory and swap it in only once the clone succeeded.

        A failed clone leaves the existing directory and the state untouched.
        """
        existing = self._reconciliation.find_package_directory(entry.id)
        if existing is None:
            await self._clone(entry, entry.id)
            state.mark_installed(LOCAL_VERSION, InstallKind.LOCAL_CLONE)
            return

        staging = f"{STAGING_PREFIX}{entry.id}"
        if self._filesystem.directory_exists(staging):
            logger.info("Removing stale staging clone Packages/%s", staging)
            self._delete_directory(staging)
        await self._clone(entry, staging)

        try:
            self._delete_directory(existing)
        except DirectoryRemovalError:
            self._discard_partial_clone(staging)
            raise
        self._filesystem.delete_meta_file(existing)
        state.mark_uninstalled()

        try:
            self._filesystem.rename_directory(staging, entry.id)
        except OSError as e:
            raise DirectoryRenameError(staging, entry.id, str(e)) from e
        logger.info("Replaced Packages/%s with a fresh clone of %s", existing, entry.id)
        state.mark_installed(LOCAL_VERSION, InstallKind.LOCAL_CLONE)

    async def _clone(self, entry: RegistryEntry, directory: str) -> None:
        """Clone the release tag, falling back to the default branch."""
        self._filesystem.ensure_packages_root()
        tag = f"v{entry.latest_version}"

        result, _ = await self._clone_attempt(entry, directory, branch=tag)
        if result.succeeded:
            return
        logger.warning(
            "Cloning %s at tag %s failed, falling back to the default branch: %s",
            entry.id,
            tag,
            result.stderr.strip(),
        )

        result, cleanup_error = await self._clone_attempt(entry, directory, branch=None)
        if not result.succeeded:
            raise GitOperationError(entry.package_url, result.stderr, cleanup_error)

    async def _clone_attempt(
        self, entry: RegistryEntry, directory: str, *, branch: str | None
    ) -> tuple[GitResult, str | None]:
        """Run one clone; a failed clone's leftovers are removed.

        Returns:
            The git result and the error that kept a leftover directory in
            place, if any
        """
        result = await self._git.clone(
            entry.package_url,
            cwd=self._filesystem.packages_root,
            directory=directory,
            branch=branch,
        )
        cleanup_error = None
        if not result.succeeded and self._filesystem.directory_exists(directory):
            cleanup_error = self._discard_partial_clone(directory)
        return result, cleanup_error

    def _discard_partial_clone(self, directory: str) -> str | None:
        logger.debug("Removing partial clone in Packages/%s", directory)
        try:
            self._delete_directory(directory)
        except DirectoryRemovalError as e:
            logger.warning("%s", e)
            return str(e)
        return None

    def _remove_local(self, extension_id: str) -> None:
        directory = self._reconciliation.find_package_directory(extension_id)
        if directory is None:
            raise DirectoryResolutionError(extension_id)
        self._delete_directory(directory)
        self._filesystem.delete_meta_file(directory)
        logger.info("Removed local package %s from Packages/%s", extension_id, directory)

    def _delete_directory(self, directory: str) -> None:
        """Delete a package directory, retrying once with read-only bits cleared.

        Best effort: whatever the first attempt deleted stays deleted when the
        retry also fails.
        """
        if self._filesystem.is_git_checkout(directory):
            self._clear_read_only(directory)

        try:
            self._filesystem.delete_directory(directory)
            return
        except OSError as first:
            logger.warning("Could not remove Packages/%s directly: %s", directory, first)
            first_error = str(first)

        self._clear_read_only(directory)
        try:
            self._filesystem.delete_directory(directory)
        except OSError as second:
            raise DirectoryRemovalError(directory, first_error, str(second)) from second

    def _clear_read_only(self, directory: str) -> None:
        try:
            self._filesystem.clear_read_only(directory)
        except OSError as e:
            logger.warning("Could not clear read-only attributes in Packages/%s: %s", directory, e)
