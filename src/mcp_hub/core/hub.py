"""ExtensionHub: the single owner of all mutable hub state."""

import asyncio
import logging

from mcp_hub.core.config_cache import CACHE_DIRECTORY, ConfigCache
from mcp_hub.core.config_fetcher import ConfigFetcher
from mcp_hub.core.context import HubContext
from mcp_hub.core.errors import ExtensionNotFoundError
from mcp_hub.core.events import (
    ConfigUpdated,
    DownloadProgress,
    EventBus,
    ExtensionsChanged,
    HubEvent,
)
from mcp_hub.core.install_coordinator import InstallCoordinator
from mcp_hub.core.reconciliation import ReconciliationEngine
from mcp_hub.core.registry_store import RegistryStore, SeedRegistry, load_builtin_registry
from mcp_hub.core.remote_config import RemoteConfigService
from mcp_hub.models.cache import CacheInfo
from mcp_hub.models.extension import ExtensionState
from mcp_hub.models.registry import ExtensionCategory, RegistryEntry

logger = logging.getLogger(__name__)


class ExtensionHub:
    """Wires the catalog, registry, reconciliation and install components together.

    One hub per project. It is not safe for concurrent use: two overlapping
    refreshes race and the last one to finish wins.
    """

    def __init__(self, ctx: HubContext, *, seed: SeedRegistry | None = None) -> None:
        self._ctx = ctx
        self.events = EventBus()

        self._cache = ConfigCache(
            ctx.project_root / CACHE_DIRECTORY,
            settings=ctx.settings,
            time=ctx.time,
        )
        fetcher = ConfigFetcher(
            ctx.downloader,
            ctx.config_urls,
            timeout_seconds=ctx.fetch_timeout_seconds,
            on_progress=self._report_progress,
        )
        self.remote_config = RemoteConfigService(
            fetcher=fetcher,
            cache=self._cache,
            settings=ctx.settings,
            events=self.events,
            time=ctx.time,
        )
        self.registry = RegistryStore(
            seed if seed is not None else load_builtin_registry(),
            on_change=self._registry_changed,
        )
        self.reconciliation = ReconciliationEngine(
            registry=self.registry,
            package_manager=ctx.package_manager,
            filesystem=ctx.filesystem,
            extension_prefix=ctx.extension_prefix,
        )
        self.coordinator = InstallCoordinator(
            registry=self.registry,
            reconciliation=self.reconciliation,
            package_manager=ctx.package_manager,
            git=ctx.git,
            filesystem=ctx.filesystem,
            events=self.events,
            local_source_prefixes=ctx.local_source_prefixes,
        )
        self.events.subscribe(self._handle_event)

    def initialize(self, *, start_refresh: bool = True) -> asyncio.Task[bool] | None:
        """Load the cached catalog, overlay it and start a refresh if one is due.

        Returns:
            The background refresh task, or None when the cache is fresh or
            start_refresh is False
        """
        task = self.remote_config.initialize(start_refresh=start_refresh)
        if self.remote_config.current_config is not None:
            self._apply_remote_catalog()
        return task

    async def get_extensions(self) -> list[ExtensionState]:
        return await self.reconciliation.get_extensions()

    async def installed_extensions(self) -> list[ExtensionState]:
        return await self.reconciliation.installed_extensions()

    async def extensions_with_updates(self) -> list[ExtensionState]:
        return await self.reconciliation.extensions_with_updates()

    async def extensions_by_category(self, category: ExtensionCategory) -> list[ExtensionState]:
        return await self.reconciliation.extensions_by_category(category)

    async def get_extension(self, extension_id: str) -> ExtensionState | None:
        return await self.reconciliation.get_extension(extension_id)

    async def is_installed(self, extension_id: str) -> bool:
        return await self.reconciliation.is_installed(extension_id)

    def register_extension(self, entry: RegistryEntry) -> None:
        self.registry.register(entry)

    async def install(self, extension_id: str) -> ExtensionState:
        return await self.coordinator.install(await self._require_state(extension_id))

    async def uninstall(self, extension_id: str) -> ExtensionState:
        return await self.coordinator.uninstall(await self._require_state(extension_id))

    async def update(self, extension_id: str) -> ExtensionState:
        return await self.coordinator.update(await self._require_state(extension_id))

    async def refresh_remote_configuration(self) -> bool:
        return await self.remote_config.refresh()

    def cache_info(self) -> CacheInfo:
        return self.remote_config.cache_info()

    def clear_cache(self) -> None:
        """Delete the cached catalog and fall back to the built-in registry."""
        self.remote_config.clear_cache()
        self.registry.apply_remote({})

    async def _require_state(self, extension_id: str) -> ExtensionState:
        state = await self.reconciliation.get_extension(extension_id)
        if state is None:
            raise ExtensionNotFoundError(extension_id)
        return state

    def _apply_remote_catalog(self) -> None:
        self.registry.apply_remote(
            self.remote_config.remote_registry(),
            self.remote_config.remote_legacy_directories(),
        )

    def _handle_event(self, event: HubEvent) -> None:
        if isinstance(event, ConfigUpdated):
            logger.debug("Catalog %s adopted, overlaying registry", event.version)
            self._apply_remote_catalog()
        elif isinstance(event, ExtensionsChanged):
            self.reconciliation.invalidate()

    def _registry_changed(self) -> None:
        self.events.emit(ExtensionsChanged())

    def _report_progress(self, progress: float) -> None:
        self.events.emit(DownloadProgress(progress=progress))
