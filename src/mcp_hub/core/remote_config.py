"""Remote configuration service: cache-first catalog with background refresh."""

import asyncio
import logging

from mcp_hub.core.config_cache import ConfigCache
from mcp_hub.core.config_fetcher import ConfigFetcher
from mcp_hub.core.errors import HubError
from mcp_hub.core.events import ConfigError, ConfigUpdated, EventBus
from mcp_hub.core.settings import SettingsStore
from mcp_hub.integrations.time.abc import Time
from mcp_hub.models.cache import CacheInfo
from mcp_hub.models.catalog import RemoteCatalog
from mcp_hub.models.registry import RegistryEntry

logger = logging.getLogger(__name__)


class RemoteConfigService:
    """Owns the fetcher and the cache and decides when to refetch.

    Fetch failures never propagate: the last good catalog stays in use and a
    ConfigError event is emitted instead.
    """

    def __init__(
        self,
        *,
        fetcher: ConfigFetcher,
        cache: ConfigCache,
        settings: SettingsStore,
        events: EventBus,
        time: Time,
    ) -> None:
        self._fetcher = fetcher
        self._cache = cache
        self._settings = settings
        self._events = events
        self._time = time

    @property
    def current_config(self) -> RemoteCatalog | None:
        return self._cache.current

    def initialize(self, *, start_refresh: bool = True) -> asyncio.Task[bool] | None:
        """Load the cached catalog and start a refresh when it is stale.

        Must be called from within a running event loop when a refresh is due.

        Args:
            start_refresh: When False, only load the cache

        Returns:
            The background refresh task, or None if the cache is fresh or no
            refresh was requested. The caller may await it or let it run detached.
        """
        self._cache.load()
        if not start_refresh:
            return None
        if self._cache.is_freshness_satisfied():
            logger.debug("Cached catalog is fresh, skipping refresh")
            return None
        logger.debug("Cached catalog is missing or stale, refreshing in background")
        return asyncio.create_task(self.fetch_configuration(), name="mcp-hub-config-refresh")

    async def fetch_configuration(self, force: bool = False) -> bool:
        """Fetch the catalog unless the cache is fresh.

        Returns:
            True when the cache was fresh or a new catalog was adopted,
            False when the fetch failed
        """
        if not force and self._cache.is_freshness_satisfied():
            return True

        try:
            result = await self._fetcher.fetch()
        except HubError as e:
            logger.error("Failed to fetch remote configuration: %s", e)
            self._events.emit(ConfigError(message=str(e)))
            return False

        fetched_at = self._time.now()
        self._cache.store(result.raw_json, result.catalog, result.source_url)
        self._cache.adopt(result.catalog, fetched_at)
        self._record_fetch(result.catalog.version)
        self._events.emit(ConfigUpdated(version=result.catalog.version))
        return True

    async def refresh(self) -> bool:
        return await self.fetch_configuration(force=True)

    def remote_registry(self) -> dict[str, RegistryEntry]:
        catalog = self._cache.current
        if catalog is None:
            return {}
        return catalog.registry_entries()

    def remote_legacy_directories(self) -> dict[str, tuple[str, ...]]:
        catalog = self._cache.current
        if catalog is None:
            return {}
        return catalog.legacy_directories()

    def clear_cache(self) -> None:
        self._cache.clear()

    def cache_info(self) -> CacheInfo:
        return self._cache.cache_info()

    def _record_fetch(self, version: str) -> None:
        try:
            self._settings.update(
                last_fetch_time=self._cache.last_fetch_time,
                last_config_version=version,
            )
        except OSError as e:
            logger.warning("Could not save settings after fetch: %s", e)
