"""On-disk cache of the remote catalog plus freshness policy.

The cache lives in <project>/Library/MCP-Hub-Cache/ as two files: the raw
catalog body, byte for byte as downloaded, and a small metadata document. The
pair is only trusted when both files parse and agree on the catalog version.
"""

import json
import logging
from datetime import datetime, timedelta
from pathlib import Path

from mcp_hub.core.config_fetcher import parse_catalog
from mcp_hub.core.errors import CacheIOError, InvalidConfigError
from mcp_hub.core.settings import SettingsStore
from mcp_hub.integrations.time.abc import Time
from mcp_hub.models.cache import CacheInfo, CacheMetadata
from mcp_hub.models.catalog import UNKNOWN_VERSION, RemoteCatalog

logger = logging.getLogger(__name__)

CACHE_DIRECTORY = Path("Library") / "MCP-Hub-Cache"
CONFIG_FILE_NAME = "remote-config.json"
METADATA_FILE_NAME = "cache-metadata.json"


class ConfigCache:
    """Holds the in-memory catalog and persists it between runs."""

    def __init__(self, cache_dir: Path, *, settings: SettingsStore, time: Time) -> None:
        self._cache_dir = cache_dir
        self._settings = settings
        self._time = time
        self._current: RemoteCatalog | None = None
        self._last_fetch_time: datetime | None = None

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    @property
    def config_path(self) -> Path:
        return self._cache_dir / CONFIG_FILE_NAME

    @property
    def metadata_path(self) -> Path:
        return self._cache_dir / METADATA_FILE_NAME

    @property
    def current(self) -> RemoteCatalog | None:
        return self._current

    @property
    def last_fetch_time(self) -> datetime | None:
        return self._last_fetch_time

    def is_freshness_satisfied(self) -> bool:
        """Whether the in-memory catalog may be used without refetching.

        Evaluated in order: nothing loaded is never fresh; with auto-update
        disabled anything loaded is fresh; otherwise the last fetch must be
        within the configured expiry window.
        """
        if self._current is None:
            return False
        settings = self._settings.current
        if not settings.auto_update_enabled:
            return True
        if self._last_fetch_time is None:
            return False
        return not self._is_expired(self._last_fetch_time, settings.cache_expiry_hours)

    def adopt(self, catalog: RemoteCatalog, fetched_at: datetime) -> None:
        self._current = catalog
        self._last_fetch_time = fetched_at

    def load(self) -> RemoteCatalog | None:
        """Load and adopt the persisted catalog.

        Returns:
            The cached catalog, or None when the cache is absent or unusable
        """
        if not self.config_path.exists():
            logger.debug("No cached catalog at %s", self.config_path)
            return None

        try:
            raw_json = self.config_path.read_text(encoding="utf-8")
            catalog = parse_catalog(raw_json)
        except (OSError, InvalidConfigError) as e:
            logger.warning("Cached catalog %s is corrupt, ignoring it: %s", self.config_path, e)
            return None

        metadata = self._load_metadata()
        if metadata is None:
            return None

        if metadata.config_version != catalog.version:
            logger.warning(
                "Cache version mismatch (catalog %s, metadata %s), ignoring cache",
                catalog.version,
                metadata.config_version,
            )
            return None

        self.adopt(catalog, metadata.cached_at)
        logger.info("Loaded cached catalog version %s from %s", catalog.version, metadata.cached_at)
        return catalog

    def store(self, raw_json: str, catalog: RemoteCatalog, original_url: str) -> bool:
        """Persist a freshly fetched catalog.

        Both files are written to temporary siblings and moved into place,
        the metadata last. A write failure is logged and reported through the
        return value; it never propagates.

        Returns:
            True if both files were written
        """
        metadata = CacheMetadata(
            cached_at=self._time.now(),
            config_version=catalog.version,
            original_url=original_url,
            expiry_hours=self._settings.current.cache_expiry_hours,
        )
        try:
            self._write_pair(raw_json, metadata)
        except CacheIOError as e:
            logger.warning("%s", e)
            return False
        logger.debug("Stored catalog version %s in %s", catalog.version, self._cache_dir)
        return True

    def clear(self) -> None:
        """Delete both cache files and forget the in-memory catalog."""
        for path in (self.config_path, self.metadata_path):
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                raise CacheIOError(f"Failed to delete cache file {path}: {e}") from e
        self._current = None
        self._last_fetch_time = None
        logger.info("Cleared catalog cache in %s", self._cache_dir)

    def cache_info(self) -> CacheInfo:
        settings = self._settings.current
        return CacheInfo(
            has_cache=self.config_path.exists() and self.metadata_path.exists(),
            last_fetch_time=self._last_fetch_time,
            config_version=self._current.version if self._current is not None else UNKNOWN_VERSION,
            is_expired=(
                self._last_fetch_time is None
                or self._is_expired(self._last_fetch_time, settings.cache_expiry_hours)
            ),
            expiry_hours=settings.cache_expiry_hours,
            auto_update_enabled=settings.auto_update_enabled,
        )

    def _is_expired(self, fetched_at: datetime, expiry_hours: int) -> bool:
        return self._time.now() - fetched_at > timedelta(hours=expiry_hours)

    def _load_metadata(self) -> CacheMetadata | None:
        if not self.metadata_path.exists():
            logger.warning("Cache metadata %s is missing, ignoring cache", self.metadata_path)
            return None
        try:
            data = json.loads(self.metadata_path.read_text(encoding="utf-8"))
            return CacheMetadata.from_json_dict(data)
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(
                "Cache metadata %s is corrupt, ignoring cache: %s", self.metadata_path, e
            )
            return None

    def _write_pair(self, raw_json: str, metadata: CacheMetadata) -> None:
        config_tmp = self.config_path.with_name(CONFIG_FILE_NAME + ".tmp")
        metadata_tmp = self.metadata_path.with_name(METADATA_FILE_NAME + ".tmp")
        try:
            self._cache_dir.mkdir(parents=True, exist_ok=True)
            config_tmp.write_text(raw_json, encoding="utf-8")
            metadata_tmp.write_text(
                json.dumps(metadata.to_json_dict(), indent=2), encoding="utf-8"
            )
            config_tmp.replace(self.config_path)
            metadata_tmp.replace(self.metadata_path)
        except OSError as e:
            raise CacheIOError(f"Failed to write catalog cache in {self._cache_dir}: {e}") from e
