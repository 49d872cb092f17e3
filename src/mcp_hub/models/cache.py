"""Cache metadata models."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class CacheMetadata:
    """Freshness metadata persisted beside the cached catalog.

    config_version must equal the version of the catalog stored with it;
    a mismatched pair is treated as no cache.
    """

    cached_at: datetime
    config_version: str
    original_url: str
    expiry_hours: int

    def to_json_dict(self) -> dict[str, Any]:
        return {
            "cachedAt": self.cached_at.isoformat(),
            "configVersion": self.config_version,
            "originalUrl": self.original_url,
            "expiryHours": self.expiry_hours,
        }

    @staticmethod
    def from_json_dict(data: dict[str, Any]) -> "CacheMetadata":
        """Parse metadata written by to_json_dict.

        Raises:
            KeyError: If a required key is missing
            ValueError: If the timestamp or expiry cannot be parsed, or the
                timestamp has no UTC offset
        """
        cached_at = datetime.fromisoformat(data["cachedAt"])
        if cached_at.tzinfo is None:
            raise ValueError(f"cachedAt has no UTC offset: {data['cachedAt']}")
        return CacheMetadata(
            cached_at=cached_at,
            config_version=str(data["configVersion"]),
            original_url=str(data.get("originalUrl", "")),
            expiry_hours=int(data["expiryHours"]),
        )


@dataclass(frozen=True)
class CacheInfo:
    """Snapshot of the cache state for display."""

    has_cache: bool
    last_fetch_time: datetime | None
    config_version: str
    is_expired: bool
    expiry_hours: int
    auto_update_enabled: bool
