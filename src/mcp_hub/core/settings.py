"""User settings data structures and loading.

Provides immutable settings loaded from ~/.mcp-hub/settings.toml (or the path
in MCP_HUB_SETTINGS). Settings are loaded eagerly at the entry point and saved
back whenever the hub records a fetch.
"""

import logging
import os
import tomllib
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import Any

import tomli_w

logger = logging.getLogger(__name__)

SETTINGS_ENV_VAR = "MCP_HUB_SETTINGS"
DEFAULT_CACHE_EXPIRY_HOURS = 24
MIN_CACHE_EXPIRY_HOURS = 1


@dataclass(frozen=True)
class HubSettings:
    """Immutable user preferences.

    All fields are read-only after construction; use SettingsStore.update()
    to change and persist them.
    """

    auto_update_enabled: bool = True
    cache_expiry_hours: int = DEFAULT_CACHE_EXPIRY_HOURS
    last_fetch_time: datetime | None = None
    last_config_version: str | None = None


def default_settings_path() -> Path:
    override = os.environ.get(SETTINGS_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".mcp-hub" / "settings.toml"


def load_settings(path: Path) -> HubSettings:
    """Load settings from a TOML file.

    A missing file yields defaults.

    Raises:
        ValueError: If the file is not valid TOML or a field has the wrong type
    """
    if not path.exists():
        return HubSettings()

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid settings file {path}: {e}") from e

    return HubSettings(
        auto_update_enabled=bool(data.get("auto_update_enabled", True)),
        cache_expiry_hours=_clamp_expiry(
            _int_field(data, "cache_expiry_hours", DEFAULT_CACHE_EXPIRY_HOURS, path)
        ),
        last_fetch_time=_datetime_field(data, "last_fetch_time", path),
        last_config_version=data.get("last_config_version"),
    )


def save_settings(path: Path, settings: HubSettings) -> None:
    """Write settings to a TOML file, creating parent directories.

    Unset optional fields are omitted.
    """
    data: dict[str, Any] = {
        "auto_update_enabled": settings.auto_update_enabled,
        "cache_expiry_hours": settings.cache_expiry_hours,
    }
    if settings.last_fetch_time is not None:
        data["last_fetch_time"] = settings.last_fetch_time
    if settings.last_config_version is not None:
        data["last_config_version"] = settings.last_config_version

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(tomli_w.dumps(data), encoding="utf-8")


class SettingsStore:
    """Holds the current settings and persists changes.

    A store without a path keeps settings in memory only (used by tests).
    """

    def __init__(self, settings: HubSettings, path: Path | None) -> None:
        self._settings = settings
        self._path = path

    @staticmethod
    def load(path: Path) -> "SettingsStore":
        return SettingsStore(load_settings(path), path)

    @property
    def current(self) -> HubSettings:
        return self._settings

    @property
    def path(self) -> Path | None:
        return self._path

    def update(self, **changes: Any) -> HubSettings:
        """Apply field changes and persist them.

        Raises:
            OSError: If the settings file cannot be written; the in-memory
                settings are updated regardless
        """
        if "cache_expiry_hours" in changes:
            changes["cache_expiry_hours"] = _clamp_expiry(changes["cache_expiry_hours"])
        self._settings = replace(self._settings, **changes)
        if self._path is not None:
            save_settings(self._path, self._settings)
        return self._settings


def _clamp_expiry(hours: int) -> int:
    return max(MIN_CACHE_EXPIRY_HOURS, hours)


def _int_field(data: dict[str, Any], key: str, default: int, path: Path) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"'{key}' in {path} must be an integer")
    return value


def _datetime_field(data: dict[str, Any], key: str, path: Path) -> datetime | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            logger.warning("Ignoring unparseable '%s' in %s: %r", key, path, value)
            return None
    raise ValueError(f"'{key}' in {path} must be a datetime")
