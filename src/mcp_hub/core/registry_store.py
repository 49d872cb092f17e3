"""Registry of known extensions: built-in seed table plus remote overlay."""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from mcp_hub.models.registry import DEFAULT_LATEST_VERSION, ExtensionCategory, RegistryEntry

logger = logging.getLogger(__name__)

BUILTIN_REGISTRY_PATH = Path(__file__).parent.parent / "data" / "registry.yaml"


@dataclass(frozen=True)
class SeedRegistry:
    """Built-in entries in declaration order, with their legacy directory names."""

    entries: tuple[RegistryEntry, ...]
    legacy_directories: dict[str, tuple[str, ...]]


def load_builtin_registry(path: Path = BUILTIN_REGISTRY_PATH) -> SeedRegistry:
    """Load registry.yaml from package data."""
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not data or "extensions" not in data:
        return SeedRegistry(entries=(), legacy_directories={})

    entries: list[RegistryEntry] = []
    legacy: dict[str, tuple[str, ...]] = {}
    for item in data["extensions"]:
        entries.append(_entry_from_yaml(item))
        aliases = item.get("legacy_directories") or []
        if aliases:
            legacy[item["id"]] = tuple(aliases)
    return SeedRegistry(entries=tuple(entries), legacy_directories=legacy)


def _entry_from_yaml(item: dict[str, Any]) -> RegistryEntry:
    return RegistryEntry(
        id=item["id"],
        display_name=item["display_name"],
        description=item.get("description", ""),
        author=item.get("author", ""),
        category=ExtensionCategory.parse(item.get("category")),
        package_url=item["package_url"],
        latest_version=str(item.get("latest_version", DEFAULT_LATEST_VERSION)),
        documentation_url=item.get("documentation_url"),
        keywords=frozenset(item.get("keywords") or []),
        dependencies=tuple(item.get("dependencies") or []),
    )


class RegistryStore:
    """Maps extension ids to registry entries.

    Lookup precedence is registered at runtime, then remote, then built-in.
    Remote entries replace the remote layer wholesale on every apply, so a
    catalog never leaves stale entries behind and built-ins are never lost.
    """

    def __init__(
        self,
        seed: SeedRegistry,
        *,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._seed = {entry.id: entry for entry in seed.entries}
        self._seed_legacy = seed.legacy_directories
        self._remote: dict[str, RegistryEntry] = {}
        self._remote_legacy: dict[str, tuple[str, ...]] = {}
        self._registered: dict[str, RegistryEntry] = {}
        self._on_change = on_change

    def apply_remote(
        self,
        entries: dict[str, RegistryEntry],
        legacy_directories: dict[str, tuple[str, ...]] | None = None,
    ) -> None:
        self._remote = dict(entries)
        self._remote_legacy = dict(legacy_directories or {})
        overridden = sorted(self._seed.keys() & self._remote.keys())
        logger.debug(
            "Applied %d remote entries (%d override built-ins: %s)",
            len(self._remote),
            len(overridden),
            ", ".join(overridden) or "none",
        )
        self._notify()

    def register(self, entry: RegistryEntry) -> None:
        """Register an entry at runtime, overriding any entry with the same id."""
        self._registered[entry.id] = entry
        logger.debug("Registered extension %s", entry.id)
        self._notify()

    def get(self, extension_id: str) -> RegistryEntry | None:
        for layer in (self._registered, self._remote, self._seed):
            if extension_id in layer:
                return layer[extension_id]
        return None

    def __contains__(self, extension_id: object) -> bool:
        return isinstance(extension_id, str) and self.get(extension_id) is not None

    def __len__(self) -> int:
        return len(self._ordered_ids())

    def entries(self) -> list[RegistryEntry]:
        """All entries: built-in order first, then remote-only, then runtime-registered."""
        result = []
        for extension_id in self._ordered_ids():
            entry = self.get(extension_id)
            if entry is not None:
                result.append(entry)
        return result

    def aliases_for(self, extension_id: str) -> tuple[str, ...]:
        """Legacy directory names for an id, built-in aliases first."""
        aliases = list(self._seed_legacy.get(extension_id, ()))
        for alias in self._remote_legacy.get(extension_id, ()):
            if alias not in aliases:
                aliases.append(alias)
        return tuple(aliases)

    def _ordered_ids(self) -> list[str]:
        return list(_unique([*self._seed, *self._remote, *self._registered]))

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change()


def _unique(ids: Iterable[str]) -> Iterable[str]:
    seen: set[str] = set()
    for extension_id in ids:
        if extension_id not in seen:
            seen.add(extension_id)
            yield extension_id
