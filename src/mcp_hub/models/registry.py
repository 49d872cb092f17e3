"""Registry models."""

from dataclasses import dataclass
from enum import StrEnum

DEFAULT_LATEST_VERSION = "1.0.0"


class ExtensionCategory(StrEnum):
    """Category an extension is listed under."""

    ESSENTIAL = "Essential"
    VISION = "Vision"
    PROGRAMMER = "Programmer"
    COMMUNITY = "Community"

    @classmethod
    def parse(cls, value: str | None) -> "ExtensionCategory":
        """Parse a category name case-insensitively.

        Unknown or missing names fall back to COMMUNITY rather than failing,
        so a catalog with a newer category still loads.
        """
        if value is None:
            return cls.COMMUNITY
        normalized = value.strip().lower()
        for category in cls:
            if category.value.lower() == normalized:
                return category
        return cls.COMMUNITY


@dataclass(frozen=True)
class RegistryEntry:
    """Canonical description of an installable extension."""

    id: str  # Globally unique, stable package id
    display_name: str
    description: str
    author: str
    category: ExtensionCategory
    package_url: str  # Registry coordinate or Git URL
    latest_version: str = DEFAULT_LATEST_VERSION
    documentation_url: str | None = None
    keywords: frozenset[str] = frozenset()
    dependencies: tuple[str, ...] = ()  # Flat list, no cycle checks
