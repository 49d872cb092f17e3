"""Pydantic models for the remote extension catalog.

The catalog endpoint serves JSON shaped as::

    {
      "version": "2.1",
      "extensions": {
        "packages": [
          {"id": "...", "displayName": "...", "category": "Vision", ...}
        ]
      }
    }
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mcp_hub.models.registry import DEFAULT_LATEST_VERSION, ExtensionCategory, RegistryEntry

UNKNOWN_VERSION = "unknown"


class RemotePackage(BaseModel):
    """A single package entry as served by the catalog endpoint."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = Field(..., min_length=1)
    display_name: str = Field(default="", alias="displayName")
    description: str = ""
    author: str = ""
    latest_version: str = Field(default=DEFAULT_LATEST_VERSION, alias="latestVersion")
    category: str | None = None
    package_url: str = Field(default="", alias="packageUrl")
    documentation_url: str | None = Field(default=None, alias="documentationUrl")
    keywords: list[str] = Field(default_factory=list)
    dependencies: list[str] = Field(default_factory=list)
    legacy_directories: list[str] = Field(default_factory=list, alias="legacyDirectories")

    @field_validator("display_name", "description", "author", "package_url", mode="before")
    @classmethod
    def none_to_empty_string(cls, v: Any) -> Any:
        if v is None:
            return ""
        return v

    @field_validator("latest_version", mode="before")
    @classmethod
    def none_to_default_version(cls, v: Any) -> Any:
        if v is None or v == "":
            return DEFAULT_LATEST_VERSION
        return v

    @field_validator("keywords", "dependencies", "legacy_directories", mode="before")
    @classmethod
    def none_to_empty_list(cls, v: Any) -> Any:
        if v is None:
            return []
        return v

    def to_registry_entry(self) -> RegistryEntry:
        """Convert to the internal registry representation.

        Unrecognized category strings degrade to Community.
        """
        return RegistryEntry(
            id=self.id,
            display_name=self.display_name or self.id,
            description=self.description,
            author=self.author,
            category=ExtensionCategory.parse(self.category),
            package_url=self.package_url,
            latest_version=self.latest_version,
            documentation_url=self.documentation_url,
            keywords=frozenset(self.keywords),
            dependencies=tuple(self.dependencies),
        )


class RemoteExtensions(BaseModel):
    """The ``extensions`` object of the catalog."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    packages: tuple[RemotePackage, ...] = ()


class RemoteCatalog(BaseModel):
    """Parsed remote catalog.

    The version is opaque and only used for change detection.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    version: str = UNKNOWN_VERSION
    extensions: RemoteExtensions = Field(default_factory=RemoteExtensions)

    @field_validator("version", mode="before")
    @classmethod
    def none_to_unknown(cls, v: Any) -> Any:
        if v is None:
            return UNKNOWN_VERSION
        return str(v)

    @property
    def packages(self) -> tuple[RemotePackage, ...]:
        return self.extensions.packages

    def registry_entries(self) -> dict[str, RegistryEntry]:
        """Registry entries keyed by id; a repeated id keeps the last entry."""
        return {package.id: package.to_registry_entry() for package in self.packages}

    def legacy_directories(self) -> dict[str, tuple[str, ...]]:
        """Legacy directory aliases declared by the catalog, keyed by id."""
        return {
            package.id: tuple(package.legacy_directories)
            for package in self.packages
            if package.legacy_directories
        }
