"""Extension state models."""

from dataclasses import dataclass, field
from enum import StrEnum

from mcp_hub.models.package import InstalledPackage
from mcp_hub.models.registry import ExtensionCategory, RegistryEntry

# Local clones carry no recoverable version
LOCAL_VERSION = "local"


class InstallKind(StrEnum):
    """How an extension ended up in the project."""

    NOT_INSTALLED = "NotInstalled"
    PACKAGE_MANAGER = "PackageManager"
    LOCAL_CLONE = "LocalClone"


@dataclass
class ExtensionState:
    """Registry fields merged with live installation state.

    Derived on every reconciliation pass and never persisted. The install
    coordinator updates the install fields in place after a successful
    operation.
    """

    id: str
    display_name: str
    description: str
    author: str
    category: ExtensionCategory
    latest_version: str
    package_url: str = ""
    documentation_url: str | None = None
    keywords: frozenset[str] = field(default_factory=frozenset)
    dependencies: tuple[str, ...] = ()
    is_installed: bool = False
    installed_version: str | None = None
    install_kind: InstallKind = InstallKind.NOT_INSTALLED

    @staticmethod
    def from_registry(entry: RegistryEntry) -> "ExtensionState":
        """Create a not-installed state carrying the entry's identity fields."""
        return ExtensionState(
            id=entry.id,
            display_name=entry.display_name,
            description=entry.description,
            author=entry.author,
            category=entry.category,
            latest_version=entry.latest_version,
            package_url=entry.package_url,
            documentation_url=entry.documentation_url,
            keywords=entry.keywords,
            dependencies=entry.dependencies,
        )

    @staticmethod
    def from_installed_package(package: InstalledPackage) -> "ExtensionState":
        """Create a state for a package installed out of band (not in the registry)."""
        state = ExtensionState(
            id=package.name,
            display_name=package.display_name or package.name,
            description=package.description or "MCP Extension Package",
            author=package.author or "Unknown",
            category=ExtensionCategory.COMMUNITY,
            latest_version=package.version,
        )
        state.mark_installed(package.version, InstallKind.PACKAGE_MANAGER)
        return state

    @property
    def has_update(self) -> bool:
        if not self.is_installed or self.install_kind == InstallKind.LOCAL_CLONE:
            return False
        return self.installed_version != self.latest_version

    def mark_installed(self, version: str, kind: InstallKind) -> None:
        self.is_installed = True
        self.installed_version = version
        self.install_kind = kind

    def mark_uninstalled(self) -> None:
        self.is_installed = False
        self.installed_version = None
        self.install_kind = InstallKind.NOT_INSTALLED
