"""Abstract interface for the host package manager."""

from abc import ABC, abstractmethod

from mcp_hub.models.package import InstalledPackage


class PackageManager(ABC):
    """Abstract interface for the native package lifecycle of a project.

    All implementations must implement this interface for testability.
    """

    @abstractmethod
    async def list_packages(self, *, include_builtin: bool) -> list[InstalledPackage]:
        """List packages currently resolved in the project.

        Args:
            include_builtin: Whether to report packages shipped with the host

        Raises:
            PackageManagerError: If the listing cannot be produced
        """
        ...

    @abstractmethod
    async def add(self, package_id: str, package_ref: str) -> InstalledPackage:
        """Add or upgrade a package.

        Args:
            package_id: Package name to record
            package_ref: Registry coordinate (``name@version``), version or Git URL

        Returns:
            The package as it is now recorded

        Raises:
            PackageManagerError: If the package cannot be added
        """
        ...

    @abstractmethod
    async def remove(self, package_id: str) -> None:
        """Remove a package.

        Raises:
            PackageManagerError: If the package is not present or cannot be removed
        """
        ...
