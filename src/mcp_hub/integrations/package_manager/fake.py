"""In-memory fake implementation of PackageManager for testing."""

from mcp_hub.core.errors import PackageManagerError
from mcp_hub.integrations.package_manager.abc import PackageManager
from mcp_hub.models.package import InstalledPackage


class FakePackageManager(PackageManager):
    """In-memory fake implementation for testing.

    All state is provided via constructor using keyword arguments.
    This class has NO public setup methods.
    """

    def __init__(
        self,
        *,
        packages: list[InstalledPackage] | None = None,
        add_versions: dict[str, str] | None = None,
        add_failures: dict[str, str] | None = None,
        remove_failures: dict[str, str] | None = None,
        list_failure: str | None = None,
    ) -> None:
        """Create FakePackageManager with a pre-configured listing.

        Args:
            packages: Packages reported by list_packages(); source "builtin" marks built-ins
            add_versions: Mapping of package_id -> version reported by add()
                (defaults to "1.0.0")
            add_failures: Mapping of package_id -> error message raised by add()
            remove_failures: Mapping of package_id -> error message raised by remove()
            list_failure: If set, list_packages() raises with this message
        """
        self._packages = {package.name: package for package in packages or []}
        self._add_versions = add_versions or {}
        self._add_failures = add_failures or {}
        self._remove_failures = remove_failures or {}
        self._list_failure = list_failure
        self._added: list[tuple[str, str]] = []
        self._removed: list[str] = []
        self._list_calls = 0

    @property
    def added(self) -> list[tuple[str, str]]:
        """(package_id, package_ref) pairs passed to add(), for test assertions."""
        return self._added.copy()

    @property
    def removed(self) -> list[str]:
        """Package ids passed to remove(), for test assertions."""
        return self._removed.copy()

    @property
    def list_calls(self) -> int:
        """Number of list_packages() calls, for test assertions."""
        return self._list_calls

    async def list_packages(self, *, include_builtin: bool) -> list[InstalledPackage]:
        self._list_calls += 1
        if self._list_failure is not None:
            raise PackageManagerError(self._list_failure)
        return [
            package
            for package in self._packages.values()
            if include_builtin or package.source != "builtin"
        ]

    async def add(self, package_id: str, package_ref: str) -> InstalledPackage:
        self._added.append((package_id, package_ref))
        if package_id in self._add_failures:
            raise PackageManagerError(self._add_failures[package_id])
        package = InstalledPackage(
            name=package_id,
            version=self._add_versions.get(package_id, "1.0.0"),
            source="registry",
        )
        self._packages[package_id] = package
        return package

    async def remove(self, package_id: str) -> None:
        self._removed.append(package_id)
        if package_id in self._remove_failures:
            raise PackageManagerError(self._remove_failures[package_id])
        if package_id not in self._packages:
            raise PackageManagerError(f"Package {package_id} is not installed")
        del self._packages[package_id]
