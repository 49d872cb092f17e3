"""In-memory fake implementation of PackageFilesystem for testing."""

from pathlib import Path
from typing import Any

from mcp_hub.integrations.filesystem.abc import PackageFilesystem


class FakePackageFilesystem(PackageFilesystem):
    """In-memory fake implementation for testing.

    All state is provided via constructor using keyword arguments.
    This class has NO public setup methods apart from materialize_directory(),
    which FakeGit calls to simulate a clone landing on disk.
    """

    def __init__(
        self,
        *,
        packages_root: Path = Path("/project/Packages"),
        directories: dict[str, str | None] | None = None,
        lock_file: dict[str, Any] | None = None,
        unreadable_manifests: set[str] | None = None,
        git_checkouts: set[str] | None = None,
        read_only_directories: set[str] | None = None,
        undeletable_directories: set[str] | None = None,
        unrenamable_directories: set[str] | None = None,
    ) -> None:
        """Create FakePackageFilesystem with pre-configured directories.

        Args:
            packages_root: Reported Packages/ path
            directories: Mapping of directory name -> package.json name (None for no manifest)
            lock_file: Parsed packages-lock.json content, None if absent
            unreadable_manifests: Directories whose manifest raises on read
            git_checkouts: Directories that are Git working copies
            read_only_directories: Directories whose deletion fails until
                clear_read_only() is called for them
            undeletable_directories: Directories whose deletion always fails
            unrenamable_directories: Directories whose rename always fails
        """
        self._packages_root = packages_root
        self._directories = dict(directories or {})
        self._lock_file = lock_file
        self._unreadable_manifests = unreadable_manifests or set()
        self._git_checkouts = set(git_checkouts or set())
        self._read_only = set(read_only_directories or set())
        self._undeletable = undeletable_directories or set()
        self._unrenamable = unrenamable_directories or set()
        self._deleted_directories: list[str] = []
        self._deleted_meta_files: list[str] = []
        self._cleared_read_only: list[str] = []
        self._renamed_directories: list[tuple[str, str]] = []
        self._root_ensured = False

    @property
    def deleted_directories(self) -> list[str]:
        return self._deleted_directories.copy()

    @property
    def deleted_meta_files(self) -> list[str]:
        return self._deleted_meta_files.copy()

    @property
    def renamed_directories(self) -> list[tuple[str, str]]:
        return self._renamed_directories.copy()

    @property
    def cleared_read_only(self) -> list[str]:
        return self._cleared_read_only.copy()

    @property
    def root_ensured(self) -> bool:
        return self._root_ensured

    @property
    def packages_root(self) -> Path:
        return self._packages_root

    def materialize_directory(
        self, name: str, manifest_name: str | None = None, *, git_checkout: bool = True
    ) -> None:
        """Record a directory as present, as a clone would leave it."""
        self._directories[name] = manifest_name
        if git_checkout:
            self._git_checkouts.add(name)

    def ensure_packages_root(self) -> None:
        self._root_ensured = True

    def directory_exists(self, name: str) -> bool:
        return name in self._directories

    def list_directories(self) -> list[str]:
        return sorted(name for name in self._directories if not name.startswith("."))

    def read_manifest_name(self, name: str) -> str | None:
        if name in self._unreadable_manifests:
            raise ValueError(f"Invalid package.json in {name}")
        return self._directories.get(name)

    def read_lock_file(self) -> dict[str, Any] | None:
        return self._lock_file

    def is_git_checkout(self, name: str) -> bool:
        return name in self._git_checkouts

    def clear_read_only(self, name: str) -> None:
        self._cleared_read_only.append(name)
        self._read_only.discard(name)

    def delete_directory(self, name: str) -> None:
        if name in self._undeletable:
            raise PermissionError(f"Access denied: {name}")
        if name in self._read_only:
            raise PermissionError(f"Read-only file in {name}")
        if name not in self._directories:
            raise FileNotFoundError(f"No such directory: {name}")
        del self._directories[name]
        self._git_checkouts.discard(name)
        self._deleted_directories.append(name)

    def delete_meta_file(self, name: str) -> None:
        self._deleted_meta_files.append(name)

    def rename_directory(self, name: str, new_name: str) -> None:
        if name in self._unrenamable:
            raise PermissionError(f"Access denied: {name}")
        if name not in self._directories:
            raise FileNotFoundError(f"No such directory: {name}")
        if new_name in self._directories:
            raise FileExistsError(f"Directory already exists: {new_name}")
        self._directories[new_name] = self._directories.pop(name)
        if name in self._git_checkouts:
            self._git_checkouts.discard(name)
            self._git_checkouts.add(new_name)
        self._renamed_directories.append((name, new_name))
