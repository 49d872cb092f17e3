"""Abstract interface for inspecting and modifying the project's Packages/ directory."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any


class PackageFilesystem(ABC):
    """Abstract view of the package directories inside a project.

    Directory names are relative to packages_root. All implementations must
    implement this interface for testability.
    """

    @property
    @abstractmethod
    def packages_root(self) -> Path:
        """Absolute path of the Packages/ directory."""
        ...

    @abstractmethod
    def ensure_packages_root(self) -> None:
        """Create the Packages/ directory if it does not exist."""
        ...

    @abstractmethod
    def directory_exists(self, name: str) -> bool:
        ...

    @abstractmethod
    def list_directories(self) -> list[str]:
        """List package directory names in sorted order.

        Hidden directories (leading dot) are skipped, as the host skips them.
        """
        ...

    @abstractmethod
    def read_manifest_name(self, name: str) -> str | None:
        """Read the ``name`` field of <name>/package.json.

        Returns:
            The declared package name, or None if the directory has no manifest

        Raises:
            OSError: If the manifest exists but cannot be read
            ValueError: If the manifest is not a JSON object
        """
        ...

    @abstractmethod
    def read_lock_file(self) -> dict[str, Any] | None:
        """Read packages-lock.json.

        Returns:
            The parsed lock file, or None if it does not exist

        Raises:
            ValueError: If the lock file is not valid JSON
        """
        ...

    @abstractmethod
    def is_git_checkout(self, name: str) -> bool:
        """Whether the directory is a Git working copy."""
        ...

    @abstractmethod
    def clear_read_only(self, name: str) -> None:
        """Make every file under the directory writable."""
        ...

    @abstractmethod
    def delete_directory(self, name: str) -> None:
        """Recursively delete a package directory.

        Raises:
            OSError: If any part of the directory cannot be deleted
        """
        ...

    @abstractmethod
    def rename_directory(self, name: str, new_name: str) -> None:
        """Rename a package directory within Packages/.

        Raises:
            OSError: If the source is missing or the target already exists
        """
        ...

    @abstractmethod
    def delete_meta_file(self, name: str) -> None:
        """Delete the <name>.meta sibling if present."""
        ...
