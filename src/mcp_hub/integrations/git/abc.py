"""Abstract interface for the Git operations the hub needs."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class GitResult:
    """Outcome of a Git subprocess."""

    exit_code: int
    stdout: str
    stderr: str

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


class Git(ABC):
    """Abstract interface for Git operations.

    All implementations must implement this interface for testability.
    """

    @abstractmethod
    async def clone(
        self,
        url: str,
        *,
        cwd: Path,
        directory: str,
        branch: str | None = None,
    ) -> GitResult:
        """Clone a repository into cwd/directory.

        With a branch, runs ``git clone --branch <branch> --single-branch``;
        without one, clones the default branch. A non-zero exit is reported in
        the result rather than raised.

        Raises:
            GitOperationError: If the git executable cannot be started
        """
        ...
