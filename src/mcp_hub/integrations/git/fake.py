"""In-memory fake implementation of Git for testing."""

from pathlib import Path

from mcp_hub.integrations.filesystem.fake import FakePackageFilesystem
from mcp_hub.integrations.git.abc import Git, GitResult

SUCCESS = GitResult(exit_code=0, stdout="", stderr="")


class FakeGit(Git):
    """In-memory fake implementation for testing.

    All state is provided via constructor using keyword arguments.
    This class has NO public setup methods.
    """

    def __init__(
        self,
        *,
        results: dict[str | None, GitResult] | None = None,
        filesystem: FakePackageFilesystem | None = None,
        leave_partial_on_failure: bool = False,
    ) -> None:
        """Create FakeGit with pre-configured clone outcomes.

        Args:
            results: Mapping of branch (None for the default branch) -> result.
                Branches not listed succeed.
            filesystem: When given, a successful clone materializes the
                directory there with a package.json naming the directory
            leave_partial_on_failure: When True, a failed clone still leaves
                its destination directory behind
        """
        self._results = results or {}
        self._filesystem = filesystem
        self._leave_partial_on_failure = leave_partial_on_failure
        self._clone_calls: list[tuple[str, Path, str, str | None]] = []

    @property
    def clone_calls(self) -> list[tuple[str, Path, str, str | None]]:
        """Read-only access to (url, cwd, directory, branch) tuples for test assertions."""
        return self._clone_calls.copy()

    async def clone(
        self,
        url: str,
        *,
        cwd: Path,
        directory: str,
        branch: str | None = None,
    ) -> GitResult:
        self._clone_calls.append((url, cwd, directory, branch))
        result = self._results.get(branch, SUCCESS)

        if self._filesystem is not None:
            if result.succeeded:
                self._filesystem.materialize_directory(directory, directory)
            elif self._leave_partial_on_failure:
                self._filesystem.materialize_directory(directory, None)
        return result
