"""Exception hierarchy for the hub.

Every error the hub raises on purpose derives from HubError so the CLI error
boundary can report it without a traceback.
"""


class HubError(Exception):
    """Base class for all hub errors."""


class NetworkError(HubError):
    """Raised when no catalog source could be downloaded."""


class InvalidConfigError(HubError):
    """Raised when a downloaded catalog body is malformed or empty."""


class CacheIOError(HubError):
    """Raised when the on-disk cache cannot be written."""


class DownloadError(HubError):
    """Raised by a Downloader when a single request fails."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to download {url}: {reason}")


class PackageManagerError(HubError):
    """Raised when the host package manager rejects an operation."""


class GitOperationError(HubError):
    """Raised when cloning a package repository fails."""

    def __init__(self, url: str, stderr: str, cleanup_error: str | None = None) -> None:
        self.url = url
        self.stderr = stderr
        self.cleanup_error = cleanup_error
        message = f"Git clone of {url} failed: {stderr.strip() or 'no output'}"
        if cleanup_error is not None:
            message += f"; the partial clone was left behind: {cleanup_error}"
        super().__init__(message)


class DirectoryResolutionError(HubError):
    """Raised when no on-disk directory can be found for an extension."""

    def __init__(self, extension_id: str) -> None:
        self.extension_id = extension_id
        super().__init__(f"Could not find a package directory for {extension_id}")


class DirectoryRemovalError(HubError):
    """Raised when a package directory survives both removal attempts."""

    def __init__(self, directory: str, first_error: str, second_error: str) -> None:
        self.directory = directory
        self.first_error = first_error
        self.second_error = second_error
        super().__init__(
            f"Failed to remove {directory}: {first_error}; "
            f"retry after clearing read-only attributes failed: {second_error}"
        )


class DirectoryRenameError(HubError):
    """Raised when a finished clone cannot be moved into place."""

    def __init__(self, source: str, target: str, reason: str) -> None:
        self.source = source
        self.target = target
        super().__init__(f"Failed to move {source} to {target}: {reason}")


class ExtensionNotFoundError(HubError):
    """Raised when an extension id is not known to the registry."""

    def __init__(self, extension_id: str) -> None:
        self.extension_id = extension_id
        super().__init__(f"Extension {extension_id} not found")
