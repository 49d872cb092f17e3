"""In-memory fake implementation of Downloader for testing."""

from mcp_hub.core.errors import DownloadError
from mcp_hub.integrations.downloader.abc import Downloader, ProgressCallback


class FakeDownloader(Downloader):
    """In-memory fake implementation for testing.

    All state is provided via constructor using keyword arguments.
    This class has NO public setup methods.
    """

    def __init__(
        self,
        *,
        responses: dict[str, str] | None = None,
        failures: dict[str, str] | None = None,
    ) -> None:
        """Create FakeDownloader with pre-configured bodies.

        Args:
            responses: Mapping of url -> body to return
            failures: Mapping of url -> failure reason; raises DownloadError.
                URLs in neither mapping also fail.
        """
        self._responses = responses or {}
        self._failures = failures or {}
        self._requested_urls: list[str] = []
        self._timeouts: list[float] = []

    @property
    def requested_urls(self) -> list[str]:
        """Read-only access to requested URLs, in request order, for test assertions."""
        return self._requested_urls.copy()

    @property
    def timeouts(self) -> list[float]:
        """Per-request timeouts that were passed, for test assertions."""
        return self._timeouts.copy()

    async def download(
        self,
        url: str,
        *,
        timeout_seconds: float,
        on_progress: ProgressCallback | None = None,
    ) -> str:
        self._requested_urls.append(url)
        self._timeouts.append(timeout_seconds)

        if url in self._failures:
            raise DownloadError(url, self._failures[url])
        if url not in self._responses:
            raise DownloadError(url, "HTTP 404")

        if on_progress is not None:
            on_progress(1.0)
        return self._responses[url]
