"""Abstract interface for downloading text documents over HTTP."""

from abc import ABC, abstractmethod
from collections.abc import Callable

ProgressCallback = Callable[[float], None]


class Downloader(ABC):
    """Abstract interface for fetching a remote document as text.

    All implementations must implement this interface for testability.
    """

    @abstractmethod
    async def download(
        self,
        url: str,
        *,
        timeout_seconds: float,
        on_progress: ProgressCallback | None = None,
    ) -> str:
        """Download the body at url and decode it as UTF-8.

        Args:
            url: Absolute URL to request
            timeout_seconds: Timeout applied to this request alone
            on_progress: Optional callback receiving progress in [0.0, 1.0]

        Returns:
            The decoded response body

        Raises:
            DownloadError: On timeout, transport failure or a non-2xx status
        """
        ...
