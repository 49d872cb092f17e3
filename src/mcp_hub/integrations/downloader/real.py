"""Real downloader using httpx."""

import logging

import httpx

from mcp_hub.core.errors import DownloadError
from mcp_hub.integrations.downloader.abc import Downloader, ProgressCallback

logger = logging.getLogger(__name__)


class RealDownloader(Downloader):
    """Production implementation streaming responses through httpx.AsyncClient."""

    def __init__(
        self,
        *,
        user_agent: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Create RealDownloader.

        Args:
            user_agent: Value sent in the User-Agent header
            transport: Optional transport override, used by tests with httpx.MockTransport
        """
        self._user_agent = user_agent
        self._transport = transport

    async def download(
        self,
        url: str,
        *,
        timeout_seconds: float,
        on_progress: ProgressCallback | None = None,
    ) -> str:
        headers = {"User-Agent": self._user_agent, "Cache-Control": "no-cache"}
        try:
            async with httpx.AsyncClient(
                timeout=timeout_seconds,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                async with client.stream("GET", url, headers=headers) as response:
                    if not response.is_success:
                        raise DownloadError(url, f"HTTP {response.status_code}")
                    body = await self._read_body(response, on_progress)
        except httpx.TimeoutException as e:
            raise DownloadError(url, f"timed out after {timeout_seconds}s") from e
        except httpx.HTTPError as e:
            raise DownloadError(url, str(e) or type(e).__name__) from e

        if on_progress is not None:
            on_progress(1.0)

        try:
            return body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DownloadError(url, "response body is not valid UTF-8") from e

    async def _read_body(
        self, response: httpx.Response, on_progress: ProgressCallback | None
    ) -> bytes:
        total = _content_length(response)
        chunks: list[bytes] = []
        received = 0
        async for chunk in response.aiter_bytes():
            chunks.append(chunk)
            received += len(chunk)
            if on_progress is not None and total:
                on_progress(min(received / total, 1.0))
        logger.debug("Downloaded %d bytes from %s", received, response.url)
        return b"".join(chunks)


def _content_length(response: httpx.Response) -> int | None:
    value = response.headers.get("Content-Length")
    if value is None or not value.isdigit():
        return None
    return int(value)
