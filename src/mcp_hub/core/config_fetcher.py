"""Download and parse the remote extension catalog.

Sources are tried strictly in priority order. The first source whose body
parses into a non-empty catalog wins; there is no merging and no racing.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from mcp_hub.core.errors import DownloadError, InvalidConfigError, NetworkError
from mcp_hub.integrations.downloader.abc import Downloader, ProgressCallback
from mcp_hub.models.catalog import RemoteCatalog, RemoteExtensions, RemotePackage

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_URLS: tuple[str, ...] = (
    "https://raw.githubusercontent.com/MiAO-AI-Lab/MiAO-MCP-Hub-Launcher/main/"
    "Assets/MiAO-MCP-Hub-Launcher/Editor/Config/extensions.json",
    "https://cdn.jsdelivr.net/gh/MiAO-AI-Lab/MiAO-MCP-Hub-Launcher@main/"
    "Assets/MiAO-MCP-Hub-Launcher/Editor/Config/extensions.json",
)
DEFAULT_FETCH_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class FetchResult:
    """A parsed catalog together with the body and the URL it came from."""

    catalog: RemoteCatalog
    raw_json: str
    source_url: str


def parse_catalog(raw_json: str) -> RemoteCatalog:
    """Parse a catalog body.

    Individual package entries that fail validation are skipped with a
    warning; the catalog is rejected only when no package survives.

    Raises:
        InvalidConfigError: If the body is not JSON, has no
            ``extensions.packages`` list, or that list yields no valid package
    """
    if not raw_json.strip():
        raise InvalidConfigError("Catalog body is empty")
    try:
        data = json.loads(raw_json)
    except json.JSONDecodeError as e:
        raise InvalidConfigError(f"Catalog is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise InvalidConfigError("Catalog root must be a JSON object")

    extensions = data.get("extensions")
    raw_packages = extensions.get("packages") if isinstance(extensions, dict) else None
    if not isinstance(raw_packages, list) or not raw_packages:
        raise InvalidConfigError("Catalog has no extensions.packages entries")

    packages = [package for package in map(_parse_package, raw_packages) if package is not None]
    if not packages:
        raise InvalidConfigError("Catalog contains no valid packages")

    try:
        return RemoteCatalog(
            version=data.get("version"),
            extensions=RemoteExtensions(packages=tuple(packages)),
        )
    except ValidationError as e:
        raise InvalidConfigError(f"Catalog header is invalid: {e}") from e


def _parse_package(raw: Any) -> RemotePackage | None:
    try:
        return RemotePackage.model_validate(raw)
    except ValidationError as e:
        logger.warning("Skipping invalid catalog package %r: %s", _package_label(raw), e)
        return None


def _package_label(raw: Any) -> str:
    if isinstance(raw, dict) and raw.get("id"):
        return str(raw["id"])
    return "<no id>"


class ConfigFetcher:
    """Fetches the catalog from an ordered list of candidate URLs."""

    def __init__(
        self,
        downloader: Downloader,
        urls: tuple[str, ...] = DEFAULT_CONFIG_URLS,
        *,
        timeout_seconds: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        """Create ConfigFetcher.

        Args:
            downloader: Integration performing the HTTP requests
            urls: Candidate catalog URLs in priority order
            timeout_seconds: Timeout applied to each attempt independently
            on_progress: Optional callback receiving download progress
        """
        if not urls:
            raise ValueError("At least one catalog URL is required")
        self._downloader = downloader
        self._urls = urls
        self._timeout_seconds = timeout_seconds
        self._on_progress = on_progress

    @property
    def urls(self) -> tuple[str, ...]:
        return self._urls

    async def fetch(self) -> FetchResult:
        """Fetch the catalog from the first source that yields a valid body.

        Raises:
            InvalidConfigError: If every source failed and the last one
                returned a malformed body
            NetworkError: If every source failed and the last failure was a
                download error
        """
        last_error: Exception | None = None
        for index, url in enumerate(self._urls, start=1):
            logger.debug("Fetching catalog from source %d/%d: %s", index, len(self._urls), url)
            try:
                raw_json = await self._downloader.download(
                    url,
                    timeout_seconds=self._timeout_seconds,
                    on_progress=self._on_progress,
                )
                catalog = parse_catalog(raw_json)
            except DownloadError as e:
                logger.warning("Catalog source %s failed: %s", url, e.reason)
                last_error = e
                continue
            except InvalidConfigError as e:
                logger.warning("Catalog source %s returned an invalid catalog: %s", url, e)
                last_error = e
                continue

            logger.info(
                "Fetched catalog version %s with %d packages from %s",
                catalog.version,
                len(catalog.packages),
                url,
            )
            return FetchResult(catalog=catalog, raw_json=raw_json, source_url=url)

        if isinstance(last_error, InvalidConfigError):
            raise last_error
        raise NetworkError(
            f"All {len(self._urls)} catalog sources failed: {last_error}"
        ) from last_error
