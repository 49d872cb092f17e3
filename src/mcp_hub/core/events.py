"""Event types and the subscription bus.

Components emit events; the CLI (or any other front end) subscribes. There is
no global bus: each ExtensionHub owns one.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfigUpdated:
    """A new remote catalog was fetched and adopted."""

    version: str


@dataclass(frozen=True)
class ConfigError:
    """A fetch failed; the last good catalog stays in use."""

    message: str


@dataclass(frozen=True)
class DownloadProgress:
    """Catalog download progress in [0.0, 1.0]."""

    progress: float


@dataclass(frozen=True)
class ExtensionsChanged:
    """Installed state or the registry changed; cached listings are stale."""


@dataclass(frozen=True)
class OperationCompleted:
    """An install, uninstall or update finished."""

    extension_id: str
    operation: str
    success: bool
    error: str | None = None


HubEvent = ConfigUpdated | ConfigError | DownloadProgress | ExtensionsChanged | OperationCompleted
Subscriber = Callable[[HubEvent], None]


class EventBus:
    """Synchronous fan-out of hub events to subscribers.

    A subscriber that raises is logged and does not affect other subscribers
    or the emitter.
    """

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback for every event.

        Returns:
            A function that removes the subscription; calling it twice is harmless
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def emit(self, event: HubEvent) -> None:
        logger.debug("Event emitted: %s", event)
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception("Subscriber %r failed handling %s", callback, event)

    def subscriber_count(self) -> int:
        return len(self._subscribers)
