"""Fake Time implementation for testing.

FakeTime returns a fixed instant so freshness checks are deterministic.
"""

from datetime import UTC, datetime

from mcp_hub.integrations.time.abc import Time

DEFAULT_FAKE_NOW = datetime(2024, 1, 15, 12, 0, tzinfo=UTC)


class FakeTime(Time):
    """In-memory fake implementation with a frozen clock.

    This class has NO public setup methods. The instant is provided via
    the constructor.
    """

    def __init__(self, *, now: datetime = DEFAULT_FAKE_NOW) -> None:
        self._now = now

    def now(self) -> datetime:
        return self._now
