"""Time operations abstraction for testing.

Cache freshness is computed from now(), so injecting the clock lets tests
move time forward without waiting.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class Time(ABC):
    """Abstract time operations for dependency injection."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time as a timezone-aware UTC datetime."""
        ...
