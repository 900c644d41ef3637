"""
Injectable clock.

The workflow engine and the export renderer never call ``datetime.now()``
themselves; they receive a Clock so tests can pin ``submitted_at``,
``acted_at`` and export filenames.

Timestamps are naive UTC, matching the ``DateTime`` columns they are stored in.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    """Source of the current time."""

    @abstractmethod
    def now(self) -> datetime:
        """Current time as a naive UTC datetime."""
        ...


class SystemClock(Clock):
    """Production clock backed by the system time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc).replace(tzinfo=None)


class FixedClock(Clock):
    """Test clock that returns a controlled time until advanced."""

    def __init__(self, current: datetime):
        self._current = current

    def now(self) -> datetime:
        return self._current

    def advance(self, **kwargs) -> datetime:
        """Move the clock forward, e.g. ``clock.advance(minutes=5)``."""
        self._current = self._current + timedelta(**kwargs)
        return self._current

    def set(self, current: datetime) -> None:
        self._current = current
