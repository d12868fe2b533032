from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from threading import Lock


class Clock(ABC):
    """Source of the current time."""

    @abstractmethod
    def now(self) -> datetime:
        """Returns the current time as timezone aware UTC datetime."""


class SystemClock(Clock):
    """Clock reading the wall clock."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """Clock that only moves when told to.

    Used to simulate the passage of time.
    """

    def __init__(self, start: datetime) -> None:
        """Initializes the clock.

        Args:
            start (datetime): The initial time. Must be timezone aware.
        """
        if start.tzinfo is None:
            raise ValueError("FixedClock requires a timezone aware datetime")
        self._now: datetime = start
        self._lock: Lock = Lock()

    def now(self) -> datetime:
        with self._lock:
            return self._now

    def set(self, now: datetime) -> None:
        """Moves the clock to the given time."""
        if now.tzinfo is None:
            raise ValueError("FixedClock requires a timezone aware datetime")
        with self._lock:
            self._now = now

    def advance(self, delta: timedelta) -> datetime:
        """Moves the clock forward and returns the new time."""
        with self._lock:
            self._now = self._now + delta
            return self._now
