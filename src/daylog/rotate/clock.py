"""Local wall-clock sources for the rotating writer."""

from __future__ import annotations

import threading
from datetime import datetime, timedelta
from typing import Optional, Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        """Return the current local (naive) time."""


class SystemClock:
    """Reads the real local time."""

    def now(self) -> datetime:
        return datetime.now()


class ManualClock:
    """
    Settable clock for tests.

    Starts at ``start`` (or the real local time) and only moves when
    ``set`` or ``advance`` is called.
    """

    def __init__(self, start: Optional[datetime] = None):
        self._lock = threading.Lock()
        self._now = start or datetime.now()

    def now(self) -> datetime:
        with self._lock:
            return self._now

    def set(self, value: datetime) -> None:
        with self._lock:
            self._now = value

    def advance(self, days: float = 0, **kwargs: float) -> datetime:
        with self._lock:
            self._now = self._now + timedelta(days=days, **kwargs)
            return self._now


__all__ = ["Clock", "SystemClock", "ManualClock"]
