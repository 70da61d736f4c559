"""Time sources for the logbook and the entry controller."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Naive UTC wall clock.

    Microseconds are kept so that two commits within the same second still
    order correctly by log timestamp.
    """

    def now(self) -> datetime:
        return datetime.now(UTC).replace(tzinfo=None)


class StaticClock:
    """A clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self._now = now

    def now(self) -> datetime:
        return self._now

    def advance(self, **kwargs: float) -> datetime:
        """Move the clock forward by a timedelta built from kwargs."""
        self._now = self._now + timedelta(**kwargs)
        return self._now
