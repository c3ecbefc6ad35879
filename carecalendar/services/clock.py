"""Wall-clock sources for the scheduling engine."""
from datetime import datetime
from typing import Protocol

import pytz

from carecalendar.utils.datetime import ensure_utc


class Clock(Protocol):
    def now(self) -> datetime:
        ...


class SystemClock:
    """Current UTC time from the host."""

    def now(self) -> datetime:
        return datetime.now(pytz.utc)


class FixedClock:
    """Clock pinned to one instant; can be moved forward explicitly."""

    def __init__(self, instant: datetime):
        self.instant = ensure_utc(instant)

    def now(self) -> datetime:
        return self.instant

    def advance(self, delta) -> datetime:
        self.instant = self.instant + delta
        return self.instant


def get_clock() -> Clock:
    """Dependency for getting the application clock."""
    return SystemClock()
