"""Date and time utilities."""

import re
from datetime import date, datetime, time
from typing import Optional

import pytz

from carecalendar.errors import InvalidTimezoneError

TIME_OF_DAY_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

TzInfo = pytz.BaseTzInfo


def get_timezone(tz_name: Optional[str]) -> TzInfo:
    """Resolve a tz database name, treating an empty name as UTC."""
    if not tz_name:
        return pytz.utc
    try:
        return pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        raise InvalidTimezoneError(tz_name)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return an aware UTC datetime. Naive values are taken to already be UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value.astimezone(pytz.utc)


def to_local(value: datetime, tz: TzInfo) -> datetime:
    """Convert an instant into the owner's wall-clock time."""
    return tz.normalize(ensure_utc(value).astimezone(tz))


def from_local(naive_local: datetime, tz: TzInfo) -> datetime:
    """Attach the owner's zone to a naive wall-clock value and return it as UTC."""
    return tz.localize(naive_local).astimezone(pytz.utc)


def local_date(value: datetime, tz: TzInfo) -> date:
    """Calendar date of an instant as seen in the owner's zone."""
    return to_local(value, tz).date()


def start_of_local_day(day: date, tz: TzInfo) -> datetime:
    """UTC instant at which the given local calendar day begins."""
    return from_local(datetime.combine(day, time.min), tz)


def parse_time_of_day(value: Optional[str]) -> Optional[time]:
    """Parse an "HH:MM" string. None and empty strings mean no scheduled time."""
    if not value:
        return None
    match = TIME_OF_DAY_PATTERN.match(value)
    if not match:
        raise ValueError(f"Invalid time of day '{value}', expected HH:MM")
    return time(int(match.group(1)), int(match.group(2)))

