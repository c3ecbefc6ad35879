"""
Recurrence Calculator

Computes when a recurring care task is due next.

All calendar arithmetic happens on the owner's wall clock: the basis instant
is converted into the owner's zone, shifted by whole days or calendar months,
optionally pinned to the scheduled time of day, and converted back to UTC.
Month steps use relativedelta so that Jan 31 + 1 month clamps to the last
day of February instead of spilling into March.
"""

from datetime import datetime, time, timedelta
from typing import Optional

import pytz
from dateutil.relativedelta import relativedelta

from carecalendar.config import DEFAULT_DUE_HOUR
from carecalendar.errors import InvalidFrequencyConfigError
from carecalendar.models.task import TaskFrequency
from carecalendar.utils.datetime import TzInfo, ensure_utc, from_local, to_local


# Fixed day offsets per frequency. Twice-weekly is approximated as every
# 3 days; reliability expectations (days / 3.5) rely on the same cadence.
FREQUENCY_DAY_OFFSETS = {
    TaskFrequency.DAILY: 1,
    TaskFrequency.EVERY_OTHER_DAY: 2,
    TaskFrequency.TWICE_WEEKLY: 3,
    TaskFrequency.WEEKLY: 7,
    TaskFrequency.BI_WEEKLY: 14,
}


def parse_frequency(frequency) -> TaskFrequency:
    """Coerce a stored frequency string into the enum, failing on unknown values."""
    try:
        return TaskFrequency(frequency)
    except ValueError:
        raise InvalidFrequencyConfigError(
            f"Unknown frequency '{frequency}'",
            frequency=str(frequency)
        )


def validate_frequency_config(frequency, custom_frequency_days: Optional[int]) -> TaskFrequency:
    """
    Check a frequency/interval pair before it is stored or scheduled.

    Raises:
        InvalidFrequencyConfigError: unknown frequency, custom without an interval,
            or an interval that is not an integer >= 1 for any frequency
    """
    parsed = parse_frequency(frequency)
    if parsed == TaskFrequency.CUSTOM and custom_frequency_days is None:
        raise InvalidFrequencyConfigError(
            "Custom frequency requires custom_frequency_days",
            frequency=parsed.value
        )
    if custom_frequency_days is not None and (
        isinstance(custom_frequency_days, bool)
        or not isinstance(custom_frequency_days, int)
        or custom_frequency_days < 1
    ):
        raise InvalidFrequencyConfigError(
            "custom_frequency_days must be a positive integer",
            frequency=parsed.value,
            custom_frequency_days=custom_frequency_days
        )
    return parsed


def frequency_offset(frequency, custom_frequency_days: Optional[int] = None) -> relativedelta:
    """Calendar step between two occurrences of a task."""
    parsed = validate_frequency_config(frequency, custom_frequency_days)
    if parsed == TaskFrequency.MONTHLY:
        return relativedelta(months=1)
    if parsed == TaskFrequency.CUSTOM:
        return relativedelta(days=custom_frequency_days)
    return relativedelta(days=FREQUENCY_DAY_OFFSETS[parsed])


def _at_time_of_day(value: datetime, time_of_day: time) -> datetime:
    return value.replace(hour=time_of_day.hour, minute=time_of_day.minute, second=0, microsecond=0)


def next_due(
    frequency,
    custom_frequency_days: Optional[int],
    scheduled_time: Optional[time],
    basis: datetime,
    tz: TzInfo = pytz.utc,
) -> datetime:
    """
    Compute the next due instant of a task completed (or skipped) at ``basis``.

    Args:
        frequency: TaskFrequency or its string value
        custom_frequency_days: Interval in days, required for custom frequency
        scheduled_time: Owner-local time of day to pin the result to, if any
        basis: Instant the task was just completed
        tz: Owner's time zone

    Returns:
        Aware UTC datetime, always strictly later than basis
    """
    offset = frequency_offset(frequency, custom_frequency_days)

    local_basis = to_local(basis, tz).replace(tzinfo=None)
    local_next = local_basis + offset
    if scheduled_time is not None:
        local_next = _at_time_of_day(local_next, scheduled_time)

    return from_local(local_next, tz)


def initial_due(
    scheduled_time: Optional[time],
    basis: datetime,
    tz: TzInfo = pytz.utc,
    default_hour: int = DEFAULT_DUE_HOUR,
) -> datetime:
    """
    First due instant of a brand-new task with no start date.

    With a scheduled time, the task is due today at that time, or tomorrow if
    that moment is not after ``basis``. Without one, it is due tomorrow at
    ``default_hour``.
    """
    basis = ensure_utc(basis)
    local_today = to_local(basis, tz).replace(tzinfo=None)

    if scheduled_time is not None:
        candidate = from_local(_at_time_of_day(local_today, scheduled_time), tz)
        if candidate <= basis:
            candidate = from_local(_at_time_of_day(local_today + timedelta(days=1), scheduled_time), tz)
        return candidate

    return from_local(_at_time_of_day(local_today + timedelta(days=1), time(default_hour, 0)), tz)
