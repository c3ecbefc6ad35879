"""
Time Bucket Classifier

Groups due tasks into display buckets (overdue, morning, ..., future).

Two different comparisons are involved:
overdue-ness is an absolute fact about instants, while every other bucket
depends on the owner's local calendar day.
"""

from collections import OrderedDict
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Iterable, List, TypeVar

import pytz

from carecalendar.utils.datetime import TzInfo, ensure_utc, local_date, to_local

T = TypeVar("T")

MORNING_END_HOUR = 12
AFTERNOON_END_HOUR = 17
EVENING_END_HOUR = 21
WEEK_HORIZON_DAYS = 7


class TimeBucket(str, Enum):
    OVERDUE = "overdue"
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"
    TOMORROW = "tomorrow"
    WEEK = "week"
    FUTURE = "future"


BUCKET_ORDER = [
    TimeBucket.OVERDUE,
    TimeBucket.MORNING,
    TimeBucket.AFTERNOON,
    TimeBucket.EVENING,
    TimeBucket.NIGHT,
    TimeBucket.TOMORROW,
    TimeBucket.WEEK,
    TimeBucket.FUTURE,
]

BUCKET_LABELS = {
    TimeBucket.OVERDUE: "Overdue",
    TimeBucket.MORNING: "Morning (before 12pm)",
    TimeBucket.AFTERNOON: "Afternoon (12pm-5pm)",
    TimeBucket.EVENING: "Evening (5pm-9pm)",
    TimeBucket.NIGHT: "Night (after 9pm)",
    TimeBucket.TOMORROW: "Tomorrow",
    TimeBucket.WEEK: "This Week",
    TimeBucket.FUTURE: "Later",
}


def is_overdue(due_at: datetime, now: datetime) -> bool:
    """Instant comparison; a task due exactly now is not overdue."""
    return ensure_utc(due_at) < ensure_utc(now)


def local_day_offset(due_at: datetime, now: datetime, tz: TzInfo) -> int:
    """Number of local calendar days between now and the due instant."""
    return (local_date(due_at, tz) - local_date(now, tz)).days


def _part_of_day(hour: int) -> TimeBucket:
    if hour < MORNING_END_HOUR:
        return TimeBucket.MORNING
    if hour < AFTERNOON_END_HOUR:
        return TimeBucket.AFTERNOON
    if hour < EVENING_END_HOUR:
        return TimeBucket.EVENING
    return TimeBucket.NIGHT


def classify(due_at: datetime, now: datetime, tz: TzInfo = pytz.utc) -> TimeBucket:
    """
    Classify a due instant relative to now.

    Args:
        due_at: When the task is due
        now: Current instant
        tz: Owner's time zone, used for every bucket except overdue

    Returns:
        Exactly one TimeBucket
    """
    if is_overdue(due_at, now):
        return TimeBucket.OVERDUE

    offset = local_day_offset(due_at, now, tz)
    if offset <= 0:
        return _part_of_day(to_local(due_at, tz).hour)
    if offset == 1:
        return TimeBucket.TOMORROW
    if offset < WEEK_HORIZON_DAYS:
        return TimeBucket.WEEK
    return TimeBucket.FUTURE


def group_by_bucket(
    items: Iterable[T],
    due_at: Callable[[T], datetime],
    now: datetime,
    tz: TzInfo = pytz.utc,
) -> "OrderedDict[TimeBucket, List[T]]":
    """
    Group items by bucket in display order, leaving out empty buckets.

    Items keep their incoming order inside a bucket.
    """
    grouped: Dict[TimeBucket, List[T]] = {}
    for item in items:
        grouped.setdefault(classify(due_at(item), now, tz), []).append(item)

    return OrderedDict(
        (bucket, grouped[bucket]) for bucket in BUCKET_ORDER if grouped.get(bucket)
    )
