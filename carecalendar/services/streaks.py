"""Completion streaks for care tasks."""

from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

import pytz

from carecalendar.models.care_log import CareLog
from carecalendar.utils.datetime import TzInfo, ensure_utc, local_date

ONE_DAY = timedelta(days=1)


def _completed_times(logs: Iterable[CareLog]) -> List[datetime]:
    return [ensure_utc(log.completed_at) for log in logs if not log.skipped]


def task_streak(logs: Iterable[CareLog]) -> int:
    """
    Current streak of a single task.

    Walks completions from newest to oldest. A step of at most one whole day
    (measured between instants, floored) keeps the streak alive, so two
    completions on the same day and one per day both count; anything longer
    ends it.
    """
    completed = sorted(_completed_times(logs), reverse=True)
    if not completed:
        return 0

    streak = 1
    anchor = completed[0]
    for completed_at in completed[1:]:
        if (anchor - completed_at) // ONE_DAY <= 1:
            streak += 1
            anchor = completed_at
        else:
            break
    return streak


def last_completed(logs: Iterable[CareLog]) -> Optional[datetime]:
    """Most recent log instant, skipped or not."""
    times = [ensure_utc(log.completed_at) for log in logs]
    return max(times) if times else None


def _completion_days(logs: Iterable[CareLog], tz: TzInfo) -> List[date]:
    return sorted({local_date(completed_at, tz) for completed_at in _completed_times(logs)})


def current_day_streak(logs: Iterable[CareLog], today: date, tz: TzInfo = pytz.utc) -> int:
    """Consecutive local days, ending today, with at least one completion."""
    days = set(_completion_days(logs, tz))
    streak = 0
    day = today
    while day in days:
        streak += 1
        day -= ONE_DAY
    return streak


def longest_day_streak(logs: Iterable[CareLog], tz: TzInfo = pytz.utc) -> int:
    """Longest run of consecutive local days with at least one completion."""
    longest = 0
    run = 0
    previous = None
    for day in _completion_days(logs, tz):
        run = run + 1 if previous is not None and (day - previous).days == 1 else 1
        longest = max(longest, run)
        previous = day
    return longest
