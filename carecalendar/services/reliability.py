"""
Reliability Scorer

Summarizes how well a set of tasks was kept up over a trailing window as a
single 0-100 percentage of expected completions actually logged.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Mapping, Optional

from carecalendar.config import RELIABILITY_WINDOW_DAYS
from carecalendar.models.care_log import CareLog
from carecalendar.models.task import CareTask, TaskFrequency
from carecalendar.services.recurrence import validate_frequency_config
from carecalendar.utils.datetime import ensure_utc


@dataclass
class TaskReliability:
    task_id: str
    task_type: str
    expected: int
    completed: int


@dataclass
class ReliabilityReport:
    """Totals behind a reliability score."""
    window_days: int
    expected: int = 0
    completed: int = 0
    tasks: List[TaskReliability] = field(default_factory=list)

    @property
    def score(self) -> int:
        return percentage(self.completed, self.expected)

    def by_type(self) -> List[Dict[str, object]]:
        """Expected vs actual per task type, largest expectation first."""
        totals: Dict[str, Dict[str, int]] = {}
        for entry in self.tasks:
            bucket = totals.setdefault(entry.task_type, {"expected": 0, "actual": 0})
            bucket["expected"] += entry.expected
            bucket["actual"] += entry.completed

        rows = [
            {
                "type": task_type,
                "expected": values["expected"],
                "actual": values["actual"],
                "percentage": percentage(values["actual"], values["expected"]),
            }
            for task_type, values in totals.items()
        ]
        return sorted(rows, key=lambda row: (-row["expected"], row["type"]))


def percentage(part: int, whole: int) -> int:
    """Half-up rounded percentage; 0 when there is nothing to measure."""
    if whole <= 0:
        return 0
    return int(math.floor(100 * part / whole + 0.5))


def expected_count(frequency, custom_frequency_days: Optional[int], window_days: int = RELIABILITY_WINDOW_DAYS) -> int:
    """Occurrences a frequency implies within the window."""
    parsed = validate_frequency_config(frequency, custom_frequency_days)
    if parsed == TaskFrequency.DAILY:
        return window_days
    if parsed == TaskFrequency.EVERY_OTHER_DAY:
        return math.ceil(window_days / 2)
    if parsed == TaskFrequency.TWICE_WEEKLY:
        return math.ceil(window_days / 3.5)
    if parsed == TaskFrequency.WEEKLY:
        return math.ceil(window_days / 7)
    if parsed == TaskFrequency.BI_WEEKLY:
        return math.ceil(window_days / 14)
    if parsed == TaskFrequency.MONTHLY:
        return 1
    return max(1, math.ceil(window_days / custom_frequency_days))


def completed_in_window(logs: Iterable[CareLog], window_start: datetime, now: datetime) -> int:
    """Non-skipped logs with window_start <= completed_at <= now."""
    return sum(
        1 for log in logs
        if not log.skipped and window_start <= ensure_utc(log.completed_at) <= now
    )


def reliability_report(
    tasks: Iterable[CareTask],
    logs_by_task: Mapping[str, Iterable[CareLog]],
    now: datetime,
    window_days: int = RELIABILITY_WINDOW_DAYS,
) -> ReliabilityReport:
    """
    Aggregate expected vs capped actual completions across active tasks.

    A task contributes at most its own expected count, so an over-logged task
    cannot hide missed ones elsewhere.
    """
    now = ensure_utc(now)
    window_start = now - timedelta(days=window_days)
    report = ReliabilityReport(window_days=window_days)

    for task in tasks:
        if not task.is_active:
            continue
        expected = expected_count(task.frequency, task.custom_frequency_days, window_days)
        if expected <= 0:
            continue
        completed = min(completed_in_window(logs_by_task.get(task.id, ()), window_start, now), expected)

        report.expected += expected
        report.completed += completed
        report.tasks.append(TaskReliability(
            task_id=task.id,
            task_type=task.type,
            expected=expected,
            completed=completed
        ))

    return report


def score(
    tasks: Iterable[CareTask],
    logs_by_task: Mapping[str, Iterable[CareLog]],
    now: datetime,
    window_days: int = RELIABILITY_WINDOW_DAYS,
) -> int:
    """Reliability percentage in [0, 100]."""
    return reliability_report(tasks, logs_by_task, now, window_days).score
