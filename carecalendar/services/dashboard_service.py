"""
Dashboard Service

Builds the care calendar read model from one snapshot of tasks and logs:
tasks grouped into time buckets, per-task streaks and the reliability score.
Nothing here is cached; every call recomputes from the raw logs.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional

import pytz

from carecalendar.config import RELIABILITY_WINDOW_DAYS
from carecalendar.models.care_log import CareLog
from carecalendar.models.task import CareTask
from carecalendar.services import reliability, streaks, time_buckets
from carecalendar.services.clock import Clock, SystemClock
from carecalendar.services.persistence import Persistence
from carecalendar.utils.datetime import TzInfo, local_date, start_of_local_day

VIEW_ALL = "all"
VIEW_TODAY = "today"
VIEW_WEEK = "week"
VIEW_MODES = (VIEW_ALL, VIEW_TODAY, VIEW_WEEK)


@dataclass
class TaskView:
    task: CareTask
    logs: List[CareLog]
    bucket: time_buckets.TimeBucket
    streak: int
    last_completed: Optional[datetime]


@dataclass
class Dashboard:
    generated_at: datetime
    buckets: "Dict[time_buckets.TimeBucket, List[TaskView]]"
    reliability: reliability.ReliabilityReport
    tasks: List[TaskView] = field(default_factory=list)

    @property
    def reliability_score(self) -> int:
        return self.reliability.score


class DashboardService:
    """Read-side projection for the care calendar."""

    def __init__(self, persistence: Persistence, clock: Optional[Clock] = None, tz: TzInfo = pytz.utc):
        self.persistence = persistence
        self.clock = clock or SystemClock()
        self.tz = tz

    def build(
        self,
        owner_id: Optional[str] = None,
        view: str = VIEW_ALL,
        enclosure_id: Optional[str] = None,
        window_days: int = RELIABILITY_WINDOW_DAYS,
    ) -> Dashboard:
        """
        Build the dashboard for one owner.

        Args:
            owner_id: Owner whose active tasks are shown
            view: "all", "today" (due before local tomorrow) or "week" (before local today + 7)
            enclosure_id: Only tasks of this enclosure; "none" keeps tasks without one
            window_days: Trailing reliability window

        Returns:
            Dashboard with non-empty buckets in display order
        """
        if view not in VIEW_MODES:
            raise ValueError(f"View must be one of: {', '.join(VIEW_MODES)}")

        now = self.clock.now()
        snapshot = self.persistence.list_tasks_with_logs(owner_id)
        snapshot = [
            (task, logs) for task, logs in snapshot
            if self._matches_enclosure(task, enclosure_id) and in_view(task.next_due_at, view, now, self.tz)
        ]

        views = [
            TaskView(
                task=task,
                logs=logs,
                bucket=time_buckets.classify(task.next_due_at, now, self.tz),
                streak=streaks.task_streak(logs),
                last_completed=streaks.last_completed(logs),
            )
            for task, logs in snapshot
        ]

        report = reliability.reliability_report(
            [task for task, _ in snapshot],
            {task.id: logs for task, logs in snapshot},
            now,
            window_days
        )

        return Dashboard(
            generated_at=now,
            buckets=time_buckets.group_by_bucket(views, lambda v: v.task.next_due_at, now, self.tz),
            reliability=report,
            tasks=views
        )

    @staticmethod
    def _matches_enclosure(task: CareTask, enclosure_id: Optional[str]) -> bool:
        if not enclosure_id:
            return True
        if enclosure_id == "none":
            return task.enclosure_id is None
        return task.enclosure_id == enclosure_id


def in_view(due_at: datetime, view: str, now: datetime, tz: TzInfo = pytz.utc) -> bool:
    """Whether a due instant falls inside a calendar view."""
    if view == VIEW_ALL:
        return True
    if view not in VIEW_MODES:
        raise ValueError(f"View must be one of: {', '.join(VIEW_MODES)}")
    horizon_days = 1 if view == VIEW_TODAY else 7
    return due_at < start_of_local_day(local_date(now, tz) + timedelta(days=horizon_days), tz)
