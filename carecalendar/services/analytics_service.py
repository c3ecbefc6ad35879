"""
Care Analytics Service

Summarizes a user's care logs: totals, completion rate, streaks, per-type
statistics and a 90-day activity heatmap.
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence

import pytz
from sqlmodel import Session, select

from carecalendar.models.care_log import CareLog
from carecalendar.models.task import CareTask
from carecalendar.services import streaks
from carecalendar.services.clock import Clock, SystemClock
from carecalendar.services.persistence import normalize_log
from carecalendar.services.reliability import percentage
from carecalendar.utils.datetime import TzInfo, ensure_utc, local_date

HEATMAP_DAYS = 90
RECENT_LOG_LIMIT = 20


@dataclass
class LogFilters:
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    task_types: Sequence[str] = ()
    exclude_skipped: bool = False


@dataclass
class TaskTypeStats:
    type: str
    total_completions: int
    last_completed: Optional[datetime]
    average_per_week: float


@dataclass
class RecentLog:
    log: CareLog
    task_title: str
    task_type: str


@dataclass
class HeatmapDay:
    date: date
    count: int


@dataclass
class CareAnalytics:
    total_completions: int
    total_skipped: int
    completion_rate: int
    logs_last_7_days: int
    logs_last_30_days: int
    logs_all_time: int
    current_streak: int
    longest_streak: int
    task_type_stats: List[TaskTypeStats] = field(default_factory=list)
    recent_logs: List[RecentLog] = field(default_factory=list)
    heatmap: List[HeatmapDay] = field(default_factory=list)


class AnalyticsService:
    """Analyzes care logs to provide insights and statistics."""

    def __init__(self, session: Session, clock: Optional[Clock] = None, tz: TzInfo = pytz.utc):
        self.session = session
        self.clock = clock or SystemClock()
        self.tz = tz

    def summary(self, user_id: str, filters: Optional[LogFilters] = None) -> CareAnalytics:
        """Get comprehensive analytics for a user's care logs."""
        filters = filters or LogFilters()
        now = self.clock.now()
        tasks = {task.id: task for task in self.session.exec(
            select(CareTask).where(CareTask.user_id == user_id)
        ).all()}
        logs = self.get_user_logs(user_id, filters, tasks)
        completed = [log for log in logs if not log.skipped]

        return CareAnalytics(
            total_completions=len(completed),
            total_skipped=len(logs) - len(completed),
            completion_rate=percentage(len(completed), len(logs)) if logs else 100,
            logs_last_7_days=self._count_since(logs, now, 7),
            logs_last_30_days=self._count_since(logs, now, 30),
            logs_all_time=len(logs),
            current_streak=streaks.current_day_streak(logs, local_date(now, self.tz), self.tz),
            longest_streak=streaks.longest_day_streak(logs, self.tz),
            task_type_stats=self._task_type_stats(logs, tasks, now),
            recent_logs=[
                RecentLog(log=log, task_title=tasks[log.task_id].title, task_type=tasks[log.task_id].type)
                for log in logs[:RECENT_LOG_LIMIT]
                if log.task_id in tasks
            ],
            heatmap=self._heatmap(completed, now),
        )

    def get_user_logs(
        self,
        user_id: str,
        filters: LogFilters,
        tasks: Optional[Dict[str, CareTask]] = None,
    ) -> List[CareLog]:
        """All of a user's logs, newest first, after applying filters."""
        statement = (
            select(CareLog)
            .where(CareLog.user_id == user_id)
            .order_by(CareLog.completed_at.desc())
        )
        logs = [normalize_log(log) for log in self.session.exec(statement).all()]

        if filters.start_date is not None:
            start = ensure_utc(filters.start_date)
            logs = [log for log in logs if log.completed_at >= start]
        if filters.end_date is not None:
            end = ensure_utc(filters.end_date)
            logs = [log for log in logs if log.completed_at <= end]
        if filters.task_types:
            wanted = set(filters.task_types)
            tasks = tasks if tasks is not None else {}
            logs = [log for log in logs if log.task_id in tasks and tasks[log.task_id].type in wanted]
        if filters.exclude_skipped:
            logs = [log for log in logs if not log.skipped]

        return logs

    @staticmethod
    def _count_since(logs: List[CareLog], now: datetime, days: int) -> int:
        cutoff = now - timedelta(days=days)
        return sum(1 for log in logs if log.completed_at >= cutoff)

    @staticmethod
    def _task_type_stats(logs: List[CareLog], tasks: Dict[str, CareTask], now: datetime) -> List[TaskTypeStats]:
        if not logs:
            return []

        oldest = min(log.completed_at for log in logs)
        weeks_since_start = max(1, math.ceil((now - oldest) / timedelta(weeks=1)))

        by_type: Dict[str, Dict[str, object]] = {}
        for log in logs:
            task = tasks.get(log.task_id)
            if log.skipped or task is None:
                continue
            entry = by_type.setdefault(task.type, {"completions": 0, "last": None})
            entry["completions"] += 1
            if entry["last"] is None or log.completed_at > entry["last"]:
                entry["last"] = log.completed_at

        stats = [
            TaskTypeStats(
                type=task_type,
                total_completions=entry["completions"],
                last_completed=entry["last"],
                average_per_week=round(entry["completions"] / weeks_since_start, 1),
            )
            for task_type, entry in by_type.items()
        ]
        return sorted(stats, key=lambda s: s.total_completions, reverse=True)

    def _heatmap(self, completed: List[CareLog], now: datetime) -> List[HeatmapDay]:
        counts: Dict[date, int] = {}
        for log in completed:
            day = local_date(log.completed_at, self.tz)
            counts[day] = counts.get(day, 0) + 1

        today = local_date(now, self.tz)
        return [
            HeatmapDay(date=day, count=counts.get(day, 0))
            for day in (today - timedelta(days=offset) for offset in range(HEATMAP_DAYS - 1, -1, -1))
        ]
