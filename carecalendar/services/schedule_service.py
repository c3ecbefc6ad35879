"""
Task Schedule Service

Owns the lifecycle of a task's next_due_at. Completing or skipping a task
appends a log and moves the due date forward from the moment of the action.

Completion is not idempotent: two calls produce two logs and advance the due
date twice, each from its own basis instant.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

import pytz

from carecalendar.config import RELIABILITY_WINDOW_DAYS
from carecalendar.errors import PartialBulkFailureError, TaskNotFoundError
from carecalendar.models.care_log import CareLog, LOG_DETAIL_FIELDS
from carecalendar.models.task import CareTask
from carecalendar.services import recurrence, reliability, streaks, time_buckets
from carecalendar.services.clock import Clock, SystemClock
from carecalendar.services.persistence import Persistence, normalize_log, normalize_task
from carecalendar.utils.datetime import TzInfo, parse_time_of_day
from carecalendar.utils.logger import get_logger
from carecalendar.utils.metrics import metrics_collector

logger = get_logger(__name__)


@dataclass
class CompletionResult:
    log: CareLog
    task: CareTask


@dataclass
class BulkCompletionResult:
    """Outcome of a best-effort bulk completion."""
    succeeded: List[str] = field(default_factory=list)
    failures: Dict[str, Exception] = field(default_factory=dict)
    results: Dict[str, CompletionResult] = field(default_factory=dict)

    @property
    def failed(self) -> List[str]:
        return list(self.failures)

    @property
    def ok(self) -> bool:
        return not self.failures

    def raise_for_failures(self):
        if self.failures:
            raise PartialBulkFailureError(self.failures, self.succeeded)


class TaskScheduleService:
    """Completes and skips care tasks and exposes the read-side calculations."""

    def __init__(self, persistence: Persistence, clock: Optional[Clock] = None, tz: TzInfo = pytz.utc):
        self.persistence = persistence
        self.clock = clock or SystemClock()
        self.tz = tz

    @metrics_collector.time_operation("care_task_complete_seconds")
    def complete(self, task_id: str, log_fields: Optional[Dict[str, Any]] = None) -> CompletionResult:
        """
        Mark a task as done now.

        Args:
            task_id: Task to complete
            log_fields: Optional log details (notes, feeding quantities, ...)

        Returns:
            The new log and the task with its advanced due date

        Raises:
            TaskNotFoundError: If the task does not exist
        """
        result = self._record(task_id, skipped=False, log_fields=log_fields)
        metrics_collector.task_completed()
        logger.info(
            "task.completed",
            task_id=task_id,
            basis=result.log.completed_at,
            next_due_at=result.task.next_due_at
        )
        return result

    def skip(self, task_id: str, reason: Optional[str] = None) -> CompletionResult:
        """Skip a task now; the due date advances exactly as on completion."""
        result = self._record(task_id, skipped=True, skip_reason=reason)
        metrics_collector.task_skipped()
        logger.info(
            "task.skipped",
            task_id=task_id,
            reason=reason,
            basis=result.log.completed_at,
            next_due_at=result.task.next_due_at
        )
        return result

    def bulk_complete(self, task_ids: Iterable[str]) -> BulkCompletionResult:
        """
        Complete each task in order, independently of the others.

        A failure never rolls back earlier successes; failed ids are reported
        together with their causes.
        """
        outcome = BulkCompletionResult()
        for task_id in task_ids:
            try:
                outcome.results[task_id] = self.complete(task_id)
                outcome.succeeded.append(task_id)
            except Exception as e:
                outcome.failures[task_id] = e
                logger.warning("task.bulk_failed", task_id=task_id, error=str(e))

        # A rolled back write expires rows loaded by earlier iterations
        for result in outcome.results.values():
            _normalized(result)

        if outcome.failures:
            metrics_collector.bulk_failure(len(outcome.failures))
        logger.info("task.bulk_completed", succeeded=outcome.succeeded, failed=outcome.failed)
        return outcome

    def _record(
        self,
        task_id: str,
        skipped: bool,
        skip_reason: Optional[str] = None,
        log_fields: Optional[Dict[str, Any]] = None,
    ) -> CompletionResult:
        task = self.persistence.get_task(task_id)
        if task is None:
            metrics_collector.task_not_found()
            raise TaskNotFoundError(task_id)

        basis = self.clock.now()
        new_due = recurrence.next_due(
            task.frequency,
            task.custom_frequency_days,
            parse_time_of_day(task.scheduled_time),
            basis,
            self.tz
        )

        log = CareLog(
            task_id=task.id,
            user_id=task.user_id,
            completed_at=basis,
            skipped=skipped,
            skip_reason=skip_reason,
            **_detail_fields(log_fields)
        )
        log = self.persistence.append_log(log)
        task = self.persistence.update_task(task.id, {"next_due_at": new_due})
        return _normalized(CompletionResult(log=log, task=task))

    # Read-side queries

    def classify(self, due_at: datetime, now: Optional[datetime] = None) -> time_buckets.TimeBucket:
        return time_buckets.classify(due_at, now or self.clock.now(), self.tz)

    def streak(self, logs: Iterable[CareLog]) -> int:
        return streaks.task_streak(logs)

    def score(
        self,
        tasks: Iterable[CareTask],
        logs_by_task: Mapping[str, Iterable[CareLog]],
        window_days: int = RELIABILITY_WINDOW_DAYS,
        now: Optional[datetime] = None,
    ) -> int:
        return reliability.score(tasks, logs_by_task, now or self.clock.now(), window_days)


def _normalized(result: CompletionResult) -> CompletionResult:
    normalize_log(result.log)
    normalize_task(result.task)
    return result


def _detail_fields(log_fields: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if not log_fields:
        return {}
    unknown = set(log_fields) - set(LOG_DETAIL_FIELDS)
    if unknown:
        raise ValueError(f"Unsupported log fields: {', '.join(sorted(unknown))}")
    return {name: value for name, value in log_fields.items() if value is not None}
