"""
Persistence collaborator for the scheduling engine.

The engine only talks to the narrow Persistence protocol; SQLModelPersistence
is the database-backed implementation used by the API.
"""

from typing import Any, Dict, List, Optional, Protocol, Tuple

import pytz
from sqlalchemy.orm.attributes import set_committed_value
from sqlmodel import Session, select

from carecalendar.errors import TaskNotFoundError
from carecalendar.models.care_log import CareLog
from carecalendar.models.task import CareTask, utc_now
from carecalendar.utils.datetime import ensure_utc

TaskWithLogs = Tuple[CareTask, List[CareLog]]


class Persistence(Protocol):
    def get_task(self, task_id: str) -> Optional[CareTask]:
        ...

    def update_task(self, task_id: str, fields: Dict[str, Any]) -> CareTask:
        ...

    def append_log(self, log: CareLog) -> CareLog:
        ...

    def list_tasks_with_logs(self, owner_id: Optional[str] = None) -> List[TaskWithLogs]:
        ...

    def list_logs(self, task_id: str) -> List[CareLog]:
        ...


def _as_loaded_utc(instance, name: str):
    # SQLite returns naive datetimes; everything above this layer expects aware UTC.
    # Setting the committed value keeps the row clean in the session.
    value = getattr(instance, name)
    if value is not None and value.tzinfo is not pytz.utc:
        set_committed_value(instance, name, ensure_utc(value))


def normalize_task(task: CareTask) -> CareTask:
    for name in ("next_due_at", "created_at", "updated_at"):
        _as_loaded_utc(task, name)
    return task


def normalize_log(log: CareLog) -> CareLog:
    _as_loaded_utc(log, "completed_at")
    return log


class SQLModelPersistence:
    """
    Persistence backed by a SQLModel session.

    With an owner_id, other owners' tasks are invisible to reads.
    """

    def __init__(self, session: Session, owner_id: Optional[str] = None):
        self.session = session
        self.owner_id = owner_id

    def get_task(self, task_id: str) -> Optional[CareTask]:
        task = self.session.get(CareTask, task_id)
        if task is None or (self.owner_id is not None and task.user_id != self.owner_id):
            return None
        return normalize_task(task)

    def update_task(self, task_id: str, fields: Dict[str, Any]) -> CareTask:
        task = self.get_task(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)

        for name, value in fields.items():
            setattr(task, name, value)
        task.updated_at = utc_now()

        self._commit(task)
        return normalize_task(task)

    def append_log(self, log: CareLog) -> CareLog:
        self._commit(log)
        return normalize_log(log)

    def _commit(self, instance):
        self.session.add(instance)
        try:
            self.session.commit()
        except Exception:
            # Leave the session usable for the next write in a bulk run
            self.session.rollback()
            raise
        self.session.refresh(instance)

    def list_logs(self, task_id: str) -> List[CareLog]:
        statement = (
            select(CareLog)
            .where(CareLog.task_id == task_id)
            .order_by(CareLog.completed_at.desc())
        )
        return [normalize_log(log) for log in self.session.exec(statement).all()]

    def list_tasks_with_logs(self, owner_id: Optional[str] = None) -> List[TaskWithLogs]:
        """Active tasks ordered by due date, each with its logs newest first."""
        statement = select(CareTask).where(CareTask.is_active == True)  # noqa: E712
        owner_id = owner_id if owner_id is not None else self.owner_id
        if owner_id is not None:
            statement = statement.where(CareTask.user_id == owner_id)
        statement = statement.order_by(CareTask.next_due_at.asc())
        tasks = [normalize_task(task) for task in self.session.exec(statement).all()]

        logs_by_task: Dict[str, List[CareLog]] = {task.id: [] for task in tasks}
        if tasks:
            log_statement = (
                select(CareLog)
                .where(CareLog.task_id.in_(list(logs_by_task)))
                .order_by(CareLog.completed_at.desc())
            )
            for log in self.session.exec(log_statement).all():
                logs_by_task[log.task_id].append(normalize_log(log))

        return [(task, logs_by_task[task.id]) for task in tasks]
