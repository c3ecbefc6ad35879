"""Task service for care task CRUD operations."""
from sqlmodel import Session, select
from typing import Any, Dict, List, Optional
from datetime import datetime
import logging

import pytz

from carecalendar.errors import TaskNotFoundError
from carecalendar.models.care_log import CareLog
from carecalendar.models.task import CareTask, TaskType
from carecalendar.services import recurrence
from carecalendar.services.clock import Clock, SystemClock
from carecalendar.services.persistence import SQLModelPersistence, normalize_task
from carecalendar.utils.datetime import TzInfo, ensure_utc, parse_time_of_day

logger = logging.getLogger(__name__)

# Fields a caller may change through update_task; next_due_at is moved only by
# creation, completion and skip
UPDATABLE_FIELDS = (
    "title",
    "description",
    "type",
    "frequency",
    "custom_frequency_days",
    "scheduled_time",
    "enclosure_id",
    "animal_id",
    "notes",
    "is_active",
    "notification_enabled",
    "notification_minutes_before",
)

# Columns that cannot be cleared with an explicit null
REQUIRED_FIELDS = (
    "title",
    "type",
    "frequency",
    "is_active",
    "notification_enabled",
    "notification_minutes_before",
)


class TaskService:
    """Service class for care task CRUD operations."""

    def __init__(self, session: Session, clock: Optional[Clock] = None, tz: TzInfo = pytz.utc):
        self.session = session
        self.clock = clock or SystemClock()
        self.tz = tz

    def create_task(
        self,
        user_id: str,
        title: str,
        frequency: str,
        type: str = TaskType.CUSTOM.value,
        custom_frequency_days: Optional[int] = None,
        scheduled_time: Optional[str] = None,
        next_due_at: Optional[datetime] = None,
        description: Optional[str] = None,
        enclosure_id: Optional[str] = None,
        animal_id: Optional[str] = None,
        notes: Optional[str] = None,
        notification_enabled: bool = False,
        notification_minutes_before: int = 15,
    ) -> CareTask:
        """
        Create a new care task.

        The frequency config is validated here. Without an explicit start
        instant the first due date comes from the scheduled time of day.
        """
        parsed = recurrence.validate_frequency_config(frequency, custom_frequency_days)
        time_of_day = parse_time_of_day(scheduled_time)

        if next_due_at is None:
            next_due_at = recurrence.initial_due(time_of_day, self.clock.now(), self.tz)

        task = CareTask(
            user_id=user_id,
            title=title,
            description=description,
            type=TaskType(type).value,
            frequency=parsed.value,
            custom_frequency_days=custom_frequency_days,
            scheduled_time=scheduled_time or None,
            next_due_at=ensure_utc(next_due_at),
            enclosure_id=enclosure_id,
            animal_id=animal_id,
            notes=notes,
            is_active=True,
            notification_enabled=notification_enabled,
            notification_minutes_before=notification_minutes_before,
        )

        self.session.add(task)
        self.session.commit()
        self.session.refresh(task)
        logger.info(f"Created care task {task.id} for user {user_id} due {task.next_due_at}")
        return normalize_task(task)

    def get_task(self, task_id: str, user_id: Optional[str] = None) -> CareTask:
        """Get a task by id, optionally enforcing ownership."""
        statement = select(CareTask).where(CareTask.id == task_id)
        if user_id is not None:
            statement = statement.where(CareTask.user_id == user_id)
        task = self.session.exec(statement).first()
        if task is None:
            raise TaskNotFoundError(task_id)
        return normalize_task(task)

    def list_tasks(
        self,
        user_id: str,
        include_inactive: bool = False,
        enclosure_id: Optional[str] = None,
    ) -> List[CareTask]:
        """List a user's tasks ordered by due date."""
        statement = select(CareTask).where(CareTask.user_id == user_id)
        if not include_inactive:
            statement = statement.where(CareTask.is_active == True)  # noqa: E712
        if enclosure_id == "none":
            statement = statement.where(CareTask.enclosure_id.is_(None))
        elif enclosure_id:
            statement = statement.where(CareTask.enclosure_id == enclosure_id)
        statement = statement.order_by(CareTask.next_due_at.asc())
        return [normalize_task(task) for task in self.session.exec(statement).all()]

    def update_task(self, task_id: str, user_id: str, updates: Dict[str, Any]) -> CareTask:
        """
        Update a task, ensuring user ownership.

        Changing the frequency re-validates it but leaves next_due_at alone.
        """
        task = self.get_task(task_id, user_id)
        updates = dict(updates)

        unknown = set(updates) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
        cleared = [name for name in REQUIRED_FIELDS if name in updates and updates[name] is None]
        if cleared:
            raise ValueError(f"Fields cannot be null: {', '.join(cleared)}")

        if "frequency" in updates or "custom_frequency_days" in updates:
            frequency = updates.get("frequency", task.frequency)
            custom_days = updates.get("custom_frequency_days", task.custom_frequency_days)
            updates["frequency"] = recurrence.validate_frequency_config(frequency, custom_days).value
        if "scheduled_time" in updates:
            parse_time_of_day(updates["scheduled_time"])
            updates["scheduled_time"] = updates["scheduled_time"] or None
        if "type" in updates:
            updates["type"] = TaskType(updates["type"]).value

        return SQLModelPersistence(self.session).update_task(task.id, updates)

    def deactivate(self, task_id: str, user_id: str) -> CareTask:
        """Hide a task from scheduling without losing its history."""
        return self.update_task(task_id, user_id, {"is_active": False})

    def delete_task(self, task_id: str, user_id: str) -> None:
        """Delete a task and its logs, ensuring user ownership."""
        task = self.get_task(task_id, user_id)
        self.session.delete(task)
        self.session.commit()
        logger.info(f"Deleted care task {task_id} for user {user_id}")

    def get_task_logs(self, task_id: str, user_id: str) -> List[CareLog]:
        """Logs of one task, newest first."""
        task = self.get_task(task_id, user_id)
        return SQLModelPersistence(self.session).list_logs(task.id)
