"""Care task model for SQLModel."""
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, DateTime, String, Text
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, List, Optional
import uuid

import pytz

if TYPE_CHECKING:
    from carecalendar.models.care_log import CareLog


def utc_now() -> datetime:
    return datetime.now(pytz.utc)


class TaskFrequency(str, Enum):
    """Recurrence pattern governing how often a task becomes due again."""
    DAILY = "daily"
    EVERY_OTHER_DAY = "every-other-day"
    TWICE_WEEKLY = "twice-weekly"
    WEEKLY = "weekly"
    BI_WEEKLY = "bi-weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


class TaskType(str, Enum):
    FEEDING = "feeding"
    MISTING = "misting"
    WATER_CHANGE = "water-change"
    SPOT_CLEAN = "spot-clean"
    DEEP_CLEAN = "deep-clean"
    HEALTH_CHECK = "health-check"
    SUPPLEMENT = "supplement"
    MAINTENANCE = "maintenance"
    CUSTOM = "custom"


class CareTask(SQLModel, table=True):
    """A recurring husbandry chore for an enclosure or animal."""

    __tablename__ = "care_tasks"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True, max_length=36)
    user_id: str = Field(sa_column=Column(String, index=True, nullable=False))
    enclosure_id: Optional[str] = Field(default=None, max_length=36)
    animal_id: Optional[str] = Field(default=None, max_length=100)

    title: str = Field(max_length=200, min_length=1)
    description: Optional[str] = Field(default=None, sa_column=Column(Text))
    type: str = Field(default=TaskType.CUSTOM.value, max_length=30)

    # Scheduling
    frequency: str = Field(max_length=30)
    custom_frequency_days: Optional[int] = Field(default=None)
    scheduled_time: Optional[str] = Field(default=None, max_length=5)  # HH:MM in owner's local time
    next_due_at: datetime = Field(sa_column=Column(DateTime(timezone=True), index=True, nullable=False))

    notes: Optional[str] = Field(default=None, sa_column=Column(Text))
    is_active: bool = Field(default=True)

    # Stored for the external notifier; never delivered from here
    notification_enabled: bool = Field(default=False)
    notification_minutes_before: int = Field(default=15)

    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))

    logs: List["CareLog"] = Relationship(
        back_populates="task",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"}
    )
