"""Care log model for SQLModel."""
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, DateTime, String, ForeignKey, Text
from datetime import datetime
from typing import TYPE_CHECKING, Optional
import uuid

if TYPE_CHECKING:
    from carecalendar.models.task import CareTask


class CareLog(SQLModel, table=True):
    """Append-only record of a task being done or skipped."""

    __tablename__ = "care_logs"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True, max_length=36)
    task_id: str = Field(
        sa_column=Column(String, ForeignKey("care_tasks.id", ondelete="CASCADE"), index=True, nullable=False)
    )
    user_id: Optional[str] = Field(default=None, max_length=100)

    completed_at: datetime = Field(sa_column=Column(DateTime(timezone=True), index=True, nullable=False))
    notes: Optional[str] = Field(default=None, sa_column=Column(Text))

    skipped: bool = Field(default=False)
    skip_reason: Optional[str] = Field(default=None, max_length=500)

    # Feeding details, only filled for feeding tasks
    feeder_type: Optional[str] = Field(default=None, max_length=100)
    quantity_offered: Optional[int] = Field(default=None)
    quantity_eaten: Optional[int] = Field(default=None)
    refusal_noted: Optional[bool] = Field(default=None)
    supplement_used: Optional[str] = Field(default=None, max_length=100)

    task: Optional["CareTask"] = Relationship(back_populates="logs")


# Caller-supplied fields that may be merged into a log on completion
LOG_DETAIL_FIELDS = (
    "notes",
    "feeder_type",
    "quantity_offered",
    "quantity_eaten",
    "refusal_noted",
    "supplement_used",
)
