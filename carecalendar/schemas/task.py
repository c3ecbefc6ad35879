"""Task and care log schemas for the Care Calendar API."""
from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
TYPE_PATTERN = r"^(feeding|misting|water-change|spot-clean|deep-clean|health-check|supplement|maintenance|custom)$"


class TaskCreate(BaseModel):
    """Schema for creating a care task."""
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    type: str = Field(default="custom", pattern=TYPE_PATTERN)
    frequency: str  # validated by the recurrence calculator
    custom_frequency_days: Optional[int] = None
    scheduled_time: Optional[str] = Field(None, pattern=TIME_PATTERN)  # HH:MM, owner's local time
    next_due_at: Optional[datetime] = None  # explicit first due instant
    enclosure_id: Optional[str] = None
    animal_id: Optional[str] = None
    notes: Optional[str] = None
    notification_enabled: bool = False
    notification_minutes_before: int = Field(default=15, ge=0)


class TaskUpdate(BaseModel):
    """Schema for updating a care task. next_due_at is not updatable."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    type: Optional[str] = Field(None, pattern=TYPE_PATTERN)
    frequency: Optional[str] = None
    custom_frequency_days: Optional[int] = None
    scheduled_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    enclosure_id: Optional[str] = None
    animal_id: Optional[str] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None
    notification_enabled: Optional[bool] = None
    notification_minutes_before: Optional[int] = Field(None, ge=0)


class TaskResponse(BaseModel):
    """Schema for care task API responses."""
    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    type: str
    frequency: str
    custom_frequency_days: Optional[int] = None
    scheduled_time: Optional[str] = None
    next_due_at: datetime
    enclosure_id: Optional[str] = None
    animal_id: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool
    notification_enabled: bool
    notification_minutes_before: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class LogResponse(BaseModel):
    id: str
    task_id: str
    user_id: Optional[str] = None
    completed_at: datetime
    notes: Optional[str] = None
    skipped: bool
    skip_reason: Optional[str] = None
    feeder_type: Optional[str] = None
    quantity_offered: Optional[int] = None
    quantity_eaten: Optional[int] = None
    refusal_noted: Optional[bool] = None
    supplement_used: Optional[str] = None

    class Config:
        from_attributes = True


class CompleteRequest(BaseModel):
    """Optional details recorded with a completion."""
    notes: Optional[str] = None
    feeder_type: Optional[str] = Field(None, max_length=100)
    quantity_offered: Optional[int] = Field(None, ge=0)
    quantity_eaten: Optional[int] = Field(None, ge=0)
    refusal_noted: Optional[bool] = None
    supplement_used: Optional[str] = Field(None, max_length=100)


class SkipRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class CompletionResponse(BaseModel):
    log: LogResponse
    task: TaskResponse


class BulkCompleteRequest(BaseModel):
    task_ids: List[str] = Field(..., min_length=1)


class BulkCompleteResponse(BaseModel):
    """Body of a fully successful bulk completion; failures are reported as 207."""
    succeeded: List[str]
