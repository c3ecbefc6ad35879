"""Dashboard and analytics response schemas."""
from pydantic import BaseModel
from datetime import date, datetime
from typing import List, Optional

from carecalendar.schemas.task import LogResponse, TaskResponse


class TaskCard(BaseModel):
    task: TaskResponse
    bucket: str
    streak: int
    last_completed: Optional[datetime] = None


class BucketGroup(BaseModel):
    bucket: str
    label: str
    tasks: List[TaskCard]


class TypeReliability(BaseModel):
    type: str
    expected: int
    actual: int
    percentage: int


class ReliabilitySummary(BaseModel):
    score: int
    window_days: int
    expected: int
    completed: int
    by_type: List[TypeReliability] = []


class DashboardResponse(BaseModel):
    """Tasks grouped by time bucket plus the reliability summary."""
    generated_at: datetime
    timezone: str
    total_tasks: int
    buckets: List[BucketGroup]
    reliability: ReliabilitySummary


class TaskTypeStatsResponse(BaseModel):
    type: str
    total_completions: int
    last_completed: Optional[datetime] = None
    average_per_week: float


class RecentLogResponse(BaseModel):
    log: LogResponse
    task_title: str
    task_type: str


class HeatmapDayResponse(BaseModel):
    date: date
    count: int


class AnalyticsResponse(BaseModel):
    total_completions: int
    total_skipped: int
    completion_rate: int
    logs_last_7_days: int
    logs_last_30_days: int
    logs_all_time: int
    current_streak: int
    longest_streak: int
    task_type_stats: List[TaskTypeStatsResponse]
    recent_logs: List[RecentLogResponse]
    heatmap: List[HeatmapDayResponse]
