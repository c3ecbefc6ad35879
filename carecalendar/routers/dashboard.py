"""Dashboard and analytics routes."""
from datetime import datetime
from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from carecalendar.routers.dependencies import get_analytics_service, get_dashboard_service
from carecalendar.schemas.dashboard import (
    AnalyticsResponse,
    BucketGroup,
    DashboardResponse,
    HeatmapDayResponse,
    RecentLogResponse,
    ReliabilitySummary,
    TaskCard,
    TaskTypeStatsResponse,
    TypeReliability,
)
from carecalendar.schemas.task import LogResponse, TaskResponse
from carecalendar.services.analytics_service import AnalyticsService, LogFilters
from carecalendar.services.dashboard_service import VIEW_ALL, DashboardService
from carecalendar.services.time_buckets import BUCKET_LABELS

router = APIRouter(tags=["Dashboard"])


@router.get("/{user_id}/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    user_id: str,
    view: str = Query(VIEW_ALL, description="Calendar view: all, today, week"),
    enclosure_id: Optional[str] = Query(None, description="Enclosure id, or 'none' for tasks without one"),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Tasks grouped by time bucket, with streaks and the reliability score."""
    dashboard = service.build(user_id, view=view, enclosure_id=enclosure_id)
    report = dashboard.reliability

    return DashboardResponse(
        generated_at=dashboard.generated_at,
        timezone=service.tz.zone,
        total_tasks=len(dashboard.tasks),
        buckets=[
            BucketGroup(
                bucket=bucket.value,
                label=BUCKET_LABELS[bucket],
                tasks=[
                    TaskCard(
                        task=TaskResponse.model_validate(entry.task),
                        bucket=entry.bucket.value,
                        streak=entry.streak,
                        last_completed=entry.last_completed
                    )
                    for entry in entries
                ]
            )
            for bucket, entries in dashboard.buckets.items()
        ],
        reliability=ReliabilitySummary(
            score=report.score,
            window_days=report.window_days,
            expected=report.expected,
            completed=report.completed,
            by_type=[TypeReliability(**row) for row in report.by_type()]
        )
    )


@router.get("/{user_id}/analytics", response_model=AnalyticsResponse)
async def get_analytics(
    user_id: str,
    start_date: Optional[datetime] = Query(None, description="Only logs at or after this instant"),
    end_date: Optional[datetime] = Query(None, description="Only logs at or before this instant"),
    task_types: Optional[List[str]] = Query(None, description="Only logs of these task types"),
    exclude_skipped: bool = Query(False),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Completion statistics, streaks and a 90-day heatmap."""
    analytics = service.summary(user_id, LogFilters(
        start_date=start_date,
        end_date=end_date,
        task_types=task_types or (),
        exclude_skipped=exclude_skipped
    ))

    return AnalyticsResponse(
        total_completions=analytics.total_completions,
        total_skipped=analytics.total_skipped,
        completion_rate=analytics.completion_rate,
        logs_last_7_days=analytics.logs_last_7_days,
        logs_last_30_days=analytics.logs_last_30_days,
        logs_all_time=analytics.logs_all_time,
        current_streak=analytics.current_streak,
        longest_streak=analytics.longest_streak,
        task_type_stats=[
            TaskTypeStatsResponse(
                type=stats.type,
                total_completions=stats.total_completions,
                last_completed=stats.last_completed,
                average_per_week=stats.average_per_week
            )
            for stats in analytics.task_type_stats
        ],
        recent_logs=[
            RecentLogResponse(
                log=LogResponse.model_validate(recent.log),
                task_title=recent.task_title,
                task_type=recent.task_type
            )
            for recent in analytics.recent_logs
        ],
        heatmap=[HeatmapDayResponse(date=day.date, count=day.count) for day in analytics.heatmap]
    )
