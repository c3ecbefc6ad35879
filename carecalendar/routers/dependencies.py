"""Shared FastAPI dependencies for the Care Calendar routers."""
from typing import Optional

from fastapi import Depends, Path, Query
from sqlmodel import Session

from carecalendar.config import DEFAULT_TIMEZONE
from carecalendar.db.config import get_session
from carecalendar.services.analytics_service import AnalyticsService
from carecalendar.services.clock import Clock, get_clock
from carecalendar.services.dashboard_service import DashboardService
from carecalendar.services.persistence import SQLModelPersistence
from carecalendar.services.schedule_service import TaskScheduleService
from carecalendar.services.task_service import TaskService
from carecalendar.utils.datetime import TzInfo, get_timezone


def get_owner_timezone(
    tz: Optional[str] = Query(None, description="Owner's IANA time zone, e.g. Europe/Berlin")
) -> TzInfo:
    """Resolve the owner's zone from the request, falling back to DEFAULT_TIMEZONE."""
    return get_timezone(tz or DEFAULT_TIMEZONE)


def get_task_service(
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock),
    tz: TzInfo = Depends(get_owner_timezone),
) -> TaskService:
    """Dependency for getting TaskService instance."""
    return TaskService(session, clock, tz)


def get_schedule_service(
    user_id: str = Path(...),
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock),
    tz: TzInfo = Depends(get_owner_timezone),
) -> TaskScheduleService:
    """Schedule service scoped to the owner in the path."""
    return TaskScheduleService(SQLModelPersistence(session, owner_id=user_id), clock, tz)


def get_dashboard_service(
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock),
    tz: TzInfo = Depends(get_owner_timezone),
) -> DashboardService:
    return DashboardService(SQLModelPersistence(session), clock, tz)


def get_analytics_service(
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock),
    tz: TzInfo = Depends(get_owner_timezone),
) -> AnalyticsService:
    return AnalyticsService(session, clock, tz)
