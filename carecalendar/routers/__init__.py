"""Routers package for the Care Calendar API."""

from .dashboard import router as dashboard_router
from .tasks import router as tasks_router

__all__ = ["dashboard_router", "tasks_router"]
