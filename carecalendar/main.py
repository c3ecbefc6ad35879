"""Main FastAPI application for the Care Calendar backend."""
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from carecalendar.config import LOG_LEVEL
from carecalendar.db.init import init_db
from carecalendar.errors import CareCalendarError, create_error_response
from carecalendar.middleware.cors import add_cors_middleware
from carecalendar.routers import dashboard_router, tasks_router
from carecalendar.utils.logger import configure_logging
from carecalendar.utils.metrics import metrics_collector

configure_logging(LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title="Care Calendar API",
    description="Recurring husbandry task scheduling, streaks and reliability scoring",
    version="1.0.0",
)

# Add CORS middleware
add_cors_middleware(app)

ERROR_STATUS = {
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "PARTIAL_BULK_FAILURE": status.HTTP_207_MULTI_STATUS,
}


def error_status(code: str) -> int:
    if code in ERROR_STATUS:
        return ERROR_STATUS[code]
    if code.startswith("INVALID_"):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@app.exception_handler(CareCalendarError)
async def care_calendar_error_handler(request: Request, exc: CareCalendarError):
    return JSONResponse(status_code=error_status(exc.code), content=create_error_response(exc))


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"success": False, "error": {"code": "VALIDATION_ERROR", "message": str(exc), "details": {}}}
    )


@app.on_event("startup")
async def startup_event():
    """Initialize database on startup."""
    try:
        init_db()
    except Exception as e:
        logger.warning(f"Database initialization failed: {str(e)}")
        logger.warning("Server will continue but database operations may fail.")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}


@app.get("/metrics")
async def get_metrics():
    """In-process scheduling counters and timers."""
    return metrics_collector.get_metrics()


app.include_router(tasks_router, prefix="/api")  # /api/{user_id}/tasks
app.include_router(dashboard_router, prefix="/api")  # /api/{user_id}/dashboard, /api/{user_id}/analytics


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "carecalendar.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
