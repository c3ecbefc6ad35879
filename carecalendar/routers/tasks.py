"""Task router for care task management and scheduling."""
from fastapi import APIRouter, Depends, status, Query
from typing import Any, Dict, List, Optional

from carecalendar.routers.dependencies import get_schedule_service, get_task_service
from carecalendar.schemas.task import (
    BulkCompleteRequest,
    BulkCompleteResponse,
    CompleteRequest,
    CompletionResponse,
    LogResponse,
    SkipRequest,
    TaskCreate,
    TaskResponse,
    TaskUpdate,
)
from carecalendar.services.dashboard_service import VIEW_ALL, in_view
from carecalendar.services.schedule_service import CompletionResult, TaskScheduleService
from carecalendar.services.task_service import TaskService

router = APIRouter(tags=["Tasks"])  # No prefix since main.py adds /api prefix


def _completion_response(result: CompletionResult) -> CompletionResponse:
    return CompletionResponse(
        log=LogResponse.model_validate(result.log),
        task=TaskResponse.model_validate(result.task)
    )


@router.get("/{user_id}/tasks", response_model=Dict[str, Any])
async def list_tasks(
    user_id: str,
    service: TaskService = Depends(get_task_service),
    view: str = Query(VIEW_ALL, description="Calendar view: all, today, week"),
    enclosure_id: Optional[str] = Query(None, description="Enclosure id, or 'none' for tasks without one"),
    include_inactive: bool = Query(False, description="Include deactivated tasks"),
):
    """List a user's care tasks ordered by due date."""
    tasks = service.list_tasks(user_id, include_inactive=include_inactive, enclosure_id=enclosure_id)
    now = service.clock.now()
    tasks = [task for task in tasks if in_view(task.next_due_at, view, now, service.tz)]

    return {
        "tasks": [TaskResponse.model_validate(task) for task in tasks],
        "count": len(tasks)
    }


@router.post("/{user_id}/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    user_id: str,
    task_data: TaskCreate,
    service: TaskService = Depends(get_task_service),
):
    """Create a care task. Without next_due_at the first due date follows scheduled_time."""
    return service.create_task(user_id=user_id, **task_data.model_dump())


@router.post("/{user_id}/tasks/bulk-complete", response_model=BulkCompleteResponse)
async def bulk_complete_tasks(
    user_id: str,
    request: BulkCompleteRequest,
    service: TaskScheduleService = Depends(get_schedule_service),
):
    """
    Complete several tasks at once.

    Every id is attempted; if any fail the response is 207 listing both the
    succeeded and the failed ids.
    """
    outcome = service.bulk_complete(request.task_ids)
    outcome.raise_for_failures()
    return BulkCompleteResponse(succeeded=outcome.succeeded)


@router.get("/{user_id}/tasks/{task_id}", response_model=TaskResponse)
async def get_task(
    user_id: str,
    task_id: str,
    service: TaskService = Depends(get_task_service),
):
    return service.get_task(task_id, user_id)


@router.put("/{user_id}/tasks/{task_id}", response_model=TaskResponse)
async def update_task(
    user_id: str,
    task_id: str,
    task_data: TaskUpdate,
    service: TaskService = Depends(get_task_service),
):
    """Update a care task. Changing the frequency does not move next_due_at."""
    return service.update_task(task_id, user_id, task_data.model_dump(exclude_unset=True))


@router.delete("/{user_id}/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    user_id: str,
    task_id: str,
    service: TaskService = Depends(get_task_service),
):
    """Delete a care task together with its logs."""
    service.delete_task(task_id, user_id)


@router.post("/{user_id}/tasks/{task_id}/complete", response_model=CompletionResponse)
async def complete_task(
    user_id: str,
    task_id: str,
    request: Optional[CompleteRequest] = None,
    service: TaskScheduleService = Depends(get_schedule_service),
):
    """Log a completion now and advance the task's due date."""
    log_fields = request.model_dump(exclude_none=True) if request else None
    return _completion_response(service.complete(task_id, log_fields))


@router.post("/{user_id}/tasks/{task_id}/skip", response_model=CompletionResponse)
async def skip_task(
    user_id: str,
    task_id: str,
    request: Optional[SkipRequest] = None,
    service: TaskScheduleService = Depends(get_schedule_service),
):
    """Log a skip now; the due date advances as if the task was done."""
    return _completion_response(service.skip(task_id, request.reason if request else None))


@router.get("/{user_id}/tasks/{task_id}/logs", response_model=List[LogResponse])
async def list_task_logs(
    user_id: str,
    task_id: str,
    service: TaskService = Depends(get_task_service),
):
    """Care logs of a task, newest first."""
    return service.get_task_logs(task_id, user_id)
