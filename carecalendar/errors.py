"""
Care Calendar Errors

Typed failures raised by the scheduling engine and the task services.
Each error carries a machine-readable code.
"""

from typing import Any, Dict, List, Optional


class CareCalendarError(Exception):
    """Base exception for care calendar errors"""
    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class TaskNotFoundError(CareCalendarError):
    """Raised when a task id cannot be resolved."""

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(
            code="NOT_FOUND",
            message=f"Task {task_id} not found",
            details={"task_id": task_id}
        )


class InvalidFrequencyConfigError(CareCalendarError):
    """Raised when a frequency is unknown, a custom interval is missing, or an interval is below 1."""

    def __init__(self, message: str, frequency: Optional[str] = None, custom_frequency_days: Optional[int] = None):
        super().__init__(
            code="INVALID_FREQUENCY_CONFIG",
            message=message,
            details={
                "frequency": frequency,
                "custom_frequency_days": custom_frequency_days
            }
        )


class InvalidTimezoneError(CareCalendarError):
    """Raised when a time zone name is not known to the tz database."""

    def __init__(self, tz_name: str):
        super().__init__(
            code="INVALID_TIMEZONE",
            message=f"Unknown time zone: {tz_name}",
            details={"timezone": tz_name}
        )


class PartialBulkFailureError(CareCalendarError):
    """
    Raised when one or more ids in a bulk operation failed.

    Successes are never rolled back, so the error reports both sides.
    """

    def __init__(self, failures: Dict[str, Exception], succeeded: Optional[List[str]] = None):
        self.failures = failures
        self.succeeded = succeeded or []
        super().__init__(
            code="PARTIAL_BULK_FAILURE",
            message=f"{len(failures)} task(s) failed during bulk completion",
            details={
                "failed": {task_id: str(error) for task_id, error in failures.items()},
                "succeeded": list(self.succeeded)
            }
        )


def create_error_response(error: CareCalendarError) -> Dict[str, Any]:
    """
    Create a standardized error response

    Args:
        error: The CareCalendarError to convert

    Returns:
        Standardized error response dictionary
    """
    return {
        "success": False,
        "error": {
            "code": error.code,
            "message": error.message,
            "details": error.details
        }
    }
