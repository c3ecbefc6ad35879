"""
Logging Utility for the Care Calendar.

Scheduling events are written as one JSON document per line so completions,
skips and bulk runs can be traced per task.
"""

import json
import logging
from datetime import datetime
from typing import Any


def _json_default(value: Any) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


class StructuredLogger:
    """Structured logger wrapping a standard library logger."""

    def __init__(self, name: str):
        """
        Initialize structured logger.

        Args:
            name: Logger name, usually the module's __name__
        """
        self.logger = logging.getLogger(name)

    def _log_structured(self, level: int, event: str, **kwargs):
        """
        Log a structured message.

        Args:
            level: Logging level
            event: Event name, e.g. "task.completed"
            **kwargs: Additional structured data
        """
        if self.logger.isEnabledFor(level):
            log_data = {"event": event}
            log_data.update(kwargs)
            self.logger.log(level, json.dumps(log_data, default=_json_default))

    def debug(self, event: str, **kwargs):
        self._log_structured(logging.DEBUG, event, **kwargs)

    def info(self, event: str, **kwargs):
        self._log_structured(logging.INFO, event, **kwargs)

    def warning(self, event: str, **kwargs):
        self._log_structured(logging.WARNING, event, **kwargs)

    def error(self, event: str, **kwargs):
        self._log_structured(logging.ERROR, event, **kwargs)


def get_logger(name: str) -> StructuredLogger:
    """
    Get a structured logger for the given module.

    Args:
        name: Logger name

    Returns:
        StructuredLogger instance
    """
    return StructuredLogger(name)


def configure_logging(level: str = "INFO"):
    """Configure root logging for the application process."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
