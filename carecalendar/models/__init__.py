"""SQLModel tables for the Care Calendar."""

from .task import CareTask, TaskFrequency, TaskType
from .care_log import CareLog, LOG_DETAIL_FIELDS

__all__ = ["CareTask", "CareLog", "TaskFrequency", "TaskType", "LOG_DETAIL_FIELDS"]
