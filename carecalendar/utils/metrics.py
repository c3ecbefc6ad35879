"""
Metrics Collection for the Care Calendar.

Counts scheduling outcomes in process; exposed over HTTP at /metrics.
"""

import threading
import time
from collections import defaultdict
from datetime import datetime
from functools import wraps
from typing import Any, Callable, Dict

import pytz


class MetricsCollector:
    """Collects and manages scheduling metrics."""

    def __init__(self):
        """Initialize metrics collector."""
        self.metrics = defaultdict(int)
        self.timers = defaultdict(float)
        self.lock = threading.Lock()

        self.metrics["care_tasks_completed_total"] = 0
        self.metrics["care_tasks_skipped_total"] = 0
        self.metrics["care_tasks_not_found_total"] = 0
        self.metrics["care_tasks_bulk_failures_total"] = 0

    def increment_counter(self, metric_name: str, value: int = 1):
        """Increment a counter metric."""
        with self.lock:
            self.metrics[metric_name] += value

    def record_timer(self, metric_name: str, duration: float):
        """Record a timing metric."""
        with self.lock:
            self.timers[metric_name] += duration

    def get_metrics(self) -> Dict[str, Any]:
        """Get current metrics values."""
        with self.lock:
            return {
                "counters": dict(self.metrics),
                "timers": dict(self.timers),
                "timestamp": datetime.now(pytz.utc).isoformat()
            }

    def reset(self):
        with self.lock:
            for name in list(self.metrics):
                self.metrics[name] = 0
            self.timers.clear()

    def task_completed(self):
        self.increment_counter("care_tasks_completed_total")

    def task_skipped(self):
        self.increment_counter("care_tasks_skipped_total")

    def task_not_found(self):
        self.increment_counter("care_tasks_not_found_total")

    def bulk_failure(self, count: int = 1):
        self.increment_counter("care_tasks_bulk_failures_total", count)

    def time_operation(self, metric_name: str) -> Callable:
        """Decorator that accumulates the wall time spent in the wrapped call."""
        def decorator(func):
            @wraps(func)
            def wrapper(*args, **kwargs):
                start_time = time.perf_counter()
                try:
                    return func(*args, **kwargs)
                finally:
                    self.record_timer(metric_name, time.perf_counter() - start_time)
            return wrapper
        return decorator


# Global metrics instance
metrics_collector = MetricsCollector()
