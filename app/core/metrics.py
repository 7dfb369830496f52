"""
Prometheus metrics for the HTTP layer and meetup operations
"""

import time
import logging
from contextlib import asynccontextmanager

from prometheus_client import Counter, Histogram, REGISTRY

from app.core.exceptions import DomainError, MeetlyException

logger = logging.getLogger(__name__)


def _counter(name: str, documentation: str, labels):
    try:
        return Counter(name, documentation, labels)
    except ValueError:
        # Already registered (module re-imported by the test runner)
        return REGISTRY._names_to_collectors[name]


def _histogram(name: str, documentation: str, labels):
    try:
        return Histogram(name, documentation, labels)
    except ValueError:
        return REGISTRY._names_to_collectors[name]


REQUEST_COUNT = _counter(
    "meetly_requests_total",
    "Total requests",
    ["method", "endpoint", "status"]
)
REQUEST_DURATION = _histogram(
    "meetly_request_duration_seconds",
    "Request duration",
    ["method", "endpoint"]
)
MEETUP_OPERATIONS = _counter(
    "meetly_meetup_operations_total",
    "Meetup lifecycle operations by outcome",
    ["operation", "outcome"]
)
MEETUP_OPERATION_DURATION = _histogram(
    "meetly_meetup_operation_duration_seconds",
    "Meetup lifecycle operation duration",
    ["operation"]
)


class MetricsCollector:
    """Tracks outcome and latency of meetup service operations"""

    def __init__(self, slow_threshold: float = 5.0):
        self.slow_threshold = slow_threshold
        self.logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def track_operation(self, operation: str):
        """Context manager to track a single service operation"""
        start_time = time.perf_counter()
        # Stays "cancelled" when the task is cancelled mid-operation
        outcome = "cancelled"
        try:
            yield
            outcome = "success"
        except DomainError as e:
            outcome = "rejected"
            self.logger.info(f"{operation} rejected: {e.code}")
            raise
        except MeetlyException as e:
            outcome = e.code.lower()
            self.logger.error(f"{operation} failed: {e.code} ({e.details})")
            raise
        except Exception as e:
            outcome = "error"
            self.logger.error(f"{operation} failed: {type(e).__name__}: {e}")
            raise
        finally:
            duration = time.perf_counter() - start_time
            MEETUP_OPERATIONS.labels(operation=operation, outcome=outcome).inc()
            MEETUP_OPERATION_DURATION.labels(operation=operation).observe(duration)
            if duration > self.slow_threshold:
                self.logger.warning(f"Slow {operation} operation: {duration:.2f}s")


metrics_collector = MetricsCollector()
