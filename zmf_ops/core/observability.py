"""
Logging and metrics for the production ops service.

Log lines are structlog key/value events stamped with the request's
correlation id and acting worker. Counters cover HTTP traffic, task status
changes, checkpoint gate decisions and bulk operations.
"""

import contextvars
import logging
import sys
import uuid
from typing import Any

import structlog
from prometheus_client import Counter, Histogram

from .config import settings

correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)
worker_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "worker_id", default=""
)

REQUEST_COUNT = Counter(
    "zmf_http_requests_total",
    "HTTP requests served, by route template",
    ["method", "endpoint", "status"],
)
REQUEST_DURATION = Histogram(
    "zmf_http_request_duration_seconds",
    "HTTP request latency, by route template",
    ["method", "endpoint"],
)
TASK_TRANSITIONS = Counter(
    "zmf_task_transitions_total",
    "Task status transitions",
    ["action", "to_status"],
)
CHECKPOINT_DECISIONS = Counter(
    "zmf_checkpoint_decisions_total",
    "Quality checkpoint gate decisions",
    ["checkpoint_type", "passed", "can_proceed"],
)
BULK_OPERATIONS = Counter(
    "zmf_bulk_operations_total",
    "Sequential multi-item operations",
    ["operation", "outcome"],
)


class RequestContextProcessor:
    """Copies the request's correlation id and acting worker onto every event."""

    _fields = (("correlation_id", correlation_id_var), ("worker_id", worker_id_var))

    def __call__(self, logger: Any, name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        for key, var in self._fields:
            value = var.get()
            if value:
                event_dict.setdefault(key, value)
        return event_dict


def _renderers() -> list[Any]:
    if settings.LOG_FORMAT == "json":
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=settings.ENVIRONMENT == "local")]


def setup_structured_logging() -> None:
    """Route structlog through stdlib logging at LOG_LEVEL with the configured renderer."""
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            RequestContextProcessor(),
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            *_renderers(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)


def bind_request_context(
    correlation_id: str | None = None, worker_id: str | None = None
) -> str:
    """Set the context for the current request; returns the correlation id used."""
    correlation_id = correlation_id or str(uuid.uuid4())
    correlation_id_var.set(correlation_id)
    worker_id_var.set(worker_id or "")
    return correlation_id


def get_correlation_id() -> str:
    return correlation_id_var.get()
