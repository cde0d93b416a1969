"""
Structured JSON logging with correlation IDs and pipeline audit events.
"""

import logging
import sys
import uuid
from typing import Optional
from datetime import datetime
from pythonjsonlogger import jsonlogger
from contextvars import ContextVar
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

# Context variable for correlation ID (thread-safe)
correlation_id_var: ContextVar[Optional[str]] = ContextVar(
    "correlation_id", default=None
)

PIPELINE_LOGGER_NAME = "pipeline.audit"


class CorrelationIdFilter(logging.Filter):
    """Add correlation ID to log records."""

    def filter(self, record):
        record.correlation_id = correlation_id_var.get() or "none"
        return True


class PipelineJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that adds timestamp, level and source location."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.utcnow().isoformat() + "Z"
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record.setdefault("correlation_id", getattr(record, "correlation_id", "none"))
        log_record["source"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName,
        }


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure structured JSON logging and return the pipeline audit logger."""

    formatter = PipelineJsonFormatter("%(message)s")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(CorrelationIdFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    # Route uvicorn output through the same handler
    for name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.addHandler(console_handler)
        uvicorn_logger.propagate = False

    # APScheduler is chatty at INFO
    logging.getLogger("apscheduler").setLevel(logging.WARNING)

    pipeline_logger = logging.getLogger(PIPELINE_LOGGER_NAME)
    pipeline_logger.setLevel(level)

    return pipeline_logger


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Middleware to add correlation IDs to requests."""

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())

        correlation_id_var.set(correlation_id)
        request.state.correlation_id = correlation_id

        response = await call_next(request)
        response.headers["X-Correlation-ID"] = correlation_id

        return response


def log_pipeline_event(
    event_type: str,
    message: str,
    level: int = logging.INFO,
    user_id: Optional[str] = None,
    event_category: str = "pipeline",
    **extra_fields
):
    """
    Log a pipeline event with structured data.

    Args:
        event_type: Type of event (e.g., "aggregation.completed")
        message: Human-readable message
        level: Logging level (default: INFO)
        user_id: User the event concerns, if any
        event_category: Event category (default: "pipeline")
        **extra_fields: Additional fields to include
    """
    logger = logging.getLogger(PIPELINE_LOGGER_NAME)

    extra = {
        "event_type": event_type,
        "event_category": event_category,
    }

    if user_id:
        extra["user_id"] = user_id

    extra.update(extra_fields)

    logger.log(level, message, extra=extra)
