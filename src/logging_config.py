"""
AI Tools Hub - Structured Logging Configuration
===============================================
JSON-formatted structured logging with request context.

Usage:
    from src.logging_config import get_logger, log_event

    logger = get_logger(__name__)
    logger.info("Post created", extra={"post_id": post_id})

    log_event("contact_submitted", message_id=message_id)
"""

from __future__ import annotations

import json
import logging
import os
import sys
import time
import traceback
from contextvars import ContextVar
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from src.config import settings


class LogLevel(str, Enum):
    """Standard log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# =============================================================================
# Request-scoped context
# =============================================================================

_request_id_var: ContextVar[str | None] = ContextVar("log_request_id", default=None)
_admin_id_var: ContextVar[str | None] = ContextVar("log_admin_id", default=None)
_client_ip_var: ContextVar[str | None] = ContextVar("log_client_ip", default=None)
_endpoint_var: ContextVar[str | None] = ContextVar("log_endpoint", default=None)


class LogContext:
    """
    Request-scoped log context.

    Backed by context variables so values set by the observability
    middleware are visible to sync route handlers running in the
    threadpool as well as to async code.
    """

    @classmethod
    def set_request_id(cls, request_id: str | None) -> None:
        _request_id_var.set(request_id)

    @classmethod
    def get_request_id(cls) -> str | None:
        return _request_id_var.get()

    @classmethod
    def set_admin_id(cls, admin_id: str | None) -> None:
        _admin_id_var.set(admin_id)

    @classmethod
    def get_admin_id(cls) -> str | None:
        return _admin_id_var.get()

    @classmethod
    def set_client_ip(cls, client_ip: str | None) -> None:
        _client_ip_var.set(client_ip)

    @classmethod
    def get_client_ip(cls) -> str | None:
        return _client_ip_var.get()

    @classmethod
    def set_endpoint(cls, endpoint: str | None) -> None:
        _endpoint_var.set(endpoint)

    @classmethod
    def get_endpoint(cls) -> str | None:
        return _endpoint_var.get()

    @classmethod
    def clear(cls) -> None:
        """Clear all context."""
        _request_id_var.set(None)
        _admin_id_var.set(None)
        _client_ip_var.set(None)
        _endpoint_var.set(None)

    @classmethod
    def get_all(cls) -> dict[str, Any]:
        return {
            "request_id": cls.get_request_id(),
            "admin_id": cls.get_admin_id(),
            "client_ip": cls.get_client_ip(),
            "endpoint": cls.get_endpoint(),
        }


# =============================================================================
# JSON Formatter
# =============================================================================

_STANDARD_ATTRS = frozenset(
    {
        "name", "msg", "args", "levelname", "levelno", "pathname",
        "filename", "module", "lineno", "funcName", "created", "msecs",
        "relativeCreated", "thread", "threadName", "processName",
        "process", "getMessage", "exc_info", "exc_text", "stack_info",
        "taskName",
    }
)


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    One JSON object per line with timestamp, level, logger, message,
    request context and any ``extra`` fields passed to the log call.
    """

    def __init__(
        self,
        *,
        service_name: str = "ai-tools-hub",
        environment: str = "production",
        include_extra_fields: bool = True,
    ) -> None:
        super().__init__()
        self.service_name = service_name
        self.environment = environment
        self.include_extra_fields = include_extra_fields
        self._iso_format = "%Y-%m-%dT%H:%M:%S.%fZ"

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": self._format_timestamp(record.created),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
            "environment": self.environment,
        }

        if record.pathname:
            log_entry["file"] = Path(record.pathname).name
            log_entry["line"] = record.lineno
            log_entry["function"] = record.funcName

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": "".join(traceback.format_exception(*record.exc_info)),
            }

        for key, value in LogContext.get_all().items():
            if value is not None:
                log_entry[key] = value

        if self.include_extra_fields:
            for key, value in record.__dict__.items():
                if key not in _STANDARD_ATTRS and not key.startswith("_"):
                    log_entry[key] = value

        return json.dumps(log_entry, default=self._json_serializer, ensure_ascii=False)

    def _format_timestamp(self, created: float) -> str:
        dt = datetime.fromtimestamp(created, tz=timezone.utc)
        return dt.strftime(self._iso_format)

    @staticmethod
    def _json_serializer(obj: Any) -> str:
        if isinstance(obj, datetime):
            return obj.isoformat()
        return str(obj)


# =============================================================================
# Console Formatter (human-readable fallback)
# =============================================================================


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter for console output during development."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        level_color = self.LEVEL_COLORS.get(record.levelname, "")
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc).strftime("%H:%M:%S.%f")[:-3]
        request_id = LogContext.get_request_id() or "-"

        base = (
            f"{level_color}{record.levelname:<8}{self.RESET} "
            f"{timestamp} "
            f"[{request_id}] "
            f"{record.name}: "
            f"{record.getMessage()}"
        )
        if record.exc_info:
            base += "\n" + "".join(traceback.format_exception(*record.exc_info))
        return base


# =============================================================================
# Logger Factory
# =============================================================================


def _get_log_level() -> int:
    level_str = os.environ.get("LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_str, logging.INFO)


def _should_use_json() -> bool:
    log_format = os.environ.get("LOG_FORMAT", "").lower()
    if log_format == "console":
        return False
    if log_format == "json":
        return True
    return not settings.debug_mode


_configured = False
_handler: logging.Handler | None = None


def configure_logging(
    *,
    level: str | int | None = None,
    service_name: str = "ai-tools-hub",
    environment: str = "production",
    log_format: str | None = None,
) -> None:
    """
    Configure the root logger with structured logging.

    Args:
        level: Log level name or constant; defaults to LOG_LEVEL.
        service_name: Service name for log identification.
        environment: Environment label.
        log_format: "json" or "console"; defaults to LOG_FORMAT / debug mode.
    """
    global _configured, _handler

    resolved_level = _get_log_level() if level is None else _convert_level(level)
    root = logging.getLogger()
    root.setLevel(resolved_level)
    if _handler is not None:
        root.removeHandler(_handler)

    use_json = _should_use_json() if log_format is None else log_format == "json"

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(resolved_level)
    if use_json:
        handler.setFormatter(StructuredFormatter(service_name=service_name, environment=environment))
    else:
        handler.setFormatter(ConsoleFormatter())

    root.addHandler(handler)
    _handler = handler
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger, configuring the root logger on first use."""
    if not _configured:
        configure_logging()
    return logging.getLogger(name)


def _convert_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


# =============================================================================
# Helper Functions
# =============================================================================


def log_event(
    event_name: str,
    level: str | LogLevel = LogLevel.INFO,
    **extra_fields: Any,
) -> None:
    """
    Log a structured event with additional fields.

    Example:
        log_event("post_published", post_id="abc123")
    """
    logger = get_logger("event")
    level_name = level.value if isinstance(level, LogLevel) else str(level)
    log_func = getattr(logger, level_name.lower(), logger.info)
    log_func(event_name, extra=extra_fields)


def log_error(
    event_name: str,
    exc: BaseException | None = None,
    **extra_fields: Any,
) -> None:
    """Log an error event, attaching the traceback of ``exc`` when given."""
    logger = get_logger("error")
    exc_info = (type(exc), exc, exc.__traceback__) if exc is not None else None
    logger.error(event_name, exc_info=exc_info, extra=extra_fields)


# =============================================================================
# Performance Tracking
# =============================================================================


class PerformanceTracker:
    """
    Context manager for tracking operation performance.

    Example:
        with PerformanceTracker("store_query", collection="users"):
            docs = store.query("users")
    """

    def __init__(self, operation: str, **extra_fields: Any) -> None:
        self.operation = operation
        self.extra = extra_fields
        self._start_time: float | None = None

    def __enter__(self) -> PerformanceTracker:
        self._start_time = time.perf_counter()
        return self

    def __exit__(self, *args: Any) -> None:
        if self._start_time is None:
            return

        duration_ms = (time.perf_counter() - self._start_time) * 1000
        self.extra["duration_ms"] = round(duration_ms, 2)

        if args[0] is not None:
            self.extra["error"] = str(args[1])
            get_logger("performance").warning(f"{self.operation}_failed", extra=self.extra)
        else:
            get_logger("performance").debug(f"{self.operation}_completed", extra=self.extra)
