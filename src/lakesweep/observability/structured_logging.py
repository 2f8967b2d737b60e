"""
Structured logging for Lakesweep.

JSON-formatted log lines with a per-pass correlation ID, for hosts whose logs
go straight into a log/metrics pipeline (e.g. Lambda into CloudWatch).

Usage:
    from lakesweep.observability import setup_structured_logging, add_correlation_id

    setup_structured_logging(level="INFO", json_format=True)

    with add_correlation_id():
        logger.info("Found 3 tables to remove")  # includes correlation_id
"""

import json
import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

from lakesweep.utils.logging import _parse_level

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

# LogRecord attributes that are not user-supplied ``extra`` fields
_RECORD_ATTRIBUTES = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "message",
        "thread",
        "threadName",
        "taskName",
    }
)


def get_correlation_id() -> str | None:
    """Get the correlation ID of the current context, if any."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None) -> None:
    """Set the correlation ID for the current context."""
    _correlation_id.set(correlation_id)


@contextmanager
def add_correlation_id(correlation_id: str | None = None) -> Any:
    """
    Context manager to tag every log line inside it with a correlation ID.

    Asyncio tasks created inside the block inherit the ID.

    Args:
        correlation_id: Correlation ID (auto-generated if not provided)

    Yields:
        The correlation ID
    """
    cid = correlation_id or str(uuid.uuid4())[:8]
    token = _correlation_id.set(cid)
    try:
        yield cid
    finally:
        _correlation_id.reset(token)


class StructuredFormatter(logging.Formatter):
    """
    JSON log formatter.

    Emits timestamp, level, logger, message, correlation_id (when set),
    source location, exception info and any ``extra`` fields.
    """

    def __init__(self, extra_fields: dict[str, Any] | None = None):
        super().__init__()
        self.extra_fields = extra_fields or {}

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        correlation_id = get_correlation_id()
        if correlation_id:
            log_data["correlation_id"] = correlation_id

        log_data["location"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRIBUTES and not key.startswith("_"):
                log_data[key] = value

        log_data.update(self.extra_fields)

        return json.dumps(log_data, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Human-readable formatter with optional correlation ID.

    Format: [timestamp] [level] [logger] [correlation_id] message
    """

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        parts = [f"[{timestamp}]", f"[{record.levelname.ljust(8)}]", f"[{record.name}]"]

        correlation_id = get_correlation_id()
        if correlation_id:
            parts.append(f"[{correlation_id}]")

        parts.append(record.getMessage())
        message = " ".join(parts)

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)

        return message


def setup_structured_logging(
    level: str | int = "INFO",
    json_format: bool = True,
    stream: Any = None,
    extra_fields: dict[str, Any] | None = None,
) -> logging.Logger:
    """
    Route ``lakesweep`` logs through a single structured handler.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: Use JSON format (True) or human-readable (False)
        stream: Output stream (defaults to sys.stderr)
        extra_fields: Extra fields to include in all logs (JSON format only)

    Returns:
        The configured ``lakesweep`` logger
    """
    level_int = _parse_level(level)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level_int)
    formatter: logging.Formatter
    if json_format:
        formatter = StructuredFormatter(extra_fields=extra_fields)
    else:
        formatter = HumanReadableFormatter()
    handler.setFormatter(formatter)

    lakesweep_logger = logging.getLogger("lakesweep")
    lakesweep_logger.handlers.clear()
    lakesweep_logger.addHandler(handler)
    lakesweep_logger.setLevel(level_int)
    # The host (e.g. the Lambda runtime) may own root handlers; avoid double lines
    lakesweep_logger.propagate = False

    lakesweep_logger.debug(f"Structured logging configured: level={level}, json={json_format}")
    return lakesweep_logger
