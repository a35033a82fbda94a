"""Structured logging configuration.

JSON (production) or plain-text (development) log lines, each tagged with
the request correlation ID when one is in context.
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

# Set by CorrelationIdMiddleware for the duration of a request
correlation_id_ctx: ContextVar[str | None] = ContextVar("correlation_id", default=None)

DEFAULT_SERVICE_NAME = "glucosemonitor-api"


def _record_time(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


class JsonFormatter(logging.Formatter):
    """Formats each record as a single JSON object.

    Keys: timestamp, level, service, message, logger, plus correlation_id
    when set, any structured extra fields, exception text, and source
    location for ERROR and above.
    """

    def __init__(self, service_name: str = DEFAULT_SERVICE_NAME):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": _record_time(record).isoformat(),
            "level": record.levelname,
            "service": self.service_name,
            "message": record.getMessage(),
            "logger": record.name,
        }

        correlation_id = correlation_id_ctx.get()
        if correlation_id:
            log_data["correlation_id"] = correlation_id

        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if record.levelno >= logging.ERROR:
            log_data["location"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable formatter for development.

    Format: timestamp - service - level - [correlation_id] - message key=value ...
    """

    def __init__(self, service_name: str = DEFAULT_SERVICE_NAME):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as readable text."""
        timestamp = _record_time(record).strftime("%Y-%m-%d %H:%M:%S")
        correlation_id = correlation_id_ctx.get() or "-"

        base_msg = (
            f"{timestamp} - {self.service_name} - {record.levelname} - "
            f"[{correlation_id}] - {record.getMessage()}"
        )

        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            pairs = " ".join(f"{key}={value}" for key, value in extra_fields.items())
            base_msg = f"{base_msg} {pairs}"

        if record.exc_info:
            base_msg += f"\n{self.formatException(record.exc_info)}"

        return base_msg


def setup_logging(
    log_format: str = "json",
    log_level: str = "INFO",
    service_name: str = DEFAULT_SERVICE_NAME,
) -> None:
    """Configure the root logger.

    Args:
        log_format: 'json' for structured logging, 'text' for human-readable
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        service_name: Service name to include in logs
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    if log_format.lower() == "json":
        formatter: logging.Formatter = JsonFormatter(service_name=service_name)
    else:
        formatter = TextFormatter(service_name=service_name)

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Uvicorn logs every request line; the middleware already does
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


class StructuredLogger:
    """Logger wrapper that accepts structured extra fields as keywords."""

    def __init__(self, name: str):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, msg: str, extra_fields: dict[str, Any] | None = None):
        record_extra = {"extra_fields": extra_fields} if extra_fields else {}
        self._logger.log(level, msg, extra=record_extra)

    def is_enabled_for(self, level: int) -> bool:
        """Whether a record at ``level`` would be emitted."""
        return self._logger.isEnabledFor(level)

    def debug(self, msg: str, **extra_fields: Any) -> None:
        """Log debug message with optional extra fields."""
        self._log(logging.DEBUG, msg, extra_fields or None)

    def info(self, msg: str, **extra_fields: Any) -> None:
        """Log info message with optional extra fields."""
        self._log(logging.INFO, msg, extra_fields or None)

    def warning(self, msg: str, **extra_fields: Any) -> None:
        """Log warning message with optional extra fields."""
        self._log(logging.WARNING, msg, extra_fields or None)

    def error(self, msg: str, **extra_fields: Any) -> None:
        """Log error message with optional extra fields."""
        self._log(logging.ERROR, msg, extra_fields or None)

    def exception(self, msg: str, **extra_fields: Any) -> None:
        """Log exception with traceback and optional extra fields."""
        record_extra = {"extra_fields": extra_fields} if extra_fields else {}
        self._logger.exception(msg, extra=record_extra)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance (typically ``get_logger(__name__)``)."""
    return StructuredLogger(name)
