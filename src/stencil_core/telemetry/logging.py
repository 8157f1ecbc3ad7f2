"""Stencil Telemetry Logging - Structured logging with OTEL integration.

Provides structured JSON logging with automatic trace context injection.

Usage:
    from stencil_core.telemetry.logging import get_logger

    logger = get_logger("engine")
    logger.info("Template rendered", template_name="greeting")
"""

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

from opentelemetry import trace

from stencil_core.types import LogFormat, LogLevel

# LogRecord attributes that are not user-supplied extra fields
_RECORD_ATTRS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "pathname", "process", "processName", "relativeCreated",
        "stack_info", "exc_info", "exc_text", "thread", "threadName",
        "message", "taskName",
    }
)  # fmt: skip

_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}

ROOT_LOGGER = "stencil"


class StructuredLogFormatter(logging.Formatter):
    """JSON formatter with trace context injection.

    Formats log records as JSON with:
    - timestamp (ISO 8601)
    - level
    - component (logger name)
    - message
    - trace_id (if available)
    - span_id (if available)
    - Additional fields from extra
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log string
        """
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "component": record.name,
            "message": record.getMessage(),
        }

        span = trace.get_current_span()
        if span and span.is_recording():
            ctx = span.get_span_context()
            if ctx.is_valid:
                log_data["trace_id"] = format(ctx.trace_id, "032x")
                log_data["span_id"] = format(ctx.span_id, "016x")

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS:
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class StencilLogger:
    """Structured logger with trace context support.

    Wraps Python logging with:
    - Automatic trace context injection
    - Structured JSON output
    - Keyword arguments as extra fields
    """

    def __init__(self, name: str, level: int = logging.INFO):
        """Initialize logger.

        Args:
            name: Logger name (component name)
            level: Logging level
        """
        self._logger = logging.getLogger(f"{ROOT_LOGGER}.{name}")
        self._logger.setLevel(level)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def _log(self, level: int, message: str, **kwargs: Any) -> None:
        """Log message with extra fields.

        Args:
            level: Log level
            message: Log message
            **kwargs: Additional fields to include
        """
        self._logger.log(level, message, extra=kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message."""
        self._log(logging.ERROR, message, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log exception with traceback."""
        self._logger.exception(message, extra=kwargs)


# Logger cache
_loggers: dict[str, StencilLogger] = {}


def get_logger(name: str, level: int = logging.INFO) -> StencilLogger:
    """Get or create a structured logger.

    Args:
        name: Logger name (component name)
        level: Logging level

    Returns:
        StencilLogger instance
    """
    if name not in _loggers:
        _loggers[name] = StencilLogger(name, level)
    return _loggers[name]


def configure_logging(
    level: LogLevel = LogLevel.INFO,
    log_format: LogFormat = LogFormat.JSON,
    stream: Any = None,
) -> logging.Handler:
    """Attach a single handler to the "stencil" logger hierarchy.

    Library code never calls this; applications opt in. Calling it again
    replaces the previous handler.

    Args:
        level: Minimum level for every stencil logger
        log_format: JSON (structured) or plain text
        stream: Output stream (defaults to stderr)

    Returns:
        The installed handler
    """
    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    if log_format == LogFormat.JSON:
        handler.setFormatter(StructuredLogFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)

    python_level = _LEVELS[level]
    root.setLevel(python_level)
    for cached in _loggers.values():
        cached.logger.setLevel(python_level)
    return handler


def reset_loggers() -> None:
    """Reset logger cache and installed handlers (for testing)."""
    global _loggers
    _loggers = {}
    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        root.removeHandler(handler)
