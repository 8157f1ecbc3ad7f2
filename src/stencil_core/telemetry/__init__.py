"""Stencil Telemetry - structured logging and tracing hooks."""

from .logging import (
    StencilLogger,
    StructuredLogFormatter,
    configure_logging,
    get_logger,
    reset_loggers,
)

__all__ = [
    "StencilLogger",
    "StructuredLogFormatter",
    "configure_logging",
    "get_logger",
    "reset_loggers",
]
