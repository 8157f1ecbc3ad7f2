"""Stencil error handling - structured errors with context."""

from .errors import (
    ConfigError,
    ContextError,
    ErrorCategory,
    ErrorTemplate,
    RenderError,
    StencilError,
    TemplateSyntaxError,
)
from .factory import ErrorFactory, create_error, get_error_factory
from .registry import ErrorRegistry

__all__ = [
    # Core error types
    "StencilError",
    "TemplateSyntaxError",
    "RenderError",
    "ContextError",
    "ConfigError",
    "ErrorCategory",
    "ErrorTemplate",
    # Registry and factory
    "ErrorRegistry",
    "ErrorFactory",
    # Convenience functions
    "get_error_factory",
    "create_error",
]
