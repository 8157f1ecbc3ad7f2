"""Stencil error types."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error source categories."""

    SYNTAX = "SYNTAX"
    RENDER = "RENDER"
    CONTEXT = "CONTEXT"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"


@dataclass
class StencilError(Exception):
    """Structured error with context. Base exception for all stencil errors."""

    # Identity
    code: str  # e.g., "UNDEFINED_VARIABLE"
    category: ErrorCategory

    # Messages
    message: str  # Human-readable summary
    detail: str | None = None  # Extended explanation
    suggestion: str | None = None  # Actionable fix

    # Context
    template_name: str | None = None  # Name the template was parsed under
    variable: str | None = None  # Identifier involved, if any
    expression: str | None = None  # Block source involved, if any
    line: int | None = None  # 1-based
    column: int | None = None  # 1-based

    cause: "StencilError | None" = None

    # Metadata
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        """Set Exception message."""
        super().__init__(self.message)

    def __str__(self) -> str:
        location = self.location
        text = f"{self.message} ({location})" if location else self.message
        if self.detail:
            text = f"{text}: {self.detail}"
        return text

    @property
    def location(self) -> str | None:
        """Return "name:line:column" when a position is known."""
        if self.line is None:
            return None
        return f"{self.template_name or 'string'}:{self.line}:{self.column or 1}"

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logs and callers that want plain data.

        Returns:
            Dictionary representation of the error
        """
        return {
            "code": self.code,
            "category": self.category.value,
            "message": self.message,
            "detail": self.detail,
            "suggestion": self.suggestion,
            "template_name": self.template_name,
            "variable": self.variable,
            "expression": self.expression,
            "line": self.line,
            "column": self.column,
            "timestamp": self.timestamp.isoformat(),
            "cause": self.cause.to_dict() if self.cause else None,
        }

    def with_context(
        self,
        template_name: str | None = None,
        variable: str | None = None,
        expression: str | None = None,
    ) -> "StencilError":
        """Return copy with additional context.

        The copy keeps the concrete subclass so callers can still catch it
        as e.g. RenderError.

        Args:
            template_name: Optional template name
            variable: Optional variable name
            expression: Optional expression source

        Returns:
            New error instance with updated context
        """
        return replace(
            self,
            template_name=template_name or self.template_name,
            variable=variable or self.variable,
            expression=expression or self.expression,
        )


@dataclass
class TemplateSyntaxError(StencilError):
    """Template source could not be parsed."""


@dataclass
class RenderError(StencilError):
    """Parsed template could not be rendered against the context."""


@dataclass
class ContextError(StencilError):
    """A context value does not support the requested operation."""


@dataclass
class ConfigError(StencilError):
    """Engine configuration is invalid."""


@dataclass
class ErrorTemplate:
    """Template for creating errors."""

    code: str
    category: ErrorCategory
    message_template: str  # "Variable '{variable}' is not defined"
    detail_template: str | None = None
    suggestion_template: str | None = None
    error_class: type[StencilError] = StencilError
