"""Shared types for stencil.

Import from here rather than submodules:
    from stencil_core.types import Operator, ValueKind, ValidationResult
"""

from .enums import (
    DivisionPolicy,
    LogFormat,
    LogLevel,
    NullPolicy,
    Operator,
    ValueKind,
)
from .validation import ValidationIssue, ValidationResult

__all__ = [
    # Enums
    "LogLevel",
    "LogFormat",
    "Operator",
    "ValueKind",
    "NullPolicy",
    "DivisionPolicy",
    # Validation
    "ValidationIssue",
    "ValidationResult",
]
