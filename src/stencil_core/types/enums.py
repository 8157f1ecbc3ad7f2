"""Shared enumerations for stencil."""

from enum import Enum


class LogLevel(str, Enum):
    """Log verbosity level."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class LogFormat(str, Enum):
    """Log output format."""

    TEXT = "text"
    JSON = "json"


class Operator(str, Enum):
    """Binary arithmetic operator."""

    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"

    @property
    def precedence(self) -> int:
        """Binding power; higher binds tighter."""
        return 2 if self in (Operator.MUL, Operator.DIV) else 1


class ValueKind(str, Enum):
    """Kind of a dynamic context value."""

    STRING = "string"
    NUMBER = "number"
    BOOL = "bool"
    NULL = "null"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


class NullPolicy(str, Enum):
    """How a null value renders inside {{ }}."""

    EMPTY = "empty"  # ""
    LITERAL = "literal"  # "null"
    ERROR = "error"  # NOT_RENDERABLE


class DivisionPolicy(str, Enum):
    """Division by zero handling."""

    IEEE = "ieee"  # inf / -inf / NaN
    ERROR = "error"  # DIVISION_BY_ZERO
