"""Stencil configuration data models."""

from dataclasses import dataclass, field

from stencil_core.types import DivisionPolicy, LogFormat, LogLevel, NullPolicy


@dataclass
class EngineConfig:
    """Parsing and rendering policies.

    ``max_depth`` bounds both parenthesis nesting and the height of the
    operator tree. Every operator adds to the height, so a flat sum such
    as ``1 + 1 + ... + 1`` fails with MAX_DEPTH_EXCEEDED once it has more
    than ``max_depth`` operators.
    """

    max_depth: int = 64  # Max parenthesis nesting and operator tree height
    division_by_zero: DivisionPolicy = DivisionPolicy.IEEE
    null_rendering: NullPolicy = NullPolicy.EMPTY
    strict_context: bool = False  # Reject unsupported data types instead of nulling them
    dotted_lookup: bool = True  # {{ user.name }} walks nested mappings


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON


@dataclass
class StencilConfig:
    """Root configuration object."""

    engine: EngineConfig = field(default_factory=EngineConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
