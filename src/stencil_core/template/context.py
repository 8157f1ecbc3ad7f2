"""Render context: caller data as a tree of dynamic values."""

import dataclasses
import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from stencil_core.errors import create_error
from stencil_core.types import NullPolicy, ValueKind

logger = logging.getLogger(__name__)


def format_number(value: int | float) -> str:
    """Canonical decimal text of a number.

    Integral values print without a fractional part (2016, not 2016.0) and
    nothing prints in exponent form. Non-finite floats print as inf, -inf
    and NaN.
    """
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value == 0:
        # -0.0 included
        return "0"
    # repr() gives the shortest round-tripping digits; Decimal drops the exponent
    digits = Decimal(repr(value))
    if value.is_integer():
        digits = digits.to_integral_value()
    return format(digits, "f")


@dataclass(frozen=True)
class Value:
    """One dynamic value.

    ``payload`` by kind:
    - STRING: str
    - NUMBER: int or float
    - BOOL: bool
    - NULL: None
    - SEQUENCE: tuple[Value, ...]
    - MAPPING: dict[str, Value]
    """

    kind: ValueKind
    payload: Any = None

    @classmethod
    def from_data(cls, data: Any, strict: bool = False) -> "Value":
        """Convert caller data into a Value tree.

        Args:
            data: Plain data (dicts, lists, scalars), dataclasses, or objects
                  with a ``to_dict()`` method
            strict: Raise instead of collapsing unsupported types to null

        Returns:
            Converted Value

        Raises:
            ContextError(UNSUPPORTED_TYPE) in strict mode
        """
        # bool before numbers: bool is an int subclass
        if data is None:
            return NULL
        if isinstance(data, bool):
            return cls(ValueKind.BOOL, data)
        if isinstance(data, str):
            return cls(ValueKind.STRING, data)
        if isinstance(data, (int, float)):
            return cls(ValueKind.NUMBER, data)
        if isinstance(data, Mapping):
            return cls(
                ValueKind.MAPPING,
                {str(k): cls.from_data(v, strict) for k, v in data.items()},
            )
        if isinstance(data, (list, tuple)):
            return cls(ValueKind.SEQUENCE, tuple(cls.from_data(item, strict) for item in data))
        if dataclasses.is_dataclass(data) and not isinstance(data, type):
            fields = {f.name: getattr(data, f.name) for f in dataclasses.fields(data)}
            return cls.from_data(fields, strict)
        if callable(getattr(data, "to_dict", None)):
            return cls.from_data(data.to_dict(), strict)

        if strict:
            raise create_error("UNSUPPORTED_TYPE", type_name=type(data).__name__)
        logger.debug("Collapsing unsupported type %s to null", type(data).__name__)
        return NULL

    def get(self, key: str) -> "Value | None":
        """Child by mapping key or sequence index; None when absent."""
        if self.kind == ValueKind.MAPPING:
            return self.payload.get(key)
        if self.kind == ValueKind.SEQUENCE and key.isascii() and key.isdigit():
            index = int(key)
            if index < len(self.payload):
                return self.payload[index]
        return None

    def render(self, null_policy: NullPolicy = NullPolicy.EMPTY) -> str:
        """Render as output text.

        Raises:
            ContextError(NOT_RENDERABLE) for sequences, mappings, and null
            under NullPolicy.ERROR
        """
        kind = self.kind
        if kind == ValueKind.STRING:
            return self.payload
        if kind == ValueKind.NUMBER:
            return format_number(self.payload)
        if kind == ValueKind.BOOL:
            return "true" if self.payload else "false"
        if kind == ValueKind.NULL:
            if null_policy == NullPolicy.EMPTY:
                return ""
            if null_policy == NullPolicy.LITERAL:
                return "null"
            raise create_error("NOT_RENDERABLE", kind=kind.value)
        if kind in (ValueKind.SEQUENCE, ValueKind.MAPPING):
            raise create_error("NOT_RENDERABLE", kind=kind.value)
        raise create_error("INTERNAL_ERROR", reason=f"unknown value kind {kind!r}")

    def to_number(self) -> float:
        """Coerce to float.

        Raises:
            ContextError(NOT_NUMERIC) for every kind but NUMBER
        """
        if self.kind == ValueKind.NUMBER:
            try:
                return float(self.payload)
            except OverflowError:
                # int too large for a double
                return math.copysign(math.inf, self.payload)
        raise create_error("NOT_NUMERIC", kind=self.kind.value)

    def to_python(self) -> Any:
        """Plain Python data equivalent of this value."""
        if self.kind == ValueKind.SEQUENCE:
            return [item.to_python() for item in self.payload]
        if self.kind == ValueKind.MAPPING:
            return {k: v.to_python() for k, v in self.payload.items()}
        return self.payload


NULL = Value(ValueKind.NULL)


class Context:
    """Data bound to one render call. Read-only after construction."""

    def __init__(
        self,
        data: Any = None,
        strict: bool = False,
        dotted_lookup: bool = True,
        null_policy: NullPolicy = NullPolicy.EMPTY,
    ):
        """Initialize context.

        Args:
            data: Caller data; lookups only succeed when it is a mapping
            strict: Fail on unsupported types instead of collapsing to null
            dotted_lookup: Resolve "a.b.0" paths through nested values
            null_policy: How null values render
        """
        self._root = Value.from_data(data, strict=strict)
        self._dotted_lookup = dotted_lookup
        self.null_policy = null_policy

    @classmethod
    def new(cls, data: Any = None, **options: Any) -> "Context":
        """Build a context from caller data (see __init__ for options)."""
        return cls(data, **options)

    @property
    def root(self) -> Value:
        return self._root

    def get(self, name: str) -> Value | None:
        """Look up a name in the top-level mapping.

        A key containing dots is first tried as a flat key, then walked as a
        path through mappings and sequences.

        Args:
            name: Variable name or dotted path

        Returns:
            The bound Value, or None if absent or the data is not a mapping
        """
        if self._root.kind != ValueKind.MAPPING:
            return None

        value = self._root.get(name)
        if value is not None or "." not in name or not self._dotted_lookup:
            return value

        current: Value | None = self._root
        for part in name.split("."):
            current = current.get(part) if current is not None else None
            if current is None:
                return None
        return current

    def render(self, value: Value) -> str:
        """Render a value using this context's null policy."""
        return value.render(self.null_policy)

    def to_number(self, value: Value) -> float:
        """Coerce a value to float."""
        return value.to_number()

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None
