"""Template AST nodes.

A parsed template is a ``Root`` whose children are ``Text`` and
``VariableBlock`` nodes in source order. A ``VariableBlock`` holds exactly one
expression: an ``Identifier``, an ``Int``, a ``Float`` or a ``Math`` node.
``Math`` operands are again expressions, never text or blocks.

Nodes are frozen; the renderer only ever reads them.
"""

from collections.abc import Iterator
from dataclasses import dataclass

from stencil_core.types import Operator


@dataclass(frozen=True)
class Node:
    """Base class of every AST node."""


@dataclass(frozen=True)
class Text(Node):
    """Literal output span."""

    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Identifier(Node):
    """Variable name looked up in the context (``name`` or ``user.name``)."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Int(Node):
    """Integer literal."""

    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Float(Node):
    """Float literal."""

    value: float

    def __str__(self) -> str:
        return repr(self.value)


@dataclass(frozen=True)
class Math(Node):
    """Binary arithmetic expression."""

    operator: Operator
    lhs: "Expression"
    rhs: "Expression"

    def __str__(self) -> str:
        lhs = _operand(self.lhs, self.operator, right=False)
        rhs = _operand(self.rhs, self.operator, right=True)
        return f"{lhs} {self.operator.value} {rhs}"


Expression = Identifier | Int | Float | Math


@dataclass(frozen=True)
class VariableBlock(Node):
    """The expression inside a ``{{ }}`` block."""

    expression: Expression

    def __str__(self) -> str:
        return "{{ " + str(self.expression) + " }}"


@dataclass(frozen=True)
class Root(Node):
    """Top-level container of a parsed template."""

    children: tuple[Text | VariableBlock, ...] = ()
    name: str = "string"

    def get_children(self) -> tuple[Text | VariableBlock, ...]:
        """Return the children in source order."""
        return self.children

    def __iter__(self) -> Iterator[Text | VariableBlock]:
        return iter(self.children)

    def __len__(self) -> int:
        return len(self.children)

    def __str__(self) -> str:
        return "".join(str(child) for child in self.children)


def _operand(node: Expression, parent: Operator, right: bool) -> str:
    """Source form of a Math operand, parenthesized where precedence needs it."""
    text = str(node)
    if not isinstance(node, Math):
        return text
    if node.operator.precedence < parent.precedence:
        return f"({text})"
    # a - (b - c) and a / (b * c) must keep their grouping
    if right and node.operator.precedence == parent.precedence and parent in (
        Operator.SUB,
        Operator.DIV,
    ):
        return f"({text})"
    return text


def iter_identifiers(node: Node) -> Iterator[Identifier]:
    """Yield every Identifier under `node`, left to right."""
    if isinstance(node, Identifier):
        yield node
    elif isinstance(node, Math):
        yield from iter_identifiers(node.lhs)
        yield from iter_identifiers(node.rhs)
    elif isinstance(node, VariableBlock):
        yield from iter_identifiers(node.expression)
    elif isinstance(node, Root):
        for child in node.children:
            yield from iter_identifiers(child)
