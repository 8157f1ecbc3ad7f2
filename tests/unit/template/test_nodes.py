"""Unit tests for the template AST nodes."""

from dataclasses import FrozenInstanceError

import pytest

from stencil_core.template.nodes import (
    Float,
    Identifier,
    Int,
    Math,
    Root,
    Text,
    VariableBlock,
    iter_identifiers,
)
from stencil_core.types import Operator


class TestNodeSourceForm:
    """str(node) gives back template-like source."""

    def test_literals(self):
        assert str(Int(2016)) == "2016"
        assert str(Float(0.2)) == "0.2"
        assert str(Identifier("user.name")) == "user.name"

    def test_block(self):
        assert str(VariableBlock(Identifier("name"))) == "{{ name }}"

    def test_math_keeps_needed_parentheses(self):
        node = Math(Operator.MUL, Math(Operator.ADD, Int(1), Int(2)), Int(3))
        assert str(node) == "(1 + 2) * 3"

    def test_math_drops_redundant_parentheses(self):
        node = Math(Operator.ADD, Int(1), Math(Operator.MUL, Int(2), Int(3)))
        assert str(node) == "1 + 2 * 3"

    def test_right_nested_subtraction_is_grouped(self):
        node = Math(Operator.SUB, Int(10), Math(Operator.SUB, Int(4), Int(3)))
        assert str(node) == "10 - (4 - 3)"

    def test_root_joins_children(self):
        root = Root(children=(Text("Hi "), VariableBlock(Identifier("name")), Text("!")))
        assert str(root) == "Hi {{ name }}!"


class TestRoot:
    """Tests for the Root container."""

    def test_children_in_order(self):
        children = (Text("a"), VariableBlock(Int(1)), Text("b"))
        root = Root(children=children)
        assert root.get_children() == children
        assert list(root) == list(children)
        assert len(root) == 3

    def test_default_name(self):
        assert Root().name == "string"


class TestImmutability:
    """Nodes are frozen."""

    def test_cannot_reassign_field(self):
        node = Text("hello")
        with pytest.raises(FrozenInstanceError):
            node.text = "changed"  # type: ignore[misc]

    def test_equal_trees_compare_equal(self):
        a = Math(Operator.DIV, Identifier("x"), Float(2.0))
        b = Math(Operator.DIV, Identifier("x"), Float(2.0))
        assert a == b


class TestIterIdentifiers:
    """Tests for identifier traversal."""

    def test_left_to_right(self):
        root = Root(
            children=(
                VariableBlock(Math(Operator.ADD, Identifier("a"), Identifier("b"))),
                Text(" "),
                VariableBlock(Identifier("c")),
            )
        )
        assert [i.name for i in iter_identifiers(root)] == ["a", "b", "c"]

    def test_no_identifiers_in_literals(self):
        assert list(iter_identifiers(VariableBlock(Int(1)))) == []
