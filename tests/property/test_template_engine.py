"""Property-based tests for template engine.

Tests text passthrough, arithmetic evaluation and source round-trips.
"""

import math

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from stencil_core import render_from_string
from stencil_core.template import TemplateEngine
from stencil_core.template.context import format_number
from stencil_core.template.nodes import Identifier, Int, Math, Root, Text, VariableBlock
from stencil_core.template.parser import parse
from stencil_core.types import Operator

# =============================================================================
# Strategies
# =============================================================================

identifiers = st.from_regex(r"[a-z_][a-z0-9_]{0,8}", fullmatch=True)

# No braces, so generated text never opens or closes a block
plain_text = st.text(
    alphabet=st.characters(exclude_characters="{}"),
    min_size=1,
    max_size=40,
)

small_ints = st.integers(min_value=0, max_value=20)

int_expressions = st.recursive(
    small_ints.map(Int),
    lambda children: st.builds(
        Math,
        st.sampled_from([Operator.ADD, Operator.SUB, Operator.MUL]),
        children,
        children,
    ),
    max_leaves=6,
)


def evaluate(node) -> int:
    """Exact integer value of an expression without division."""
    if isinstance(node, Int):
        return node.value
    lhs, rhs = evaluate(node.lhs), evaluate(node.rhs)
    if node.operator == Operator.ADD:
        return lhs + rhs
    if node.operator == Operator.SUB:
        return lhs - rhs
    return lhs * rhs


@st.composite
def templates(draw) -> Root:
    """Alternating text and blocks, so no two Text nodes touch."""
    count = draw(st.integers(min_value=0, max_value=6))
    children = []
    text_next = draw(st.booleans())
    for _ in range(count):
        if text_next:
            children.append(Text(draw(plain_text)))
        else:
            expression = draw(st.one_of(identifiers.map(Identifier), int_expressions))
            children.append(VariableBlock(expression))
        text_next = not text_next
    return Root(tuple(children))


# =============================================================================
# Test Classes
# =============================================================================


@pytest.mark.property
class TestTextPassthrough:
    """Text outside blocks is copied verbatim."""

    @given(st.text(max_size=300).filter(lambda s: "{{" not in s))
    @settings(max_examples=200)
    def test_text_without_blocks_is_unchanged(self, text):
        assert render_from_string(text, {}) == text

    @given(plain_text, plain_text)
    @settings(max_examples=100)
    def test_text_around_block_is_unchanged(self, before, after):
        assert render_from_string(before + "{{ 1 }}" + after) == before + "1" + after


@pytest.mark.property
class TestValueInjection:
    """Context values are rendered as data, never re-parsed."""

    @given(st.text(max_size=200))
    @settings(max_examples=200)
    def test_string_value_rendered_verbatim(self, value):
        assert render_from_string("{{ value }}", {"value": value}) == value

    @given(
        st.dictionaries(
            keys=identifiers,
            values=st.text(max_size=30),
            min_size=1,
            max_size=5,
        )
    )
    @settings(max_examples=100)
    def test_nested_lookup(self, values):
        for key, expected in values.items():
            assert render_from_string(f"{{{{ data.{key} }}}}", {"data": values}) == expected


@pytest.mark.property
class TestArithmetic:
    """Arithmetic agrees with exact integer arithmetic."""

    @given(int_expressions)
    @settings(max_examples=200)
    def test_matches_integer_evaluation(self, expression):
        source = str(VariableBlock(expression))
        assert render_from_string(source) == str(evaluate(expression))

    @given(
        st.integers(0, 10**6),
        st.sampled_from(["+", "-", "*", "/"]),
        st.integers(0, 10**6),
    )
    @settings(max_examples=200)
    def test_binary_operation_matches_float_evaluation(self, a, op, b):
        lhs, rhs = float(a), float(b)
        if op == "+":
            expected = lhs + rhs
        elif op == "-":
            expected = lhs - rhs
        elif op == "*":
            expected = lhs * rhs
        elif rhs == 0:
            expected = math.nan if lhs == 0 else math.inf
        else:
            expected = lhs / rhs
        assert render_from_string(f"{{{{ {a} {op} {b} }}}}") == format_number(expected)

    @given(st.integers(-(10**6), 10**6), st.integers(-(10**6), 10**6))
    @settings(max_examples=100)
    def test_variables_and_literals_agree(self, a, b):
        assert render_from_string("{{ a * b - a }}", {"a": a, "b": b}) == str(a * b - a)

    @given(st.integers(1, 10**6), st.integers(1, 1000))
    @settings(max_examples=100)
    def test_exact_division(self, quotient, divisor):
        dividend = quotient * divisor
        assert render_from_string(f"{{{{ {dividend} / {divisor} }}}}") == str(quotient)


@pytest.mark.property
class TestRoundTrip:
    """Printing a parsed template gives source that parses to the same text."""

    @given(templates())
    @settings(max_examples=200)
    def test_source_is_fixed_point(self, root):
        source = str(root)
        assert str(parse(source)) == source

    @given(templates())
    @settings(max_examples=100)
    def test_generated_templates_validate(self, root):
        assert TemplateEngine().validate(str(root)) == []

    @given(st.text(max_size=200).filter(lambda s: "{{" not in s))
    @settings(max_examples=100)
    def test_plain_text_round_trips(self, text):
        assert str(parse(text)) == text
