"""Fuzz test harnesses for stencil-core.

These tests use Hypothesis for property-based fuzzing. Whatever the input,
the parser and renderer must fail only with stencil errors.
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from stencil_core.errors import StencilError, TemplateSyntaxError
from stencil_core.template import TemplateEngine
from stencil_core.template.nodes import VariableBlock
from stencil_core.template.parser import parse, validate_syntax

# Characters the expression grammar cares about, plus a little noise
expression_alphabet = st.sampled_from(list("{}()+-*/ .0123456789eEabxyz_\n@"))
template_like = st.text(alphabet=expression_alphabet, max_size=200)


@pytest.mark.fuzz
class TestParserFuzzing:
    """Fuzz tests for the template parser."""

    @given(st.text(max_size=1000))
    @settings(max_examples=200, deadline=5000)
    def test_fuzz_001_random_text(self, source: str):
        """FUZZ-001: Parse arbitrary text."""
        try:
            root = parse(source)
        except TemplateSyntaxError as e:
            assert e.line is not None
            return
        blocks = [c for c in root.get_children() if isinstance(c, VariableBlock)]
        assert str(root).count("{{") == len(blocks)

    @given(template_like)
    @settings(max_examples=300, deadline=5000)
    def test_fuzz_002_grammar_characters(self, source: str):
        """FUZZ-002: Parse text dense in grammar characters."""
        try:
            parse(source)
        except TemplateSyntaxError:
            pass

    @given(template_like)
    @settings(max_examples=200, deadline=5000)
    def test_fuzz_003_validate_agrees_with_parse(self, source: str):
        """FUZZ-003: validate_syntax reports nothing exactly when parse succeeds."""
        errors = validate_syntax(source)
        try:
            parse(source)
        except TemplateSyntaxError:
            assert errors
        else:
            assert errors == []

    @given(st.integers(min_value=1, max_value=200))
    @settings(max_examples=50, deadline=5000)
    def test_fuzz_004_deep_parentheses(self, depth: int):
        """FUZZ-004: Deep nesting fails cleanly instead of recursing forever."""
        source = "{{ " + "(" * depth + "1" + ")" * depth + " }}"
        try:
            parse(source)
        except TemplateSyntaxError as e:
            assert e.code == "MAX_DEPTH_EXCEEDED"


@pytest.mark.fuzz
class TestRenderFuzzing:
    """Fuzz tests for rendering."""

    @given(
        template_like,
        st.dictionaries(
            keys=st.sampled_from(["a", "b", "x", "y", "z"]),
            values=st.one_of(
                st.none(),
                st.booleans(),
                st.integers(),
                st.floats(allow_nan=True, allow_infinity=True),
                st.text(max_size=10),
                st.lists(st.integers(), max_size=3),
            ),
        ),
    )
    @settings(max_examples=300, deadline=5000)
    def test_fuzz_005_render_random_templates(self, source: str, data: dict):
        """FUZZ-005: Rendering raises nothing but stencil errors."""
        try:
            result = TemplateEngine().render(source, data)
        except StencilError:
            return
        assert isinstance(result, str)
