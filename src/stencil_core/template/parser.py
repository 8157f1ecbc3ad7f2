"""Template parsing.

Turns template source into a ``Root`` AST. Text outside ``{{ }}`` is kept
verbatim; each block body is parsed as one expression:

    identifier      name, user.name, items.0
    integer         2016
    float           0.2, 1.5e3
    arithmetic      operands joined by + - * /, with parentheses

``*`` and ``/`` bind tighter than ``+`` and ``-``; operators of equal
precedence associate to the left.
"""

import re
from dataclasses import dataclass
from typing import Any

from stencil_core.errors import TemplateSyntaxError, create_error
from stencil_core.types import Operator

from .nodes import (
    Expression,
    Float,
    Identifier,
    Int,
    Math,
    Root,
    Text,
    VariableBlock,
    iter_identifiers,
)

BLOCK_START = "{{"
BLOCK_END = "}}"

DEFAULT_MAX_DEPTH = 64

INT64_MAX = 2**63 - 1

# Regex to find complete {{ }} blocks
TEMPLATE_PATTERN = re.compile(r"\{\{(.*?)\}\}", re.DOTALL)

_SEGMENT = r"[A-Za-z_][A-Za-z0-9_]*"
INT_PATTERN = re.compile(r"[0-9]+")
FLOAT_PATTERN = re.compile(r"[0-9]+\.[0-9]+(?:[eE][+-]?[0-9]+)?|[0-9]+[eE][+-]?[0-9]+")
IDENTIFIER_PATTERN = re.compile(rf"{_SEGMENT}(?:\.(?:{_SEGMENT}|[0-9]+))*")

TOKEN_PATTERN = re.compile(
    rf"(?P<number>{FLOAT_PATTERN.pattern}|{INT_PATTERN.pattern})"
    rf"|(?P<name>{IDENTIFIER_PATTERN.pattern})"
    r"|(?P<op>[-+*/])"
    r"|(?P<lparen>\()"
    r"|(?P<rparen>\))"
)


@dataclass(frozen=True)
class Token:
    """Lexical token inside an expression block."""

    kind: str  # number | name | op | lparen | rparen
    text: str
    offset: int  # offset in the template source


def parse_number(text: str) -> Int | Float:
    """Classify a numeric literal.

    Integers outside the signed 64-bit range are read as floats.
    """
    if INT_PATTERN.fullmatch(text):
        value = int(text)
        if value <= INT64_MAX:
            return Int(value)
    return Float(float(text))


class Parser:
    """Parse one template source into a Root."""

    def __init__(
        self,
        source: str,
        name: str = "string",
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        """Initialize parser.

        Args:
            source: Template source
            name: Name used in error locations
            max_depth: Maximum expression nesting depth
        """
        self.source = source
        self.name = name
        self.max_depth = max_depth
        self._tokens: list[Token] = []
        self._index = 0
        self._expression = ""
        self._block_offset = 0

    def parse(self) -> Root:
        """Parse the whole template.

        Returns:
            Root with Text and VariableBlock children in source order

        Raises:
            TemplateSyntaxError: On an unterminated block or invalid expression
        """
        children: list[Text | VariableBlock] = []
        source = self.source
        pos = 0

        while True:
            start = source.find(BLOCK_START, pos)
            if start == -1:
                if pos < len(source):
                    children.append(Text(source[pos:]))
                break

            if start > pos:
                children.append(Text(source[pos:start]))

            end = source.find(BLOCK_END, start + len(BLOCK_START))
            if end == -1:
                raise self._error(
                    "UNTERMINATED_BLOCK",
                    start,
                    expression=source[start : start + 40].strip(),
                )

            body_start = start + len(BLOCK_START)
            children.append(VariableBlock(self.parse_block(source[body_start:end], body_start)))
            pos = end + len(BLOCK_END)

        return Root(children=tuple(children), name=self.name)

    def parse_block(self, body: str, offset: int = 0) -> Expression:
        """Parse the body of one ``{{ }}`` block.

        Args:
            body: Text between the delimiters
            offset: Offset of `body` in the template source

        Returns:
            Expression node
        """
        text = body.strip()
        self._expression = text
        self._block_offset = offset + (len(body) - len(body.lstrip()))

        if not text:
            raise self._error("INVALID_EXPRESSION", offset, detail="empty expression block")

        # Single-token fast paths, in order: int, float, identifier
        if INT_PATTERN.fullmatch(text) or FLOAT_PATTERN.fullmatch(text):
            return parse_number(text)
        if IDENTIFIER_PATTERN.fullmatch(text):
            return Identifier(text)

        self._tokens = self._tokenize(text)
        self._index = 0
        node, _ = self._parse_expression(1, 0)

        leftover = self._peek()
        if leftover is not None:
            detail = (
                "unbalanced ')'"
                if leftover.kind == "rparen"
                else f"unexpected '{leftover.text}' after complete expression"
            )
            raise self._error("INVALID_EXPRESSION", leftover.offset, detail=detail)
        return node

    def _tokenize(self, text: str) -> list[Token]:
        """Split an expression into tokens, skipping whitespace."""
        tokens: list[Token] = []
        pos = 0
        while pos < len(text):
            if text[pos].isspace():
                pos += 1
                continue
            match = TOKEN_PATTERN.match(text, pos)
            if match is None:
                raise self._error(
                    "INVALID_EXPRESSION",
                    self._block_offset + pos,
                    detail=f"unexpected character '{text[pos]}'",
                )
            kind = match.lastgroup or ""
            tokens.append(Token(kind, match.group(), self._block_offset + pos))
            pos = match.end()
        return tokens

    def _peek(self) -> Token | None:
        if self._index < len(self._tokens):
            return self._tokens[self._index]
        return None

    def _advance(self) -> Token:
        token = self._tokens[self._index]
        self._index += 1
        return token

    def _parse_expression(self, min_precedence: int, nesting: int) -> tuple[Expression, int]:
        """Precedence climbing. Returns the node and its tree depth."""
        node, depth = self._parse_operand(nesting)

        while True:
            token = self._peek()
            if token is None or token.kind != "op":
                return node, depth
            operator = Operator(token.text)
            if operator.precedence < min_precedence:
                return node, depth

            self._advance()
            rhs, rhs_depth = self._parse_expression(operator.precedence + 1, nesting + 1)
            node = Math(operator=operator, lhs=node, rhs=rhs)
            depth = max(depth, rhs_depth) + 1
            if depth > self.max_depth:
                raise self._error("MAX_DEPTH_EXCEEDED", token.offset, max_depth=self.max_depth)

    def _parse_operand(self, nesting: int) -> tuple[Expression, int]:
        if nesting > self.max_depth:
            offset = self._tokens[max(self._index - 1, 0)].offset
            raise self._error("MAX_DEPTH_EXCEEDED", offset, max_depth=self.max_depth)

        token = self._peek()
        if token is None:
            last = self._tokens[-1]
            raise self._error(
                "INVALID_EXPRESSION",
                last.offset,
                detail=f"expected an operand after '{last.text}'",
            )

        self._advance()
        if token.kind == "number":
            return parse_number(token.text), 0
        if token.kind == "name":
            return Identifier(token.text), 0
        if token.kind == "lparen":
            node, depth = self._parse_expression(1, nesting + 1)
            closing = self._peek()
            if closing is None or closing.kind != "rparen":
                raise self._error("INVALID_EXPRESSION", token.offset, detail="unbalanced '('")
            self._advance()
            return node, depth

        raise self._error(
            "INVALID_EXPRESSION",
            token.offset,
            detail=f"expected an operand, found '{token.text}'",
        )

    def _position(self, offset: int) -> tuple[int, int]:
        """1-based line and column of a source offset."""
        line = self.source.count("\n", 0, offset) + 1
        column = offset - (self.source.rfind("\n", 0, offset) + 1) + 1
        return line, column

    def _error(self, code: str, offset: int, **context: Any) -> TemplateSyntaxError:
        line, column = self._position(offset)
        context.setdefault("expression", self._expression)
        return create_error(  # type: ignore[return-value]
            code,
            template_name=self.name,
            line=line,
            column=column,
            **context,
        )


def parse(source: str, name: str = "string", max_depth: int = DEFAULT_MAX_DEPTH) -> Root:
    """Parse template source into a Root.

    Args:
        source: Template source
        name: Name used in error locations
        max_depth: Maximum expression nesting depth

    Returns:
        Parsed Root

    Raises:
        TemplateSyntaxError: If the template is malformed
    """
    return Parser(source, name=name, max_depth=max_depth).parse()


def extract_templates(text: str) -> list[str]:
    """Extract all {{ }} template expressions from text.

    Args:
        text: Text to search

    Returns:
        List of template expressions (without {{ }}), trimmed
    """
    return [match.group(1).strip() for match in TEMPLATE_PATTERN.finditer(text)]


def has_templates(text: str) -> bool:
    """Check if text contains any {{ }} templates.

    Args:
        text: Text to check

    Returns:
        True if templates found
    """
    return bool(TEMPLATE_PATTERN.search(text))


def extract_references(root: Root) -> list[str]:
    """Identifier names used by a parsed template, first appearance first."""
    seen: dict[str, None] = {}
    for identifier in iter_identifiers(root):
        seen.setdefault(identifier.name, None)
    return list(seen)


def validate_syntax(
    text: str,
    name: str = "string",
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[str]:
    """Validate template syntax without rendering.

    Unlike parse(), keeps going after a bad block so every problem is
    reported at once.

    Args:
        text: Text to validate
        name: Name used in error locations
        max_depth: Maximum expression nesting depth

    Returns:
        List of error messages (empty if valid)
    """
    return [str(error) for error in collect_syntax_errors(text, name, max_depth)]


def collect_syntax_errors(
    text: str,
    name: str = "string",
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[TemplateSyntaxError]:
    """Every syntax error in a template, in source order."""
    errors: list[TemplateSyntaxError] = []
    parser = Parser(text, name=name, max_depth=max_depth)
    pos = 0

    for match in TEMPLATE_PATTERN.finditer(text):
        try:
            parser.parse_block(match.group(1), match.start(1))
        except TemplateSyntaxError as e:
            errors.append(e)
        pos = match.end()

    tail = text.find(BLOCK_START, pos)
    if tail != -1:
        # No closing delimiter follows, otherwise the pattern would have matched
        expression = text[tail : tail + 40].strip()
        errors.append(parser._error("UNTERMINATED_BLOCK", tail, expression=expression))

    return errors
