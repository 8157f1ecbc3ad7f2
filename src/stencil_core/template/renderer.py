"""Renderer: walks a parsed template against a context."""

import math

from stencil_core.config.models import EngineConfig
from stencil_core.errors import (
    ContextError,
    RenderError,
    StencilError,
    create_error,
    get_error_factory,
)
from stencil_core.types import DivisionPolicy, Operator

from .context import Context, Value, format_number
from .nodes import Float, Identifier, Int, Math, Node, Root, Text, VariableBlock


class Renderer:
    """Render one Root against one Context.

    A renderer is single use: ``render()`` consumes the tree and a second
    call fails with INTERNAL_ERROR.
    """

    def __init__(self, root: Root, context: Context, config: EngineConfig | None = None):
        """Initialize renderer.

        Args:
            root: Parsed template
            context: Data to render against
            config: Engine policies (division by zero)
        """
        self._root: Root | None = root
        self._name = root.name
        self.context = context
        self.config = config or EngineConfig()
        self._output: list[str] = []

    def render(self) -> str:
        """Render every child of the root in source order.

        Returns:
            Rendered output

        Raises:
            RenderError: Undefined variable, division by zero (error policy),
                or a context value that cannot be rendered/used as a number
            StencilError(INTERNAL_ERROR): Malformed tree or reuse
        """
        root, self._root = self._root, None
        if root is None:
            raise create_error(
                "INTERNAL_ERROR",
                reason="renderer already consumed its template",
                template_name=self._name,
            )

        for node in root.get_children():
            if isinstance(node, Text):
                self._output.append(node.text)
            elif isinstance(node, VariableBlock):
                self.render_variable_block(node)
            else:
                raise self._internal(f"unexpected top-level node {type(node).__name__}")

        return "".join(self._output)

    def render_variable_block(self, block: VariableBlock) -> None:
        """Evaluate the expression of one {{ }} block and append its text."""
        expression = block.expression
        try:
            if isinstance(expression, Identifier):
                self._output.append(self.context.render(self.lookup(expression)))
            elif isinstance(expression, (Int, Float, Math)):
                self._output.append(format_number(self.eval_math(expression)))
            else:
                raise self._internal(
                    f"unexpected node in variable block: {type(expression).__name__}"
                )
        except ContextError as e:
            raise self._wrap(e, expression) from e

    def lookup(self, identifier: Identifier) -> Value:
        """Resolve an identifier or fail with UNDEFINED_VARIABLE."""
        value = self.context.get(identifier.name)
        if value is None:
            raise create_error(
                "UNDEFINED_VARIABLE",
                variable=identifier.name,
                template_name=self._name,
            )
        return value

    def eval_math(self, node: Node) -> float:
        """Evaluate an arithmetic subtree to a float.

        Args:
            node: Identifier, Int, Float or Math

        Returns:
            IEEE-754 result
        """
        if isinstance(node, Identifier):
            try:
                return self.context.to_number(self.lookup(node))
            except ContextError as e:
                raise self._wrap(e, node) from e
        if isinstance(node, (Int, Float)):
            return float(node.value)
        if isinstance(node, Math):
            lhs = self.eval_math(node.lhs)
            rhs = self.eval_math(node.rhs)
            return self._apply(node, lhs, rhs)

        raise self._internal(f"unexpected node in arithmetic: {type(node).__name__}")

    def _apply(self, node: Math, lhs: float, rhs: float) -> float:
        operator = node.operator
        if operator == Operator.ADD:
            return lhs + rhs
        if operator == Operator.SUB:
            return lhs - rhs
        if operator == Operator.MUL:
            return lhs * rhs
        if operator == Operator.DIV:
            if rhs == 0:
                if self.config.division_by_zero == DivisionPolicy.ERROR:
                    raise create_error(
                        "DIVISION_BY_ZERO",
                        expression=str(node),
                        template_name=self._name,
                    )
                # Python raises instead of following IEEE here
                if lhs == 0 or math.isnan(lhs):
                    return math.nan
                return math.copysign(math.inf, lhs) * math.copysign(1.0, rhs)
            return lhs / rhs

        raise self._internal(f"unexpected operator: {operator!r}")

    def _wrap(self, error: ContextError, node: Node) -> StencilError:
        """Re-raise a context failure as a render failure."""
        return get_error_factory().wrap(
            error,
            RenderError,
            variable=node.name if isinstance(node, Identifier) else None,
            expression=str(node),
            template_name=self._name,
        )

    def _internal(self, reason: str) -> StencilError:
        return create_error("INTERNAL_ERROR", reason=reason, template_name=self._name)
