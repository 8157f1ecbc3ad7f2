"""Template Engine implementation."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from stencil_core.config.loader import load_config
from stencil_core.config.models import EngineConfig, StencilConfig
from stencil_core.errors import StencilError
from stencil_core.telemetry.logging import configure_logging, get_logger
from stencil_core.types import ValidationResult

from .context import Context
from .nodes import Root
from .parser import (
    Parser,
    collect_syntax_errors,
    extract_references,
    has_templates,
    validate_syntax,
)
from .renderer import Renderer
from .types import RenderResult

logger = get_logger("engine")
tracer = trace.get_tracer(__name__)


class TemplateEngine:
    """Parse and render ``{{ }}`` templates.

    Supports:
    - Literal text, copied verbatim: <h1>Hello</h1>
    - Variables: {{ name }}, nested: {{ user.name }}, {{ items.0 }}
    - Arithmetic: {{ 100 * vat_rate }}, {{ (a + b) / 2 }}

    Does NOT support:
    - Control flow (if/for)
    - Filters or function calls
    - Includes / inheritance
    - Whitespace control

    An engine holds only its config, so one instance can serve many threads.
    Every call builds its own parser, context and renderer.
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        """Initialize template engine.

        Args:
            config: Engine policies (defaults to EngineConfig())
        """
        self.config = config or EngineConfig()

    @classmethod
    def from_config(cls, config: StencilConfig | None = None) -> "TemplateEngine":
        """Build an engine from a full stencil config and apply its logging section.

        Meant for applications; library callers construct TemplateEngine directly
        and leave logging alone.

        Args:
            config: Loaded config (defaults to load_config())

        Returns:
            Engine using config.engine
        """
        config = config or load_config()
        configure_logging(config.logging.level, config.logging.format)
        return cls(config.engine)

    def parse(self, template: str, name: str = "string") -> Root:
        """Parse template source.

        Args:
            template: Template source
            name: Name used in error locations

        Returns:
            Parsed Root

        Raises:
            TemplateSyntaxError: If the template is malformed
        """
        root = Parser(template, name=name, max_depth=self.config.max_depth).parse()
        logger.debug("Template parsed", template_name=name, nodes=len(root))
        return root

    def make_context(self, data: Any) -> Context:
        """Wrap caller data according to the engine policies."""
        return Context(
            data,
            strict=self.config.strict_context,
            dotted_lookup=self.config.dotted_lookup,
            null_policy=self.config.null_rendering,
        )

    def render(self, template: str, data: Any = None, name: str = "string") -> str:
        """Parse and render a template.

        Args:
            template: Template source
            data: Values for identifiers (usually a dict)
            name: Name used in error locations

        Returns:
            Rendered output

        Raises:
            TemplateSyntaxError: If the template is malformed
            RenderError: If evaluation fails
        """
        with self._render_span(name):
            return self._render_root(self.parse(template, name=name), data)

    def render_template(
        self, template: str, data: Any = None, name: str = "string"
    ) -> RenderResult:
        """Render a template and report what it referenced.

        Args:
            template: Template source
            data: Values for identifiers
            name: Name used in error locations

        Returns:
            RenderResult with output and referenced identifiers
        """
        with self._render_span(name):
            root = self.parse(template, name=name)
            references = extract_references(root)
            output = self._render_root(root, data)
        return RenderResult(
            output=output,
            had_templates=has_templates(template),
            references=references,
        )

    def render_ast(self, root: Root, data: Any = None) -> str:
        """Render an already parsed template.

        Args:
            root: Result of parse()
            data: Values for identifiers

        Returns:
            Rendered output
        """
        with self._render_span(root.name):
            return self._render_root(root, data)

    def validate(self, template: str) -> list[str]:
        """Validate template syntax without rendering.

        Returns list of errors (empty if valid).
        Does NOT check variable existence.

        Args:
            template: Template source

        Returns:
            List of error messages (empty if valid)
        """
        return validate_syntax(template, max_depth=self.config.max_depth)

    def check(self, template: str, name: str = "string") -> ValidationResult:
        """Structured form of validate(): one issue per syntax error.

        Each issue carries the error code and its 1-based line and column.
        """
        result = ValidationResult()
        for error in collect_syntax_errors(template, name, self.config.max_depth):
            result.add_error(
                error.location or name,
                str(error),
                line=error.line,
                column=error.column,
                code=error.code,
            )
        return result

    def extract_references(self, template: str) -> list[str]:
        """Extract all variable references from template.

        E.g., "{{ price * qty }}" → ["price", "qty"]

        Useful for dependency analysis.

        Args:
            template: Template source

        Returns:
            List of variable references
        """
        return extract_references(self.parse(template))

    @contextmanager
    def _render_span(self, name: str) -> Iterator[None]:
        """Trace one render call and log its failure, whatever the entry point."""
        with tracer.start_as_current_span("template.render") as span:
            span.set_attribute("template.name", name)
            try:
                yield
            except StencilError as e:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                span.record_exception(e)
                logger.warning(
                    "Template render failed",
                    template_name=name,
                    code=e.code,
                    error=str(e),
                )
                raise

    def _render_root(self, root: Root, data: Any) -> str:
        context = self.make_context(data)
        output = Renderer(root, context, self.config).render()
        trace.get_current_span().set_attribute("template.output_length", len(output))
        logger.debug("Template rendered", template_name=root.name, length=len(output))
        return output


_default_engine: TemplateEngine | None = None


def get_engine() -> TemplateEngine:
    """Get default template engine singleton."""
    global _default_engine  # noqa: PLW0603
    if _default_engine is None:
        _default_engine = TemplateEngine()
    return _default_engine


def render_from_string(template: str, data: Any = None) -> str:
    """Render a template string against data with the default engine.

    Args:
        template: Template source
        data: Values for identifiers (usually a dict)

    Returns:
        Rendered output

    Raises:
        TemplateSyntaxError: If the template is malformed
        RenderError: If evaluation fails
    """
    return get_engine().render(template, data)
