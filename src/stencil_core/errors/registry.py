"""Error registry for creating errors from templates."""

from typing import Any

from .errors import (
    ConfigError,
    ContextError,
    ErrorCategory,
    ErrorTemplate,
    RenderError,
    StencilError,
    TemplateSyntaxError,
)

# Context keys copied onto the error instance rather than only interpolated
_FIELD_KEYS = ("template_name", "variable", "expression", "line", "column")


class ErrorRegistry:
    """Registry of error templates. Creates errors from templates + context."""

    def __init__(self) -> None:
        """Initialize error registry with built-in templates."""
        self._templates: dict[str, ErrorTemplate] = {}
        self._load_builtin_templates()

    def get_template(self, code: str) -> ErrorTemplate | None:
        """Get template by error code.

        Args:
            code: Error code to look up

        Returns:
            ErrorTemplate if found, None otherwise
        """
        return self._templates.get(code)

    def list_codes(self) -> list[str]:
        """List all registered error codes.

        Returns:
            List of error codes
        """
        return list(self._templates.keys())

    def register(self, template: ErrorTemplate) -> None:
        """Register (or replace) an error template."""
        self._templates[template.code] = template

    def create(
        self,
        code: str,
        context: dict[str, Any] | None = None,
        cause: StencilError | None = None,
        error_class: type[StencilError] | None = None,
    ) -> StencilError:
        """Create error instance from template + context.

        Args:
            code: Error code
            context: Context variables for template interpolation
            cause: Optional cause error
            error_class: Override the template's exception class

        Returns:
            Instance of the template's error class

        Raises:
            ValueError: If error code not found
        """
        template = self.get_template(code)
        if not template:
            msg = f"Unknown error code: {code}"
            raise ValueError(msg)

        context = context or {}

        message = self._interpolate(template.message_template, context)
        detail = context.get("detail") or self._interpolate(template.detail_template, context)
        suggestion = self._interpolate(template.suggestion_template, context)

        if message is None:
            message = f"Error {code}"

        return (error_class or template.error_class)(
            code=template.code,
            category=template.category,
            message=message,
            detail=detail,
            suggestion=suggestion,
            cause=cause,
            **{key: context.get(key) for key in _FIELD_KEYS},
        )

    def _interpolate(
        self,
        template: str | None,
        context: dict[str, Any],
    ) -> str | None:
        """Safe string interpolation.

        Args:
            template: Template string with {var} placeholders
            context: Context variables

        Returns:
            Interpolated string or None if template is None
        """
        if template is None:
            return None

        try:
            return template.format(**context)
        except KeyError:
            # Missing context variable - return template as-is
            return template

    def _load_builtin_templates(self) -> None:
        """Load hardcoded built-in templates."""
        # Templates go through str.format, so literal braces are doubled
        # SYNTAX Errors
        self.register(
            ErrorTemplate(
                code="UNTERMINATED_BLOCK",
                category=ErrorCategory.SYNTAX,
                message_template="Unterminated expression block",
                detail_template="Reached end of template before the closing '}}}}'",
                suggestion_template="Close the block opened with '{{{{' using '}}}}'",
                error_class=TemplateSyntaxError,
            )
        )

        self.register(
            ErrorTemplate(
                code="INVALID_EXPRESSION",
                category=ErrorCategory.SYNTAX,
                message_template="Invalid expression '{expression}'",
                detail_template=None,
                suggestion_template=(
                    "Use an identifier, a number, or arithmetic with + - * / between them"
                ),
                error_class=TemplateSyntaxError,
            )
        )

        self.register(
            ErrorTemplate(
                code="MAX_DEPTH_EXCEEDED",
                category=ErrorCategory.SYNTAX,
                message_template="Expression nesting exceeds {max_depth} levels",
                detail_template=None,
                suggestion_template="Simplify the expression or raise engine.max_depth",
                error_class=TemplateSyntaxError,
            )
        )

        # RENDER Errors
        self.register(
            ErrorTemplate(
                code="UNDEFINED_VARIABLE",
                category=ErrorCategory.RENDER,
                message_template="Variable '{variable}' is not defined",
                detail_template=None,
                suggestion_template="Pass '{variable}' in the render data",
                error_class=RenderError,
            )
        )

        self.register(
            ErrorTemplate(
                code="DIVISION_BY_ZERO",
                category=ErrorCategory.RENDER,
                message_template="Division by zero in '{expression}'",
                detail_template=None,
                suggestion_template=(
                    "Guard the divisor in the data or set engine.division_by_zero to 'ieee'"
                ),
                error_class=RenderError,
            )
        )

        # CONTEXT Errors
        self.register(
            ErrorTemplate(
                code="NOT_NUMERIC",
                category=ErrorCategory.CONTEXT,
                message_template="Value of kind '{kind}' is not numeric",
                detail_template=None,
                suggestion_template="Only numbers can be used in arithmetic",
                error_class=ContextError,
            )
        )

        self.register(
            ErrorTemplate(
                code="NOT_RENDERABLE",
                category=ErrorCategory.CONTEXT,
                message_template="Value of kind '{kind}' cannot be rendered",
                detail_template=None,
                suggestion_template="Reference a string, number or boolean inside the block",
                error_class=ContextError,
            )
        )

        self.register(
            ErrorTemplate(
                code="UNSUPPORTED_TYPE",
                category=ErrorCategory.CONTEXT,
                message_template="Cannot convert value of type '{type_name}' into the context",
                detail_template=None,
                suggestion_template="Pass plain data (dict, list, str, int, float, bool, None)",
                error_class=ContextError,
            )
        )

        # CONFIG Errors
        self.register(
            ErrorTemplate(
                code="CONFIG_INVALID",
                category=ErrorCategory.CONFIG,
                message_template="Configuration is invalid",
                detail_template=None,
                suggestion_template="Check the configuration file against the documented keys",
                error_class=ConfigError,
            )
        )

        # INTERNAL Errors
        self.register(
            ErrorTemplate(
                code="INTERNAL_ERROR",
                category=ErrorCategory.INTERNAL,
                message_template="Internal error: {reason}",
                detail_template=None,
                suggestion_template="This is a bug in stencil; please report it with the template",
                error_class=StencilError,
            )
        )
