"""Error factory for creating StencilErrors by code."""

from typing import Any

from .errors import StencilError
from .registry import ErrorRegistry


class ErrorFactory:
    """Creates StencilErrors from registered codes."""

    def __init__(self, registry: ErrorRegistry | None = None):
        """Initialize error factory.

        Args:
            registry: Error registry (defaults to new ErrorRegistry())
        """
        self.registry = registry or ErrorRegistry()

    def create(
        self,
        code: str,
        context: dict[str, Any] | None = None,
        cause: StencilError | None = None,
        **kwargs: Any,
    ) -> StencilError:
        """Create StencilError directly from code.

        Args:
            code: Error code
            context: Context variables for template interpolation
            cause: Optional underlying error
            **kwargs: Additional context variables

        Returns:
            StencilError instance
        """
        merged_context = dict(context or {})
        merged_context.update(kwargs)

        return self.registry.create(code=code, context=merged_context, cause=cause)

    def wrap(
        self,
        error: StencilError,
        error_class: type[StencilError],
        **context: Any,
    ) -> StencilError:
        """Re-raise `error` as `error_class`, keeping its code and message.

        Naming and position fields of the original are inherited unless
        given; the original is kept as the cause.
        """
        fields = {
            key: context[key] if context.get(key) is not None else getattr(error, key)
            for key in ("template_name", "variable", "expression", "line", "column")
        }
        return error_class(
            code=error.code,
            category=error.category,
            message=error.message,
            detail=error.detail,
            suggestion=error.suggestion,
            cause=error,
            **fields,
        )


# Convenience singleton
_default_factory: ErrorFactory | None = None


def get_error_factory() -> ErrorFactory:
    """Get default error factory singleton.

    Returns:
        Default ErrorFactory instance
    """
    global _default_factory  # noqa: PLW0603
    if _default_factory is None:
        _default_factory = ErrorFactory()
    return _default_factory


def create_error(code: str, cause: StencilError | None = None, **context: Any) -> StencilError:
    """Convenience function to create error.

    Args:
        code: Error code
        cause: Optional underlying error
        **context: Context variables for template interpolation

    Returns:
        StencilError instance
    """
    return get_error_factory().create(code, context, cause=cause)
