"""Error factory for creating ConduitErrors from any exception type."""

from typing import Any

from .errors import ConduitError
from .matchers import ErrorMatcherChain
from .registry import ErrorRegistry


class ErrorFactory:
    """Creates ConduitErrors from any exception type."""

    def __init__(
        self,
        registry: ErrorRegistry | None = None,
        matcher_chain: ErrorMatcherChain | None = None,
    ):
        """Initialize error factory.

        Args:
            registry: Error registry (defaults to new ErrorRegistry())
            matcher_chain: Matcher chain (defaults to new ErrorMatcherChain())
        """
        self.registry = registry or ErrorRegistry()
        self.matcher_chain = matcher_chain or ErrorMatcherChain()

    def from_exception(
        self,
        error: Exception,
        connection_id: str | None = None,
        tool_name: str | None = None,
    ) -> ConduitError:
        """Convert any exception to ConduitError.

        Args:
            error: Exception to convert
            connection_id: Optional connection identifier
            tool_name: Optional tool name

        Returns:
            ConduitError instance
        """
        # If already a ConduitError, just add context
        if isinstance(error, ConduitError):
            return error.with_context(connection_id=connection_id, tool_name=tool_name)

        match_result = self.matcher_chain.match(error)

        context = match_result.context.copy()
        if connection_id:
            context["connection_id"] = connection_id
        if tool_name:
            context["tool_name"] = tool_name

        conduit_error = self.registry.create(code=match_result.code, context=context)

        if match_result.retryable is not None:
            conduit_error.retryable = match_result.retryable

        return conduit_error

    def create(
        self,
        code: str,
        context: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> ConduitError:
        """Create ConduitError directly from code.

        Args:
            code: Error code
            context: Context variables for template interpolation
            **kwargs: Additional context variables

        Returns:
            ConduitError instance
        """
        merged_context = dict(context or {})
        merged_context.update(kwargs)

        return self.registry.create(code=code, context=merged_context)


# Convenience singleton
_default_factory: ErrorFactory | None = None


def get_error_factory() -> ErrorFactory:
    """Get default error factory singleton."""
    global _default_factory  # noqa: PLW0603
    if _default_factory is None:
        _default_factory = ErrorFactory()
    return _default_factory


def create_error(code: str, **context: Any) -> ConduitError:
    """Convenience function to create error.

    Args:
        code: Error code
        **context: Context variables for template interpolation

    Returns:
        ConduitError instance
    """
    return get_error_factory().create(code, context)
