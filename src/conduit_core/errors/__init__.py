"""Conduit error handling - Structured errors with context."""

from .errors import (
    ConduitError,
    ConnectionExistsError,
    ConnectionFailedError,
    ConnectionNotFoundError,
    ConnectionUnavailableError,
    ErrorCategory,
    ErrorMatcher,
    ErrorTemplate,
    MatchResult,
    ToolCallTimeoutError,
    ToolExecutionFailedError,
    ToolNotFoundError,
    UnsupportedOperationError,
)
from .factory import ErrorFactory, create_error, get_error_factory
from .matchers import ErrorMatcherChain
from .registry import ErrorRegistry

__all__ = [
    # Core error types
    "ConduitError",
    "ErrorCategory",
    "ErrorTemplate",
    "MatchResult",
    "ConnectionNotFoundError",
    "ConnectionUnavailableError",
    "ConnectionFailedError",
    "ConnectionExistsError",
    "ToolNotFoundError",
    "ToolExecutionFailedError",
    "ToolCallTimeoutError",
    "UnsupportedOperationError",
    # Registry and factory
    "ErrorRegistry",
    "ErrorFactory",
    "ErrorMatcherChain",
    "ErrorMatcher",
    # Convenience functions
    "get_error_factory",
    "create_error",
]
