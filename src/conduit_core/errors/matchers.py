"""Error matchers for converting exceptions to ConduitErrors."""

import asyncio
from typing import Any

from websockets.exceptions import ConnectionClosed

from .errors import ErrorMatcher, MatchResult


class TimeoutErrorMatcher(ErrorMatcher):
    """Matches timeout errors."""

    def matches(self, error: Exception) -> bool:
        """Check if error is a timeout error.

        Args:
            error: Exception to check

        Returns:
            True if error is a timeout error
        """
        return isinstance(error, (asyncio.TimeoutError, TimeoutError))

    def extract(self, error: Exception) -> MatchResult:
        """Extract timeout error info.

        Args:
            error: Exception to extract from

        Returns:
            MatchResult with TOOL_CALL_TIMEOUT code
        """
        return MatchResult(
            code="TOOL_CALL_TIMEOUT",
            context={"timeout_seconds": "unknown", "detail": str(error) or None},
        )


class TransportClosedMatcher(ErrorMatcher):
    """Matches closed sockets and OS-level connection errors."""

    def matches(self, error: Exception) -> bool:
        return isinstance(error, (ConnectionClosed, ConnectionError))

    def extract(self, error: Exception) -> MatchResult:
        return MatchResult(
            code="CONNECTION_UNAVAILABLE",
            context={"detail": str(error)},
        )


class GenericErrorMatcher(ErrorMatcher):
    """Fallback matcher for any exception."""

    def matches(self, error: Exception) -> bool:
        """Always matches."""
        return True

    def extract(self, error: Exception) -> MatchResult:
        """Extract generic error info.

        Handler failures surface as tool execution failures carrying the
        original message.
        """
        context: dict[str, Any] = {
            "detail": str(error),
            "error_type": type(error).__name__,
        }

        return MatchResult(
            code="TOOL_EXECUTION_FAILED",
            context=context,
            retryable=False,
        )


class ErrorMatcherChain:
    """Ordered chain of matchers. First match wins."""

    def __init__(self) -> None:
        """Initialize matcher chain with built-in matchers."""
        self.matchers: list[ErrorMatcher] = []
        self._load_builtin_matchers()

    def match(self, error: Exception) -> MatchResult:
        """Find first matching matcher and extract result.

        Args:
            error: Exception to match

        Returns:
            MatchResult from first matching matcher
        """
        for matcher in self.matchers:
            if matcher.matches(error):
                return matcher.extract(error)

        # Should never reach here due to GenericErrorMatcher
        return MatchResult(
            code="INTERNAL_ERROR",
            context={"detail": str(error)},
            retryable=False,
        )

    def _load_builtin_matchers(self) -> None:
        """Load built-in matchers in priority order."""
        # Order matters - more specific matchers first
        self.matchers = [
            TimeoutErrorMatcher(),
            TransportClosedMatcher(),
            GenericErrorMatcher(),  # Fallback - must be last
        ]
