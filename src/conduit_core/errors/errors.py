"""Conduit error types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error source categories."""

    CONNECTION = "CONNECTION"
    TOOL = "TOOL"
    PROTOCOL = "PROTOCOL"
    SYSTEM = "SYSTEM"


@dataclass(eq=False)
class ConduitError(Exception):
    """Structured error with context. Base exception for all Conduit errors."""

    # Identity
    code: str  # e.g., "CONNECTION_FAILED"
    category: ErrorCategory

    # Messages
    message: str  # Human-readable summary
    detail: str | None = None  # Extended explanation
    suggestion: str | None = None  # Actionable fix

    # Context
    retryable: bool = False
    connection_id: str | None = None
    tool_name: str | None = None

    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        """Set Exception message."""
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Serialize for result payloads.

        Returns:
            Dictionary representation of the error
        """
        return {
            "code": self.code,
            "category": self.category.value,
            "message": self.message,
            "detail": self.detail,
            "suggestion": self.suggestion,
            "retryable": self.retryable,
            "connection_id": self.connection_id,
            "tool_name": self.tool_name,
            "timestamp": self.timestamp.isoformat(),
        }

    def with_context(
        self,
        connection_id: str | None = None,
        tool_name: str | None = None,
    ) -> "ConduitError":
        """Return copy with additional context.

        The copy keeps the concrete error class.
        """
        return replace(
            self,
            connection_id=connection_id or self.connection_id,
            tool_name=tool_name or self.tool_name,
        )


class ConnectionNotFoundError(ConduitError):
    """No connection is registered under the requested id."""


class ConnectionUnavailableError(ConduitError):
    """The connection exists but is not connected (or its socket is gone)."""


class ConnectionFailedError(ConduitError):
    """Establishing a connection failed. The cause is chained."""


class ConnectionExistsError(ConduitError):
    """A connection with the same id is already registered."""


class ToolNotFoundError(ConduitError):
    """The domain/name pair is not registered."""


class ToolExecutionFailedError(ConduitError):
    """A tool handler (local or remote) reported a failure."""


class ToolCallTimeoutError(ConduitError):
    """A correlated round trip exceeded its deadline."""


class UnsupportedOperationError(ConduitError):
    """The operation is not supported for this connection type."""


@dataclass
class ErrorTemplate:
    """Template for creating errors."""

    code: str
    category: ErrorCategory
    message_template: str  # "Connection '{connection_id}' not found"
    detail_template: str | None = None
    suggestion_template: str | None = None
    default_retryable: bool = False
    error_type: type[ConduitError] = ConduitError


@dataclass
class MatchResult:
    """Result of matching an exception."""

    code: str
    context: dict[str, Any]
    retryable: bool | None = None  # None = use template default


class ErrorMatcher(ABC):
    """Base class for exception matchers."""

    @abstractmethod
    def matches(self, error: Exception) -> bool:
        """Check if this matcher handles the error."""

    @abstractmethod
    def extract(self, error: Exception) -> MatchResult:
        """Extract Conduit error info from the exception."""
