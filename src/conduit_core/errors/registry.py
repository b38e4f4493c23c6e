"""Error registry for creating errors from templates."""

from typing import Any

from .errors import (
    ConduitError,
    ConnectionExistsError,
    ConnectionFailedError,
    ConnectionNotFoundError,
    ConnectionUnavailableError,
    ErrorCategory,
    ErrorTemplate,
    ToolCallTimeoutError,
    ToolExecutionFailedError,
    ToolNotFoundError,
    UnsupportedOperationError,
)


class ErrorRegistry:
    """Registry of error templates. Creates errors from templates + context."""

    def __init__(self) -> None:
        """Initialize error registry with built-in templates."""
        self._templates: dict[str, ErrorTemplate] = {}
        self._load_builtin_templates()

    def get_template(self, code: str) -> ErrorTemplate | None:
        """Get template by error code."""
        return self._templates.get(code)

    def list_codes(self) -> list[str]:
        """List all registered error codes."""
        return list(self._templates.keys())

    def register(self, template: ErrorTemplate) -> None:
        """Add or replace a template."""
        self._templates[template.code] = template

    def create(
        self,
        code: str,
        context: dict[str, Any] | None = None,
    ) -> ConduitError:
        """Create error instance from template + context.

        Args:
            code: Error code
            context: Context variables for template interpolation

        Returns:
            ConduitError (or the template's subclass)

        Raises:
            ValueError: If error code not found
        """
        template = self.get_template(code)
        if not template:
            msg = f"Unknown error code: {code}"
            raise ValueError(msg)

        context = context or {}

        message = self._interpolate(template.message_template, context)
        # An explicit detail in the context wins over the template's
        detail = context.get("detail") or self._interpolate(template.detail_template, context)
        suggestion = self._interpolate(template.suggestion_template, context)

        if message is None:
            message = f"Error {code}"

        return template.error_type(
            code=template.code,
            category=template.category,
            message=message,
            detail=detail,
            suggestion=suggestion,
            retryable=template.default_retryable,
            connection_id=context.get("connection_id"),
            tool_name=context.get("tool_name"),
        )

    def _interpolate(
        self,
        template: str | None,
        context: dict[str, Any],
    ) -> str | None:
        """Safe string interpolation.

        Missing context variables leave the template untouched.
        """
        if template is None:
            return None

        try:
            return template.format(**context)
        except (KeyError, IndexError):
            return template

    def _load_builtin_templates(self) -> None:
        """Load hardcoded built-in templates."""
        # CONNECTION Errors
        self._templates["CONNECTION_NOT_FOUND"] = ErrorTemplate(
            code="CONNECTION_NOT_FOUND",
            category=ErrorCategory.CONNECTION,
            message_template="Connection '{connection_id}' not found",
            detail_template="No connection is registered under this id",
            suggestion_template="List connections to find a valid id",
            error_type=ConnectionNotFoundError,
        )

        self._templates["CONNECTION_UNAVAILABLE"] = ErrorTemplate(
            code="CONNECTION_UNAVAILABLE",
            category=ErrorCategory.CONNECTION,
            message_template="Connection '{connection_id}' is not available",
            detail_template="The connection exists but is not connected",
            suggestion_template="Test the connection or run a reconnect sweep",
            default_retryable=True,
            error_type=ConnectionUnavailableError,
        )

        self._templates["CONNECTION_FAILED"] = ErrorTemplate(
            code="CONNECTION_FAILED",
            category=ErrorCategory.CONNECTION,
            message_template="Failed to connect to '{connection_id}'",
            detail_template="The transport could not establish the connection",
            suggestion_template="Check the endpoint and credentials, then retry",
            default_retryable=True,
            error_type=ConnectionFailedError,
        )

        self._templates["CONNECTION_EXISTS"] = ErrorTemplate(
            code="CONNECTION_EXISTS",
            category=ErrorCategory.CONNECTION,
            message_template="Connection '{connection_id}' already exists",
            detail_template="Connection ids must be unique",
            suggestion_template="Remove the existing connection or omit the id",
            error_type=ConnectionExistsError,
        )

        self._templates["UNSUPPORTED_OPERATION"] = ErrorTemplate(
            code="UNSUPPORTED_OPERATION",
            category=ErrorCategory.CONNECTION,
            message_template="Operation not supported for '{connection_type}' connections",
            detail_template="The connection type does not support this operation",
            error_type=UnsupportedOperationError,
        )

        # TOOL Errors
        self._templates["TOOL_NOT_FOUND"] = ErrorTemplate(
            code="TOOL_NOT_FOUND",
            category=ErrorCategory.TOOL,
            message_template="Tool '{tool_name}' not found in domain '{domain}'",
            detail_template="The tool is not registered for this capability domain",
            suggestion_template="List the domain's tools to find a valid name",
            error_type=ToolNotFoundError,
        )

        self._templates["TOOL_EXECUTION_FAILED"] = ErrorTemplate(
            code="TOOL_EXECUTION_FAILED",
            category=ErrorCategory.TOOL,
            message_template="Tool '{tool_name}' failed",
            detail_template="The tool handler reported an error",
            suggestion_template="Check the tool parameters and handler logs",
            error_type=ToolExecutionFailedError,
        )

        self._templates["TOOL_CALL_TIMEOUT"] = ErrorTemplate(
            code="TOOL_CALL_TIMEOUT",
            category=ErrorCategory.TOOL,
            message_template="Tool '{tool_name}' timed out after {timeout_seconds}s",
            detail_template="No correlated response arrived before the deadline",
            suggestion_template="Check that the peer is responsive or raise the timeout",
            default_retryable=True,
            error_type=ToolCallTimeoutError,
        )

        # SYSTEM Errors
        self._templates["CONFIG_INVALID"] = ErrorTemplate(
            code="CONFIG_INVALID",
            category=ErrorCategory.SYSTEM,
            message_template="Invalid configuration",
            detail_template="The Conduit configuration is invalid",
            suggestion_template="Check the configuration file and fix errors",
        )

        self._templates["INTERNAL_ERROR"] = ErrorTemplate(
            code="INTERNAL_ERROR",
            category=ErrorCategory.SYSTEM,
            message_template="Internal Conduit error",
            detail_template="An unexpected error occurred",
            suggestion_template="Check the logs and report this issue",
        )
