"""Unit tests for the error registry, matcher chain and factory."""

import asyncio

import pytest
from websockets.exceptions import ConnectionClosedError

from conduit_core.errors import (
    ConduitError,
    ConnectionExistsError,
    ConnectionFailedError,
    ConnectionNotFoundError,
    ConnectionUnavailableError,
    ErrorCategory,
    ErrorFactory,
    ErrorMatcherChain,
    ErrorRegistry,
    ErrorTemplate,
    ToolCallTimeoutError,
    ToolExecutionFailedError,
    ToolNotFoundError,
    UnsupportedOperationError,
    create_error,
)


class TestErrorRegistry:
    """Templates and interpolation."""

    def test_builtin_codes_registered(self):
        codes = ErrorRegistry().list_codes()
        for code in (
            "CONNECTION_NOT_FOUND",
            "CONNECTION_UNAVAILABLE",
            "CONNECTION_FAILED",
            "CONNECTION_EXISTS",
            "TOOL_NOT_FOUND",
            "TOOL_EXECUTION_FAILED",
            "TOOL_CALL_TIMEOUT",
            "UNSUPPORTED_OPERATION",
            "CONFIG_INVALID",
            "INTERNAL_ERROR",
        ):
            assert code in codes

    @pytest.mark.parametrize(
        "code,error_type",
        [
            ("CONNECTION_NOT_FOUND", ConnectionNotFoundError),
            ("CONNECTION_UNAVAILABLE", ConnectionUnavailableError),
            ("CONNECTION_FAILED", ConnectionFailedError),
            ("CONNECTION_EXISTS", ConnectionExistsError),
            ("TOOL_NOT_FOUND", ToolNotFoundError),
            ("TOOL_EXECUTION_FAILED", ToolExecutionFailedError),
            ("TOOL_CALL_TIMEOUT", ToolCallTimeoutError),
            ("UNSUPPORTED_OPERATION", UnsupportedOperationError),
        ],
    )
    def test_create_uses_typed_subclass(self, code, error_type):
        error = ErrorRegistry().create(code, {"connection_id": "c1", "tool_name": "t"})
        assert isinstance(error, error_type)
        assert isinstance(error, ConduitError)
        assert error.code == code

    def test_message_interpolated_from_context(self):
        error = ErrorRegistry().create("CONNECTION_NOT_FOUND", {"connection_id": "abc"})
        assert error.message == "Connection 'abc' not found"
        assert error.connection_id == "abc"
        assert error.category == ErrorCategory.CONNECTION

    def test_missing_context_keeps_template(self):
        error = ErrorRegistry().create("TOOL_NOT_FOUND", {"tool_name": "x"})
        assert "{domain}" in error.message

    def test_context_detail_overrides_template(self):
        error = ErrorRegistry().create("CONNECTION_FAILED", {"detail": "refused"})
        assert error.detail == "refused"
        assert str(error).endswith(": refused")

    def test_unknown_code_raises(self):
        with pytest.raises(ValueError, match="Unknown error code"):
            ErrorRegistry().create("NOPE")

    def test_retryable_defaults(self):
        registry = ErrorRegistry()
        assert registry.create("TOOL_CALL_TIMEOUT").retryable is True
        assert registry.create("CONNECTION_NOT_FOUND").retryable is False

    def test_register_custom_template(self):
        registry = ErrorRegistry()
        registry.register(
            ErrorTemplate(
                code="CUSTOM",
                category=ErrorCategory.SYSTEM,
                message_template="Custom {thing}",
            )
        )
        error = registry.create("CUSTOM", {"thing": "failure"})
        assert error.message == "Custom failure"
        assert type(error) is ConduitError


class TestConduitError:
    """Error instances behave as exceptions and serialize."""

    def test_is_raisable(self):
        with pytest.raises(ConnectionNotFoundError):
            raise create_error("CONNECTION_NOT_FOUND", connection_id="x")

    def test_to_dict(self):
        error = create_error("TOOL_NOT_FOUND", tool_name="read", domain="fs")
        data = error.to_dict()
        assert data["code"] == "TOOL_NOT_FOUND"
        assert data["category"] == "TOOL"
        assert data["tool_name"] == "read"
        assert "timestamp" in data

    def test_with_context_keeps_type(self):
        error = create_error("TOOL_CALL_TIMEOUT", tool_name="t", timeout_seconds=1)
        enriched = error.with_context(connection_id="c9")
        assert isinstance(enriched, ToolCallTimeoutError)
        assert enriched.connection_id == "c9"
        assert enriched.tool_name == "t"


class TestErrorFactory:
    """Exceptions are classified by the matcher chain."""

    def test_timeout_maps_to_tool_call_timeout(self):
        error = ErrorFactory().from_exception(asyncio.TimeoutError(), tool_name="slow")
        assert error.code == "TOOL_CALL_TIMEOUT"
        assert error.tool_name == "slow"

    def test_connection_closed_maps_to_unavailable(self):
        error = ErrorFactory().from_exception(ConnectionClosedError(None, None))
        assert error.code == "CONNECTION_UNAVAILABLE"

    def test_connection_error_maps_to_unavailable(self):
        error = ErrorFactory().from_exception(ConnectionResetError("reset"))
        assert error.code == "CONNECTION_UNAVAILABLE"

    def test_anything_else_is_tool_execution_failure(self):
        error = ErrorFactory().from_exception(RuntimeError("boom"), connection_id="c1")
        assert error.code == "TOOL_EXECUTION_FAILED"
        assert error.detail == "boom"
        assert error.connection_id == "c1"
        assert error.retryable is False

    def test_conduit_error_passes_through_with_context(self):
        original = create_error("CONNECTION_NOT_FOUND", connection_id="c1")
        error = ErrorFactory().from_exception(original, tool_name="t")
        assert isinstance(error, ConnectionNotFoundError)
        assert error.tool_name == "t"

    def test_create_merges_kwargs(self):
        error = ErrorFactory().create("CONNECTION_EXISTS", {"connection_id": "a"}, detail="dup")
        assert error.message == "Connection 'a' already exists"
        assert error.detail == "dup"

    def test_matcher_chain_order(self):
        chain = ErrorMatcherChain()
        assert chain.match(TimeoutError()).code == "TOOL_CALL_TIMEOUT"
        assert chain.match(ValueError("x")).code == "TOOL_EXECUTION_FAILED"
