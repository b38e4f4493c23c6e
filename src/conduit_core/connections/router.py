"""Tool Execution Router - runs a tool through a connection's transport."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from conduit_core.errors import (
    ConduitError,
    ErrorFactory,
    create_error,
    get_error_factory,
)
from conduit_core.logging import ConduitLogger
from conduit_core.server.protocol import METHOD_TOOLS_CALL, METHOD_TOOLS_LIST
from conduit_core.telemetry import MetricLabels
from conduit_core.tools import ToolRegistry
from conduit_core.types import ConnectionStatus, ConnectionType, LocalDomain

from .channel import DEFAULT_REQUEST_TIMEOUT
from .registry import ConnectionRegistry
from .types import ConnectionInfo

if TYPE_CHECKING:
    from conduit_core.telemetry import ConduitMetrics

# Raised as typed errors; every other failure is returned as a payload
RAISED_ERROR_CODES = frozenset(
    {
        "TOOL_CALL_TIMEOUT",
        "CONNECTION_UNAVAILABLE",
        "CONNECTION_NOT_FOUND",
        "TOOL_NOT_FOUND",
        "UNSUPPORTED_OPERATION",
    }
)


def domain_for_endpoint(endpoint: str) -> str:
    """Map a local/socket endpoint to its capability domain by substring."""
    endpoint = endpoint.lower()
    for domain in (LocalDomain.FILESYSTEM, LocalDomain.TERMINAL, LocalDomain.CALENDAR):
        if domain.value in endpoint:
            return domain.value
    return LocalDomain.FILESYSTEM.value


def _failure_payload(error: ConduitError) -> dict[str, Any]:
    return {"success": False, "error": str(error), "code": error.code}


class ToolExecutionRouter:
    """Resolves a connection and dispatches a tool call by connection type."""

    def __init__(
        self,
        connections: ConnectionRegistry,
        tools: ToolRegistry,
        logger: ConduitLogger | None = None,
        error_factory: ErrorFactory | None = None,
        tool_call_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self._connections = connections
        self._tools = tools
        self._logger = logger
        self._error_factory = error_factory or get_error_factory()
        self._tool_call_timeout = tool_call_timeout
        self._metrics: ConduitMetrics | None = None

        self._dispatch: dict[
            ConnectionType, Callable[[ConnectionInfo, str, dict[str, Any]], Awaitable[Any]]
        ] = {
            ConnectionType.LOCAL: self._execute_local,
            ConnectionType.API: self._execute_api,
            ConnectionType.SOCKET_PEER: self._execute_socket_peer,
            ConnectionType.DATABASE: self._execute_database,
        }

    def set_metrics(self, metrics: ConduitMetrics | None) -> None:
        self._metrics = metrics

    async def execute(
        self,
        connection_id: str,
        tool_name: str,
        parameters: dict[str, Any] | None = None,
    ) -> Any:
        """Run a tool through a connection.

        Handler-level failures come back as ``{success: False, error, code}``.

        Returns:
            The tool's result

        Raises:
            ConnectionNotFoundError: Unknown connection id
            ConnectionUnavailableError: Connection not connected, or its socket closed
            ToolNotFoundError: Domain/name not registered
            ToolCallTimeoutError: Socket-peer round trip exceeded its deadline
            UnsupportedOperationError: Database connections
        """
        connection = self._resolve(connection_id)
        parameters = parameters or {}

        tool_log = self._logger.tool(connection_id) if self._logger else None
        if tool_log:
            tool_log.calling(tool_name, parameters)

        start = time.monotonic()
        try:
            result = await self._dispatch[connection.type](connection, tool_name, parameters)
        except Exception as e:
            error = self._error_factory.from_exception(
                e, connection_id=connection_id, tool_name=tool_name
            )
            self._record(connection, tool_name, start, error)
            if tool_log:
                tool_log.error(tool_name, str(error), self._elapsed_ms(start))
            if error.code not in RAISED_ERROR_CODES:
                return _failure_payload(error)
            if isinstance(e, ConduitError):
                raise
            raise error from e

        self._record(connection, tool_name, start)
        if tool_log:
            tool_log.result(tool_name, result, self._elapsed_ms(start))
        return result

    async def list_tools(self, connection_id: str) -> list[dict[str, Any]]:
        """List the tools reachable through a connection.

        Raises:
            ConnectionNotFoundError: Unknown connection id
            ConnectionUnavailableError: Socket peer not connected
        """
        connection = self._connections.get(connection_id)
        if connection is None:
            raise create_error("CONNECTION_NOT_FOUND", connection_id=connection_id)

        if connection.type == ConnectionType.LOCAL:
            return self._tools.list_for_domain(domain_for_endpoint(connection.endpoint))
        if connection.type == ConnectionType.API:
            return self._tools.list_for_domain(connection.id)
        if connection.type == ConnectionType.SOCKET_PEER:
            result = await self._connections.send_message(
                connection_id,
                METHOD_TOOLS_LIST,
                {"domain": domain_for_endpoint(connection.endpoint)},
                self._tool_call_timeout,
            )
            tools = result.get("tools", []) if isinstance(result, dict) else []
            return list(tools)
        return []

    # ── dispatch targets ───────────────────────────────────────────

    async def _execute_local(
        self, connection: ConnectionInfo, tool_name: str, parameters: dict[str, Any]
    ) -> Any:
        domain = domain_for_endpoint(connection.endpoint)
        return await self._tools.execute(domain, tool_name, parameters)

    async def _execute_api(
        self, connection: ConnectionInfo, tool_name: str, parameters: dict[str, Any]
    ) -> Any:
        # api-backed handlers are registered under the connection id
        return await self._tools.execute(connection.id, tool_name, parameters)

    async def _execute_socket_peer(
        self, connection: ConnectionInfo, tool_name: str, parameters: dict[str, Any]
    ) -> Any:
        return await self._connections.send_message(
            connection.id,
            METHOD_TOOLS_CALL,
            {
                "domain": domain_for_endpoint(connection.endpoint),
                "toolName": tool_name,
                "arguments": parameters,
            },
            self._tool_call_timeout,
        )

    async def _execute_database(
        self, connection: ConnectionInfo, tool_name: str, parameters: dict[str, Any]
    ) -> Any:
        raise create_error(
            "UNSUPPORTED_OPERATION",
            connection_id=connection.id,
            tool_name=tool_name,
            connection_type=connection.type.value,
            detail="Tool execution is not supported for database connections",
        )

    # ── helpers ────────────────────────────────────────────────────

    def _resolve(self, connection_id: str) -> ConnectionInfo:
        connection = self._connections.get(connection_id)
        if connection is None:
            raise create_error("CONNECTION_NOT_FOUND", connection_id=connection_id)
        if connection.status != ConnectionStatus.CONNECTED:
            raise create_error(
                "CONNECTION_UNAVAILABLE",
                connection_id=connection_id,
                detail=f"Connection status is '{connection.status.value}'",
            )
        return connection

    @staticmethod
    def _elapsed_ms(start: float) -> int:
        return int((time.monotonic() - start) * 1000)

    def _record(
        self,
        connection: ConnectionInfo,
        tool_name: str,
        start: float,
        error: ConduitError | None = None,
    ) -> None:
        if not self._metrics:
            return
        if error is None:
            status = MetricLabels.STATUS_SUCCESS
        elif error.code == "TOOL_CALL_TIMEOUT":
            status = MetricLabels.STATUS_TIMEOUT
        else:
            status = MetricLabels.STATUS_ERROR
        self._metrics.record_tool_call(
            connection.type.value,
            tool_name,
            time.monotonic() - start,
            status,
            error.code if error else None,
        )
