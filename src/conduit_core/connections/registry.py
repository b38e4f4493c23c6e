"""Connection Registry - owns live connections and their lifecycle.

Descriptors are persisted through the injected ConnectionStore; runtime
state (status, timestamps, transport handles) stays in memory and never
leaves this module.
"""

from __future__ import annotations

import asyncio
import time
from collections import Counter
from typing import TYPE_CHECKING, Any

from conduit_core.errors import ConduitError, ConnectionFailedError, create_error
from conduit_core.logging import ConduitLogger, ConnectionLogger
from conduit_core.types import ConnectionStatus, ConnectionType, LogLevel

from .catalog import CONNECTION_CATALOG
from .channel import DEFAULT_REQUEST_TIMEOUT, PeerChannel
from .store import ConnectionStore
from .transports import Transport, default_transports
from .types import (
    Connection,
    ConnectionDescriptor,
    ConnectionInfo,
    ConnectionState,
    ReconnectResult,
    RegistryStats,
    TestResult,
    generate_connection_id,
)

if TYPE_CHECKING:
    from conduit_core.telemetry import ConduitMetrics


class ConnectionRegistry:
    """Authoritative map of connection id -> Connection.

    Mutations on one id (add/remove/establish) are serialized by a per-id
    lock; operations on different ids proceed independently. list() and
    stats() work on snapshots.
    """

    def __init__(
        self,
        store: ConnectionStore,
        transports: dict[ConnectionType, Transport] | None = None,
        logger: ConduitLogger | None = None,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        """Initialize the registry.

        Args:
            store: Persistence port for descriptors
            transports: Transport per connection type (defaults to default_transports())
            logger: Optional logger
            request_timeout: Default deadline for correlated messages
        """
        self._store = store
        self._transports = transports or default_transports()
        self._logger = logger
        self._request_timeout = request_timeout
        self._connections: dict[str, Connection] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._persist_lock = asyncio.Lock()
        self._metrics: ConduitMetrics | None = None
        self._server: Any = None

    def set_metrics(self, metrics: ConduitMetrics | None) -> None:
        self._metrics = metrics

    def set_server(self, server: Any) -> None:
        """Attach the protocol server so stats() can report whether it runs."""
        self._server = server

    def _log(self, level: LogLevel, message: str, context: dict[str, Any] | None = None) -> None:
        """Log message if logger available."""
        if self._logger:
            self._logger._log(level, "registry", message, context)

    def _conn_logger(self, descriptor: ConnectionDescriptor) -> ConnectionLogger | None:
        if self._logger:
            return self._logger.connection(descriptor.id, descriptor.type.value)
        return None

    def _lock_for(self, connection_id: str) -> asyncio.Lock:
        lock = self._locks.get(connection_id)
        if lock is None:
            lock = self._locks[connection_id] = asyncio.Lock()
        return lock

    # ── lifecycle ───────────────────────────────────────────────────

    async def add(self, descriptor: ConnectionDescriptor, persist: bool = True) -> ConnectionInfo:
        """Establish and register a connection.

        A failed establishment leaves nothing behind in the registry.

        Args:
            descriptor: Connection descriptor; an id is generated when empty
            persist: Snapshot descriptors to the store afterwards

        Returns:
            Public projection of the new connection

        Raises:
            ConnectionExistsError: The id is already registered
            ConnectionFailedError: Establishment failed
        """
        if not descriptor.id:
            descriptor = descriptor.with_id(generate_connection_id())

        async with self._lock_for(descriptor.id):
            if descriptor.id in self._connections:
                raise create_error("CONNECTION_EXISTS", connection_id=descriptor.id)

            state = await self._establish(descriptor)
            connection = Connection(descriptor=descriptor, state=state)
            self._connections[descriptor.id] = connection
            info = connection.info()

        if persist:
            await self._persist()

        return info

    async def remove(self, connection_id: str) -> bool:
        """Tear down and delete a connection.

        Returns:
            False if the id was unknown
        """
        async with self._lock_for(connection_id):
            connection = self._connections.get(connection_id)
            if connection is None:
                return False

            await self._teardown(connection)
            del self._connections[connection_id]

        log = self._conn_logger(connection.descriptor)
        if log:
            log.removed()

        await self._persist()
        return True

    async def test(self, connection_id: str) -> TestResult:
        """Re-run establishment against the existing descriptor.

        The entry is kept either way. On success the fresh state replaces
        the old one; on failure the status becomes error with the reason
        recorded. Failures are reported, not raised.

        Raises:
            ConnectionNotFoundError: The id is unknown
        """
        async with self._lock_for(connection_id):
            connection = self._require(connection_id)
            error = await self._reestablish(connection)

        if error is None:
            return TestResult(success=True, message="Connection successful")
        return TestResult(success=False, message=error)

    async def test_with_ping(self, connection_id: str) -> TestResult:
        """Round-trip a ``ping`` over a connected socket peer.

        Other types, and socket peers that are not connected, fall back to
        test().

        Raises:
            ConnectionNotFoundError: The id is unknown
        """
        connection = self._require(connection_id)
        if (
            connection.type != ConnectionType.SOCKET_PEER
            or connection.status != ConnectionStatus.CONNECTED
        ):
            return await self.test(connection_id)

        start = time.monotonic()
        try:
            await self.send_message(connection_id, "ping", {})
        except ConduitError as e:
            return TestResult(success=False, message=str(e))

        round_trip_ms = round((time.monotonic() - start) * 1000, 2)
        return TestResult(success=True, message="Ping successful", round_trip_ms=round_trip_ms)

    async def reconnect_all(self) -> list[ReconnectResult]:
        """Retry establishment on every connection that is not connected.

        Failures are collected per connection; the sweep itself never
        raises for them.

        Returns:
            One entry per connection attempted
        """
        targets = [
            c.id
            for c in list(self._connections.values())
            if c.status != ConnectionStatus.CONNECTED
        ]
        if not targets:
            return []

        self._log(LogLevel.INFO, f"Reconnecting {len(targets)} connection(s)")
        return list(await asyncio.gather(*(self._reconnect_one(cid) for cid in targets)))

    async def _reconnect_one(self, connection_id: str) -> ReconnectResult:
        async with self._lock_for(connection_id):
            connection = self._connections.get(connection_id)
            if connection is None:
                return ReconnectResult(id=connection_id, success=False, error="Connection removed")
            if connection.status == ConnectionStatus.CONNECTED:
                return ReconnectResult(id=connection_id, success=True)

            error = await self._reestablish(connection)

        return ReconnectResult(id=connection_id, success=error is None, error=error)

    async def load(self) -> int:
        """Restore stored descriptors at startup (without re-persisting).

        Descriptors that fail to establish are kept with status error so a
        later reconnect_all() can retry them and the next save keeps them.

        Returns:
            Number of connections that came up connected
        """
        descriptors = [
            d if d.id else d.with_id(generate_connection_id())
            for d in await self._store.load_connections()
        ]
        if not descriptors:
            return 0

        results = await asyncio.gather(
            *(self.add(d, persist=False) for d in descriptors),
            return_exceptions=True,
        )

        restored = 0
        for descriptor, result in zip(descriptors, results, strict=True):
            if isinstance(result, ConnectionFailedError):
                self._connections.setdefault(
                    descriptor.id,
                    Connection(
                        descriptor=descriptor,
                        state=ConnectionState(
                            status=ConnectionStatus.ERROR, last_error=str(result)
                        ),
                    ),
                )
            elif isinstance(result, BaseException):
                self._log(
                    LogLevel.ERROR,
                    f"Failed to restore connection '{descriptor.id}': {result}",
                )
            else:
                restored += 1

        self._log(LogLevel.INFO, f"Restored {restored}/{len(descriptors)} connection(s)")
        return restored

    async def shutdown(self) -> None:
        """Tear down every transport handle. Nothing is persisted."""
        for connection_id in list(self._connections.keys()):
            async with self._lock_for(connection_id):
                connection = self._connections.get(connection_id)
                if connection is not None:
                    await self._teardown(connection)

    # ── queries ────────────────────────────────────────────────────

    def get(self, connection_id: str) -> ConnectionInfo | None:
        connection = self._connections.get(connection_id)
        return connection.info() if connection else None

    def list(self) -> list[ConnectionInfo]:
        """Snapshot of every connection (secrets excluded)."""
        return [c.info() for c in list(self._connections.values())]

    def stats(self) -> RegistryStats:
        snapshot = list(self._connections.values())
        by_status = {status.value: 0 for status in ConnectionStatus}
        by_status.update(Counter(c.status.value for c in snapshot))
        return RegistryStats(
            total=len(snapshot),
            by_status=by_status,
            by_type=dict(Counter(c.type.value for c in snapshot)),
            by_category=dict(Counter(c.descriptor.category or "Uncategorized" for c in snapshot)),
            server_running=bool(self._server is not None and self._server.running),
        )

    def available_connection_types(self) -> list[ConnectionDescriptor]:
        """Catalog of connection templates."""
        return list(CONNECTION_CATALOG)

    # ── messaging ──────────────────────────────────────────────────

    async def send_message(
        self,
        connection_id: str,
        method: str,
        params: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Send a correlated message over a socket-peer connection.

        Returns:
            The peer's result

        Raises:
            ConnectionNotFoundError: The id is unknown
            ConnectionUnavailableError: Not connected
            UnsupportedOperationError: Not a socket-peer connection
            ToolCallTimeoutError: No response before the deadline
        """
        connection = self._require(connection_id)
        if connection.status != ConnectionStatus.CONNECTED:
            raise create_error("CONNECTION_UNAVAILABLE", connection_id=connection_id)

        channel = connection.state.handle
        if connection.type != ConnectionType.SOCKET_PEER or not isinstance(channel, PeerChannel):
            raise create_error(
                "UNSUPPORTED_OPERATION",
                connection_id=connection_id,
                connection_type=connection.type.value,
                detail="Correlated messaging requires a socket-peer connection",
            )

        return await channel.request(method, params, timeout or self._request_timeout)

    # ── internals ──────────────────────────────────────────────────

    def _require(self, connection_id: str) -> Connection:
        connection = self._connections.get(connection_id)
        if connection is None:
            raise create_error("CONNECTION_NOT_FOUND", connection_id=connection_id)
        return connection

    async def _establish(self, descriptor: ConnectionDescriptor) -> ConnectionState:
        """Run the descriptor's transport. Caller holds the id's lock.

        Raises:
            ConnectionFailedError: Any establishment failure, cause chained
        """
        log = self._conn_logger(descriptor)
        if log:
            log.establishing(descriptor.endpoint)

        transport = self._transports.get(descriptor.type)
        start = time.monotonic()
        try:
            if transport is None:
                raise create_error(
                    "UNSUPPORTED_OPERATION",
                    connection_id=descriptor.id,
                    connection_type=descriptor.type.value,
                )
            state = await transport.establish(
                descriptor, on_close=self._close_handler(descriptor.id)
            )
        except Exception as e:
            if self._metrics:
                self._metrics.record_connection_attempt(descriptor.type.value, "error")
            if log:
                log.failed(e)
            if isinstance(e, ConnectionFailedError):
                raise
            raise create_error(
                "CONNECTION_FAILED", connection_id=descriptor.id, detail=str(e)
            ) from e

        if self._metrics:
            self._metrics.record_connection_attempt(descriptor.type.value, "success")
        if log:
            log.connected(int((time.monotonic() - start) * 1000))
        return state

    async def _reestablish(self, connection: Connection) -> str | None:
        """Re-run establishment in place. Caller holds the id's lock.

        Returns:
            None on success, otherwise the failure reason
        """
        previous = connection.state
        try:
            state = await self._establish(connection.descriptor)
        except ConnectionFailedError as e:
            await self._release(connection.descriptor.type, previous)
            connection.state = ConnectionState(
                status=ConnectionStatus.ERROR,
                last_connected_at=previous.last_connected_at,
                last_error=str(e),
            )
            return str(e)

        connection.state = state
        await self._release(connection.descriptor.type, previous)
        return None

    async def _teardown(self, connection: Connection) -> None:
        previous = connection.state
        connection.state = ConnectionState(
            status=ConnectionStatus.DISCONNECTED,
            last_connected_at=previous.last_connected_at,
        )
        await self._release(connection.descriptor.type, previous)

    async def _release(self, connection_type: ConnectionType, state: ConnectionState) -> None:
        """Release a superseded state's handle."""
        if state.handle is None:
            return
        transport = self._transports.get(connection_type)
        if transport is None:
            return
        try:
            await transport.teardown(state)
        except Exception as e:
            self._log(LogLevel.WARN, f"Transport teardown failed: {e}")

    def _close_handler(self, connection_id: str):
        """Callback for a socket that closes on its own."""

        def on_close(channel: PeerChannel, reason: str | None) -> None:
            connection = self._connections.get(connection_id)
            # Ignore channels that were already replaced or torn down
            if connection is None or connection.state.handle is not channel:
                return
            connection.state = ConnectionState(
                status=ConnectionStatus.DISCONNECTED,
                last_connected_at=connection.state.last_connected_at,
                last_error=reason,
            )
            log = self._conn_logger(connection.descriptor)
            if log:
                log.disconnected(reason)

        return on_close

    async def _persist(self) -> None:
        """Snapshot descriptors (no status, no handles) to the store.

        Saves are serialized and each snapshot is taken under the lock.
        """
        async with self._persist_lock:
            descriptors = [c.descriptor for c in list(self._connections.values())]
            await self._store.save_connections(descriptors)
