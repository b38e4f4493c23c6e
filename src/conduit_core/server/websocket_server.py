"""WebSocket Server for Peer Connections.

Implements the inbound side of the peer protocol. Remote peers connect,
receive a ``server/connected`` welcome and then issue JSON-RPC requests:
- tools/list
- tools/call
- connection/info
- ping

Malformed messages are answered with an error (or dropped when they carry
no id); the socket stays open either way.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import websockets
from websockets.asyncio.server import Server, ServerConnection
from websockets.exceptions import ConnectionClosed

from conduit_core.tools import ToolDescriptor, ToolRegistry
from conduit_core.types import LocalDomain

from .protocol import (
    ERROR_CODE,
    JSONRPC_VERSION,
    METHOD_CONNECTION_INFO,
    METHOD_PING,
    METHOD_TOOLS_CALL,
    METHOD_TOOLS_LIST,
    NOTIFICATION_CONNECTED,
    JSONRPCMessage,
)

if TYPE_CHECKING:
    from conduit_core.logging import ConduitLogger
    from conduit_core.telemetry import ConduitMetrics

logger = logging.getLogger(__name__)

DEFAULT_DOMAIN = LocalDomain.FILESYSTEM.value

CAPABILITIES = {"tools": True, "resources": False, "prompts": False}


@dataclass
class PeerClient:
    """Active inbound peer."""

    id: str
    websocket: ServerConnection = field(repr=False)
    connected_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    remote_address: str | None = None
    send_lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    async def send(self, message: dict[str, Any]) -> None:
        """Write one frame. Frames from concurrent handlers never interleave."""
        async with self.send_lock:
            await self.websocket.send(JSONRPCMessage.encode(message))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "connected_at": self.connected_at.isoformat(),
            "remote_address": self.remote_address,
        }


class ProtocolServer:
    """WebSocket server exposing the local tool registry to remote peers.

    Every message is handled independently; a bad message never closes
    the peer's socket.
    """

    def __init__(
        self,
        tools: ToolRegistry,
        host: str = "127.0.0.1",
        port: int = 3001,
        name: str = "Conduit Protocol Server",
        version: str = "1.0.0",
        conduit_logger: ConduitLogger | None = None,
    ) -> None:
        """Initialize the server.

        Args:
            tools: Registry answering tools/list and tools/call
            host: Host to bind to
            port: Port to listen on (0 picks a free port)
            name: Server name reported to peers
            version: Server version reported by connection/info
            conduit_logger: Structured logger for lifecycle events
        """
        self._tools = tools
        self._host = host
        self._port = port
        self._name = name
        self._version = version
        self._conduit_logger = conduit_logger
        self._metrics: ConduitMetrics | None = None
        self._peers: dict[str, PeerClient] = {}
        self._server: Server | None = None
        self._running = False

        # Request handlers
        self._handlers: dict[str, Callable[[dict[str, Any]], Awaitable[Any]]] = {
            METHOD_TOOLS_LIST: self._handle_tools_list,
            METHOD_TOOLS_CALL: self._handle_tools_call,
            METHOD_CONNECTION_INFO: self._handle_connection_info,
            METHOD_PING: self._handle_ping,
        }

    def set_metrics(self, metrics: ConduitMetrics | None) -> None:
        self._metrics = metrics

    @property
    def running(self) -> bool:
        return self._running

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int:
        """Bound port once started, configured port otherwise."""
        if self._server is not None:
            for sock in self._server.sockets:
                return sock.getsockname()[1]
        return self._port

    @property
    def url(self) -> str:
        return f"ws://{self._host}:{self.port}"

    async def start(self) -> None:
        """Start the WebSocket server."""
        if self._running:
            return
        self._server = await websockets.serve(
            self._handle_connection,
            self._host,
            self._port,
        )
        self._running = True
        logger.info(f"Protocol server started on {self.url}")
        if self._conduit_logger:
            self._conduit_logger.info("server", "Protocol server started", {"url": self.url})

    async def stop(self) -> None:
        """Stop the server and drop every peer."""
        if not self._running:
            return
        self._running = False
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
            self._server = None
        self._peers.clear()

        logger.info("Protocol server stopped")
        if self._conduit_logger:
            self._conduit_logger.info("server", "Protocol server stopped")

    def register_tool(self, domain: str, name: str, descriptor: ToolDescriptor) -> None:
        """Expose an additional tool to peers."""
        self._tools.register(domain, name, descriptor)

    def get_connected_peers(self) -> list[dict[str, Any]]:
        return [peer.to_dict() for peer in self._peers.values()]

    async def send_to(self, peer_id: str, message: dict[str, Any]) -> bool:
        """Send a message to one peer.

        Returns:
            True if the message was written
        """
        peer = self._peers.get(peer_id)
        if peer is None:
            return False
        try:
            await peer.send(message)
        except ConnectionClosed:
            return False
        return True

    async def broadcast(self, message: dict[str, Any]) -> int:
        """Send a message to every connected peer.

        Returns:
            Number of peers the message reached
        """
        peer_ids = list(self._peers.keys())
        results = await asyncio.gather(*(self.send_to(pid, message) for pid in peer_ids))
        return sum(1 for delivered in results if delivered)

    # ── connection handling ────────────────────────────────────────

    async def _handle_connection(self, websocket: ServerConnection) -> None:
        """Handle a new WebSocket connection."""
        peer = PeerClient(
            id=str(uuid.uuid4()),
            websocket=websocket,
            remote_address=_format_address(websocket.remote_address),
        )
        self._peers[peer.id] = peer
        if self._metrics:
            self._metrics.peer_connected()
        logger.info(f"Peer {peer.id} connected from {peer.remote_address}")

        # One task per message; unfinished ones are cancelled when the peer leaves
        in_flight: set[asyncio.Task[None]] = set()
        try:
            await self._send_notification(
                peer,
                NOTIFICATION_CONNECTED,
                {"server": self._name, "client_id": peer.id, "capabilities": dict(CAPABILITIES)},
            )
            async for message in websocket:
                task = asyncio.create_task(self._dispatch(peer, message))
                in_flight.add(task)
                task.add_done_callback(in_flight.discard)
        except ConnectionClosed:
            pass
        finally:
            for task in in_flight:
                task.cancel()
            if in_flight:
                await asyncio.gather(*in_flight, return_exceptions=True)
            self._peers.pop(peer.id, None)
            if self._metrics:
                self._metrics.peer_disconnected()
            logger.info(f"Peer {peer.id} disconnected")

    async def _dispatch(self, peer: PeerClient, raw: str | bytes) -> None:
        try:
            await self._process_message(peer, raw)
        except ConnectionClosed:
            logger.debug(f"Peer {peer.id} closed before its reply was sent")

    async def _process_message(self, peer: PeerClient, raw: str | bytes) -> None:
        """Process one JSON-RPC message."""
        try:
            data = JSONRPCMessage.parse(raw)
        except ValueError:
            await self._send_error(peer, None, "Parse error")
            return

        if not isinstance(data, dict):
            await self._send_error(peer, None, "Invalid request")
            return

        msg_id = data.get("id")
        method = data.get("method")

        if data.get("jsonrpc") != JSONRPC_VERSION:
            await self._reject(peer, msg_id, "Invalid JSON-RPC version")
            return
        if not isinstance(method, str) or not method:
            await self._reject(peer, msg_id, "Missing method")
            return

        handler = self._handlers.get(method)
        if handler is None:
            await self._reject(peer, msg_id, f"Unknown method: {method}")
            return

        params = data.get("params")
        if params is None:
            params = {}
        if not isinstance(params, dict):
            await self._reject(peer, msg_id, "params must be an object")
            return

        try:
            result = await handler(params)
        except Exception as e:
            logger.warning(f"Handler for '{method}' failed: {e}")
            await self._reject(peer, msg_id, str(e))
            return

        if msg_id is not None:
            await self._send_response(peer, msg_id, result)

    async def _reject(self, peer: PeerClient, msg_id: Any, message: str) -> None:
        # Notifications never get a reply
        if msg_id is None:
            logger.debug(f"Dropping notification: {message}")
            return
        await self._send_error(peer, msg_id, message)

    # ── request handlers ───────────────────────────────────────────

    async def _handle_tools_list(self, params: dict[str, Any]) -> dict[str, Any]:
        domain = params.get("domain") or DEFAULT_DOMAIN
        return {"tools": self._tools.list_for_domain(domain)}

    async def _handle_tools_call(self, params: dict[str, Any]) -> Any:
        domain = params.get("domain") or DEFAULT_DOMAIN
        tool_name = params.get("toolName")
        if not tool_name:
            raise ValueError("toolName is required")
        arguments = params.get("arguments") or {}
        return await self._tools.execute(domain, tool_name, arguments)

    async def _handle_connection_info(self, params: dict[str, Any]) -> dict[str, Any]:
        return {
            "server": self._name,
            "version": self._version,
            "capabilities": dict(CAPABILITIES),
            "available_connections": self._tools.domains(),
        }

    async def _handle_ping(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"pong": True, "timestamp": datetime.now(UTC).isoformat()}

    # ── senders ────────────────────────────────────────────────────

    async def _send_response(self, peer: PeerClient, msg_id: Any, result: Any) -> None:
        """Send a JSON-RPC response."""
        await peer.send(JSONRPCMessage.success_response(msg_id, result))

    async def _send_error(
        self,
        peer: PeerClient,
        msg_id: Any,
        message: str,
        code: int = ERROR_CODE,
    ) -> None:
        """Send a JSON-RPC error response."""
        await peer.send(JSONRPCMessage.error_response(msg_id, message, code))

    async def _send_notification(
        self,
        peer: PeerClient,
        method: str,
        params: dict[str, Any],
    ) -> None:
        """Send a JSON-RPC notification (no id)."""
        await peer.send(JSONRPCMessage.notification(method, params))


def _format_address(address: Any) -> str | None:
    if isinstance(address, tuple) and len(address) >= 2:
        return f"{address[0]}:{address[1]}"
    return str(address) if address else None
