"""Test doubles for the peer protocol.

- MockPeer: client that connects to a ProtocolServer the way a remote peer would
- ScriptedPeerServer: remote protocol server with per-method scripted replies,
  used as the far end of socket-peer connections
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import websockets
from websockets.asyncio.server import Server, ServerConnection
from websockets.exceptions import ConnectionClosed

logger = logging.getLogger(__name__)

# method params -> result; raising MockPeerError produces an error reply
Responder = Callable[[dict[str, Any]], Any | Awaitable[Any]]


class MockPeer:
    """Test client that simulates a remote peer.

    Example:
        async with MockPeer(server.url) as peer:
            welcome = await peer.receive()
            assert welcome["method"] == "server/connected"

            response = await peer.request("ping")
            assert response["result"]["pong"] is True
    """

    def __init__(self, url: str):
        self.url = url
        self.ws: Any | None = None
        self._message_id = 0

    def _next_id(self) -> int:
        self._message_id += 1
        return self._message_id

    async def connect(self) -> None:
        logger.info(f"MockPeer connecting to {self.url}")
        self.ws = await websockets.connect(self.url)

    async def disconnect(self) -> None:
        if self.ws:
            await self.ws.close()
            self.ws = None

    async def __aenter__(self) -> MockPeer:
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()

    async def send(self, message: dict) -> None:
        """Send a JSON message."""
        await self.send_raw(json.dumps(message))

    async def send_raw(self, data: str) -> None:
        if not self.ws:
            raise RuntimeError("Not connected")
        await self.ws.send(data)

    async def receive(self, timeout: float = 5.0) -> Any:
        """Receive a JSON message."""
        if not self.ws:
            raise RuntimeError("Not connected")
        data = await asyncio.wait_for(self.ws.recv(), timeout)
        return json.loads(data)

    async def receive_welcome(self) -> dict:
        msg = await self.receive()
        if msg.get("method") != "server/connected":
            raise ValueError(f"Expected server/connected, got {msg.get('method')}")
        return msg["params"]

    async def request(self, method: str, params: dict | None = None) -> dict:
        """Send a request and return the matching response."""
        msg_id = self._next_id()
        message: dict[str, Any] = {"jsonrpc": "2.0", "id": msg_id, "method": method}
        if params is not None:
            message["params"] = params
        await self.send(message)
        return await self.receive()


class MockPeerError(Exception):
    """Raised by a responder to make the server answer with an error object."""


class ScriptedPeerServer:
    """Minimal remote protocol server with scripted replies.

    Methods without a responder are never answered, which lets tests
    exercise request deadlines.
    """

    def __init__(self, responders: dict[str, Responder] | None = None):
        self.responders: dict[str, Responder] = dict(responders or {})
        self.received: list[dict] = []
        self.connections: list[ServerConnection] = []
        self._server: Server | None = None

    @property
    def url(self) -> str:
        assert self._server is not None
        port = self._server.sockets[0].getsockname()[1]
        return f"ws://127.0.0.1:{port}"

    async def start(self) -> None:
        self._server = await websockets.serve(self._handle, "127.0.0.1", 0)

    async def stop(self) -> None:
        if self._server:
            self._server.close()
            await self._server.wait_closed()
            self._server = None

    async def __aenter__(self) -> ScriptedPeerServer:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()

    async def drop_clients(self) -> None:
        """Close every client socket from the server side."""
        for ws in list(self.connections):
            await ws.close()

    async def send_raw(self, data: str) -> None:
        """Push a raw frame to every client."""
        for ws in list(self.connections):
            await ws.send(data)

    async def _handle(self, websocket: ServerConnection) -> None:
        self.connections.append(websocket)
        try:
            async for raw in websocket:
                message = json.loads(raw)
                self.received.append(message)
                asyncio.create_task(self._reply(websocket, message))
        except ConnectionClosed:
            pass
        finally:
            self.connections.remove(websocket)

    async def _reply(self, websocket: ServerConnection, message: dict) -> None:
        responder = self.responders.get(message.get("method", ""))
        if responder is None or "id" not in message:
            return

        reply: dict[str, Any] = {"jsonrpc": "2.0", "id": message["id"]}
        try:
            result = responder(message.get("params") or {})
            if asyncio.iscoroutine(result):
                result = await result
            reply["result"] = result
        except MockPeerError as e:
            reply["error"] = {"code": -1, "message": str(e)}

        try:
            await websocket.send(json.dumps(reply))
        except ConnectionClosed:
            pass
