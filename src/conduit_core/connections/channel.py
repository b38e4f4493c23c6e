"""Correlated request/response channel over an outbound socket peer."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from websockets.asyncio.client import ClientConnection
from websockets.exceptions import ConnectionClosed

from conduit_core.errors import create_error
from conduit_core.server.protocol import JSONRPCMessage

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 10.0


@dataclass
class PendingRequest:
    """Outstanding correlated request.

    Lives in the channel's table until the matching response arrives or
    the deadline elapses, whichever comes first.
    """

    id: str
    method: str
    tool_name: str | None
    issued_at: datetime
    deadline: float  # loop.time() based
    future: asyncio.Future[Any] = field(repr=False)


class PeerChannel:
    """Owns one socket to a remote peer.

    Writes are serialized by a lock; any number of requests may be
    outstanding at once, each under a unique id. A reader task resolves
    pending requests as responses arrive.
    """

    def __init__(
        self,
        websocket: ClientConnection,
        connection_id: str,
        on_close: Callable[[PeerChannel, str | None], None] | None = None,
    ) -> None:
        self._websocket = websocket
        self._connection_id = connection_id
        self._on_close = on_close
        self._pending: dict[str, PendingRequest] = {}
        self._send_lock = asyncio.Lock()
        self._reader: asyncio.Task[None] | None = None
        self._closed = False
        self._closing = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending_ids(self) -> list[str]:
        """Ids of requests still awaiting a response."""
        return list(self._pending.keys())

    def start(self) -> None:
        """Start the reader task."""
        if self._reader is None:
            self._reader = asyncio.create_task(
                self._read_loop(), name=f"peer-reader-{self._connection_id}"
            )

    async def request(
        self,
        method: str,
        params: dict[str, Any] | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> Any:
        """Send a correlated request and wait for its response.

        Returns:
            The response's ``result``

        Raises:
            ToolCallTimeoutError: No response before the deadline
            ConnectionUnavailableError: Socket closed before or during the call
            ToolExecutionFailedError: Peer answered with an error object
        """
        if self._closed:
            raise create_error(
                "CONNECTION_UNAVAILABLE",
                connection_id=self._connection_id,
                detail="Socket is closed",
            )

        loop = asyncio.get_running_loop()
        request_id = str(uuid.uuid4())
        while request_id in self._pending:
            request_id = str(uuid.uuid4())

        pending = PendingRequest(
            id=request_id,
            method=method,
            tool_name=(params or {}).get("toolName"),
            issued_at=datetime.now(UTC),
            deadline=loop.time() + timeout,
            future=loop.create_future(),
        )
        self._pending[request_id] = pending

        try:
            async with self._send_lock:
                await self._websocket.send(
                    JSONRPCMessage.encode(JSONRPCMessage.request(method, params, id=request_id))
                )
            remaining = max(pending.deadline - loop.time(), 0)
            return await asyncio.wait_for(pending.future, timeout=remaining)
        except TimeoutError:
            raise create_error(
                "TOOL_CALL_TIMEOUT",
                connection_id=self._connection_id,
                tool_name=pending.tool_name or method,
                timeout_seconds=timeout,
            ) from None
        except ConnectionClosed as e:
            raise create_error(
                "CONNECTION_UNAVAILABLE",
                connection_id=self._connection_id,
                detail=f"Socket closed: {e}",
            ) from e
        finally:
            # A late response must find nothing to resolve
            self._pending.pop(request_id, None)

    async def close(self) -> None:
        """Deliberately close the socket. Does not fire on_close."""
        self._closing = True
        await self._websocket.close()
        if self._reader is not None and self._reader is not asyncio.current_task():
            await self._reader
        self._fail_pending("Connection closed")
        self._closed = True

    async def _read_loop(self) -> None:
        reason: str | None = None
        try:
            async for raw in self._websocket:
                self._handle_frame(raw)
        except ConnectionClosed as e:
            reason = str(e)
        finally:
            self._closed = True
            self._fail_pending(reason or "Connection closed")
            if not self._closing:
                logger.warning(
                    f"Peer connection '{self._connection_id}' closed unexpectedly: {reason}"
                )
                if self._on_close is not None:
                    self._on_close(self, reason)

    def _handle_frame(self, raw: str | bytes) -> None:
        try:
            message = JSONRPCMessage.parse(raw)
        except ValueError:
            logger.warning(f"Ignoring non-JSON frame from '{self._connection_id}'")
            return

        if not isinstance(message, dict):
            logger.warning(f"Ignoring non-object frame from '{self._connection_id}'")
            return

        msg_id = message.get("id")
        if msg_id is None:
            logger.debug(f"Notification from '{self._connection_id}': {message.get('method')}")
            return

        if not isinstance(msg_id, str) or not JSONRPCMessage.is_response(message):
            logger.debug(f"Ignoring frame with id {msg_id!r} from '{self._connection_id}'")
            return

        pending = self._pending.pop(msg_id, None)
        if pending is None or pending.future.done():
            logger.debug(f"Ignoring response for unknown id '{msg_id}'")
            return

        if JSONRPCMessage.is_error(message):
            pending.future.set_exception(
                create_error(
                    "TOOL_EXECUTION_FAILED",
                    connection_id=self._connection_id,
                    tool_name=pending.tool_name or pending.method,
                    detail=JSONRPCMessage.error_message(message),
                )
            )
        else:
            pending.future.set_result(message.get("result"))

    def _fail_pending(self, reason: str) -> None:
        for pending in list(self._pending.values()):
            if not pending.future.done():
                pending.future.set_exception(
                    create_error(
                        "CONNECTION_UNAVAILABLE",
                        connection_id=self._connection_id,
                        detail=reason,
                    )
                )
        self._pending.clear()
