"""Transport adapters: one establishment strategy per connection type."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import UTC, datetime

import httpx
import websockets
from websockets.exceptions import WebSocketException

from conduit_core.config import TransportsConfig
from conduit_core.errors import create_error
from conduit_core.types import ConnectionStatus, ConnectionType

from .channel import PeerChannel
from .types import ConnectionDescriptor, ConnectionState

logger = logging.getLogger(__name__)

CloseCallback = Callable[[PeerChannel, str | None], None]


def _connected_state(handle: object = None) -> ConnectionState:
    return ConnectionState(
        status=ConnectionStatus.CONNECTED,
        last_connected_at=datetime.now(UTC),
        handle=handle,
    )


class Transport(ABC):
    """Brings a descriptor to the connected state."""

    @abstractmethod
    async def establish(
        self,
        descriptor: ConnectionDescriptor,
        on_close: CloseCallback | None = None,
    ) -> ConnectionState:
        """Establish a connection.

        Returns:
            A connected ConnectionState

        Raises:
            ConnectionFailedError: Establishment failed (cause chained)
        """

    async def teardown(self, state: ConnectionState) -> None:
        """Release whatever the state's handle holds."""
        return None


class ApiTransport(Transport):
    """Single bounded-timeout authenticated GET probe; 2xx means connected."""

    def __init__(
        self,
        timeout: float = 5.0,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._http_transport = http_transport

    @staticmethod
    def auth_headers(descriptor: ConnectionDescriptor) -> dict[str, str]:
        if not descriptor.requires_auth:
            return {}
        if descriptor.auth_type == "token" and descriptor.api_key:
            return {"Authorization": f"Bearer {descriptor.api_key}"}
        if descriptor.auth_type == "oauth" and descriptor.access_token:
            return {"Authorization": f"Bearer {descriptor.access_token}"}
        return {}

    async def establish(
        self,
        descriptor: ConnectionDescriptor,
        on_close: CloseCallback | None = None,
    ) -> ConnectionState:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._http_transport
            ) as client:
                response = await client.get(
                    descriptor.endpoint, headers=self.auth_headers(descriptor)
                )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise create_error(
                "CONNECTION_FAILED",
                connection_id=descriptor.id,
                detail=f"API connection failed: {e}",
            ) from e

        if not response.is_success:
            raise create_error(
                "CONNECTION_FAILED",
                connection_id=descriptor.id,
                detail=f"API probe returned HTTP {response.status_code}",
            )

        return _connected_state()


class SocketPeerTransport(Transport):
    """Persistent socket to a remote protocol server."""

    def __init__(self, connect_timeout: float = 5.0) -> None:
        self._connect_timeout = connect_timeout

    async def establish(
        self,
        descriptor: ConnectionDescriptor,
        on_close: CloseCallback | None = None,
    ) -> ConnectionState:
        try:
            websocket = await websockets.connect(
                descriptor.endpoint, open_timeout=self._connect_timeout
            )
        except TimeoutError as e:
            raise create_error(
                "CONNECTION_FAILED",
                connection_id=descriptor.id,
                detail=f"Socket connection timed out after {self._connect_timeout}s",
            ) from e
        except (OSError, WebSocketException) as e:
            raise create_error(
                "CONNECTION_FAILED",
                connection_id=descriptor.id,
                detail=f"Socket connection failed: {e}",
            ) from e

        channel = PeerChannel(websocket, descriptor.id, on_close=on_close)
        channel.start()
        return _connected_state(handle=channel)

    async def teardown(self, state: ConnectionState) -> None:
        if isinstance(state.handle, PeerChannel):
            await state.handle.close()


class DatabaseTransport(Transport):
    """Placeholder: marks connected without dialling anything.

    Kept for compatibility with persisted database connections; no driver
    is wired in.
    """

    async def establish(
        self,
        descriptor: ConnectionDescriptor,
        on_close: CloseCallback | None = None,
    ) -> ConnectionState:
        logger.warning(
            f"Database connection '{descriptor.id}' marked connected without dialling "
            f"(placeholder transport)"
        )
        return _connected_state()


class LocalTransport(Transport):
    """In-process capabilities are always available."""

    async def establish(
        self,
        descriptor: ConnectionDescriptor,
        on_close: CloseCallback | None = None,
    ) -> ConnectionState:
        return _connected_state()


def default_transports(config: TransportsConfig | None = None) -> dict[ConnectionType, Transport]:
    """One transport per connection type, configured from the transports section."""
    config = config or TransportsConfig()
    return {
        ConnectionType.API: ApiTransport(timeout=config.api_probe_timeout),
        ConnectionType.SOCKET_PEER: SocketPeerTransport(
            connect_timeout=config.socket_connect_timeout
        ),
        ConnectionType.DATABASE: DatabaseTransport(),
        ConnectionType.LOCAL: LocalTransport(),
    }
