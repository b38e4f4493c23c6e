"""Unit tests for transport adapters."""

import httpx
import pytest

from conduit_core.config import TransportsConfig
from conduit_core.connections import (
    ApiTransport,
    ConnectionDescriptor,
    DatabaseTransport,
    LocalTransport,
    PeerChannel,
    SocketPeerTransport,
    default_transports,
)
from conduit_core.errors import ConnectionFailedError
from conduit_core.types import ConnectionStatus, ConnectionType
from tests.mocks import ScriptedPeerServer


def _api(**kwargs) -> ConnectionDescriptor:
    return ConnectionDescriptor(
        id="gh", name="GitHub", type=ConnectionType.API, endpoint="https://api.example.com/user", **kwargs
    )


class TestApiTransport:
    def test_auth_headers(self):
        assert ApiTransport.auth_headers(_api()) == {}
        assert ApiTransport.auth_headers(
            _api(requires_auth=True, auth_type="token", api_key="k")
        ) == {"Authorization": "Bearer k"}
        assert ApiTransport.auth_headers(
            _api(requires_auth=True, auth_type="oauth", access_token="t")
        ) == {"Authorization": "Bearer t"}
        assert ApiTransport.auth_headers(_api(requires_auth=True, auth_type="token")) == {}

    @pytest.mark.asyncio
    async def test_success_probe(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"login": "octocat"})

        transport = ApiTransport(http_transport=httpx.MockTransport(handler))
        state = await transport.establish(_api(requires_auth=True, auth_type="token", api_key="k"))

        assert state.status == ConnectionStatus.CONNECTED
        assert state.last_connected_at is not None
        assert seen[0].method == "GET"
        assert seen[0].headers["Authorization"] == "Bearer k"

    @pytest.mark.asyncio
    async def test_non_2xx_fails(self):
        transport = ApiTransport(
            http_transport=httpx.MockTransport(lambda request: httpx.Response(401))
        )
        with pytest.raises(ConnectionFailedError) as exc_info:
            await transport.establish(_api())
        assert "401" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_network_error_fails_with_cause(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        transport = ApiTransport(http_transport=httpx.MockTransport(handler))
        with pytest.raises(ConnectionFailedError) as exc_info:
            await transport.establish(_api())
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_invalid_url_fails(self):
        descriptor = ConnectionDescriptor(id="x", name="X", type="api", endpoint="not a url")
        with pytest.raises(ConnectionFailedError):
            await ApiTransport(timeout=0.5).establish(descriptor)


class TestSocketPeerTransport:
    @pytest.mark.asyncio
    async def test_establish_and_teardown(self):
        async with ScriptedPeerServer() as remote:
            descriptor = ConnectionDescriptor(
                id="peer", name="Peer", type="socket-peer", endpoint=remote.url
            )
            transport = SocketPeerTransport(connect_timeout=2.0)
            state = await transport.establish(descriptor)

            assert state.status == ConnectionStatus.CONNECTED
            assert isinstance(state.handle, PeerChannel)

            await transport.teardown(state)
            assert state.handle.closed

    @pytest.mark.asyncio
    async def test_refused(self):
        descriptor = ConnectionDescriptor(
            id="peer", name="Peer", type="socket-peer", endpoint="ws://127.0.0.1:1"
        )
        with pytest.raises(ConnectionFailedError) as exc_info:
            await SocketPeerTransport(connect_timeout=2.0).establish(descriptor)
        assert exc_info.value.connection_id == "peer"
        assert exc_info.value.__cause__ is not None

    @pytest.mark.asyncio
    async def test_bad_uri(self):
        descriptor = ConnectionDescriptor(
            id="peer", name="Peer", type="socket-peer", endpoint="http://not-a-socket"
        )
        with pytest.raises(ConnectionFailedError):
            await SocketPeerTransport(connect_timeout=1.0).establish(descriptor)


class TestOtherTransports:
    @pytest.mark.asyncio
    async def test_local_always_connected(self):
        descriptor = ConnectionDescriptor(id="l", name="L", type="local", endpoint="local://terminal")
        state = await LocalTransport().establish(descriptor)
        assert state.status == ConnectionStatus.CONNECTED
        assert state.handle is None

    @pytest.mark.asyncio
    async def test_database_placeholder(self):
        descriptor = ConnectionDescriptor(id="db", name="DB", type="database", endpoint="postgresql://h")
        state = await DatabaseTransport().establish(descriptor)
        assert state.status == ConnectionStatus.CONNECTED

    def test_default_transports_cover_every_type(self):
        transports = default_transports(TransportsConfig(api_probe_timeout=1.0))
        assert set(transports) == set(ConnectionType)
        assert transports[ConnectionType.API]._timeout == 1.0
