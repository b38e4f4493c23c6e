"""Unit tests for PeerChannel request/response correlation."""

import asyncio

import pytest
import websockets

from conduit_core.connections import PeerChannel
from conduit_core.errors import (
    ConnectionUnavailableError,
    ToolCallTimeoutError,
    ToolExecutionFailedError,
)
from tests.mocks import MockPeerError, ScriptedPeerServer


async def _open_channel(remote: ScriptedPeerServer, on_close=None) -> PeerChannel:
    websocket = await websockets.connect(remote.url)
    channel = PeerChannel(websocket, "peer-1", on_close=on_close)
    channel.start()
    return channel


class TestRequest:
    @pytest.mark.asyncio
    async def test_result_delivered(self):
        async with ScriptedPeerServer({"echo": lambda params: {"echo": params}}) as remote:
            channel = await _open_channel(remote)
            try:
                assert await channel.request("echo", {"a": 1}, timeout=2.0) == {"echo": {"a": 1}}
                assert channel.pending_ids == []
            finally:
                await channel.close()

    @pytest.mark.asyncio
    async def test_envelope_sent(self):
        async with ScriptedPeerServer({"ping": lambda params: {"pong": True}}) as remote:
            channel = await _open_channel(remote)
            try:
                await channel.request("ping", {}, timeout=2.0)
            finally:
                await channel.close()
            (sent,) = remote.received
            assert sent["jsonrpc"] == "2.0"
            assert sent["method"] == "ping"
            assert isinstance(sent["id"], str) and sent["id"]

    @pytest.mark.asyncio
    async def test_out_of_order_responses(self):
        async def slow(params):
            await asyncio.sleep(0.3)
            return "slow"

        async def fast(params):
            return "fast"

        async with ScriptedPeerServer({"slow": slow, "fast": fast}) as remote:
            channel = await _open_channel(remote)
            try:
                results = await asyncio.gather(
                    channel.request("slow", timeout=2.0),
                    channel.request("fast", timeout=2.0),
                )
                assert results == ["slow", "fast"]
                ids = [m["id"] for m in remote.received]
                assert len(set(ids)) == 2
            finally:
                await channel.close()

    @pytest.mark.asyncio
    async def test_error_response(self):
        def fail(params):
            raise MockPeerError("Tool not found")

        async with ScriptedPeerServer({"tools/call": fail}) as remote:
            channel = await _open_channel(remote)
            try:
                with pytest.raises(ToolExecutionFailedError) as exc_info:
                    await channel.request("tools/call", {"toolName": "nope"}, timeout=2.0)
                assert exc_info.value.detail == "Tool not found"
                assert exc_info.value.tool_name == "nope"
            finally:
                await channel.close()

    @pytest.mark.asyncio
    async def test_timeout_clears_pending(self):
        async with ScriptedPeerServer() as remote:  # never answers
            channel = await _open_channel(remote)
            try:
                with pytest.raises(ToolCallTimeoutError) as exc_info:
                    await channel.request("tools/call", {"toolName": "hang"}, timeout=0.2)
                assert exc_info.value.tool_name == "hang"
                assert exc_info.value.connection_id == "peer-1"
                assert channel.pending_ids == []
            finally:
                await channel.close()

    @pytest.mark.asyncio
    async def test_late_response_ignored(self):
        async def late(params):
            await asyncio.sleep(0.4)
            return "late"

        async with ScriptedPeerServer({"late": late, "ok": lambda p: "ok"}) as remote:
            channel = await _open_channel(remote)
            try:
                with pytest.raises(ToolCallTimeoutError):
                    await channel.request("late", timeout=0.1)
                await asyncio.sleep(0.5)
                # Channel still usable after the late frame arrives
                assert await channel.request("ok", timeout=2.0) == "ok"
            finally:
                await channel.close()


class TestFrames:
    @pytest.mark.asyncio
    async def test_garbage_frames_ignored(self):
        async with ScriptedPeerServer({"ok": lambda p: "ok"}) as remote:
            channel = await _open_channel(remote)
            try:
                await remote.send_raw("not json")
                await remote.send_raw("[1, 2]")
                await remote.send_raw('{"jsonrpc": "2.0", "method": "server/connected"}')
                await remote.send_raw('{"jsonrpc": "2.0", "id": "unknown", "result": 1}')
                assert await channel.request("ok", timeout=2.0) == "ok"
                assert not channel.closed
            finally:
                await channel.close()


class TestClose:
    @pytest.mark.asyncio
    async def test_remote_close_fails_pending_and_notifies(self):
        closed: list[str | None] = []

        async with ScriptedPeerServer() as remote:
            channel = await _open_channel(remote, on_close=lambda ch, reason: closed.append(reason))
            request = asyncio.create_task(channel.request("hang", timeout=5.0))
            await asyncio.sleep(0.1)
            await remote.drop_clients()

            with pytest.raises(ConnectionUnavailableError):
                await request
            await asyncio.sleep(0.1)
            assert channel.closed
            assert len(closed) == 1

    @pytest.mark.asyncio
    async def test_deliberate_close_does_not_notify(self):
        closed: list[str | None] = []

        async with ScriptedPeerServer() as remote:
            channel = await _open_channel(remote, on_close=lambda ch, reason: closed.append(reason))
            await channel.close()
            assert channel.closed
            assert closed == []

    @pytest.mark.asyncio
    async def test_request_after_close(self):
        async with ScriptedPeerServer() as remote:
            channel = await _open_channel(remote)
            await channel.close()
            with pytest.raises(ConnectionUnavailableError):
                await channel.request("ping", timeout=1.0)
