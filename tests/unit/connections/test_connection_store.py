"""Unit tests for connection stores."""

import asyncio
import stat
import sys
from pathlib import Path

import pytest
import yaml

from conduit_core.connections import (
    ConnectionDescriptor,
    InMemoryConnectionStore,
    YAMLConnectionStore,
)
from conduit_core.types import ConnectionType


def _descriptors() -> list[ConnectionDescriptor]:
    return [
        ConnectionDescriptor(
            id="gh",
            name="GitHub",
            type=ConnectionType.API,
            endpoint="https://api.github.com",
            requires_auth=True,
            auth_type="token",
            api_key="ghp_x",
        ),
        ConnectionDescriptor(
            id="peer", name="Peer", type=ConnectionType.SOCKET_PEER, endpoint="ws://h:1"
        ),
    ]


class TestInMemoryStore:
    @pytest.mark.asyncio
    async def test_save_and_load(self):
        store = InMemoryConnectionStore()
        await store.save_connections(_descriptors())
        assert await store.load_connections() == _descriptors()
        assert store.save_count == 1

    @pytest.mark.asyncio
    async def test_initial_descriptors(self):
        store = InMemoryConnectionStore(_descriptors())
        assert len(await store.load_connections()) == 2


class TestYAMLStore:
    @pytest.mark.asyncio
    async def test_missing_file_loads_empty(self, tmp_path: Path):
        assert await YAMLConnectionStore(tmp_path / "none.yaml").load_connections() == []

    @pytest.mark.asyncio
    async def test_round_trip(self, tmp_path: Path):
        store = YAMLConnectionStore(tmp_path / "nested" / "connections.yaml")
        await store.save_connections(_descriptors())
        assert await store.load_connections() == _descriptors()

    @pytest.mark.asyncio
    async def test_file_format(self, tmp_path: Path):
        path = tmp_path / "connections.yaml"
        await YAMLConnectionStore(path).save_connections(_descriptors())
        data = yaml.safe_load(path.read_text())
        assert [entry["id"] for entry in data["connections"]] == ["gh", "peer"]
        assert data["connections"][1]["type"] == "socket-peer"
        assert "status" not in data["connections"][0]

    @pytest.mark.asyncio
    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    async def test_file_is_private(self, tmp_path: Path):
        path = tmp_path / "connections.yaml"
        await YAMLConnectionStore(path).save_connections(_descriptors())
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    @pytest.mark.asyncio
    async def test_overwrite_replaces(self, tmp_path: Path):
        store = YAMLConnectionStore(tmp_path / "connections.yaml")
        await store.save_connections(_descriptors())
        await store.save_connections(_descriptors()[:1])
        assert [d.id for d in await store.load_connections()] == ["gh"]

    @pytest.mark.asyncio
    async def test_concurrent_saves_land_in_order(self, tmp_path: Path):
        store = YAMLConnectionStore(tmp_path / "connections.yaml")
        descriptors = _descriptors()
        snapshots = [descriptors[: i % 2 + 1] for i in range(20)]

        await asyncio.gather(*(store.save_connections(s) for s in snapshots))

        assert [d.id for d in await store.load_connections()] == [d.id for d in snapshots[-1]]
        assert [p.name for p in tmp_path.iterdir()] == ["connections.yaml"]

    @pytest.mark.asyncio
    async def test_legacy_entries(self, tmp_path: Path):
        path = tmp_path / "connections.yaml"
        path.write_text(
            "connections:\n"
            "  - id: old\n"
            "    name: Old Peer\n"
            "    type: websocket\n"
            "    endpoint: ws://localhost:3001\n"
            "    requiresAuth: false\n"
        )
        (descriptor,) = await YAMLConnectionStore(path).load_connections()
        assert descriptor.type is ConnectionType.SOCKET_PEER

    @pytest.mark.asyncio
    async def test_invalid_entries_skipped(self, tmp_path: Path):
        path = tmp_path / "connections.yaml"
        path.write_text(
            "connections:\n"
            "  - id: bad\n"
            "    name: Bad\n"
            "    type: telepathy\n"
            "    endpoint: x\n"
            "  - id: incomplete\n"
            "  - id: good\n"
            "    name: Good\n"
            "    type: local\n"
            "    endpoint: local://filesystem\n"
        )
        descriptors = await YAMLConnectionStore(path).load_connections()
        assert [d.id for d in descriptors] == ["good"]

    def test_path_expands_home(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert YAMLConnectionStore("~/c.yaml").path == tmp_path / "c.yaml"
