"""Persistence port for connection descriptors."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

import yaml

from .types import ConnectionDescriptor

logger = logging.getLogger(__name__)


class ConnectionStore(ABC):
    """Loads and saves descriptors. Status and transport handles are never stored."""

    @abstractmethod
    async def load_connections(self) -> list[ConnectionDescriptor]:
        """Return every stored descriptor."""

    @abstractmethod
    async def save_connections(self, descriptors: list[ConnectionDescriptor]) -> None:
        """Replace the stored set with descriptors."""


class InMemoryConnectionStore(ConnectionStore):
    """Store kept in process memory."""

    def __init__(self, descriptors: list[ConnectionDescriptor] | None = None) -> None:
        self._descriptors = list(descriptors or [])
        self.save_count = 0

    async def load_connections(self) -> list[ConnectionDescriptor]:
        return list(self._descriptors)

    async def save_connections(self, descriptors: list[ConnectionDescriptor]) -> None:
        self._descriptors = list(descriptors)
        self.save_count += 1


class YAMLConnectionStore(ConnectionStore):
    """Descriptors in a YAML file under a ``connections`` key.

    The file holds credentials, so it is written owner-read/write only.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path).expanduser()
        self._write_lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def load_connections(self) -> list[ConnectionDescriptor]:
        return await asyncio.to_thread(self._read)

    async def save_connections(self, descriptors: list[ConnectionDescriptor]) -> None:
        entries = [d.to_dict() for d in descriptors]
        async with self._write_lock:
            await asyncio.to_thread(self._write, entries)

    def _read(self) -> list[ConnectionDescriptor]:
        if not self._path.exists():
            return []

        with self._path.open() as f:
            data = yaml.safe_load(f) or {}

        entries = data.get("connections", []) if isinstance(data, dict) else []
        descriptors: list[ConnectionDescriptor] = []
        for entry in entries or []:
            try:
                descriptors.append(ConnectionDescriptor.from_dict(entry))
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                entry_id = entry.get("id") if isinstance(entry, dict) else None
                logger.error(f"Skipping invalid stored connection '{entry_id}': {e}")
        return descriptors

    def _write(self, entries: list[dict]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        # mkstemp creates the file 0o600 under a unique name
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w") as f:
                f.write("# conduit connections - generated, do not edit while running\n")
                yaml.safe_dump(
                    {"connections": entries}, f, default_flow_style=False, sort_keys=False
                )
            os.replace(tmp_name, self._path)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_name)
            raise
