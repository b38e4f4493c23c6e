"""Connection data model.

The descriptor is the persisted identity of a connection; the state is
runtime-only and owned by the ConnectionRegistry.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from conduit_core.types import ConnectionStatus, ConnectionType

# camelCase keys written by older stores
_LEGACY_KEYS = {
    "requiresAuth": "requires_auth",
    "authType": "auth_type",
    "apiKey": "api_key",
    "accessToken": "access_token",
}


def generate_connection_id() -> str:
    """Generate a unique connection ID."""
    return f"conn_{secrets.token_hex(6)}"


@dataclass(frozen=True)
class ConnectionDescriptor:
    """Identity and transport parameters of a connection.

    Attributes:
        id: Stable unique id (assigned on add when empty)
        name: Display name
        type: Transport strategy; immutable after creation
        endpoint: URI/address the transport dials
        description: Display-only
        category: Display-only grouping
        requires_auth: Whether the probe carries credentials
        auth_type: token | oauth | other provider-specific tags
        api_key: Secret for token auth (never logged)
        access_token: Secret for oauth (never logged)
        capabilities: Informational capability tags
    """

    id: str
    name: str
    type: ConnectionType
    endpoint: str
    description: str = ""
    category: str = ""
    requires_auth: bool = False
    auth_type: str | None = None
    api_key: str | None = field(default=None, repr=False)
    access_token: str | None = field(default=None, repr=False)
    capabilities: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Normalise loose inputs so equality holds across persistence
        object.__setattr__(self, "type", ConnectionType.parse(self.type))
        object.__setattr__(self, "capabilities", tuple(self.capabilities))

    def with_id(self, connection_id: str) -> ConnectionDescriptor:
        return replace(self, id=connection_id)

    def to_dict(self) -> dict[str, Any]:
        """Persisted form: descriptor fields only."""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "endpoint": self.endpoint,
            "description": self.description,
            "category": self.category,
            "requires_auth": self.requires_auth,
            "auth_type": self.auth_type,
            "api_key": self.api_key,
            "access_token": self.access_token,
            "capabilities": list(self.capabilities),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConnectionDescriptor:
        """Build a descriptor from its persisted form.

        Accepts camelCase keys and the legacy ``websocket`` type tag.

        Raises:
            KeyError: If name, type or endpoint is missing
            ValueError: If the type tag is unknown
        """
        data = {_LEGACY_KEYS.get(k, k): v for k, v in data.items()}
        return cls(
            id=data.get("id") or "",
            name=data["name"],
            type=ConnectionType.parse(data["type"]),
            endpoint=data["endpoint"],
            description=data.get("description") or "",
            category=data.get("category") or "",
            requires_auth=bool(data.get("requires_auth", False)),
            auth_type=data.get("auth_type"),
            api_key=data.get("api_key"),
            access_token=data.get("access_token"),
            capabilities=tuple(data.get("capabilities") or ()),
        )


@dataclass
class ConnectionState:
    """Runtime state of a connection. Never persisted.

    ``handle`` is the transport's live resource (e.g. a PeerChannel) and
    never leaves the registry.
    """

    status: ConnectionStatus = ConnectionStatus.DISCONNECTED
    last_connected_at: datetime | None = None
    last_error: str | None = None
    handle: Any = field(default=None, repr=False)


@dataclass
class Connection:
    """Registry entry: descriptor plus runtime state."""

    descriptor: ConnectionDescriptor
    state: ConnectionState = field(default_factory=ConnectionState)

    @property
    def id(self) -> str:
        return self.descriptor.id

    @property
    def type(self) -> ConnectionType:
        return self.descriptor.type

    @property
    def status(self) -> ConnectionStatus:
        return self.state.status

    def info(self) -> ConnectionInfo:
        d = self.descriptor
        return ConnectionInfo(
            id=d.id,
            name=d.name,
            description=d.description,
            category=d.category,
            type=d.type,
            endpoint=d.endpoint,
            status=self.state.status,
            last_connected_at=self.state.last_connected_at,
            last_error=self.state.last_error,
            capabilities=d.capabilities,
        )


@dataclass(frozen=True)
class ConnectionInfo:
    """Public projection of a connection (secrets and handle excluded)."""

    id: str
    name: str
    description: str
    category: str
    type: ConnectionType
    endpoint: str
    status: ConnectionStatus
    last_connected_at: datetime | None
    last_error: str | None
    capabilities: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "type": self.type.value,
            "endpoint": self.endpoint,
            "status": self.status.value,
            "last_connected_at": (
                self.last_connected_at.isoformat() if self.last_connected_at else None
            ),
            "last_error": self.last_error,
            "capabilities": list(self.capabilities),
        }


@dataclass
class TestResult:
    """Outcome of re-running establishment against an existing connection."""

    __test__ = False  # not a pytest class

    success: bool
    message: str
    round_trip_ms: float | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"success": self.success, "message": self.message}
        if self.round_trip_ms is not None:
            result["round_trip_ms"] = self.round_trip_ms
        return result


@dataclass
class ReconnectResult:
    """One entry of a reconnect sweep."""

    id: str
    success: bool
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"id": self.id, "success": self.success}
        if self.error is not None:
            result["error"] = self.error
        return result


@dataclass
class RegistryStats:
    """Aggregate counts over the live set."""

    total: int
    by_status: dict[str, int]
    by_type: dict[str, int]
    by_category: dict[str, int]
    server_running: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "by_status": dict(self.by_status),
            "by_type": dict(self.by_type),
            "by_category": dict(self.by_category),
            "server_running": self.server_running,
        }
