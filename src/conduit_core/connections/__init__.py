"""Conduit Connections - registry, transports and tool routing."""

from .catalog import CONNECTION_CATALOG, get_template
from .channel import PeerChannel, PendingRequest
from .registry import ConnectionRegistry
from .router import ToolExecutionRouter, domain_for_endpoint
from .store import ConnectionStore, InMemoryConnectionStore, YAMLConnectionStore
from .transports import (
    ApiTransport,
    DatabaseTransport,
    LocalTransport,
    SocketPeerTransport,
    Transport,
    default_transports,
)
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

__all__ = [
    # Types
    "ConnectionDescriptor",
    "ConnectionState",
    "ConnectionInfo",
    "Connection",
    "TestResult",
    "ReconnectResult",
    "RegistryStats",
    "generate_connection_id",
    # Catalog
    "CONNECTION_CATALOG",
    "get_template",
    # Transports
    "Transport",
    "ApiTransport",
    "SocketPeerTransport",
    "DatabaseTransport",
    "LocalTransport",
    "default_transports",
    "PeerChannel",
    "PendingRequest",
    # Persistence
    "ConnectionStore",
    "YAMLConnectionStore",
    "InMemoryConnectionStore",
    # Registry / routing
    "ConnectionRegistry",
    "ToolExecutionRouter",
    "domain_for_endpoint",
]
