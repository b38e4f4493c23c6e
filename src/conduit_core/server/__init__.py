"""Conduit Protocol Server - inbound peer endpoint."""

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
from .websocket_server import PeerClient, ProtocolServer

__all__ = [
    "JSONRPCMessage",
    "JSONRPC_VERSION",
    "ERROR_CODE",
    "METHOD_TOOLS_LIST",
    "METHOD_TOOLS_CALL",
    "METHOD_CONNECTION_INFO",
    "METHOD_PING",
    "NOTIFICATION_CONNECTED",
    "PeerClient",
    "ProtocolServer",
]
