"""Conduit Core - connection manager and tool bridge.

Keeps a registry of live connections to external systems, routes tool
calls through them, and exposes local tools to remote peers over an
embedded JSON-RPC WebSocket server.
"""

from conduit_core.application import ConduitApplication

__version__ = "1.0.0"
__all__ = ["__version__", "ConduitApplication"]
