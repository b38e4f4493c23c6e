"""Test mocks for conduit-core.

Provides mock implementations for testing:
- MockPeer: Simulates a remote peer connecting to the protocol server
- ScriptedPeerServer: Simulates a remote protocol server for socket-peer connections
"""

from .mock_peer import MockPeer, MockPeerError, ScriptedPeerServer

__all__ = ["MockPeer", "MockPeerError", "ScriptedPeerServer"]
