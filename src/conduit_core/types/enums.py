"""Shared enumerations for Conduit."""

from enum import Enum


class LogLevel(str, Enum):
    """Log verbosity level."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class LogFormat(str, Enum):
    """Log output format."""

    COLORED = "colored"
    JSON = "json"


class ConnectionType(str, Enum):
    """Transport strategy used to reach a connection."""

    API = "api"
    SOCKET_PEER = "socket-peer"
    DATABASE = "database"
    LOCAL = "local"

    @classmethod
    def parse(cls, value: "str | ConnectionType") -> "ConnectionType":
        """Parse a persisted type tag.

        Older stores wrote ``websocket`` for socket peers.

        Raises:
            ValueError: If the tag is not a known connection type
        """
        if isinstance(value, cls):
            return value
        if value == "websocket":
            return cls.SOCKET_PEER
        return cls(value)


class ConnectionStatus(str, Enum):
    """Externally observable connection status."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    ERROR = "error"


class LocalDomain(str, Enum):
    """Capability domains served in-process by local connections."""

    FILESYSTEM = "filesystem"
    TERMINAL = "terminal"
    CALENDAR = "calendar"


class StorageType(str, Enum):
    """Connection store backend."""

    FILE = "file"
    MEMORY = "memory"
