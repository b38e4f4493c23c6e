"""Conduit configuration data models."""

from dataclasses import dataclass, field

from conduit_core.types import LogFormat, LogLevel, StorageType


@dataclass
class ServerConfig:
    """Embedded protocol server configuration."""

    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 3001  # 0 = pick a free port
    name: str = "Conduit Protocol Server"
    version: str = "1.0.0"


@dataclass
class TransportsConfig:
    """Transport timeouts, in seconds."""

    api_probe_timeout: float = 5.0
    socket_connect_timeout: float = 5.0
    tool_call_timeout: float = 10.0


@dataclass
class StorageConfig:
    """Where connection descriptors are persisted."""

    type: StorageType = StorageType.FILE
    path: str = "~/.conduit/connections.yaml"


@dataclass
class LoggingComponentsConfig:
    """Per-component logging switches."""

    connection: bool = True
    tool: bool = True
    registry: bool = True
    server: bool = True


@dataclass
class LoggingOptionsConfig:
    show_params: bool = True
    show_results: bool = True
    truncate_at: int = 200


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.COLORED
    components: LoggingComponentsConfig = field(default_factory=LoggingComponentsConfig)
    options: LoggingOptionsConfig = field(default_factory=LoggingOptionsConfig)


@dataclass
class TelemetryConfig:
    """Telemetry configuration."""

    enabled: bool = True
    service_name: str = "conduit"


@dataclass
class ConduitConfig:
    """Root configuration."""

    server: ServerConfig = field(default_factory=ServerConfig)
    transports: TransportsConfig = field(default_factory=TransportsConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
