"""Conduit Configuration - Config loading and management."""

from .loader import (
    ConfigLoader,
    deep_merge,
    get_config_loader,
    load_config,
    resolve_env_vars,
)
from .models import (
    ConduitConfig,
    LoggingComponentsConfig,
    LoggingConfig,
    LoggingOptionsConfig,
    ServerConfig,
    StorageConfig,
    TelemetryConfig,
    TransportsConfig,
)

__all__ = [
    # Config models
    "ConduitConfig",
    "ServerConfig",
    "TransportsConfig",
    "StorageConfig",
    "LoggingConfig",
    "LoggingComponentsConfig",
    "LoggingOptionsConfig",
    "TelemetryConfig",
    # Loader
    "ConfigLoader",
    "get_config_loader",
    "load_config",
    "resolve_env_vars",
    "deep_merge",
]
