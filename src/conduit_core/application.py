"""Conduit Application - orchestrator for all components.

This is the main application class that initializes and wires all
components together: the tool registry, the connection registry with
its transports and persistence, the execution router and the embedded
protocol server.
"""

import sys
from pathlib import Path
from typing import TextIO

from conduit_core.config import ConduitConfig, ConfigLoader
from conduit_core.connections import (
    ConnectionRegistry,
    ConnectionStore,
    InMemoryConnectionStore,
    ToolExecutionRouter,
    YAMLConnectionStore,
    default_transports,
)
from conduit_core.errors import ErrorFactory, ErrorRegistry
from conduit_core.logging import ConduitLogger, LogConfig
from conduit_core.server import ProtocolServer
from conduit_core.telemetry import ConduitMetrics, setup_telemetry
from conduit_core.tools import ToolRegistry, register_builtin_tools
from conduit_core.types import StorageType


class ConduitApplication:
    """
    Conduit Application orchestrator.

    Initializes and wires all components together. The initialization
    sequence is:

    1. Config loading
    2. Logger setup
    3. Error registry
    4. Telemetry setup
    5. Connection store
    6. Tool registry (+ built-in tools)
    7. Connection registry (+ restore of persisted connections)
    8. Tool execution router
    9. Protocol server (when enabled)
    """

    def __init__(
        self,
        config_path: str | Path | None = None,
        config: ConduitConfig | None = None,
        log_output: TextIO | None = None,
        store: ConnectionStore | None = None,
    ):
        """Initialize application.

        Args:
            config_path: Path to config file (optional)
            config: Ready-made config, skips the loader when given
            log_output: Output stream for logs (default: sys.stdout)
            store: Persistence port override (default: from storage config)
        """
        self._config_path = config_path
        self._log_output = log_output or sys.stdout
        self._store_override = store
        self._initialized = False

        # Components (initialized in initialize())
        self.config_loader: ConfigLoader | None = None
        self.config: ConduitConfig | None = config
        self.logger: ConduitLogger | None = None
        self.error_registry: ErrorRegistry | None = None
        self.error_factory: ErrorFactory | None = None
        self.metrics: ConduitMetrics | None = None
        self.store: ConnectionStore | None = None
        self.tool_registry: ToolRegistry | None = None
        self.connection_registry: ConnectionRegistry | None = None
        self.router: ToolExecutionRouter | None = None
        self.server: ProtocolServer | None = None

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Initialize all components. Calling it twice is a no-op."""
        if self._initialized:
            return

        # 1. Config
        if self.config is None:
            self.config_loader = ConfigLoader()
            self.config = self.config_loader.load(self._config_path)
        config = self.config

        # 2. Logger
        log_config = LogConfig(
            level=config.logging.level,
            format=config.logging.format,
            show_params=config.logging.options.show_params,
            show_results=config.logging.options.show_results,
            truncate_at=config.logging.options.truncate_at,
            components={
                "connection": config.logging.components.connection,
                "tool": config.logging.components.tool,
                "registry": config.logging.components.registry,
                "server": config.logging.components.server,
            },
            output=self._log_output,
        )
        self.logger = ConduitLogger(log_config)

        # 3. Error Registry & Factory
        self.error_registry = ErrorRegistry()
        self.error_factory = ErrorFactory(self.error_registry)

        # 4. Telemetry
        self.metrics = setup_telemetry(config.telemetry)

        # 5. Connection store
        self.store = self._store_override or self._create_store(config)

        # 6. Tool Registry
        self.tool_registry = ToolRegistry(logger=self.logger)
        register_builtin_tools(self.tool_registry)

        # 7. Connection Registry
        self.connection_registry = ConnectionRegistry(
            self.store,
            transports=default_transports(config.transports),
            logger=self.logger,
            request_timeout=config.transports.tool_call_timeout,
        )
        self.connection_registry.set_metrics(self.metrics)
        await self.connection_registry.load()

        # 8. Router
        self.router = ToolExecutionRouter(
            self.connection_registry,
            self.tool_registry,
            logger=self.logger,
            error_factory=self.error_factory,
            tool_call_timeout=config.transports.tool_call_timeout,
        )
        self.router.set_metrics(self.metrics)

        # 9. Protocol Server
        if config.server.enabled:
            self.server = ProtocolServer(
                self.tool_registry,
                host=config.server.host,
                port=config.server.port,
                name=config.server.name,
                version=config.server.version,
                conduit_logger=self.logger,
            )
            self.server.set_metrics(self.metrics)
            await self.server.start()
            self.connection_registry.set_server(self.server)

        self._initialized = True
        self.logger.info(
            "registry",
            "Conduit initialized",
            {
                "connections": len(self.connection_registry.list()),
                "tools": len(self.tool_registry),
                "server": self.server.url if self.server else None,
            },
        )

    async def shutdown(self) -> None:
        """Stop the server, then tear down every connection."""
        if self.server:
            await self.server.stop()
        if self.connection_registry:
            await self.connection_registry.shutdown()
        self._initialized = False

    async def __aenter__(self) -> "ConduitApplication":
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.shutdown()

    @staticmethod
    def _create_store(config: ConduitConfig) -> ConnectionStore:
        if config.storage.type == StorageType.MEMORY:
            return InMemoryConnectionStore()
        return YAMLConnectionStore(config.storage.path)
