"""
Pytest configuration and shared fixtures for Conduit tests.
"""

import io
import sys
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from conduit_core.connections import (  # noqa: E402
    ConnectionDescriptor,
    ConnectionRegistry,
    InMemoryConnectionStore,
    ToolExecutionRouter,
)
from conduit_core.logging import ConduitLogger, LogConfig  # noqa: E402
from conduit_core.server import ProtocolServer  # noqa: E402
from conduit_core.tools import ToolRegistry, register_builtin_tools  # noqa: E402
from conduit_core.types import ConnectionType, LogFormat, LogLevel  # noqa: E402

# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def tests_dir() -> Path:
    """Return the tests directory."""
    return Path(__file__).parent


# =============================================================================
# Component Fixtures
# =============================================================================


@pytest.fixture
def log_output() -> io.StringIO:
    """Capture logger output."""
    return io.StringIO()


@pytest.fixture
def conduit_logger(log_output: io.StringIO) -> ConduitLogger:
    """JSON logger writing to an in-memory stream."""
    return ConduitLogger(LogConfig(level=LogLevel.DEBUG, format=LogFormat.JSON, output=log_output))


@pytest.fixture
def tool_registry() -> ToolRegistry:
    """Tool registry with the built-in domains."""
    registry = ToolRegistry()
    register_builtin_tools(registry)
    return registry


@pytest.fixture
def memory_store() -> InMemoryConnectionStore:
    return InMemoryConnectionStore()


@pytest_asyncio.fixture
async def connection_registry(
    memory_store: InMemoryConnectionStore,
) -> AsyncGenerator[ConnectionRegistry, None]:
    """Registry over an in-memory store, shut down after the test."""
    registry = ConnectionRegistry(memory_store, request_timeout=2.0)
    yield registry
    await registry.shutdown()


@pytest.fixture
def router(connection_registry: ConnectionRegistry, tool_registry: ToolRegistry) -> ToolExecutionRouter:
    return ToolExecutionRouter(connection_registry, tool_registry, tool_call_timeout=2.0)


@pytest_asyncio.fixture
async def protocol_server(tool_registry: ToolRegistry) -> AsyncGenerator[ProtocolServer, None]:
    """Protocol server on a free loopback port."""
    server = ProtocolServer(tool_registry, host="127.0.0.1", port=0)
    await server.start()
    yield server
    await server.stop()


@pytest.fixture
def local_descriptor() -> ConnectionDescriptor:
    return ConnectionDescriptor(
        id="local-fs",
        name="File System",
        type=ConnectionType.LOCAL,
        endpoint="local://filesystem",
        category="System",
    )


# =============================================================================
# Markers Configuration
# =============================================================================


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "property: Property-based tests")
    config.addinivalue_line("markers", "slow: Slow tests")
