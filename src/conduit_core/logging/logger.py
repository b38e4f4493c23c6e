"""Conduit Logger - component-scoped colored/JSON logging."""

import json
import sys
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, TextIO

from conduit_core.logging.colors import (
    CYAN,
    GREEN,
    LIGHT_BLUE,
    MAGENTA,
    ORANGE,
    RED,
    RESET,
    YELLOW,
)
from conduit_core.types import LogFormat, LogLevel

# Context keys whose values never reach the output
SECRET_KEYS = frozenset({"api_key", "access_token", "password", "token", "authorization"})
MASK = "***"


def mask_secrets(data: Any) -> Any:
    """Return a copy of data with secret-bearing keys masked."""
    if isinstance(data, dict):
        return {
            k: (MASK if str(k).lower() in SECRET_KEYS and v else mask_secrets(v))
            for k, v in data.items()
        }
    if isinstance(data, list):
        return [mask_secrets(item) for item in data]
    return data


@dataclass
class LogConfig:
    """Logger configuration."""

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.COLORED
    show_params: bool = True
    show_results: bool = True
    truncate_at: int = 200
    components: dict[str, bool] = field(default_factory=dict)
    output: TextIO = field(default=sys.stdout)

    def __post_init__(self) -> None:
        """Initialize default components if not provided."""
        if not self.components:
            self.components = {
                "connection": True,
                "tool": True,
                "registry": True,
                "server": True,
            }


class ConduitLogger:
    """Main logger facade. Creates component-specific loggers."""

    def __init__(self, config: LogConfig | None = None):
        """Initialize logger with configuration.

        Args:
            config: Logger configuration (defaults to LogConfig())
        """
        self.config = config or LogConfig()
        self._level_order = {
            LogLevel.DEBUG: 0,
            LogLevel.INFO: 1,
            LogLevel.WARN: 2,
            LogLevel.ERROR: 3,
        }

    def connection(self, connection_id: str, connection_type: str) -> "ConnectionLogger":
        """Get a logger scoped to a single connection."""
        return ConnectionLogger(self, connection_id, connection_type)

    def tool(self, connection_id: str) -> "ToolLogger":
        """Get a logger for tool calls routed through a connection."""
        return ToolLogger(self, connection_id)

    def configure(self, config: LogConfig) -> None:
        """Update configuration.

        Args:
            config: New logger configuration
        """
        self.config = config

    def info(self, component: str, message: str, context: dict[str, Any] | None = None) -> None:
        self._log(LogLevel.INFO, component, message, context)

    def warn(self, component: str, message: str, context: dict[str, Any] | None = None) -> None:
        self._log(LogLevel.WARN, component, message, context)

    def error(self, component: str, message: str, context: dict[str, Any] | None = None) -> None:
        self._log(LogLevel.ERROR, component, message, context)

    def debug(self, component: str, message: str, context: dict[str, Any] | None = None) -> None:
        self._log(LogLevel.DEBUG, component, message, context)

    def _should_log(self, level: LogLevel) -> bool:
        return self._level_order.get(level, 0) >= self._level_order.get(self.config.level, 1)

    def _log(
        self,
        level: LogLevel,
        component: str,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Internal logging method.

        Args:
            level: Log level
            component: Component name (connection, tool, registry, server)
            message: Log message
            context: Additional context data (secrets are masked)
        """
        if not self._should_log(level):
            return

        if not self.config.components.get(component, True):
            return

        if context:
            context = mask_secrets(context)

        if self.config.format == LogFormat.JSON:
            self._log_json(level, component, message, context)
        else:
            self._log_colored(level, component, message, context)

    def _log_json(
        self,
        level: LogLevel,
        component: str,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        log_entry = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": level.value,
            "component": component,
            "message": message,
        }
        if context:
            log_entry.update(context)

        print(json.dumps(log_entry, default=str), file=self.config.output)

    def _log_colored(
        self,
        level: LogLevel,
        component: str,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        level_colors = {
            LogLevel.DEBUG: LIGHT_BLUE,
            LogLevel.INFO: CYAN,
            LogLevel.WARN: YELLOW,
            LogLevel.ERROR: RED,
        }

        color = level_colors.get(level, RESET)
        component_color = {
            "connection": MAGENTA,
            "tool": GREEN,
            "registry": CYAN,
            "server": ORANGE,
        }.get(component, RESET)

        # Format: [COMPONENT] message
        output = f"{component_color}[{component.upper()}]{RESET} {color}{message}{RESET}"

        if context and self.config.show_params:
            context_str = str(context)
            if len(context_str) > self.config.truncate_at:
                context_str = context_str[: self.config.truncate_at] + "..."
            output += f" {LIGHT_BLUE}{context_str}{RESET}"

        print(output, file=self.config.output)


class ConnectionLogger:
    """Logger for connection lifecycle events."""

    def __init__(self, parent: ConduitLogger, connection_id: str, connection_type: str):
        self.parent = parent
        self.connection_id = connection_id
        self.connection_type = connection_type

    def _context(self, event: str, **extra: Any) -> dict[str, Any]:
        context = {
            "connection_id": self.connection_id,
            "connection_type": self.connection_type,
            "event": event,
        }
        context.update(extra)
        return context

    def establishing(self, endpoint: str | None = None) -> None:
        """Log a connection attempt.

        Args:
            endpoint: Optional endpoint being dialled
        """
        context = self._context("connection_establishing")
        if endpoint:
            context["endpoint"] = endpoint
        message = f"Connecting '{self.connection_id}' ({self.connection_type})"
        self.parent._log(LogLevel.DEBUG, "connection", message, context)

    def connected(self, duration_ms: int) -> None:
        """Log a successful connection.

        Args:
            duration_ms: Time spent establishing in milliseconds
        """
        context = self._context("connection_connected", duration_ms=duration_ms)
        duration_s = duration_ms / 1000
        message = f"Connection '{self.connection_id}' established ({duration_s:.2f}s) ✓"
        self.parent._log(LogLevel.INFO, "connection", message, context)

    def failed(self, error: Exception) -> None:
        """Log a failed connection attempt.

        Args:
            error: Exception raised by the transport
        """
        context = self._context(
            "connection_failed",
            error=str(error),
            error_type=type(error).__name__,
        )
        message = f"Connection '{self.connection_id}' failed: {error}"
        self.parent._log(LogLevel.ERROR, "connection", message, context)

    def disconnected(self, reason: str | None = None) -> None:
        context = self._context("connection_disconnected")
        if reason:
            context["reason"] = reason
        message = f"Connection '{self.connection_id}' disconnected"
        self.parent._log(LogLevel.WARN, "connection", message, context)

    def removed(self) -> None:
        context = self._context("connection_removed")
        message = f"Connection '{self.connection_id}' removed"
        self.parent._log(LogLevel.INFO, "connection", message, context)


class ToolLogger:
    """Logger for tool call events."""

    def __init__(self, parent: ConduitLogger, connection_id: str):
        """Initialize tool logger.

        Args:
            parent: Parent ConduitLogger instance
            connection_id: Connection the calls are routed through
        """
        self.parent = parent
        self.connection_id = connection_id

    def calling(self, tool_name: str, params: dict[str, Any] | None = None) -> None:
        """Log tool call start.

        Args:
            tool_name: Name of the tool being called
            params: Optional tool parameters
        """
        context: dict[str, Any] = {
            "connection_id": self.connection_id,
            "event": "tool_calling",
            "tool_name": tool_name,
        }
        if params and self.parent.config.show_params:
            context["params"] = params

        message = f"Calling tool '{tool_name}' via '{self.connection_id}'"

        self.parent._log(LogLevel.INFO, "tool", message, context)

    def result(self, tool_name: str, result: Any, duration_ms: int) -> None:
        """Log tool call result.

        Args:
            tool_name: Name of the tool
            result: Tool execution result
            duration_ms: Execution duration in milliseconds
        """
        context: dict[str, Any] = {
            "connection_id": self.connection_id,
            "event": "tool_result",
            "tool_name": tool_name,
            "duration_ms": duration_ms,
        }

        duration_s = duration_ms / 1000
        message = f"Tool '{tool_name}' completed ({duration_s:.2f}s) ✓"

        if self.parent.config.show_results:
            result_str = str(result)
            if len(result_str) > self.parent.config.truncate_at:
                result_str = result_str[: self.parent.config.truncate_at] + "..."
            context["result"] = result_str

        self.parent._log(LogLevel.INFO, "tool", message, context)

    def error(self, tool_name: str, error: str, duration_ms: int) -> None:
        """Log tool call error.

        Args:
            tool_name: Name of the tool
            error: Error message
            duration_ms: Execution duration in milliseconds
        """
        context = {
            "connection_id": self.connection_id,
            "event": "tool_error",
            "tool_name": tool_name,
            "duration_ms": duration_ms,
            "error": error,
        }

        duration_s = duration_ms / 1000
        message = f"Tool '{tool_name}' failed ({duration_s:.2f}s): {error}"

        self.parent._log(LogLevel.ERROR, "tool", message, context)
