"""Tool Registry - two-level catalog of tools keyed by domain then name."""

from __future__ import annotations

import inspect
from typing import Any

from conduit_core.errors import create_error
from conduit_core.logging import ConduitLogger
from conduit_core.types import LogLevel

from .types import ToolDescriptor, ToolHandler, ToolResult


class ToolRegistry:
    """Catalog of tool descriptors per capability domain.

    Pure data plus dispatch, no network I/O of its own. Parameter
    validation is left to the handlers.
    """

    def __init__(self, logger: ConduitLogger | None = None):
        self._tools: dict[str, dict[str, ToolDescriptor]] = {}
        self._logger = logger

    def _log(self, level: LogLevel, message: str, context: dict[str, Any] | None = None) -> None:
        """Log message if logger available."""
        if self._logger:
            self._logger._log(level, "registry", message, context)

    def register(self, domain: str, name: str, descriptor: ToolDescriptor) -> None:
        """Insert or replace a descriptor.

        Raises:
            ValueError: If the descriptor names a different domain/name pair
        """
        if descriptor.domain != domain or descriptor.name != name:
            raise ValueError(
                f"Descriptor {descriptor.domain}/{descriptor.name} "
                f"registered under {domain}/{name}"
            )
        self._tools.setdefault(domain, {})[name] = descriptor
        self._log(LogLevel.DEBUG, f"Registered tool '{domain}/{name}'")

    def tool(
        self,
        domain: str,
        name: str,
        description: str,
        parameter_schema: dict[str, Any] | None = None,
    ):
        """Decorator form of register()."""

        def decorator(handler: ToolHandler) -> ToolHandler:
            self.register(
                domain,
                name,
                ToolDescriptor(
                    domain=domain,
                    name=name,
                    description=description,
                    handler=handler,
                    parameter_schema=parameter_schema or {},
                ),
            )
            return handler

        return decorator

    def get(self, domain: str, name: str) -> ToolDescriptor | None:
        return self._tools.get(domain, {}).get(name)

    def domains(self) -> list[str]:
        """Registered domain keys, in registration order."""
        return list(self._tools.keys())

    def list_for_domain(self, domain: str) -> list[dict[str, Any]]:
        """List a domain's tools as {name, description, parameters}.

        Unknown domains list as empty.
        """
        return [d.to_listing() for d in self._tools.get(domain, {}).values()]

    async def execute(self, domain: str, name: str, parameters: dict[str, Any]) -> ToolResult:
        """Invoke the handler registered for domain/name.

        Sync handlers are called directly; awaitable results are awaited.

        Returns:
            Whatever the handler returns

        Raises:
            ToolNotFoundError: If domain/name is unregistered
        """
        descriptor = self.get(domain, name)
        if descriptor is None:
            raise create_error("TOOL_NOT_FOUND", tool_name=name, domain=domain)

        result = descriptor.handler(parameters or {})
        if inspect.isawaitable(result):
            result = await result
        return result

    def __len__(self) -> int:
        return sum(len(tools) for tools in self._tools.values())
