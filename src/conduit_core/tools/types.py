"""Tool Registry types for Conduit."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

ToolResult = dict[str, Any]

# (parameters) -> {success: bool, ...payload}; may be sync or async
ToolHandler = Callable[[dict[str, Any]], ToolResult | Awaitable[ToolResult]]


@dataclass(frozen=True)
class ToolDescriptor:
    """Schema-described operation within a capability domain.

    Handlers report expected failures as ``{"success": False, "error": ...}``
    and only raise for exceptional conditions.
    """

    domain: str
    name: str
    description: str
    handler: ToolHandler = field(repr=False, compare=False)
    parameter_schema: dict[str, Any] = field(default_factory=dict)

    def to_listing(self) -> dict[str, Any]:
        """Outward projection; the handler never leaves the registry."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameter_schema,
        }
