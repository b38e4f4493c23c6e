"""Conduit Tools - domain/name tool catalog and built-in domains."""

from .builtin import register_builtin_tools
from .registry import ToolRegistry
from .types import ToolDescriptor, ToolHandler, ToolResult

__all__ = [
    "ToolDescriptor",
    "ToolHandler",
    "ToolResult",
    "ToolRegistry",
    "register_builtin_tools",
]
