"""Built-in tool domains."""

from conduit_core.tools.registry import ToolRegistry

from . import filesystem, services, terminal


def register_builtin_tools(registry: ToolRegistry) -> None:
    """Register every built-in domain on the registry."""
    filesystem.register(registry)
    terminal.register(registry)
    services.register(registry)


__all__ = ["register_builtin_tools"]
