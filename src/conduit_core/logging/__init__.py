"""Conduit Logging - component-scoped colored logging."""

from .colors import (
    CYAN,
    GREEN,
    LIGHT_BLUE,
    MAGENTA,
    ORANGE,
    RED,
    RESET,
    YELLOW,
)
from .logger import (
    ConduitLogger,
    ConnectionLogger,
    LogConfig,
    ToolLogger,
    mask_secrets,
)

__all__ = [
    # Logger classes
    "ConduitLogger",
    "ConnectionLogger",
    "ToolLogger",
    "LogConfig",
    "mask_secrets",
    # Colors
    "RESET",
    "GREEN",
    "RED",
    "YELLOW",
    "ORANGE",
    "LIGHT_BLUE",
    "CYAN",
    "MAGENTA",
]
