"""ANSI color codes for colored log output (256-color palette)."""

RESET = "\033[0m"

GREEN = "\033[38;5;82m"  # connected / tool ok
RED = "\033[38;5;196m"  # errors
YELLOW = "\033[38;5;226m"  # warnings
ORANGE = "\033[38;5;208m"  # server
LIGHT_BLUE = "\033[38;5;153m"  # context payloads
CYAN = "\033[38;5;51m"
MAGENTA = "\033[38;5;201m"

__all__ = [
    "RESET",
    "GREEN",
    "RED",
    "YELLOW",
    "ORANGE",
    "LIGHT_BLUE",
    "CYAN",
    "MAGENTA",
]
