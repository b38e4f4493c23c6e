"""Shared types for Conduit.

Import from here rather than submodules:
    from conduit_core.types import ConnectionStatus, ConnectionType, LogLevel
"""

from .enums import (
    ConnectionStatus,
    ConnectionType,
    LocalDomain,
    LogFormat,
    LogLevel,
    StorageType,
)
from .validation import ValidationIssue, ValidationResult

__all__ = [
    # Enums
    "LogLevel",
    "LogFormat",
    "ConnectionType",
    "ConnectionStatus",
    "LocalDomain",
    "StorageType",
    # Validation
    "ValidationIssue",
    "ValidationResult",
]
