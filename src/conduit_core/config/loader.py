"""Conduit configuration loader."""

import os
import re
import typing
from dataclasses import fields
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from conduit_core.errors import create_error
from conduit_core.types import ValidationIssue, ValidationResult

from .models import ConduitConfig

CONFIG_PATH_ENV = "CONDUIT_CONFIG_PATH"
LOCAL_CONFIG_NAME = "conduit-config.yaml"


def resolve_env_vars(value: str) -> str:
    """Resolve environment variable references in string.

    Supports:
    - ${VAR} - Required, error if not set
    - ${VAR:-default} - With default value
    - ${VAR:?error message} - Required with custom error

    Raises:
        ConduitError: If required var not set
    """
    pattern = r"\$\{([^}:]+)(?::([?-])([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        operator = match.group(2)  # '-' or '?' or None
        operand = match.group(3)

        env_value = os.environ.get(var_name)
        if env_value is not None:
            return env_value

        if operator == "-":
            return operand or ""
        if operator == "?":
            error_msg = operand or f"Required environment variable {var_name} not set"
            raise create_error("CONFIG_INVALID", detail=error_msg)
        raise create_error(
            "CONFIG_INVALID",
            detail=f"Required environment variable {var_name} not set",
        )

    return re.sub(pattern, replacer, value)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries. Values from override win."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def _resolve_env_vars_recursive(data: Any) -> Any:
    if isinstance(data, dict):
        return {k: _resolve_env_vars_recursive(v) for k, v in data.items()}
    if isinstance(data, list):
        return [_resolve_env_vars_recursive(item) for item in data]
    if isinstance(data, str):
        return resolve_env_vars(data)
    return data


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ConfigLoader:
    """Load and validate Conduit configuration."""

    VALID_SECTIONS = {"server", "transports", "storage", "logging", "telemetry"}

    def __init__(self, logger: Any = None):
        """Initialize config loader.

        Args:
            logger: Optional ConduitLogger instance
        """
        self._config: ConduitConfig | None = None
        self._config_path: Path | None = None
        self._logger = logger

    def load(self, path: str | Path | None = None, use_defaults: bool = True) -> ConduitConfig:
        """Load configuration from file.

        Resolution order if path not specified:
        1. CONDUIT_CONFIG_PATH environment variable
        2. ./conduit-config.yaml
        3. ~/.conduit/config.yaml
        4. If use_defaults=True and no file found, use default configuration

        Raises:
            ConduitError: If file not found (when use_defaults=False) or invalid
        """
        if path is None:
            path = self._resolve_config_path()

        config_path = Path(path).expanduser()

        if not config_path.exists():
            if use_defaults:
                if self._logger:
                    self._logger.info("registry", "No config file found, using defaults")
                return self.load_defaults()
            raise create_error(
                "CONFIG_INVALID",
                detail=f"Configuration file not found: {config_path}",
            )

        try:
            with config_path.open() as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise create_error(
                "CONFIG_INVALID",
                detail=f"Invalid YAML in config file: {e}",
            ) from e

        if not isinstance(data, dict):
            raise create_error(
                "CONFIG_INVALID",
                detail="Configuration root must be a mapping",
            )

        data = _resolve_env_vars_recursive(data)

        return self.load_from_dict(data, config_path)

    def load_defaults(self) -> ConduitConfig:
        """Load default configuration without a file."""
        return self.load_from_dict({})

    def load_from_dict(
        self, data: dict[str, Any], config_path: Path | None = None
    ) -> ConduitConfig:
        """Load configuration from dictionary.

        Raises:
            ConduitError: If configuration is invalid
        """
        validation = self.validate(data)
        if not validation.valid:
            error_messages = [f"- {issue.path}: {issue.message}" for issue in validation.errors]
            raise create_error(
                "CONFIG_INVALID",
                detail="Configuration validation failed:\n" + "\n".join(error_messages),
            )

        if self._logger:
            for warning in validation.warnings:
                self._logger.warn("registry", warning.message, {"path": warning.path})

        try:
            config = self._dict_to_config(data)
        except (TypeError, ValueError) as e:
            raise create_error(
                "CONFIG_INVALID",
                detail=f"Failed to parse configuration: {e}",
            ) from e

        self._config = config
        self._config_path = config_path
        return config

    def validate(self, data: dict[str, Any]) -> ValidationResult:
        """Validate config data without loading.

        Returns:
            ValidationResult with errors and warnings
        """
        errors: list[ValidationIssue] = []
        warnings: list[ValidationIssue] = []

        for key in data:
            if key not in self.VALID_SECTIONS:
                warnings.append(
                    ValidationIssue(
                        path=key,
                        message=f"Unknown configuration key: {key}",
                        severity="warning",
                    )
                )

        for section in self.VALID_SECTIONS:
            if section in data and not isinstance(data[section], dict):
                errors.append(
                    ValidationIssue(path=section, message=f"{section} must be a dictionary")
                )

        server = data.get("server")
        if isinstance(server, dict) and "port" in server:
            port = server["port"]
            if not isinstance(port, int) or isinstance(port, bool) or not 0 <= port <= 65535:
                errors.append(
                    ValidationIssue(
                        path="server.port",
                        message="port must be an integer between 0 and 65535",
                    )
                )

        transports = data.get("transports")
        if isinstance(transports, dict):
            for timeout_key in (
                "api_probe_timeout",
                "socket_connect_timeout",
                "tool_call_timeout",
            ):
                if timeout_key in transports:
                    value = transports[timeout_key]
                    if not _is_number(value) or value <= 0:
                        errors.append(
                            ValidationIssue(
                                path=f"transports.{timeout_key}",
                                message=f"{timeout_key} must be a positive number",
                            )
                        )

        storage = data.get("storage")
        if isinstance(storage, dict) and "type" in storage:
            if storage["type"] not in ("file", "memory"):
                errors.append(
                    ValidationIssue(
                        path="storage.type",
                        message="storage type must be 'file' or 'memory'",
                    )
                )

        return ValidationResult(valid=True, errors=errors, warnings=warnings)

    def get(self) -> ConduitConfig:
        """Get current configuration.

        Raises:
            ConduitError: If configuration not loaded
        """
        if self._config is None:
            raise create_error("CONFIG_INVALID", detail="Configuration not loaded")
        return self._config

    @property
    def config_path(self) -> Path | None:
        return self._config_path

    def _resolve_config_path(self) -> Path:
        # 1. CONDUIT_CONFIG_PATH environment variable
        env_path = os.environ.get(CONFIG_PATH_ENV)
        if env_path:
            return Path(env_path)

        # 2. ./conduit-config.yaml
        local_path = Path(LOCAL_CONFIG_NAME)
        if local_path.exists():
            return local_path

        # 3. ~/.conduit/config.yaml
        home_path = Path.home() / ".conduit" / "config.yaml"
        if home_path.exists():
            return home_path

        return local_path

    def _dict_to_config(self, data: dict[str, Any]) -> ConduitConfig:
        kwargs: dict[str, Any] = {}
        hints = typing.get_type_hints(ConduitConfig)

        for f in fields(ConduitConfig):
            if f.name in data:
                kwargs[f.name] = self._convert_field(hints[f.name], data[f.name])

        return ConduitConfig(**kwargs)

    def _convert_field(self, field_type: Any, value: Any) -> Any:
        """Convert field value to the declared dataclass/enum type."""
        if value is None:
            return None

        if hasattr(field_type, "__dataclass_fields__"):
            if isinstance(value, dict):
                hints = typing.get_type_hints(field_type)
                kwargs = {}
                for f in fields(field_type):
                    if f.name in value:
                        kwargs[f.name] = self._convert_field(hints[f.name], value[f.name])
                return field_type(**kwargs)
            return value

        if isinstance(field_type, type) and issubclass(field_type, Enum):
            if isinstance(value, str):
                return field_type(value)
            return value

        if field_type is float and _is_number(value):
            return float(value)

        return value


# Convenience singleton
_default_loader: ConfigLoader | None = None


def get_config_loader() -> ConfigLoader:
    """Get default config loader singleton."""
    global _default_loader  # noqa: PLW0603
    if _default_loader is None:
        _default_loader = ConfigLoader()
    return _default_loader


def load_config(path: str | Path | None = None) -> ConduitConfig:
    """Convenience function to load config."""
    return get_config_loader().load(path)
