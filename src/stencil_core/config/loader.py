"""Stencil configuration loader."""

import os
import re
import typing
from dataclasses import fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from stencil_core.errors import create_error
from stencil_core.telemetry.logging import get_logger
from stencil_core.types import (
    DivisionPolicy,
    LogFormat,
    LogLevel,
    NullPolicy,
    ValidationResult,
)

from .models import StencilConfig

logger = get_logger("config")

# Allowed values per enum-typed key
_ENUM_KEYS: dict[str, type[Enum]] = {
    "engine.division_by_zero": DivisionPolicy,
    "engine.null_rendering": NullPolicy,
    "logging.level": LogLevel,
    "logging.format": LogFormat,
}

_BOOL_KEYS = ("engine.strict_context", "engine.dotted_lookup")


def resolve_env_vars(value: str) -> str:
    """Resolve environment variable references in string.

    Supports:
    - ${VAR} - Required, error if not set
    - ${VAR:-default} - With default value
    - ${VAR:?error message} - Required with custom error

    Args:
        value: String with potential env var references

    Returns:
        String with env vars resolved

    Raises:
        ConfigError: If required var not set
    """
    # Pattern: ${VAR}, ${VAR:-default}, ${VAR:?error}
    pattern = r"\$\{([^}:]+)(?::([?-])([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        operator = match.group(2)  # '-' or '?' or None
        operand = match.group(3)  # default value or error message

        env_value = os.environ.get(var_name)

        if env_value is not None:
            return env_value

        if operator == "-":
            return operand or ""
        elif operator == "?":
            error_msg = operand or f"Required environment variable {var_name} not set"
            raise create_error("CONFIG_INVALID", detail=error_msg)
        else:
            raise create_error(
                "CONFIG_INVALID",
                detail=f"Required environment variable {var_name} not set",
            )

    return re.sub(pattern, replacer, value)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Override dictionary

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def _resolve_env_vars_recursive(data: Any) -> Any:
    """Recursively resolve env vars in data structure.

    Args:
        data: Data structure (dict, list, str, etc.)

    Returns:
        Data with env vars resolved
    """
    if isinstance(data, dict):
        return {k: _resolve_env_vars_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_resolve_env_vars_recursive(item) for item in data]
    elif isinstance(data, str):
        return resolve_env_vars(data)
    else:
        return data


def _coerce_scalar(value: Any) -> Any:
    """Turn env-substituted strings back into bools/ints where they spell one."""
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "false"):
            return lowered == "true"
        if lowered.isdigit():
            return int(lowered)
    return value


class ConfigLoader:
    """Load and validate stencil configuration."""

    def __init__(self) -> None:
        """Initialize config loader."""
        self._config: StencilConfig | None = None
        self._config_path: Path | None = None

    def load(self, path: str | Path | None = None, use_defaults: bool = True) -> StencilConfig:
        """Load configuration from file.

        Resolution order if path not specified:
        1. STENCIL_CONFIG_PATH environment variable
        2. ./stencil.yaml
        3. ~/.stencil/config.yaml
        4. If use_defaults=True and no file found, use default configuration

        Args:
            path: Optional path to config file
            use_defaults: If True, use default config when no file found (default: True)

        Returns:
            Loaded StencilConfig instance

        Raises:
            ConfigError: If file not found (when use_defaults=False) or invalid
        """
        if path is None:
            path = self._resolve_config_path()

        config_path = Path(path)

        if not config_path.exists():
            if use_defaults:
                logger.info("No config file found, using default configuration")
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
                detail=f"Top level of {config_path} must be a mapping",
            )

        data = _resolve_env_vars_recursive(data)

        return self.load_from_dict(data, config_path)

    def load_defaults(self) -> StencilConfig:
        """Load default configuration without a file.

        Returns:
            StencilConfig with default values
        """
        return self.load_from_dict({})

    def load_from_dict(
        self, data: dict[str, Any], config_path: Path | None = None
    ) -> StencilConfig:
        """Load configuration from dictionary.

        Args:
            data: Configuration dictionary
            config_path: Optional path to config file (for tracking)

        Returns:
            Loaded StencilConfig instance

        Raises:
            ConfigError: If configuration is invalid
        """
        data = {
            section: (
                {k: _coerce_scalar(v) for k, v in values.items()}
                if isinstance(values, dict)
                else values
            )
            for section, values in data.items()
        }

        validation = self.validate(data)
        for warning in validation.warnings:
            logger.warning(warning.message, path=warning.path)
        if not validation.valid:
            error_messages = [f"- {message}" for message in validation.messages]
            raise create_error(
                "CONFIG_INVALID",
                detail="Configuration validation failed:\n" + "\n".join(error_messages),
            )

        config = self._dict_to_config(data)

        self._config = config
        self._config_path = config_path

        logger.debug("Configuration loaded", path=str(config_path) if config_path else None)

        return config

    def validate(self, data: dict[str, Any]) -> ValidationResult:
        """Validate config data without loading.

        Unknown sections and keys are warnings; wrong types and values
        outside an enum are errors.

        Args:
            data: Configuration dictionary

        Returns:
            ValidationResult with errors and warnings
        """
        result = ValidationResult()
        sections = typing.get_type_hints(StencilConfig)

        for key, section in data.items():
            if key not in sections:
                result.add_warning(key, f"Unknown configuration key: {key}")
                continue
            if not isinstance(section, dict):
                result.add_error(key, f"{key} must be a dictionary")
                continue

            known = {f.name for f in fields(sections[key])}
            for name in section:
                if name not in known:
                    result.add_warning(f"{key}.{name}", f"Unknown configuration key: {key}.{name}")

        max_depth = self._lookup(data, "engine.max_depth")
        if max_depth is not None and (
            isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth <= 0
        ):
            result.add_error("engine.max_depth", "max_depth must be a positive integer")

        for path, enum_type in _ENUM_KEYS.items():
            value = self._lookup(data, path)
            allowed = [member.value for member in enum_type]
            if value is not None and value not in allowed:
                result.add_error(path, f"{path} must be one of: {', '.join(allowed)}")

        for path in _BOOL_KEYS:
            value = self._lookup(data, path)
            if value is not None and not isinstance(value, bool):
                result.add_error(path, f"{path} must be a boolean")

        return result

    def get(self) -> StencilConfig:
        """Get current configuration.

        Returns:
            Current StencilConfig instance

        Raises:
            ConfigError: If configuration not loaded
        """
        if self._config is None:
            raise create_error("CONFIG_INVALID", detail="Configuration not loaded")
        return self._config

    @property
    def config_path(self) -> Path | None:
        return self._config_path

    def _lookup(self, data: dict[str, Any], path: str) -> Any:
        section, _, key = path.partition(".")
        values = data.get(section)
        if not isinstance(values, dict):
            return None
        return values.get(key)

    def _resolve_config_path(self) -> Path:
        """Resolve config file path using resolution order.

        Returns:
            Path to config file (may not exist)
        """
        env_path = os.environ.get("STENCIL_CONFIG_PATH")
        if env_path:
            return Path(env_path)

        local_path = Path("stencil.yaml")
        if local_path.exists():
            return local_path

        home_path = Path.home() / ".stencil" / "config.yaml"
        if home_path.exists():
            return home_path

        # Not found - use local path as default
        return local_path

    def _dict_to_config(self, data: dict[str, Any]) -> StencilConfig:
        """Convert dictionary to StencilConfig.

        Args:
            data: Configuration dictionary

        Returns:
            StencilConfig instance
        """
        kwargs: dict[str, Any] = {}
        hints = typing.get_type_hints(StencilConfig)

        for field in fields(StencilConfig):
            if field.name in data:
                kwargs[field.name] = self._convert_field(hints[field.name], data[field.name])

        return StencilConfig(**kwargs)

    def _convert_field(self, field_type: Any, value: Any) -> Any:
        """Convert field value to appropriate type.

        Args:
            field_type: Expected field type
            value: Value to convert

        Returns:
            Converted value
        """
        if value is None:
            return None

        # Handle dataclasses
        if is_dataclass(field_type) and isinstance(field_type, type):
            if isinstance(value, dict):
                hints = typing.get_type_hints(field_type)
                kwargs = {}
                for f in fields(field_type):
                    if f.name in value:
                        kwargs[f.name] = self._convert_field(hints[f.name], value[f.name])
                return field_type(**kwargs)
            return value

        # Handle enums
        if isinstance(field_type, type) and issubclass(field_type, Enum):
            if isinstance(value, str):
                return field_type(value)
            return value

        # Return as-is for primitives
        return value


# Convenience singleton
_default_loader: ConfigLoader | None = None


def get_config_loader() -> ConfigLoader:
    """Get default config loader singleton.

    Returns:
        Default ConfigLoader instance
    """
    global _default_loader  # noqa: PLW0603
    if _default_loader is None:
        _default_loader = ConfigLoader()
    return _default_loader


def load_config(path: str | Path | None = None) -> StencilConfig:
    """Convenience function to load config.

    Args:
        path: Optional path to config file

    Returns:
        Loaded StencilConfig instance
    """
    return get_config_loader().load(path)
