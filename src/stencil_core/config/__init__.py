"""Stencil configuration - config loading and models."""

from .loader import (
    ConfigLoader,
    deep_merge,
    get_config_loader,
    load_config,
    resolve_env_vars,
)
from .models import EngineConfig, LoggingConfig, StencilConfig

__all__ = [
    # Config models
    "StencilConfig",
    "EngineConfig",
    "LoggingConfig",
    # Loader
    "ConfigLoader",
    "get_config_loader",
    "load_config",
    "resolve_env_vars",
    "deep_merge",
]
