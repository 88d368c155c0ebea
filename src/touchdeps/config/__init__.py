"""Configuration models and loaders for touchdeps."""

from .loader import ConfigError, DEFAULT_CONFIG_PATH, dump_example_config, load_config
from .models import ChangeFileConfig, FingerprintConfig, RuntimeConfig, TouchdepsConfig

__all__ = [
    "ChangeFileConfig",
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "FingerprintConfig",
    "RuntimeConfig",
    "TouchdepsConfig",
    "dump_example_config",
    "load_config",
]
