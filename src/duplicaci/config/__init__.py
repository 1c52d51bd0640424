"""Configuration system for duplicaci.

This module provides TOML-based configuration loading, validation,
and schema definitions for automated backup runs.
"""

from .loader import ConfigError, find_config_file, generate_example_config, load_config
from .schema import (
    BackupConfig,
    Config,
    ConnectionConfig,
    ForgejoConfig,
    RepositoryConfig,
    RetentionConfig,
    StorageConfig,
)

__all__ = [
    "BackupConfig",
    "Config",
    "ConnectionConfig",
    "ForgejoConfig",
    "RepositoryConfig",
    "RetentionConfig",
    "StorageConfig",
    "load_config",
    "find_config_file",
    "generate_example_config",
    "ConfigError",
]
