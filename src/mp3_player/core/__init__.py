"""Core infrastructure layer - no business logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML)
- Key-value storage (SQLite)
- Logging and user-facing output (Loguru)
- Error taxonomy

Clean architecture principle: The core layer has no dependencies on
domain or application layers.
"""

# Configuration
from .config import (
    Config,
    IngestConfig,
    LoggingConfig,
    PlayerConfig,
    StorageConfig,
    create_default_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    load_config,
)

# Storage
from .database import (
    KeyValueStore,
    get_database_path,
    get_db_connection,
    init_database,
)

# Errors
from .exceptions import (
    ConfigError,
    PersistenceError,
    PlaybackError,
    PlayerError,
    ValidationError,
)

__all__ = [
    # Config
    "Config",
    "IngestConfig",
    "LoggingConfig",
    "PlayerConfig",
    "StorageConfig",
    "create_default_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "load_config",
    # Storage
    "KeyValueStore",
    "get_database_path",
    "get_db_connection",
    "init_database",
    # Errors
    "ConfigError",
    "PersistenceError",
    "PlaybackError",
    "PlayerError",
    "ValidationError",
]
