"""
Configuration management for the MP3 player
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from loguru import logger

from .exceptions import ConfigError

VALID_REPEAT_MODES = ("all", "one", "none")

DEFAULT_AUDIO_MIME_TYPES = [
    "audio/mpeg",
    "audio/mp3",
    "audio/wav",
    "audio/ogg",
    "audio/aac",
    "audio/flac",
    "audio/m4a",
    "audio/webm",
]


@dataclass
class PlayerConfig:
    """Configuration for the media backend and playback policy."""

    mpv_path: Optional[str] = None
    mpv_socket_path: Optional[str] = None
    volume: float = 1.0  # 0.0 - 1.0
    repeat_mode: str = "all"  # 'all' | 'one' | 'none'

    def validate(self) -> None:
        """Validate player configuration values.

        Raises:
            ConfigError: If configuration values are invalid
        """
        if self.repeat_mode not in VALID_REPEAT_MODES:
            raise ConfigError(
                f"Invalid repeat mode: {self.repeat_mode}. "
                f"Valid modes are: {', '.join(VALID_REPEAT_MODES)}"
            )
        if not 0.0 <= self.volume <= 1.0:
            raise ConfigError(f"Invalid volume: {self.volume}. Must be between 0.0 and 1.0")


@dataclass
class IngestConfig:
    """Configuration for importing audio files."""

    max_file_size_mb: int = 50
    allowed_mime_types: List[str] = field(
        default_factory=lambda: list(DEFAULT_AUDIO_MIME_TYPES)
    )
    fallback_extensions: List[str] = field(default_factory=lambda: [".mp3"])
    probe_duration: bool = True

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


@dataclass
class StorageConfig:
    """Configuration for durable playlist storage."""

    database_path: Optional[str] = None  # default: <data dir>/mp3_player.db
    playlist_key: str = "mp3-player-playlist"


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = (
        None  # Custom log file path (default: ~/.local/share/mp3-player/mp3-player.log)
    )
    max_file_size_mb: int = 10  # Maximum log file size before rotation
    backup_count: int = 5  # Number of backup files to keep
    console_output: bool = False  # Also output to console (for debugging)


@dataclass
class Config:
    """Main configuration object."""

    player: PlayerConfig = field(default_factory=PlayerConfig)
    ingest: IngestConfig = field(default_factory=IngestConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "mp3-player"
    return Path.home() / ".config" / "mp3-player"


def _find_project_config() -> Optional[Path]:
    """Find config.toml in project root by looking for pyproject.toml.

    Returns:
        Path to config.toml in project root, or None if not found
    """
    current = Path(__file__).resolve().parent
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            config_path = parent / "config.toml"
            return config_path if config_path.exists() else None
    return None


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Project root (detected via pyproject.toml) - for development
    2. Current working directory
    3. XDG_CONFIG_HOME/mp3-player (or ~/.config/mp3-player)
    """
    project_config = _find_project_config()
    if project_config:
        return project_config

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "mp3-player"
    return Path.home() / ".local" / "share" / "mp3-player"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# MP3 Player Configuration

[player]
# Path to the mpv binary (defaults to "mpv" on PATH)
# mpv_path = "/usr/bin/mpv"

# Path for mpv socket (auto-generated if not specified)
# mpv_socket_path = "/tmp/mp3-player-mpv.sock"

# Initial volume (0.0 - 1.0)
volume = 1.0

# What happens when a track ends: "all" (wrap around), "one" (repeat track), "none" (stop at end)
repeat_mode = "all"

[ingest]
# Reject files larger than this
max_file_size_mb = 50

# Accepted MIME types (files named *.mp3 are always accepted)
allowed_mime_types = ["audio/mpeg", "audio/mp3", "audio/wav", "audio/ogg", "audio/aac", "audio/flac", "audio/m4a", "audio/webm"]

# Read track duration from file tags when importing
probe_duration = true

[storage]
# Custom database path (default: ~/.local/share/mp3-player/mp3_player.db)
# database_path = "/path/to/mp3_player.db"

# Storage key holding the saved playlist
playlist_key = "mp3-player-playlist"

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/mp3-player/mp3-player.log)
# log_file = "/path/to/custom/mp3-player.log"

# Maximum log file size in MB before rotation
max_file_size_mb = 10

# Number of backup log files to keep
backup_count = 5

# Also output logs to console (useful for debugging)
console_output = false
""".strip()


def _parse_config(toml_data: dict) -> Config:
    """Build a Config from parsed TOML, falling back to defaults per section."""
    config = Config()

    if "player" in toml_data:
        player_data = toml_data["player"]
        try:
            config.player = PlayerConfig(
                mpv_path=player_data.get("mpv_path"),
                mpv_socket_path=player_data.get("mpv_socket_path"),
                volume=float(player_data.get("volume", config.player.volume)),
                repeat_mode=player_data.get("repeat_mode", config.player.repeat_mode),
            )
            config.player.validate()
        except (ConfigError, TypeError, ValueError) as e:
            logger.warning(f"Invalid player configuration: {e}. Using defaults.")
            print(f"Warning: Invalid player configuration: {e}")
            print("Using default player configuration.")
            config.player = PlayerConfig()

    if "ingest" in toml_data:
        ingest_data = toml_data["ingest"]
        config.ingest = IngestConfig(
            max_file_size_mb=ingest_data.get(
                "max_file_size_mb", config.ingest.max_file_size_mb
            ),
            allowed_mime_types=[
                m.lower()
                for m in ingest_data.get(
                    "allowed_mime_types", config.ingest.allowed_mime_types
                )
            ],
            fallback_extensions=[
                e.lower()
                for e in ingest_data.get(
                    "fallback_extensions", config.ingest.fallback_extensions
                )
            ],
            probe_duration=ingest_data.get(
                "probe_duration", config.ingest.probe_duration
            ),
        )

    if "storage" in toml_data:
        storage_data = toml_data["storage"]
        database_path = storage_data.get("database_path")
        if database_path:
            database_path = str(Path(database_path).expanduser())
        config.storage = StorageConfig(
            database_path=database_path,
            playlist_key=storage_data.get("playlist_key", config.storage.playlist_key),
        )

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        log_file = logging_data.get("log_file")
        if log_file:
            log_file = str(Path(log_file).expanduser())
        config.logging = LoggingConfig(
            level=logging_data.get("level", config.logging.level).upper(),
            log_file=log_file,
            max_file_size_mb=logging_data.get(
                "max_file_size_mb", config.logging.max_file_size_mb
            ),
            backup_count=logging_data.get("backup_count", config.logging.backup_count),
            console_output=logging_data.get(
                "console_output", config.logging.console_output
            ),
        )

    return config


def _apply_env_overrides(config: Config) -> Config:
    """Environment variables override TOML values."""
    mpv_path = os.environ.get("MP3_PLAYER_MPV_PATH")
    if mpv_path:
        config.player.mpv_path = mpv_path

    db_path = os.environ.get("MP3_PLAYER_DB_PATH")
    if db_path:
        config.storage.database_path = str(Path(db_path).expanduser())

    return config


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file or create default.

    Environment variables override TOML values:
    - MP3_PLAYER_MPV_PATH
    - MP3_PLAYER_DB_PATH

    Args:
        config_path: Explicit config file; default lookup order is used when None

    Returns:
        Parsed configuration (defaults when the file is missing or unreadable)
    """
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, "w", encoding="utf-8") as f:
                f.write(create_default_config())
            logger.info(f"Created default configuration at: {config_path}")
        except OSError as e:
            logger.warning(f"Could not write default configuration to {config_path}: {e}")
        return _apply_env_overrides(Config())

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.error(f"Error loading configuration from {config_path}: {e}")
        print(f"Error loading configuration: {e}")
        print("Using default configuration.")
        return _apply_env_overrides(Config())

    return _apply_env_overrides(_parse_config(toml_data))
