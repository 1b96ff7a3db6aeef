"""Error taxonomy for the player core."""


class PlayerError(Exception):
    """Base exception for player operations."""

    pass


class ValidationError(PlayerError):
    """Raised when an ingested file is rejected (bad type, too large, unreadable)."""

    def __init__(self, file_name: str, reason: str):
        self.file_name = file_name
        self.reason = reason
        super().__init__(f"{file_name}: {reason}")


class PlaybackError(PlayerError):
    """Raised when the media backend fails to load or play a source."""

    pass


class PersistenceError(PlayerError):
    """Raised when durable storage is unavailable or corrupt."""

    pass


class ConfigError(PlayerError):
    """Raised when a configuration value is invalid."""

    pass
