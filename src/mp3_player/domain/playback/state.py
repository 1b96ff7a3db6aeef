"""
Playback state for the MP3 player.
"""

from enum import Enum
from typing import NamedTuple, Optional


class PlaybackStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    PAUSED = "paused"
    ERROR = "error"


class PlaybackState(NamedTuple):
    """Immutable playback state. Use ._replace() to derive a new one."""

    status: PlaybackStatus = PlaybackStatus.IDLE
    position: float = 0.0  # seconds, >= 0
    duration: Optional[float] = None  # None until metadata arrives
    volume: float = 1.0  # 0.0 - 1.0
    error: Optional[str] = None
    track_id: Optional[str] = None  # Track currently loaded into the media backend


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
