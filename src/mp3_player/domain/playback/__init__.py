"""Playback domain - media backend integration and the playback state machine.

This domain handles:
- The playback controller (play/pause/seek/volume/next/previous/auto-advance)
- Generation-tagged media events and stale-event suppression
- The mpv JSON IPC backend and a silent fallback backend
"""

from .controller import PlaybackController
from .events import (
    EventChannel,
    Ended,
    Failed,
    MediaEvent,
    MetadataReady,
    PositionAdvanced,
    TaggedEvent,
)
from .media import MediaPlayer, SilentMediaPlayer
from .mpv import MpvMediaPlayer, check_mpv_available
from .state import PlaybackState, PlaybackStatus

__all__ = [
    # Controller
    "PlaybackController",
    # State
    "PlaybackState",
    "PlaybackStatus",
    # Events
    "EventChannel",
    "Ended",
    "Failed",
    "MediaEvent",
    "MetadataReady",
    "PositionAdvanced",
    "TaggedEvent",
    # Backends
    "MediaPlayer",
    "MpvMediaPlayer",
    "SilentMediaPlayer",
    "check_mpv_available",
]
