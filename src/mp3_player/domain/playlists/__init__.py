"""Playlists domain - the ordered track list and its durable mirror.

This domain handles:
- Playlist mutation (insert, remove, clear, select) with index rebasing
- Wraparound next/previous index computation
- Saving and restoring playlist metadata
"""

from .persistence import (
    DEFAULT_PLAYLIST_KEY,
    PlaylistPersistence,
    record_to_track,
    track_to_record,
)
from .store import (
    PlaylistSnapshot,
    PlaylistStore,
    next_index,
    previous_index,
)

__all__ = [
    # Store
    "PlaylistSnapshot",
    "PlaylistStore",
    "next_index",
    "previous_index",
    # Persistence
    "DEFAULT_PLAYLIST_KEY",
    "PlaylistPersistence",
    "record_to_track",
    "track_to_record",
]
