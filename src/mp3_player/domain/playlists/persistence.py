"""
Durable mirror of the playlist.

Only metadata is stored: resource handles are process-local and meaningless
after a restart, so restored tracks come back without one and stay
unplayable until their file is imported again.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from loguru import logger

from mp3_player.core.database import KeyValueStore
from mp3_player.core.exceptions import PersistenceError
from mp3_player.domain.library.models import Track

from .store import PlaylistSnapshot

DEFAULT_PLAYLIST_KEY = "mp3-player-playlist"


def track_to_record(track: Track) -> Dict[str, Any]:
    """Durable fields of a track, in the stored JSON shape."""
    return {
        "id": track.id,
        "title": track.title,
        "durationSeconds": track.duration,
        "addedAt": track.added_at.isoformat(),
    }


def record_to_track(record: Any) -> Optional[Track]:
    """Rebuild a handle-less Track from a stored record. None if malformed."""
    if not isinstance(record, dict):
        return None

    track_id = record.get("id")
    title = record.get("title")
    if not isinstance(track_id, str) or not track_id or not isinstance(title, str):
        return None

    duration = record.get("durationSeconds")
    if isinstance(duration, bool) or not isinstance(duration, (int, float, type(None))):
        return None

    added_at_raw = record.get("addedAt")
    try:
        added_at = datetime.fromisoformat(added_at_raw) if added_at_raw else None
    except (TypeError, ValueError):
        return None
    if added_at is None:
        added_at = datetime.now(timezone.utc)
    elif added_at.tzinfo is None:
        added_at = added_at.replace(tzinfo=timezone.utc)

    return Track(
        id=track_id,
        title=title,
        duration=float(duration) if duration is not None else None,
        handle=None,
        added_at=added_at,
    )


class PlaylistPersistence:
    """Loads and saves the playlist record. Never raises to its callers."""

    def __init__(self, store: KeyValueStore, key: str = DEFAULT_PLAYLIST_KEY):
        self.store = store
        self.key = key

    def load(self) -> List[Track]:
        """Read the stored playlist.

        Returns:
            Restored tracks in stored order; empty on a missing key, malformed
            content or any storage failure
        """
        try:
            raw = self.store.get(self.key)
        except PersistenceError as e:
            logger.warning(f"Playlist storage unavailable, starting empty: {e}")
            return []

        if raw is None:
            logger.debug(f"No saved playlist under '{self.key}'")
            return []

        try:
            records = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Saved playlist is not valid JSON, starting empty: {e}")
            return []

        if not isinstance(records, list):
            logger.warning(
                f"Saved playlist has unexpected type {type(records).__name__}, starting empty"
            )
            return []

        tracks: List[Track] = []
        for record in records:
            track = record_to_track(record)
            if track is None:
                logger.warning(f"Skipping malformed playlist entry: {record!r}")
                continue
            tracks.append(track)

        logger.info(f"Loaded {len(tracks)} tracks from storage")
        return tracks

    def save(self, tracks: Iterable[Track]) -> bool:
        """Write the durable fields of every track.

        Returns:
            True on success; failures are logged and otherwise ignored
        """
        try:
            payload = json.dumps([track_to_record(t) for t in tracks])
            self.store.set(self.key, payload)
        except (PersistenceError, TypeError, ValueError) as e:
            logger.error(f"Failed to save playlist: {e}")
            return False
        return True

    def on_playlist_changed(self, snapshot: PlaylistSnapshot) -> None:
        """PlaylistStore listener: mirror every mutation to storage."""
        self.save(snapshot.tracks)
