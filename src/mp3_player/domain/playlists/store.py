"""
In-memory playlist: ordered tracks plus the current index.

The store is the only writer of the sequence and the index. Each mutation
completes before listeners are notified, so listeners only ever observe
snapshots where current_index is None iff the playlist is empty, and a
valid index otherwise.
"""

import random
from dataclasses import dataclass, replace
from typing import Callable, Iterable, List, Optional, Tuple

from loguru import logger

from mp3_player.domain.library.models import Track, TrackSummary
from mp3_player.domain.library.resources import ResourceManager


@dataclass(frozen=True)
class PlaylistSnapshot:
    """Immutable view of the playlist at one point in time."""

    tracks: Tuple[Track, ...] = ()
    current_index: Optional[int] = None

    def __len__(self) -> int:
        return len(self.tracks)

    @property
    def current_track(self) -> Optional[Track]:
        if self.current_index is None:
            return None
        return self.tracks[self.current_index]

    def summaries(self) -> List[TrackSummary]:
        return [TrackSummary.of(t) for t in self.tracks]


PlaylistListener = Callable[[PlaylistSnapshot], None]


def next_index(current_index: Optional[int], length: int) -> Optional[int]:
    """Index after current_index, wrapping to 0. None for an empty playlist."""
    if length <= 0:
        return None
    if current_index is None:
        return 0
    return (current_index + 1) % length


def previous_index(current_index: Optional[int], length: int) -> Optional[int]:
    """Index before current_index, wrapping to the last track. None for an empty playlist."""
    if length <= 0:
        return None
    if current_index is None:
        return length - 1
    return (current_index - 1 + length) % length


class PlaylistStore:
    """Owns the playlist sequence and current index."""

    def __init__(self, resources: ResourceManager):
        self.resources = resources
        self._tracks: List[Track] = []
        self._current: Optional[int] = None
        self._listeners: List[PlaylistListener] = []

    # ---- observation ----

    def subscribe(self, listener: PlaylistListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: PlaylistListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def clear_listeners(self) -> None:
        self._listeners.clear()

    def snapshot(self) -> PlaylistSnapshot:
        return PlaylistSnapshot(tuple(self._tracks), self._current)

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception(f"Playlist listener {listener!r} failed")

    # ---- queries ----

    def __len__(self) -> int:
        return len(self._tracks)

    @property
    def current_index(self) -> Optional[int]:
        return self._current

    @property
    def tracks(self) -> Tuple[Track, ...]:
        return tuple(self._tracks)

    def current_track(self) -> Optional[Track]:
        if self._current is None:
            return None
        return self._tracks[self._current]

    def index_of(self, track_id: str) -> Optional[int]:
        for i, track in enumerate(self._tracks):
            if track.id == track_id:
                return i
        return None

    def get(self, track_id: str) -> Optional[Track]:
        index = self.index_of(track_id)
        return self._tracks[index] if index is not None else None

    def next_index(self) -> Optional[int]:
        return next_index(self._current, len(self._tracks))

    def previous_index(self) -> Optional[int]:
        return previous_index(self._current, len(self._tracks))

    # ---- mutations ----

    def insert(self, tracks: Iterable[Track]) -> List[Track]:
        """Append tracks in order, skipping any whose id is already present.

        Returns:
            The tracks actually inserted
        """
        existing = {t.id for t in self._tracks}
        inserted: List[Track] = []
        was_empty = not self._tracks

        for track in tracks:
            if track.id in existing:
                logger.warning(f"Skipping duplicate track id {track.id} ({track.title})")
                continue
            existing.add(track.id)
            inserted.append(track)

        if not inserted:
            return inserted

        self._tracks.extend(inserted)
        if was_empty:
            self._current = 0

        logger.info(f"Inserted {len(inserted)} tracks (playlist size {len(self._tracks)})")
        self._notify()
        return inserted

    def remove(self, track_id: str) -> Optional[Track]:
        """Remove a track and revoke its handle. No-op when the id is absent.

        Returns:
            The removed track, or None if it was not in the playlist
        """
        removed_index = self.index_of(track_id)
        if removed_index is None:
            logger.debug(f"remove: {track_id} not in playlist")
            return None

        removed = self._tracks.pop(removed_index)
        new_length = len(self._tracks)

        if new_length == 0:
            self._current = None
        elif self._current is not None:
            if removed_index < self._current:
                self._current -= 1
            elif removed_index == self._current:
                self._current = min(removed_index, new_length - 1)

        self._revoke(removed)
        logger.info(f"Removed {removed.id} ({removed.title}) at index {removed_index}")
        self._notify()
        return removed

    def clear(self) -> int:
        """Revoke every handle and empty the playlist.

        Returns:
            Number of tracks removed
        """
        removed = self._tracks
        self._tracks = []
        self._current = None

        for track in removed:
            self._revoke(track)

        logger.info(f"Cleared playlist ({len(removed)} tracks)")
        self._notify()
        return len(removed)

    def select(self, track_id: str) -> bool:
        """Make the given track current.

        Returns:
            False if the id is not in the playlist (nothing changes)
        """
        index = self.index_of(track_id)
        if index is None:
            return False
        return self.select_index(index)

    def select_index(self, index: int) -> bool:
        if not 0 <= index < len(self._tracks):
            return False
        if index != self._current:
            self._current = index
            self._notify()
        return True

    def shuffle(self, rng: Optional[random.Random] = None) -> None:
        """Shuffle the order; the current track stays current."""
        if len(self._tracks) < 2:
            return
        current = self.current_track()
        (rng or random).shuffle(self._tracks)
        if current is not None:
            self._current = next(i for i, t in enumerate(self._tracks) if t.id == current.id)
        logger.info("Shuffled playlist")
        self._notify()

    def restore(self, tracks: Iterable[Track]) -> None:
        """Repopulate from storage at startup. Allocates and revokes nothing."""
        if self._tracks:
            raise RuntimeError("restore() called on a non-empty playlist")
        seen = set()
        for track in tracks:
            if track.id in seen:
                logger.warning(f"Skipping duplicate stored track id {track.id}")
                continue
            seen.add(track.id)
            self._tracks.append(track)
        self._current = 0 if self._tracks else None
        logger.info(f"Restored {len(self._tracks)} tracks from storage")

    def update_duration(self, track_id: str, duration: Optional[float]) -> bool:
        """Record a resolved duration. Returns False if the track is gone."""
        index = self.index_of(track_id)
        if index is None:
            return False
        track = self._tracks[index]
        if track.duration == duration:
            return True
        self._tracks[index] = replace(track, duration=duration)
        self._notify()
        return True

    def _revoke(self, track: Track) -> None:
        if track.handle is not None and self.resources.is_live(track.handle):
            self.resources.revoke(track.handle)
