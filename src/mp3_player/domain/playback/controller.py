"""
Playback controller: the command surface the UI talks to.

State machine:

    idle --select--> loading --metadata--> paused --play--> playing --pause--> paused
    playing --ended--> loading (next track) | idle (playlist exhausted)
    any --failed--> error --select--> loading

Every load bumps a generation counter. Media events carry the generation of
the load they belong to and are dropped when it is no longer current, so a
late 'ended' from a track the user already switched away from cannot
advance the playlist a second time.

No command raises: failures become PlaybackState.error or a per-file
IngestResult.
"""

from typing import Iterable, List, Optional

from loguru import logger

from mp3_player.core.config import IngestConfig
from mp3_player.core.exceptions import PlaybackError
from mp3_player.domain.library.ingest import ingest_files
from mp3_player.domain.library.models import FileDescriptor, IngestResult, TrackSummary
from mp3_player.domain.library.registry import TrackRegistry
from mp3_player.domain.playlists.store import PlaylistSnapshot, PlaylistStore

from .events import (
    EventChannel,
    Ended,
    Failed,
    MetadataReady,
    PositionAdvanced,
    TaggedEvent,
)
from .media import MediaPlayer
from .state import PlaybackState, PlaybackStatus, clamp

UNPLAYABLE_MESSAGE = "Track has no playable source; import the file again"


class PlaybackController:
    """Drives one media backend against the playlist's current track."""

    def __init__(
        self,
        store: PlaylistStore,
        media: MediaPlayer,
        registry: TrackRegistry,
        channel: Optional[EventChannel] = None,
        ingest_config: Optional[IngestConfig] = None,
        repeat_mode: str = "all",
        volume: float = 1.0,
    ):
        self.store = store
        self.media = media
        self.registry = registry
        self.channel = channel or media.channel
        self.ingest_config = ingest_config or IngestConfig()
        self.repeat_mode = repeat_mode
        self._state = PlaybackState(volume=clamp(volume, 0.0, 1.0))
        self._unmuted_volume = self._state.volume or 1.0
        self._generation = 0
        self._resume_on_ready = False

    # ---- observation ----

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    def current_track(self) -> Optional[TrackSummary]:
        track = self.store.current_track()
        return TrackSummary.of(track) if track is not None else None

    def playlist(self) -> PlaylistSnapshot:
        return self.store.snapshot()

    # ---- transport ----

    def play(self) -> None:
        """Start or resume playback of the current track."""
        status = self._state.status
        if status is PlaybackStatus.PLAYING:
            return
        if status is PlaybackStatus.LOADING:
            self._resume_on_ready = True
            return

        track = self.store.current_track()
        if track is None:
            return

        if status is PlaybackStatus.PAUSED and self._state.track_id == track.id:
            self._start_media()
        else:
            self._load_current(resume=True)

    def pause(self) -> None:
        status = self._state.status
        if status is PlaybackStatus.LOADING:
            self._resume_on_ready = False
            return
        if status is not PlaybackStatus.PLAYING:
            return
        try:
            self.media.pause()
        except PlaybackError as e:
            self._fail(str(e))
            return
        self._state = self._state._replace(status=PlaybackStatus.PAUSED)

    def toggle_play_pause(self) -> None:
        if self._state.status is PlaybackStatus.PLAYING:
            self.pause()
        else:
            self.play()

    def seek(self, seconds: float) -> float:
        """Move the playhead, clamped to [0, duration].

        Returns:
            The position actually requested from the backend
        """
        if self._state.track_id is None or self._state.status in (
            PlaybackStatus.IDLE,
            PlaybackStatus.ERROR,
        ):
            return self._state.position

        duration = self._state.duration
        position = max(0.0, float(seconds))
        if duration is not None:
            position = min(position, duration)

        try:
            self.media.set_position(position)
        except PlaybackError as e:
            logger.warning(f"Seek to {position:.2f}s failed: {e}")
            return self._state.position

        self._state = self._state._replace(position=position)
        return position

    def set_volume(self, level: float) -> float:
        """Set volume, clamped to [0, 1]. Returns the applied level."""
        volume = clamp(float(level), 0.0, 1.0)
        if volume > 0.0:
            self._unmuted_volume = volume
        self._state = self._state._replace(volume=volume)
        try:
            self.media.set_volume(volume)
        except PlaybackError as e:
            logger.warning(f"Volume change not applied by backend: {e}")
        return volume

    def toggle_mute(self) -> float:
        """Mute, or restore the last audible volume. Returns the applied level."""
        if self._state.volume > 0.0:
            return self.set_volume(0.0)
        return self.set_volume(self._unmuted_volume)

    # ---- track selection ----

    def select_track(self, track_id: str) -> bool:
        """Make a track current and load it.

        Returns:
            False if the id is not in the playlist
        """
        resume = self._has_play_intent()
        if not self.store.select(track_id):
            logger.debug(f"select_track: {track_id} not found")
            return False
        self._load_current(resume=resume)
        return True

    def next(self) -> bool:
        index = self.store.next_index()
        if index is None:
            return False
        resume = self._has_play_intent()
        self.store.select_index(index)
        self._load_current(resume=resume)
        return True

    def previous(self) -> bool:
        index = self.store.previous_index()
        if index is None:
            return False
        resume = self._has_play_intent()
        self.store.select_index(index)
        self._load_current(resume=resume)
        return True

    # ---- playlist commands ----

    def add_files(self, descriptors: Iterable[FileDescriptor]) -> List[IngestResult]:
        """Import files; each one succeeds or fails on its own."""
        results = ingest_files(descriptors, self.registry, self.ingest_config)
        accepted = [r.track for r in results if r.ok]
        inserted = {t.id for t in self.store.insert(accepted)}

        # Tracks the store refused never reach the playlist, so nothing else would revoke them
        for track in accepted:
            if track.id not in inserted and track.handle is not None:
                self.registry.resources.revoke(track.handle)

        return results

    def remove_track(self, track_id: str) -> bool:
        """Remove a track; if it was current, move on to its successor."""
        current = self.store.current_track()
        was_current = current is not None and current.id == track_id
        resume = self._has_play_intent()

        if was_current and self._state.track_id == track_id:
            # Unload before the store revokes the handle the backend is reading
            self._stop_media()

        removed = self.store.remove(track_id)
        if removed is None:
            return False

        if was_current:
            if len(self.store) == 0:
                self._go_idle()
            elif self._state.status is not PlaybackStatus.IDLE:
                self._load_current(resume=resume)
        return True

    def clear(self) -> int:
        """Stop playback, revoke every handle and empty the playlist."""
        self._stop_media()
        count = self.store.clear()
        self._go_idle()
        return count

    def shuffle(self) -> None:
        self.store.shuffle()

    # ---- media events ----

    def dispatch_events(self) -> int:
        """Handle everything the backend has posted so far.

        Returns:
            Number of events that were current (not stale)
        """
        handled = 0
        self.media.poll()
        for tagged in self.channel.drain():
            if self.handle_event(tagged):
                handled += 1
        return handled

    def handle_event(self, tagged: TaggedEvent) -> bool:
        """Apply one backend event. Returns False if it was stale."""
        if tagged.generation != self._generation:
            logger.debug(
                f"Dropping stale {type(tagged.event).__name__} "
                f"(generation {tagged.generation}, current {self._generation})"
            )
            return False

        event = tagged.event
        if isinstance(event, MetadataReady):
            self._on_metadata_ready(event)
        elif isinstance(event, PositionAdvanced):
            if self._state.status in (PlaybackStatus.PLAYING, PlaybackStatus.PAUSED):
                self._state = self._state._replace(position=max(0.0, event.position))
        elif isinstance(event, Ended):
            self._on_ended()
        elif isinstance(event, Failed):
            self._fail(event.reason)
        return True

    def _on_metadata_ready(self, event: MetadataReady) -> None:
        if self._state.status is not PlaybackStatus.LOADING:
            return

        duration = event.duration
        if duration is not None and self._state.track_id is not None:
            self.store.update_duration(self._state.track_id, duration)
        elif duration is None:
            duration = self._state.duration

        self._state = self._state._replace(status=PlaybackStatus.PAUSED, duration=duration)
        logger.debug(f"Metadata ready: duration={duration}")

        if self._resume_on_ready:
            self._resume_on_ready = False
            self._start_media()

    def _on_ended(self) -> None:
        length = len(self.store)
        current = self.store.current_index
        if self.repeat_mode == "one":
            index = current
        elif self.repeat_mode == "none" and current is not None and current == length - 1:
            index = None
        else:
            index = self.store.next_index()

        if index is None:
            logger.info("Playlist finished")
            self._stop_media()
            self._go_idle()
            return

        self.store.select_index(index)
        self._load_current(resume=True)

    # ---- internals ----

    def _has_play_intent(self) -> bool:
        status = self._state.status
        return status is PlaybackStatus.PLAYING or (
            status is PlaybackStatus.LOADING and self._resume_on_ready
        )

    def _load_current(self, resume: bool) -> None:
        track = self.store.current_track()
        if track is None:
            self._stop_media()
            self._go_idle()
            return

        self._generation += 1
        self._resume_on_ready = resume

        if not self.registry.resources.is_live(track.handle):
            self._stop_media()
            self._state = self._state._replace(
                status=PlaybackStatus.ERROR,
                position=0.0,
                duration=track.duration,
                error=UNPLAYABLE_MESSAGE,
                track_id=track.id,
            )
            self._resume_on_ready = False
            logger.warning(f"Cannot play {track.id} ({track.title}): no live resource handle")
            return

        self._state = self._state._replace(
            status=PlaybackStatus.LOADING,
            position=0.0,
            duration=track.duration,
            error=None,
            track_id=track.id,
        )
        logger.info(f"Loading {track.id}: {track.title} (generation {self._generation})")

        try:
            self.media.load(track.handle.path, self._generation)
            self.media.set_volume(self._state.volume)
        except PlaybackError as e:
            self._fail(str(e))

    def _start_media(self) -> None:
        try:
            self.media.play()
        except PlaybackError as e:
            self._fail(str(e))
            return
        self._state = self._state._replace(status=PlaybackStatus.PLAYING, error=None)

    def _stop_media(self) -> None:
        try:
            self.media.stop()
        except PlaybackError as e:
            logger.warning(f"Backend stop failed: {e}")

    def _fail(self, reason: str) -> None:
        logger.error(f"Playback error: {reason}")
        self._resume_on_ready = False
        self._state = self._state._replace(status=PlaybackStatus.ERROR, error=reason)

    def _go_idle(self) -> None:
        # Invalidate anything still in flight for the unloaded track
        self._generation += 1
        self._resume_on_ready = False
        self._state = PlaybackState(volume=self._state.volume)

    def shutdown(self) -> None:
        """Unload the backend's source and ignore any events still queued."""
        self._stop_media()
        self._go_idle()
        self.channel.drain()
