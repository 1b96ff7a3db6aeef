"""Shared fixtures: an in-memory media backend and track factories."""

from pathlib import Path
from typing import Callable, List, Optional, Tuple

import pytest

from mp3_player.core.exceptions import PlaybackError
from mp3_player.domain.library.models import FileDescriptor, Track
from mp3_player.domain.library.registry import TrackRegistry
from mp3_player.domain.library.resources import ResourceManager
from mp3_player.domain.playback.controller import PlaybackController
from mp3_player.domain.playback.events import EventChannel, MediaEvent
from mp3_player.domain.playlists.store import PlaylistStore


class FakeMediaPlayer:
    """Records commands; tests post events explicitly with emit()."""

    def __init__(self, channel: Optional[EventChannel] = None):
        self.channel = channel or EventChannel()
        self.calls: List[Tuple] = []
        self.source: Optional[Path] = None
        self.generation: Optional[int] = None
        self.playing = False
        self.volume: Optional[float] = None
        self.position: Optional[float] = None
        self.play_error: Optional[str] = None
        self.pause_error: Optional[str] = None
        self.closed = False

    def load(self, source: Path, generation: int) -> None:
        # Loading a revoked handle would mean reading a deleted spool file
        assert Path(source).exists(), f"load() of a revoked resource: {source}"
        self.calls.append(("load", source, generation))
        self.source = source
        self.generation = generation
        self.playing = False

    def play(self) -> None:
        self.calls.append(("play",))
        if self.play_error:
            raise PlaybackError(self.play_error)
        self.playing = True

    def pause(self) -> None:
        self.calls.append(("pause",))
        if self.pause_error:
            raise PlaybackError(self.pause_error)
        self.playing = False

    def set_position(self, seconds: float) -> None:
        self.calls.append(("set_position", seconds))
        self.position = seconds

    def set_volume(self, level: float) -> None:
        self.calls.append(("set_volume", level))
        self.volume = level

    def poll(self) -> None:
        pass

    def stop(self) -> None:
        self.calls.append(("stop",))
        self.source = None
        self.playing = False

    def close(self) -> None:
        self.closed = True

    def emit(self, event: MediaEvent, generation: Optional[int] = None) -> None:
        """Post an event for the current load (or an explicit generation)."""
        self.channel.post(self.generation if generation is None else generation, event)

    def call_names(self) -> List[str]:
        return [c[0] for c in self.calls]


def make_descriptor(
    name: str = "song.mp3",
    data: bytes = b"ID3\x03\x00fake-audio",
    mime_type: str = "audio/mpeg",
    size_bytes: Optional[int] = None,
) -> FileDescriptor:
    return FileDescriptor(
        name=name,
        mime_type=mime_type,
        size_bytes=len(data) if size_bytes is None else size_bytes,
        read_bytes=lambda: data,
    )


@pytest.fixture
def resources(tmp_path: Path) -> ResourceManager:
    manager = ResourceManager(tmp_path / "spool")
    yield manager
    manager.close()


@pytest.fixture
def registry(resources: ResourceManager) -> TrackRegistry:
    return TrackRegistry(resources, probe_duration=False)


@pytest.fixture
def store(resources: ResourceManager) -> PlaylistStore:
    return PlaylistStore(resources)


@pytest.fixture
def track_factory(registry: TrackRegistry) -> Callable[[str], Track]:
    """Create a track with a live handle, titled after its file name."""

    def factory(title: str = "song") -> Track:
        return registry.create(make_descriptor(f"{title}.mp3", data=title.encode()))

    return factory


@pytest.fixture
def media() -> FakeMediaPlayer:
    return FakeMediaPlayer()


@pytest.fixture
def controller(store, media, registry) -> PlaybackController:
    return PlaybackController(store, media, registry)
