"""
Media backend contract.

A backend plays one source at a time. Commands are issued from the control
thread; results come back as events posted to the EventChannel it was
built with, tagged with the generation passed to load(). For one
generation the order is MetadataReady, PositionAdvanced*, then Ended or
Failed.
"""

import time
from pathlib import Path
from typing import Callable, Optional, Protocol

from loguru import logger

from mp3_player.domain.library.registry import probe_duration

from .events import EventChannel, Ended, MetadataReady, PositionAdvanced

# Minimum clock progress worth reporting (seconds)
POSITION_REPORT_STEP = 0.25


class MediaPlayer(Protocol):
    channel: EventChannel

    def load(self, source: Path, generation: int) -> None:
        """Replace the current source. Playback stays paused until play()."""
        ...

    def play(self) -> None:
        """Start or resume playback. May raise PlaybackError."""
        ...

    def pause(self) -> None: ...

    def set_position(self, seconds: float) -> None: ...

    def set_volume(self, level: float) -> None:
        """Set volume, 0.0 - 1.0."""
        ...

    def poll(self) -> None:
        """Post any progress the backend cannot push on its own."""
        ...

    def stop(self) -> None:
        """Unload the current source."""
        ...

    def close(self) -> None:
        """Release the backend. Called once at teardown."""
        ...


class SilentMediaPlayer:
    """Backend that produces no sound.

    Used when mpv is unavailable or disabled. Metadata comes from file tags
    and a wall clock stands in for the audio device, so position advances
    and tracks end at their tagged duration. A track with no known duration
    plays until it is replaced.
    """

    def __init__(self, channel: EventChannel, clock: Callable[[], float] = time.monotonic):
        self.channel = channel
        self.clock = clock
        self.source: Optional[Path] = None
        self.duration: Optional[float] = None
        self.paused = True
        self.volume = 1.0
        self._generation: Optional[int] = None
        self._offset = 0.0
        self._started_at: Optional[float] = None
        self._reported: Optional[float] = None

    @property
    def position(self) -> float:
        if self._started_at is None:
            return self._offset
        return self._offset + (self.clock() - self._started_at)

    def load(self, source: Path, generation: int) -> None:
        self.source = source
        self.paused = True
        self.duration = probe_duration(source)
        self._generation = generation
        self._offset = 0.0
        self._started_at = None
        self._reported = None
        self.channel.post(generation, MetadataReady(self.duration))

    def play(self) -> None:
        if self._started_at is None:
            self._started_at = self.clock()
        self.paused = False

    def pause(self) -> None:
        self._offset = self.position
        self._started_at = None
        self.paused = True

    def set_position(self, seconds: float) -> None:
        self._offset = seconds
        self._reported = None
        if self._started_at is not None:
            self._started_at = self.clock()

    def set_volume(self, level: float) -> None:
        self.volume = level

    def poll(self) -> None:
        """Post the clock's progress for the loaded track."""
        if self.source is None or self.paused or self._generation is None:
            return

        position = self.position
        if self.duration and position >= self.duration:
            self.pause()
            self._offset = self.duration
            self.channel.post(self._generation, PositionAdvanced(self.duration))
            self.channel.post(self._generation, Ended())
            self.source = None
            return

        if self._reported is None or position - self._reported >= POSITION_REPORT_STEP:
            self._reported = position
            self.channel.post(self._generation, PositionAdvanced(position))

    def stop(self) -> None:
        self.source = None
        self.paused = True
        self._started_at = None
        self._offset = 0.0

    def close(self) -> None:
        logger.debug("Silent media backend closed")
        self.stop()
