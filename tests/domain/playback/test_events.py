"""
Tests for the event channel and the silent media backend.
"""

import threading
from unittest.mock import patch

import pytest

from mp3_player.domain.playback.controller import PlaybackController
from mp3_player.domain.playback.events import (
    EventChannel,
    Ended,
    MetadataReady,
    PositionAdvanced,
    TaggedEvent,
)
from mp3_player.domain.playback.media import SilentMediaPlayer
from mp3_player.domain.playback.state import PlaybackStatus


class TestEventChannel:
    def test_drain_preserves_order(self):
        channel = EventChannel()
        channel.post(1, MetadataReady(10.0))
        channel.post(1, PositionAdvanced(1.0))
        channel.post(1, Ended())

        assert channel.drain() == [
            TaggedEvent(1, MetadataReady(10.0)),
            TaggedEvent(1, PositionAdvanced(1.0)),
            TaggedEvent(1, Ended()),
        ]
        assert len(channel) == 0

    def test_drain_limit(self):
        channel = EventChannel()
        for i in range(5):
            channel.post(1, PositionAdvanced(float(i)))

        assert len(channel.drain(max_events=2)) == 2
        assert len(channel) == 3

    def test_drain_empty(self):
        assert EventChannel().drain() == []

    def test_post_from_other_thread(self):
        channel = EventChannel()
        worker = threading.Thread(target=lambda: channel.post(7, Ended()))
        worker.start()
        worker.join()

        assert channel.drain() == [TaggedEvent(7, Ended())]


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def clip(tmp_path):
    source = tmp_path / "clip.mp3"
    source.write_bytes(b"not really audio")
    return source


class TestSilentMediaPlayer:
    def test_load_posts_metadata_for_generation(self, clip):
        channel = EventChannel()
        media = SilentMediaPlayer(channel)

        media.load(clip, 4)

        [tagged] = channel.drain()
        assert tagged.generation == 4
        assert isinstance(tagged.event, MetadataReady)
        assert media.source == clip
        assert media.paused

    def test_transport(self, clip, clock):
        media = SilentMediaPlayer(EventChannel(), clock=clock)
        media.load(clip, 1)

        media.play()
        assert not media.paused
        media.set_volume(0.5)
        media.set_position(12.0)
        clock.advance(3.0)
        assert media.position == 15.0

        media.stop()

        assert media.paused
        assert media.source is None
        assert media.volume == 0.5

    def test_clock_stands_still_while_paused(self, clip, clock):
        media = SilentMediaPlayer(EventChannel(), clock=clock)
        media.load(clip, 1)

        media.play()
        clock.advance(2.0)
        media.pause()
        clock.advance(10.0)

        assert media.position == 2.0

    def test_poll_reports_progress_then_end(self, clip, clock):
        channel = EventChannel()
        media = SilentMediaPlayer(channel, clock=clock)
        with patch("mp3_player.domain.playback.media.probe_duration", return_value=3.0):
            media.load(clip, 2)
        channel.drain()

        media.play()
        clock.advance(1.0)
        media.poll()
        media.poll()
        clock.advance(5.0)
        media.poll()
        media.poll()

        assert channel.drain() == [
            TaggedEvent(2, PositionAdvanced(1.0)),
            TaggedEvent(2, PositionAdvanced(3.0)),
            TaggedEvent(2, Ended()),
        ]

    def test_unknown_duration_never_ends(self, clip, clock):
        channel = EventChannel()
        media = SilentMediaPlayer(channel, clock=clock)
        with patch("mp3_player.domain.playback.media.probe_duration", return_value=None):
            media.load(clip, 1)
        channel.drain()

        media.play()
        clock.advance(3600.0)
        media.poll()

        assert channel.drain() == [TaggedEvent(1, PositionAdvanced(3600.0))]

    def test_poll_while_paused_posts_nothing(self, clip, clock):
        channel = EventChannel()
        media = SilentMediaPlayer(channel, clock=clock)
        media.load(clip, 1)
        channel.drain()

        clock.advance(5.0)
        media.poll()

        assert channel.drain() == []


class TestSilentPlaylistPlayback:
    def test_tracks_advance_on_the_clock(self, store, registry, track_factory, clock):
        media = SilentMediaPlayer(EventChannel(), clock=clock)
        controller = PlaybackController(store, media, registry)
        store.insert([track_factory("first"), track_factory("second")])

        with patch("mp3_player.domain.playback.media.probe_duration", return_value=3.0):
            controller.play()
            controller.dispatch_events()
            assert controller.state.status is PlaybackStatus.PLAYING

            clock.advance(1.0)
            controller.dispatch_events()
            assert controller.state.position == 1.0

            clock.advance(5.0)
            controller.dispatch_events()
            controller.dispatch_events()

        assert store.current_track().title == "second"
        assert controller.state.status is PlaybackStatus.PLAYING
        assert controller.state.position == 0.0
        assert controller.state.duration == 3.0
