"""
Tests for translating mpv IPC messages into tagged media events.

No mpv process is started: messages are fed straight to the handler the
reader thread uses.
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from mp3_player.core.config import PlayerConfig
from mp3_player.core.exceptions import PlaybackError
from mp3_player.domain.playback.events import (
    EventChannel,
    Ended,
    Failed,
    MetadataReady,
    PositionAdvanced,
    TaggedEvent,
)
from mp3_player.domain.playback.mpv import MpvMediaPlayer, check_mpv_available


@pytest.fixture
def channel():
    return EventChannel()


@pytest.fixture
def mpv(channel):
    return MpvMediaPlayer(channel, PlayerConfig(mpv_socket_path="/tmp/test-mp3-player.sock"))


def load(mpv, generation):
    with patch.object(mpv, "_send") as send:
        mpv.load(Path(f"/music/{generation}.mp3"), generation)
    return send.call_args.kwargs["request_id"]


def reply(mpv, request_id, entry_id, error="success"):
    mpv._handle_message(
        {"request_id": request_id, "error": error, "data": {"playlist_entry_id": entry_id}}
    )


def start_file(mpv, generation, entry_id):
    reply(mpv, load(mpv, generation), entry_id)
    mpv._handle_message({"event": "start-file", "playlist_entry_id": entry_id})


class TestMessageTranslation:
    def test_duration_becomes_metadata_once(self, mpv, channel):
        start_file(mpv, 3, entry_id=1)

        mpv._handle_message({"event": "property-change", "name": "duration", "data": 215.4})
        mpv._handle_message({"event": "property-change", "name": "duration", "data": 215.4})

        assert channel.drain() == [TaggedEvent(3, MetadataReady(215.4))]

    def test_time_pos_is_throttled(self, mpv, channel):
        start_file(mpv, 1, entry_id=1)

        for position in (0.0, 0.1, 0.3, 0.4, 1.0):
            mpv._handle_message({"event": "property-change", "name": "time-pos", "data": position})

        positions = [e.event.position for e in channel.drain()]
        assert positions == [0.0, 0.3, 1.0]

    def test_null_property_values_are_ignored(self, mpv, channel):
        start_file(mpv, 1, entry_id=1)

        mpv._handle_message({"event": "property-change", "name": "duration", "data": None})

        assert channel.drain() == []

    def test_eof_becomes_ended(self, mpv, channel):
        start_file(mpv, 5, entry_id=9)

        mpv._handle_message({"event": "end-file", "reason": "eof", "playlist_entry_id": 9})

        assert channel.drain() == [TaggedEvent(5, Ended())]

    def test_load_error_becomes_failed(self, mpv, channel):
        start_file(mpv, 2, entry_id=4)

        mpv._handle_message(
            {
                "event": "end-file",
                "reason": "error",
                "file_error": "unrecognized file format",
                "playlist_entry_id": 4,
            }
        )

        [tagged] = channel.drain()
        assert tagged.generation == 2
        assert isinstance(tagged.event, Failed)
        assert "unrecognized file format" in tagged.event.reason

    def test_stop_on_replace_posts_nothing(self, mpv, channel):
        start_file(mpv, 1, entry_id=1)

        mpv._handle_message({"event": "end-file", "reason": "stop", "playlist_entry_id": 1})

        assert channel.drain() == []

    def test_end_of_replaced_file_keeps_its_own_generation(self, mpv, channel):
        start_file(mpv, 1, entry_id=1)
        start_file(mpv, 2, entry_id=2)

        # mpv can report the old entry's end after the new one started
        mpv._handle_message({"event": "end-file", "reason": "eof", "playlist_entry_id": 1})

        assert channel.drain() == [TaggedEvent(1, Ended())]

    def test_new_file_resets_metadata_and_position(self, mpv, channel):
        start_file(mpv, 1, entry_id=1)
        mpv._handle_message({"event": "property-change", "name": "duration", "data": 10.0})
        mpv._handle_message({"event": "property-change", "name": "time-pos", "data": 5.0})
        channel.drain()

        start_file(mpv, 2, entry_id=2)
        mpv._handle_message({"event": "property-change", "name": "duration", "data": 20.0})
        mpv._handle_message({"event": "property-change", "name": "time-pos", "data": 5.0})

        assert channel.drain() == [
            TaggedEvent(2, MetadataReady(20.0)),
            TaggedEvent(2, PositionAdvanced(5.0)),
        ]

    def test_events_before_any_load_are_ignored(self, mpv, channel):
        mpv._handle_message({"event": "property-change", "name": "time-pos", "data": 1.0})
        mpv._handle_message({"event": "end-file", "reason": "eof"})

        assert channel.drain() == []

    def test_command_replies_are_ignored(self, mpv, channel):
        mpv._handle_message({"error": "success", "request_id": 0})

        assert channel.drain() == []


class TestLoadBursts:
    def test_replaced_loads_credit_the_started_entry_to_the_newest(self, mpv, channel):
        load(mpv, 1)
        load(mpv, 2)

        # mpv skipped the first file; its reply has not arrived yet
        mpv._handle_message({"event": "start-file", "playlist_entry_id": 2})
        mpv._handle_message({"event": "property-change", "name": "duration", "data": 10.0})

        assert channel.drain() == [TaggedEvent(2, MetadataReady(10.0))]

    def test_replies_map_each_entry_to_its_own_load(self, mpv, channel):
        first = load(mpv, 1)
        second = load(mpv, 2)
        reply(mpv, first, entry_id=7)
        reply(mpv, second, entry_id=8)

        mpv._handle_message({"event": "start-file", "playlist_entry_id": 7})
        mpv._handle_message({"event": "property-change", "name": "duration", "data": 30.0})
        mpv._handle_message({"event": "start-file", "playlist_entry_id": 8})
        mpv._handle_message({"event": "property-change", "name": "duration", "data": 10.0})

        assert channel.drain() == [
            TaggedEvent(1, MetadataReady(30.0)),
            TaggedEvent(2, MetadataReady(10.0)),
        ]

    def test_rejected_load_becomes_failed(self, mpv, channel):
        request_id = load(mpv, 4)

        reply(mpv, request_id, entry_id=None, error="invalid parameter")

        [tagged] = channel.drain()
        assert tagged.generation == 4
        assert isinstance(tagged.event, Failed)
        assert "invalid parameter" in tagged.event.reason


class TestCommandsWithoutProcess:
    def test_commands_fail_when_not_running(self, mpv):
        with pytest.raises(PlaybackError):
            mpv.play()

    def test_start_without_binary(self, mpv):
        with patch("mp3_player.domain.playback.mpv.check_mpv_available", return_value=False):
            with pytest.raises(PlaybackError, match="mpv not found"):
                mpv.start()


class TestCheckMpvAvailable:
    def test_missing_binary(self):
        with patch("subprocess.run", side_effect=FileNotFoundError):
            assert check_mpv_available("mpv") is False

    def test_available(self):
        with patch("subprocess.run") as run:
            run.return_value.returncode = 0
            assert check_mpv_available("mpv") is True


class TestClose:
    def test_close_joins_reader_thread(self, mpv):
        reader = MagicMock()
        reader.is_alive.return_value = False
        mpv._reader = reader

        mpv.close()

        reader.join.assert_called_once_with(timeout=1.0)
        assert mpv._reader is None
