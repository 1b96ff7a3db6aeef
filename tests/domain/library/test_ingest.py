"""
Tests for import filtering, track creation and display titles.
"""

import uuid
from unittest.mock import patch

import pytest

from mp3_player.core.config import IngestConfig
from mp3_player.core.exceptions import ValidationError
from mp3_player.domain.library.ingest import ingest_files, is_audio_file, validate_descriptor
from mp3_player.domain.library.models import FileDescriptor, get_track_title
from mp3_player.domain.library.registry import TrackRegistry

from conftest import make_descriptor

MB = 1024 * 1024


class TestIsAudioFile:
    @pytest.mark.parametrize(
        "mime_type",
        ["audio/mpeg", "audio/mp3", "audio/wav", "audio/ogg", "audio/aac", "audio/flac", "audio/m4a", "audio/webm"],
    )
    def test_allowed_mime_types(self, mime_type):
        assert is_audio_file(make_descriptor("track.bin", mime_type=mime_type))

    def test_mime_type_is_case_insensitive(self):
        assert is_audio_file(make_descriptor("track.bin", mime_type="Audio/MPEG"))

    def test_mp3_extension_fallback(self):
        assert is_audio_file(make_descriptor("Track.MP3", mime_type=""))

    def test_rejects_other_types(self):
        assert not is_audio_file(make_descriptor("notes.txt", mime_type="text/plain"))
        assert not is_audio_file(make_descriptor("video.mp4", mime_type="video/mp4"))

    def test_custom_allow_list(self):
        config = IngestConfig(allowed_mime_types=["audio/x-custom"], fallback_extensions=[])

        assert is_audio_file(make_descriptor("a.bin", mime_type="audio/x-custom"), config)
        assert not is_audio_file(make_descriptor("a.mp3", mime_type=""), config)


class TestValidateDescriptor:
    def test_size_limit_is_inclusive(self):
        validate_descriptor(make_descriptor("big.mp3", size_bytes=50 * MB))

    def test_oversized_file(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_descriptor(make_descriptor("huge.mp3", size_bytes=50 * MB + 1))

        assert exc_info.value.file_name == "huge.mp3"
        assert exc_info.value.reason == "File too large (max 50MB)"

    def test_invalid_format(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_descriptor(make_descriptor("notes.txt", mime_type="text/plain"))

        assert exc_info.value.reason == "Invalid audio file format"
        assert str(exc_info.value) == "notes.txt: Invalid audio file format"


class TestIngestFiles:
    def test_batch_continues_past_rejections(self, registry, resources):
        descriptors = [
            make_descriptor("one.mp3"),
            make_descriptor("notes.txt", mime_type="text/plain"),
            make_descriptor("huge.mp3", size_bytes=51 * MB),
            make_descriptor("two.ogg", mime_type="audio/ogg"),
        ]

        results = ingest_files(descriptors, registry)

        assert [r.name for r in results] == ["one.mp3", "notes.txt", "huge.mp3", "two.ogg"]
        assert [r.ok for r in results] == [True, False, False, True]
        assert results[1].error.reason == "Invalid audio file format"
        assert results[2].error.reason == "File too large (max 50MB)"
        # Rejected files never get a handle
        assert len(resources.live_handles()) == 2

    def test_unreadable_file_is_rejected(self, registry, resources):
        def unreadable():
            raise OSError("permission denied")

        descriptor = FileDescriptor("locked.mp3", "audio/mpeg", 10, unreadable)

        results = ingest_files([descriptor, make_descriptor("fine.mp3")], registry)

        assert not results[0].ok
        assert "Could not read file" in results[0].error.reason
        assert results[1].ok
        assert len(resources.live_handles()) == 1

    def test_accepted_track_fields(self, registry, resources):
        [result] = ingest_files([make_descriptor("Artist - Song.mp3", data=b"12345")], registry)

        track = result.track
        assert track.title == "Artist - Song"
        assert track.id.startswith("track-")
        assert track.size_bytes == 5
        assert track.duration is None
        assert track.file_name == "Artist - Song.mp3"
        assert resources.is_live(track.handle)
        assert track.handle.path.read_bytes() == b"12345"

    def test_empty_batch(self, registry):
        assert ingest_files([], registry) == []


class TestTrackRegistry:
    def test_ids_are_unique(self, registry):
        ids = {registry.create(make_descriptor(f"{i}.mp3")).id for i in range(30)}

        assert len(ids) == 30

    def test_reserved_ids_are_not_issued(self, registry):
        with patch("mp3_player.domain.library.registry.uuid.uuid4") as uuid4:
            uuid4.side_effect = [
                uuid.UUID("aaaaaaaa" + "0" * 24),
                uuid.UUID("bbbbbbbb" + "0" * 24),
            ]
            registry.reserve_ids(["track-aaaaaaaa"])
            track_id = registry._new_id()

        assert track_id == "track-bbbbbbbb"

    def test_duration_probe_when_enabled(self, resources):
        registry = TrackRegistry(resources, probe_duration=True)

        with patch("mp3_player.domain.library.registry.probe_duration", return_value=123.0):
            track = registry.create(make_descriptor("a.mp3"))

        assert track.duration == 123.0

    def test_probe_of_unknown_format_returns_none(self, tmp_path):
        from mp3_player.domain.library.registry import probe_duration

        path = tmp_path / "noise.xyz"
        path.write_bytes(b"definitely not audio")

        assert probe_duration(path) is None


class TestFileDescriptorFromPath:
    def test_describes_local_file(self, tmp_path):
        path = tmp_path / "song.mp3"
        path.write_bytes(b"abc")

        descriptor = FileDescriptor.from_path(path)

        assert descriptor.name == "song.mp3"
        assert descriptor.mime_type == "audio/mpeg"
        assert descriptor.size_bytes == 3
        assert descriptor.read_bytes() == b"abc"

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            FileDescriptor.from_path(tmp_path / "gone.mp3")


class TestGetTrackTitle:
    @pytest.mark.parametrize(
        "file_name,expected",
        [
            ("song.mp3", "song"),
            ("Artist - Song.mp3", "Artist - Song"),
            ("archive.tar.gz", "archive.tar"),
            ("noext", "noext"),
            (".hidden", ".hidden"),
            ("", "Unknown Track"),
            (None, "Unknown Track"),
        ],
    )
    def test_titles(self, file_name, expected):
        assert get_track_title(file_name) == expected
