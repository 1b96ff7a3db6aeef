"""Tests for display formatting helpers."""

import pytest

from mp3_player.utils.formatting import format_duration, format_file_size, format_time


@pytest.mark.parametrize(
    "seconds,expected",
    [(0, "0:00"), (5, "0:05"), (59.9, "0:59"), (60, "1:00"), (245, "4:05"), (3600, "60:00")],
)
def test_format_time(seconds, expected):
    assert format_time(seconds) == expected


@pytest.mark.parametrize("seconds", [None, float("nan"), -1])
def test_format_time_invalid(seconds):
    assert format_time(seconds) == "0:00"


def test_format_duration_unknown():
    assert format_duration(None) == "--:--"
    assert format_duration(0) == "--:--"
    assert format_duration(125) == "2:05"


@pytest.mark.parametrize(
    "size,expected",
    [
        (0, "0 B"),
        (512, "512 B"),
        (1536, "1.5 KB"),
        (5 * 1024 * 1024, "5.0 MB"),
        (3 * 1024**3, "3.0 GB"),
    ],
)
def test_format_file_size(size, expected):
    assert format_file_size(size) == expected
