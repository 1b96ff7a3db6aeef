"""
Cross-cutting utilities for the MP3 player.

Contains:
- formatting: time and file size display helpers
- parsers: Argument and command parsing
"""

from .formatting import format_duration, format_file_size, format_time
from .parsers import parse_command, parse_time, parse_volume

__all__ = [
    # From formatting
    "format_duration",
    "format_file_size",
    "format_time",
    # From parsers
    "parse_command",
    "parse_time",
    "parse_volume",
]
