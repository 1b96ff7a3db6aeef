"""
Display formatting helpers.
"""

import math
from typing import Optional


def format_time(seconds: Optional[float]) -> str:
    """Format time in seconds to M:SS format.

    None, NaN and negative values render as '0:00'.
    """
    if seconds is None or math.isnan(seconds) or seconds < 0:
        return "0:00"

    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes}:{secs:02d}"


def format_duration(seconds: Optional[float]) -> str:
    """Like format_time, but unknown durations render as '--:--'."""
    if seconds is None or math.isnan(seconds) or seconds <= 0:
        return "--:--"
    return format_time(seconds)


def format_file_size(size_bytes: int) -> str:
    """Format a byte count for humans, e.g. 1536 -> '1.5 KB'."""
    if not size_bytes or size_bytes <= 0:
        return "0 B"

    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ["B", "KB", "MB", "GB"]
    size = float(size_bytes)
    unit = 0
    while size >= 1024 and unit < len(units) - 1:
        size /= 1024
        unit += 1
    return f"{size:.1f} {units[unit]}"
