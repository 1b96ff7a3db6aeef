"""
Argument and command parsing utilities.

Cross-cutting utilities for parsing user input and command arguments.
"""

import math
import shlex
from typing import List, Optional


def parse_command(user_input: str) -> tuple[str, List[str]]:
    """
    Parse user input into command and arguments.

    Quoted arguments are kept together, so paths with spaces work:
        add "~/Music/My Song.mp3" -> ('add', ['~/Music/My Song.mp3'])

    Args:
        user_input: Raw user input string

    Returns:
        Tuple of (command, args) where command is lowercase and args is a list
    """
    try:
        parts = shlex.split(user_input.strip())
    except ValueError:
        # Unbalanced quotes - fall back to whitespace splitting
        parts = user_input.strip().split()
    if not parts:
        return "", []

    command = parts[0].lower()
    args = parts[1:] if len(parts) > 1 else []
    return command, args


def parse_time(text: str) -> Optional[float]:
    """
    Parse a playback position.

    Accepts plain seconds ('90', '12.5') or clock form ('1:30', '1:02:03').

    Returns:
        Seconds, or None if the text is not a time
    """
    text = text.strip()
    if not text:
        return None

    parts = text.split(":")
    if len(parts) > 3:
        return None

    try:
        values = [float(p) for p in parts]
    except ValueError:
        return None

    if any(v < 0 for v in values):
        return None

    seconds = 0.0
    for value in values:
        seconds = seconds * 60 + value
    return seconds


def parse_volume(text: str) -> Optional[float]:
    """
    Parse a volume level.

    '0.5' and '50' and '50%' all mean half volume. A '%' suffix always
    means a percentage, so '1%' is 0.01. Without it, whole numbers above 1
    are percentages and anything else is a level, so '1.7' is passed
    through for the controller to clamp.

    Returns:
        Level on the 0.0 - 1.0 scale (unclamped), or None if not a number
    """
    text = text.strip()
    is_percent = text.endswith("%")
    try:
        value = float(text[:-1] if is_percent else text)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    if is_percent or (value > 1.0 and value.is_integer()):
        return value / 100.0
    return value


__all__ = ["parse_command", "parse_time", "parse_volume"]
