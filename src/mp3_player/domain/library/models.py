"""
Music library domain models.

Contains data structures for imported tracks, their resource handles and
the file descriptors they are created from.
"""

import mimetypes
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, NamedTuple, Optional, Union

from mp3_player.core.exceptions import ValidationError

UNKNOWN_TITLE = "Unknown Track"


@dataclass(frozen=True)
class ResourceHandle:
    """Ephemeral reference that lets the media backend read a track's bytes.

    Only valid while the ResourceManager that issued it still lists it as live.
    """

    token: str  # 'res-<hex>', never reused
    path: Path  # Spooled copy of the file's bytes

    def __str__(self) -> str:
        return str(self.path)


@dataclass(frozen=True)
class Track:
    """Represents one playable item in the playlist.

    Tracks restored from storage carry metadata only: handle is None until
    the underlying file is imported again.
    """

    id: str
    title: str
    duration: Optional[float] = None  # in seconds, None until resolved
    handle: Optional[ResourceHandle] = None
    size_bytes: int = 0
    added_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    file_name: Optional[str] = None
    mime_type: Optional[str] = None

    @property
    def playable(self) -> bool:
        return self.handle is not None


class TrackSummary(NamedTuple):
    """Read-only view of a track for display."""

    id: str
    title: str
    duration: Optional[float]
    playable: bool

    @classmethod
    def of(cls, track: Track) -> "TrackSummary":
        return cls(track.id, track.title, track.duration, track.playable)


@dataclass(frozen=True)
class FileDescriptor:
    """Opaque description of a file offered for import."""

    name: str
    mime_type: str
    size_bytes: int
    read_bytes: Callable[[], bytes]

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "FileDescriptor":
        """Describe a local file. The bytes are read lazily on allocation."""
        path = Path(path).expanduser()
        mime_type, _ = mimetypes.guess_type(path.name)
        return cls(
            name=path.name,
            mime_type=mime_type or "",
            size_bytes=path.stat().st_size,
            read_bytes=path.read_bytes,
        )


class IngestResult(NamedTuple):
    """Per-file outcome of an import batch."""

    name: str
    track: Optional[Track] = None
    error: Optional[ValidationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.track is not None


def get_track_title(file_name: Optional[str]) -> str:
    """Display title for a file: the name with its final extension stripped.

    Example:
        'Artist - Song.mp3' -> 'Artist - Song'
    """
    if not file_name:
        return UNKNOWN_TITLE

    name = Path(file_name).name
    stem, dot, _ext = name.rpartition(".")
    # Names like '.hidden' or 'noext' keep their full text
    title = stem if dot and stem else name
    return title or UNKNOWN_TITLE
