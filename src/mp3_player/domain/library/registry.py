"""
Track creation for imported files.
"""

import uuid
from pathlib import Path
from typing import Optional, Set

import mutagen
from loguru import logger

from mp3_player.core.exceptions import ValidationError

from .models import FileDescriptor, Track, get_track_title
from .resources import ResourceManager


class TrackRegistry:
    """Turns accepted file descriptors into Tracks that own a live handle."""

    def __init__(self, resources: ResourceManager, probe_duration: bool = False):
        self.resources = resources
        self.probe_duration = probe_duration
        self._issued_ids: Set[str] = set()

    def reserve_ids(self, ids) -> None:
        """Mark ids (e.g. restored from storage) as taken."""
        self._issued_ids.update(ids)

    def _new_id(self) -> str:
        while True:
            track_id = f"track-{uuid.uuid4().hex[:8]}"
            if track_id not in self._issued_ids:
                self._issued_ids.add(track_id)
                return track_id

    def create(self, descriptor: FileDescriptor) -> Track:
        """Allocate a handle for the file and build its Track.

        Raises:
            ValidationError: If the file's bytes cannot be read
        """
        suffix = Path(descriptor.name).suffix.lower()
        try:
            handle = self.resources.allocate(descriptor.read_bytes, suffix=suffix)
        except OSError as e:
            raise ValidationError(descriptor.name, f"Could not read file: {e}") from e

        duration = probe_duration(handle.path) if self.probe_duration else None

        track = Track(
            id=self._new_id(),
            title=get_track_title(descriptor.name),
            duration=duration,
            handle=handle,
            size_bytes=descriptor.size_bytes,
            file_name=descriptor.name,
            mime_type=descriptor.mime_type or None,
        )
        logger.debug(f"Registered {track.id}: {track.title}")
        return track


def probe_duration(path: Path) -> Optional[float]:
    """Read duration from file tags with mutagen. None when unknown."""
    try:
        audio = mutagen.File(path)
    except mutagen.MutagenError as e:
        logger.debug(f"Duration probe failed for {path.name}: {e}")
        return None

    if audio is None or getattr(audio, "info", None) is None:
        return None

    length = getattr(audio.info, "length", None)
    if length is None or length <= 0:
        return None
    return float(length)
