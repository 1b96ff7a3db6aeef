"""Library domain - imported tracks and their resource handles.

This domain handles:
- Track and file descriptor models
- Resource handle allocation and revocation
- Import validation (MIME allow-list, size limit)
- Track creation with optional duration probing
"""

from .ingest import ingest_files, is_audio_file, validate_descriptor
from .models import (
    FileDescriptor,
    IngestResult,
    ResourceHandle,
    Track,
    TrackSummary,
    get_track_title,
)
from .registry import TrackRegistry, probe_duration
from .resources import ResourceManager

__all__ = [
    # Models
    "FileDescriptor",
    "IngestResult",
    "ResourceHandle",
    "Track",
    "TrackSummary",
    "get_track_title",
    # Resources
    "ResourceManager",
    # Registry
    "TrackRegistry",
    "probe_duration",
    # Ingest
    "ingest_files",
    "is_audio_file",
    "validate_descriptor",
]
