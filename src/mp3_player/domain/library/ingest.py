"""
Import filtering for audio files.

Files are validated one by one; a rejected file never aborts the rest of
the batch.
"""

from typing import Iterable, List, Optional

from loguru import logger

from mp3_player.core.config import IngestConfig
from mp3_player.core.exceptions import ValidationError

from .models import FileDescriptor, IngestResult
from .registry import TrackRegistry


def is_audio_file(descriptor: FileDescriptor, config: Optional[IngestConfig] = None) -> bool:
    """Check the MIME type against the allow-list, falling back to the file extension."""
    config = config or IngestConfig()
    mime_type = (descriptor.mime_type or "").lower()
    if mime_type in config.allowed_mime_types:
        return True
    name = descriptor.name.lower()
    return any(name.endswith(ext) for ext in config.fallback_extensions)


def validate_descriptor(descriptor: FileDescriptor, config: Optional[IngestConfig] = None) -> None:
    """Validate one file offered for import.

    Raises:
        ValidationError: If the type is not recognized or the file is too large
    """
    config = config or IngestConfig()

    if not is_audio_file(descriptor, config):
        raise ValidationError(descriptor.name, "Invalid audio file format")

    if descriptor.size_bytes > config.max_file_size_bytes:
        raise ValidationError(
            descriptor.name, f"File too large (max {config.max_file_size_mb}MB)"
        )


def ingest_files(
    descriptors: Iterable[FileDescriptor],
    registry: TrackRegistry,
    config: Optional[IngestConfig] = None,
) -> List[IngestResult]:
    """Validate each descriptor and create Tracks for the accepted ones.

    Args:
        descriptors: Files offered for import
        registry: Creates tracks and allocates their handles
        config: Filter policy (defaults to IngestConfig())

    Returns:
        One IngestResult per descriptor, in input order
    """
    config = config or IngestConfig()
    results: List[IngestResult] = []

    for descriptor in descriptors:
        try:
            validate_descriptor(descriptor, config)
            track = registry.create(descriptor)
        except ValidationError as e:
            logger.warning(f"Rejected {e.file_name}: {e.reason}")
            results.append(IngestResult(name=descriptor.name, error=e))
            continue
        results.append(IngestResult(name=descriptor.name, track=track))

    accepted = sum(1 for r in results if r.ok)
    logger.info(f"Ingested {accepted}/{len(results)} files")
    return results
