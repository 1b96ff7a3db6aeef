"""
Resource lifecycle management for imported audio.

Each imported file is spooled into a private temporary file; the resulting
ResourceHandle is what the media backend loads. Handles are revoked exactly
once, when their track leaves the playlist or at process teardown.
"""

import shutil
import tempfile
import uuid
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set

from loguru import logger

from .models import ResourceHandle


class ResourceManager:
    """Allocates and revokes ResourceHandles.

    Tokens are never reused: a revoked token stays in the revoked set for
    the lifetime of the manager, so allocate() cannot hand it out again.
    """

    def __init__(self, spool_dir: Optional[Path] = None):
        self._owns_spool_dir = spool_dir is None
        if spool_dir is None:
            spool_dir = Path(tempfile.mkdtemp(prefix="mp3-player-"))
        else:
            spool_dir.mkdir(parents=True, exist_ok=True)
        self.spool_dir = spool_dir
        self._live: Dict[str, ResourceHandle] = {}
        self._revoked: Set[str] = set()
        self._closed = False

    def _new_token(self) -> str:
        while True:
            token = f"res-{uuid.uuid4().hex}"
            if token not in self._live and token not in self._revoked:
                return token

    def allocate(self, read_bytes: Callable[[], bytes], suffix: str = "") -> ResourceHandle:
        """Spool the accessor's bytes and return a new live handle.

        Args:
            read_bytes: Zero-argument callable returning the file's content
            suffix: File extension for the spooled copy (helps media backends sniff format)

        Returns:
            Handle unique among all handles this manager ever issued

        Raises:
            OSError: If the bytes cannot be read or written
            RuntimeError: If the manager has been closed
        """
        if self._closed:
            raise RuntimeError("ResourceManager is closed")

        token = self._new_token()
        path = self.spool_dir / f"{token}{suffix}"
        data = read_bytes()
        path.write_bytes(data)

        handle = ResourceHandle(token=token, path=path)
        self._live[token] = handle
        logger.debug(f"Allocated {token} ({len(data)} bytes)")
        return handle

    def revoke(self, handle: ResourceHandle) -> bool:
        """Invalidate a handle and delete its spooled bytes.

        Returns:
            True if the handle was live, False if it was already revoked or unknown
        """
        if handle.token in self._revoked:
            logger.warning(f"Handle {handle.token} already revoked")
            return False
        if self._live.pop(handle.token, None) is None:
            logger.warning(f"Unknown handle {handle.token}")
            return False

        self._revoked.add(handle.token)
        try:
            handle.path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not delete spooled file {handle.path}: {e}")
        logger.debug(f"Revoked {handle.token}")
        return True

    def is_live(self, handle: Optional[ResourceHandle]) -> bool:
        return handle is not None and handle.token in self._live

    def live_handles(self) -> List[ResourceHandle]:
        return list(self._live.values())

    def revoke_all(self) -> int:
        """Revoke every live handle. Returns how many were revoked."""
        count = 0
        for handle in list(self._live.values()):
            if self.revoke(handle):
                count += 1
        return count

    def close(self) -> None:
        """Teardown: revoke remaining handles and remove the spool directory."""
        if self._closed:
            return
        count = self.revoke_all()
        self._closed = True
        if self._owns_spool_dir:
            shutil.rmtree(self.spool_dir, ignore_errors=True)
        logger.info(f"Resource manager closed ({count} handles revoked at teardown)")
