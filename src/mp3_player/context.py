"""Process-scoped application context.

AppContext owns the one media backend, the one storage connection and the
components wired between them. create() is the explicit initialization
(including the single read of the saved playlist); shutdown() is the
explicit teardown (revoke live handles, detach listeners, close the backend).
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from loguru import logger
from rich.console import Console

from mp3_player.core.config import Config
from mp3_player.core.database import KeyValueStore
from mp3_player.core.exceptions import PlaybackError
from mp3_player.domain.library.registry import TrackRegistry
from mp3_player.domain.library.resources import ResourceManager
from mp3_player.domain.playback.controller import PlaybackController
from mp3_player.domain.playback.events import EventChannel
from mp3_player.domain.playback.media import MediaPlayer, SilentMediaPlayer
from mp3_player.domain.playback.mpv import MpvMediaPlayer
from mp3_player.domain.playlists.persistence import PlaylistPersistence
from mp3_player.domain.playlists.store import PlaylistStore


def create_media_player(config: Config, channel: EventChannel, use_mpv: bool = True) -> MediaPlayer:
    """Start mpv, or fall back to the silent backend if it cannot start."""
    if not use_mpv:
        return SilentMediaPlayer(channel)

    media = MpvMediaPlayer(channel, config.player)
    try:
        media.start()
    except PlaybackError as e:
        logger.warning(f"mpv unavailable, using silent backend: {e}")
        return SilentMediaPlayer(channel)
    return media


@dataclass
class AppContext:
    """Application components for one process.

    Attributes:
        config: Application configuration
        resources: Issues and revokes resource handles
        registry: Creates tracks for imported files
        store: The playlist
        persistence: Durable mirror of the playlist
        media: Media backend
        controller: Command surface for the UI
        console: Rich Console for tables (None falls back to plain log lines)
    """

    config: Config
    resources: ResourceManager
    registry: TrackRegistry
    store: PlaylistStore
    persistence: PlaylistPersistence
    media: MediaPlayer
    controller: PlaybackController
    console: Optional[Console] = None
    closed: bool = field(default=False)

    @classmethod
    def create(
        cls,
        config: Config,
        media: Optional[MediaPlayer] = None,
        kv_store: Optional[KeyValueStore] = None,
        console: Optional[Console] = None,
        spool_dir: Optional[Path] = None,
    ) -> "AppContext":
        """Wire the components and restore the saved playlist.

        Args:
            config: Application configuration
            media: Media backend (default: mpv, falling back to silent)
            kv_store: Durable storage (default: SQLite at the configured path)
            console: Optional Rich Console instance
            spool_dir: Where resource handles are spooled (default: private temp dir)

        Returns:
            Ready-to-use context
        """
        channel = media.channel if media is not None else EventChannel()
        if media is None:
            media = create_media_player(config, channel)

        if kv_store is None:
            db_path = Path(config.storage.database_path) if config.storage.database_path else None
            kv_store = KeyValueStore(db_path)

        resources = ResourceManager(spool_dir)
        registry = TrackRegistry(resources, probe_duration=config.ingest.probe_duration)
        store = PlaylistStore(resources)
        persistence = PlaylistPersistence(kv_store, config.storage.playlist_key)

        restored = persistence.load()
        registry.reserve_ids(t.id for t in restored)
        store.restore(restored)
        store.subscribe(persistence.on_playlist_changed)

        controller = PlaybackController(
            store,
            media,
            registry,
            channel=channel,
            ingest_config=config.ingest,
            repeat_mode=config.player.repeat_mode,
            volume=config.player.volume,
        )

        logger.info(f"Player ready ({len(store)} tracks restored)")
        return cls(
            config=config,
            resources=resources,
            registry=registry,
            store=store,
            persistence=persistence,
            media=media,
            controller=controller,
            console=console,
        )

    def shutdown(self) -> None:
        """Teardown: stop playback, detach listeners, revoke handles, close the backend."""
        if self.closed:
            return
        self.closed = True

        self.controller.shutdown()
        self.store.clear_listeners()
        self.resources.close()
        try:
            self.media.close()
        except PlaybackError as e:
            logger.warning(f"Error closing media backend: {e}")
        logger.info("Player shut down")

    def __enter__(self) -> "AppContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()
