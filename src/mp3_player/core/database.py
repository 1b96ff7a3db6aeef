"""
SQLite key-value storage for the MP3 player
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from loguru import logger

from .config import get_data_dir
from .exceptions import PersistenceError

# Database schema version for migrations
SCHEMA_VERSION = 1


def get_database_path() -> Path:
    """Get the path to the SQLite database file."""
    return get_data_dir() / "mp3_player.db"


@contextmanager
def get_db_connection(db_path: Optional[Path] = None) -> Iterator[sqlite3.Connection]:
    """Get a database connection with proper cleanup."""
    db_path = db_path or get_database_path()
    conn = sqlite3.connect(db_path, timeout=30.0)
    conn.row_factory = sqlite3.Row  # Enable dict-like access

    try:
        yield conn
    finally:
        conn.close()


def init_database(db_path: Optional[Path] = None) -> None:
    """Initialize the database with required tables."""
    db_path = db_path or get_database_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    with get_db_connection(db_path) as conn:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        cursor = conn.execute("SELECT MAX(version) FROM schema_version")
        current_version = cursor.fetchone()[0] or 0
        if current_version < SCHEMA_VERSION:
            conn.execute(
                "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
                (SCHEMA_VERSION,),
            )
        conn.commit()


class KeyValueStore:
    """Namespaced string storage backed by a single SQLite table.

    Every failure surfaces as PersistenceError so callers have one thing to catch.
    """

    def __init__(self, db_path: Optional[Path] = None, namespace: str = "mp3-player"):
        self.db_path = Path(db_path) if db_path else get_database_path()
        self.namespace = namespace
        self._initialized = False

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def _ensure_initialized(self) -> None:
        if self._initialized:
            return
        try:
            init_database(self.db_path)
        except (sqlite3.Error, OSError) as e:
            raise PersistenceError(f"Cannot open database {self.db_path}: {e}") from e
        self._initialized = True

    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the key is missing."""
        self._ensure_initialized()
        try:
            with get_db_connection(self.db_path) as conn:
                cursor = conn.execute(
                    "SELECT value FROM kv_store WHERE key = ?", (self._key(key),)
                )
                row = cursor.fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to read '{key}': {e}") from e
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        """Insert or replace a value."""
        self._ensure_initialized()
        try:
            with get_db_connection(self.db_path) as conn:
                conn.execute(
                    """
                    INSERT INTO kv_store (key, value, updated_at)
                    VALUES (?, ?, CURRENT_TIMESTAMP)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (self._key(key), value),
                )
                conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to write '{key}': {e}") from e
        logger.debug(f"Stored {len(value)} bytes under {self._key(key)}")

    def delete(self, key: str) -> None:
        """Remove a key (missing keys are ignored)."""
        self._ensure_initialized()
        try:
            with get_db_connection(self.db_path) as conn:
                conn.execute("DELETE FROM kv_store WHERE key = ?", (self._key(key),))
                conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to delete '{key}': {e}") from e
