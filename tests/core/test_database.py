"""
Tests for the SQLite key-value store.
"""

import pytest

from mp3_player.core.database import SCHEMA_VERSION, KeyValueStore, get_db_connection, init_database
from mp3_player.core.exceptions import PersistenceError


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "nested" / "player.db"


class TestInitDatabase:
    def test_creates_tables(self, db_path):
        init_database(db_path)

        with get_db_connection(db_path) as conn:
            tables = {
                row["name"]
                for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
            }
            version = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()[0]

        assert {"schema_version", "kv_store"} <= tables
        assert version == SCHEMA_VERSION

    def test_is_idempotent(self, db_path):
        init_database(db_path)
        init_database(db_path)


class TestKeyValueStore:
    def test_get_missing_key(self, db_path):
        assert KeyValueStore(db_path).get("absent") is None

    def test_set_then_get(self, db_path):
        store = KeyValueStore(db_path)

        store.set("playlist", "[]")

        assert store.get("playlist") == "[]"

    def test_set_overwrites(self, db_path):
        store = KeyValueStore(db_path)
        store.set("playlist", "[1]")

        store.set("playlist", "[2]")

        assert store.get("playlist") == "[2]"

    def test_delete(self, db_path):
        store = KeyValueStore(db_path)
        store.set("playlist", "[]")

        store.delete("playlist")
        store.delete("playlist")

        assert store.get("playlist") is None

    def test_namespaces_are_isolated(self, db_path):
        KeyValueStore(db_path, namespace="one").set("key", "first")

        assert KeyValueStore(db_path, namespace="two").get("key") is None
        assert KeyValueStore(db_path, namespace="one").get("key") == "first"

    def test_unopenable_database(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        with pytest.raises(PersistenceError):
            KeyValueStore(blocker / "player.db").get("playlist")
