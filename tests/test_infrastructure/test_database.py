"""Tests for database initialization and the key-value store."""

from groupify.infrastructure.database import AppDatabase


class TestAppDatabase:
    def test_init_creates_schema(self):
        db = AppDatabase()
        db._init_test()
        tables = db.db.execute("SELECT name FROM sqlite_master WHERE type='table' ORDER BY name").fetchall()
        assert "storage" in [row[0] for row in tables]

    def test_repos_initialized(self):
        db = AppDatabase()
        db._init_test()
        assert db.kv_store is not None
        assert db.session_repo is not None
        assert db.path is None

    def test_multiple_init_is_safe(self):
        db = AppDatabase()
        db._init_test()
        db._init_test()  # Should not raise

    def test_file_store_shared_between_connections(self, tmp_path):
        path = tmp_path / "nested" / "groupify.db"
        writer = AppDatabase()
        writer.init(path)
        reader = AppDatabase()
        reader.init(path)

        writer.kv_store.set_item("k", "v")
        assert reader.kv_store.get_item("k") == "v"
        assert writer.path == path

        writer.close()
        reader.close()
        assert not writer.is_open


class TestKeyValueStore:
    def test_set_and_get(self, db):
        db.kv_store.set_item("key1", "value1")
        assert db.kv_store.get_item("key1") == "value1"

    def test_get_nonexistent(self, db):
        assert db.kv_store.get_item("nonexistent") is None

    def test_upsert(self, db):
        db.kv_store.set_item("key1", "old")
        db.kv_store.set_item("key1", "new")
        assert db.kv_store.get_item("key1") == "new"

    def test_keys_by_prefix(self, db):
        db.kv_store.set_item("a_1", "x")
        db.kv_store.set_item("a_2", "x")
        db.kv_store.set_item("b_1", "x")
        assert db.kv_store.keys("a_") == ["a_1", "a_2"]
        assert len(db.kv_store.keys()) == 3

    def test_prefix_is_literal(self, db):
        db.kv_store.set_item("a%b", "x")
        db.kv_store.set_item("aXb", "x")
        assert db.kv_store.keys("a%") == ["a%b"]
