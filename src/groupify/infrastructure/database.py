"""SQLite schema and AppDatabase composition root."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from groupify.infrastructure.config import STORE_DIR, STORE_FILENAME
from groupify.infrastructure.logger import logger


def create_schema(db: sqlite3.Connection) -> None:
    """Create all tables. Safe to call multiple times (IF NOT EXISTS)."""
    db.executescript("""
        CREATE TABLE IF NOT EXISTS storage (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        );
    """)


class AppDatabase:
    """Composition root that opens the durable store and exposes repositories."""

    def __init__(self) -> None:
        self._db: sqlite3.Connection | None = None
        self._path: Path | None = None
        # Repositories are set after init
        self.kv_store: KeyValueStore | None = None  # type: ignore[assignment]
        self.session_repo: SessionRepository | None = None  # type: ignore[assignment]

    @property
    def db(self) -> sqlite3.Connection:
        assert self._db is not None, "Database not initialized. Call init() first."
        return self._db

    @property
    def is_open(self) -> bool:
        return self._db is not None

    @property
    def path(self) -> Path | None:
        """File backing the store, or None for an in-memory database."""
        return self._path

    def init(self, path: Path | None = None) -> None:
        """Open (or create) the database file, by default at the standard location."""
        db_path = path or STORE_DIR / STORE_FILENAME
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self._db = sqlite3.connect(str(db_path))
        self._db.row_factory = sqlite3.Row
        # Readers in other processes must not block on the writer
        self._db.execute("PRAGMA journal_mode=WAL")
        self._path = db_path
        self._init_repos()
        logger.debug("Durable store opened", path=str(db_path))

    def _init_test(self) -> None:
        """For tests only. Creates a fresh in-memory database."""
        self._db = sqlite3.connect(":memory:")
        self._db.row_factory = sqlite3.Row
        self._path = None
        self._init_repos()

    def _init_repos(self) -> None:
        assert self._db is not None
        create_schema(self._db)

        # Import here to avoid circular imports
        from groupify.infrastructure.storage import KeyValueStore
        from groupify.sessions.repository import SessionRepository

        self.kv_store = KeyValueStore(self._db)
        self.session_repo = SessionRepository(self.kv_store)

    def close(self) -> None:
        if self._db is not None:
            self._db.close()
            self._db = None
