"""Durable key-value storage shared by every process observing a session."""

from __future__ import annotations

import sqlite3


class KeyValueStore:
    """String-to-string entries in the ``storage`` table.

    Each write commits immediately so other connections to the same file
    see it on their next read. There is no read-modify-write transaction:
    two writers racing on one key leave whichever value committed last.
    """

    def __init__(self, db: sqlite3.Connection) -> None:
        self._db = db

    def get_item(self, key: str) -> str | None:
        row = self._db.execute("SELECT value FROM storage WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        self._db.execute("INSERT OR REPLACE INTO storage (key, value) VALUES (?, ?)", (key, value))
        self._db.commit()

    def keys(self, prefix: str = "") -> list[str]:
        rows = self._db.execute(
            "SELECT key FROM storage WHERE substr(key, 1, ?) = ? ORDER BY key", (len(prefix), prefix)
        ).fetchall()
        return [row[0] for row in rows]
