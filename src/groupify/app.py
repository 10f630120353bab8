"""GroupifyApp: composes the durable store, session store and views."""

from __future__ import annotations

import random
from pathlib import Path
from typing import Callable

from groupify.infrastructure.database import AppDatabase
from groupify.infrastructure.logger import logger
from groupify.sessions.assignment import RandomSource
from groupify.sessions.store import SessionStore
from groupify.sessions.types import Session
from groupify.sync.feeds import PushChangeFeed
from groupify.sync.synchronizer import Synchronizer, signal_for
from groupify.sync.types import ChangeFeed
from groupify.views.admin import AdminView
from groupify.views.join import JoinView


class GroupifyApp:
    """One process's view of the shared store. Every process opening the same file sees the same sessions."""

    def __init__(self, db: AppDatabase | None = None, rng: RandomSource | None = None) -> None:
        self._db = db or AppDatabase()
        self._rng = rng or random.Random()
        self._store: SessionStore | None = None

    def start(self, path: Path | None = None) -> None:
        """Open the durable store (standard location unless ``path`` is given) if not already open."""
        if not self._db.is_open:
            self._db.init(path)
        self._store = SessionStore(self._db.session_repo, rng=self._rng)
        logger.debug("Groupify app ready", path=str(self._db.path) if self._db.path else ":memory:")

    def shutdown(self) -> None:
        self._db.close()
        self._store = None

    @property
    def store(self) -> SessionStore:
        assert self._store is not None, "App not started. Call start() first."
        return self._store

    @property
    def db(self) -> AppDatabase:
        return self._db

    # --- Views ---

    def admin_view(self) -> AdminView:
        return AdminView(self.store, self._db.session_repo)

    def join_view(self, url: str) -> JoinView:
        return JoinView.from_url(self.store, self._db.session_repo, url)

    def join_view_for(self, session_id: str | None) -> JoinView:
        return JoinView(self.store, self._db.session_repo, session_id)

    # --- Feeds ---

    def push_feed(self, mode: str, on_reload: Callable[[Session], None] | None = None) -> ChangeFeed:
        """File-change driven feed for the active session; needs a file-backed store."""
        synchronizer = Synchronizer(self.store, self._db.session_repo, signal_for(mode), on_reload)
        return PushChangeFeed.for_store_file(f"{mode} push", synchronizer, self._db.path)
