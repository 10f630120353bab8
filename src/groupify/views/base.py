"""Shared plumbing for view-models: error capture and change-feed lifecycle."""

from __future__ import annotations

import sqlite3
from typing import Callable, TypeVar

from groupify.infrastructure.logger import logger
from groupify.sessions.errors import GroupifyError
from groupify.sessions.repository import SessionRepository
from groupify.sessions.store import SessionStore
from groupify.sessions.types import Session
from groupify.sync.feeds import PollingChangeFeed
from groupify.sync.synchronizer import Synchronizer
from groupify.sync.types import ChangeFeed, DivergenceSignal

T = TypeVar("T")


class View:
    """Base for the admin and join view-models.

    Actions never raise domain errors: the message lands in ``error`` for
    display and the user retries by hand. Subclasses pick the divergence
    signal and poll period their screen needs.
    """

    name = "view"
    signal: DivergenceSignal
    poll_interval: float

    def __init__(self, store: SessionStore, session_repo: SessionRepository) -> None:
        self.store = store
        self.session_repo = session_repo
        self.error = ""
        self._feed: ChangeFeed | None = None

    def _run(self, action: Callable[[], T], failure_message: str) -> T | None:
        self.error = ""
        try:
            return action()
        except GroupifyError as err:
            self.error = str(err)
        except sqlite3.Error:
            logger.exception(f"{self.name} action failed")
            self.error = failure_message
        return None

    # --- Feed lifecycle ---

    def synchronizer(self, on_reload: Callable[[Session], None] | None = None) -> Synchronizer:
        return Synchronizer(self.store, self.session_repo, type(self).signal, on_reload)

    def watch(
        self,
        feed: ChangeFeed | None = None,
        interval_s: float | None = None,
        on_reload: Callable[[Session], None] | None = None,
    ) -> ChangeFeed:
        """Start keeping this view current; defaults to polling at the view's period."""
        self.stop()
        self._feed = feed or PollingChangeFeed(
            f"{self.name} poll", interval_s or self.poll_interval, self.synchronizer(on_reload)
        )
        self._feed.start()
        return self._feed

    def stop(self) -> None:
        """Stop watching; call when the view is no longer displayed."""
        if self._feed is not None:
            self._feed.stop()
            self._feed = None

    @property
    def feed(self) -> ChangeFeed | None:
        return self._feed
