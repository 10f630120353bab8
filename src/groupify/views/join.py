"""Join screen view-model: opened from the shared join URL."""

from __future__ import annotations

from typing import Callable

from groupify.infrastructure.config import JOIN_POLL_INTERVAL
from groupify.sessions.repository import SessionRepository
from groupify.sessions.store import SessionStore, parse_join_url
from groupify.sessions.types import Participant, Session
from groupify.sync.synchronizer import groups_changed
from groupify.sync.types import ChangeFeed
from groupify.views.base import View

INVALID_SESSION = "No session ID provided"


class JoinView(View):
    name = "join"
    signal = groups_changed
    poll_interval = JOIN_POLL_INTERVAL

    def __init__(self, store: SessionStore, session_repo: SessionRepository, session_id: str | None) -> None:
        super().__init__(store, session_repo)
        self.session_id = session_id
        self.participant: Participant | None = None
        self.success = ""
        if session_id is None:
            self.error = INVALID_SESSION
        else:
            store.set_current_session(session_id)

    @classmethod
    def from_url(cls, store: SessionStore, session_repo: SessionRepository, url: str) -> JoinView:
        return cls(store, session_repo, parse_join_url(url))

    @property
    def is_valid(self) -> bool:
        return self.session_id is not None

    @property
    def session_name(self) -> str | None:
        session = self.store.current_session
        return session.name if session else None

    def join(self, name: str) -> Participant | None:
        """Add the user to the session. An invalid join URL never creates a participant."""
        self.success = ""
        if not self.is_valid:
            self.error = INVALID_SESSION
            return None
        participant = self._run(lambda: self.store.add_participant(name), "Failed to join session. Please try again.")
        if participant is not None:
            self.participant = participant
            self.success = "Successfully joined the session!"
        return participant

    @property
    def my_group(self) -> int | None:
        if self.participant is None:
            return None
        return self.store.group_of(self.participant.id)

    def group_mates(self) -> list[str]:
        """Names of everyone in the joined participant's group, the participant included."""
        number = self.my_group
        if number is None:
            return []
        return [p.name for p in self.store.group_members(number)]

    def watch(
        self,
        feed: ChangeFeed | None = None,
        interval_s: float | None = None,
        on_reload: Callable[[Session], None] | None = None,
    ) -> ChangeFeed | None:
        if not self.is_valid:
            return None
        return super().watch(feed, interval_s, on_reload)
