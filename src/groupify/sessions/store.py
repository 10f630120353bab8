"""Session store: the only writer of session, participant and group state."""

from __future__ import annotations

import random
import string
import time
from datetime import datetime
from typing import Callable
from urllib.parse import parse_qs, urlencode, urlsplit

from groupify.infrastructure.config import GROUPIFY_ORIGIN, MIN_GROUP_COUNT
from groupify.infrastructure.logger import logger
from groupify.sessions.assignment import RandomSource, partition
from groupify.sessions.errors import NoActiveSessionError, SessionValidationError
from groupify.sessions.repository import SessionRepository
from groupify.sessions.types import GroupsAssigned, OnGroupsAssigned, Participant, Session


def generate_session_id() -> str:
    rand = "".join(random.choices(string.ascii_lowercase + string.digits, k=6))
    return f"session-{int(time.time() * 1000)}-{rand}"


def generate_participant_id() -> str:
    rand = "".join(random.choices(string.ascii_lowercase + string.digits, k=6))
    return f"p-{int(time.time() * 1000)}-{rand}"


def build_join_url(session_id: str, origin: str = GROUPIFY_ORIGIN) -> str:
    return f"{origin.rstrip('/')}/join?{urlencode({'sessionId': session_id})}"


def parse_join_url(url: str) -> str | None:
    """Extract ``sessionId`` from a join URL; None when absent or blank."""
    values = parse_qs(urlsplit(url).query).get("sessionId", [])
    session_id = values[0].strip() if values else ""
    return session_id or None


class SessionStore:
    """In-memory view of the active session, mirrored into the durable store on every mutation.

    The active view is ``current_session_id`` plus ``participants`` and
    ``groups``; ``sessions`` holds every session this process has created or
    loaded. Read-modify-write against the durable store is not atomic, so a
    second process writing the same session can overwrite this one's change.
    """

    def __init__(
        self,
        session_repo: SessionRepository,
        rng: RandomSource | None = None,
        id_factory: Callable[[], str] = generate_session_id,
        participant_id_factory: Callable[[], str] = generate_participant_id,
        origin: str = GROUPIFY_ORIGIN,
    ) -> None:
        self._session_repo = session_repo
        self._rng = rng or random.Random()
        self._id_factory = id_factory
        self._participant_id_factory = participant_id_factory
        self._origin = origin
        self._sessions: dict[str, Session] = {}
        self._current_session_id: str | None = None
        self._participants: list[Participant] = []
        self._groups: dict[int, list[str]] = {}
        self._listeners: list[OnGroupsAssigned] = []

    # --- Read accessors ---

    @property
    def current_session_id(self) -> str | None:
        return self._current_session_id

    @property
    def current_session(self) -> Session | None:
        if self._current_session_id is None:
            return None
        return self._sessions.get(self._current_session_id)

    @property
    def participants(self) -> list[Participant]:
        return list(self._participants)

    @property
    def groups(self) -> dict[int, list[str]]:
        return {number: list(ids) for number, ids in self._groups.items()}

    @property
    def sessions(self) -> dict[str, Session]:
        return dict(self._sessions)

    def get_session(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def get_join_url(self, session_id: str) -> str:
        return build_join_url(session_id, self._origin)

    def find_participant(self, participant_id: str) -> Participant | None:
        return next((p for p in self._participants if p.id == participant_id), None)

    def group_of(self, participant_id: str) -> int | None:
        participant = self.find_participant(participant_id)
        return participant.group if participant else None

    def group_members(self, number: int) -> list[Participant]:
        by_id = {p.id: p for p in self._participants}
        return [by_id[pid] for pid in self._groups.get(number, []) if pid in by_id]

    # --- Notifications ---

    def on_groups_assigned(self, listener: OnGroupsAssigned) -> Callable[[], None]:
        """Subscribe to assignment notifications. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit_groups_assigned(self, event: GroupsAssigned) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Groups-assigned listener failed", session_id=event.session_id)

    # --- Operations ---

    def create_session(self, name: str, group_count: int) -> str:
        name = name.strip()
        if not name:
            raise SessionValidationError("Please enter a session name")
        if group_count < MIN_GROUP_COUNT:
            raise SessionValidationError(f"Group count must be at least {MIN_GROUP_COUNT}")

        now = datetime.now().isoformat()
        session = Session(
            id=self._id_factory(),
            name=name,
            group_count=group_count,
            status="open",
            created_at=now,
            last_update=now,
        )
        self._session_repo.save_session(session)
        self._sessions[session.id] = session
        self._activate(session)
        logger.info("Session created", session_id=session.id, name=name, group_count=group_count)
        return session.id

    def set_current_session(self, session_id: str) -> None:
        """Make a session active, preferring the durable record over the in-memory copy.

        An unknown id still becomes active, with no participants and no groups.
        """
        session = self._session_repo.get_session(session_id)
        if session is not None:
            self._sessions[session_id] = session
        else:
            session = self._sessions.get(session_id)

        self._current_session_id = session_id
        self._participants = list(session.participants) if session else []
        self._groups = dict(session.groups) if session else {}

    def add_participant(self, name: str) -> Participant:
        """Join the active session. A name already present returns the existing participant."""
        name = name.strip()
        if not name:
            raise SessionValidationError("Please enter your name")
        session = self._require_session("add_participant")

        existing = session.find_participant_by_name(name)
        if existing is not None:
            logger.debug("Duplicate participant ignored", session_id=session.id, name=name)
            return existing
        if session.status == "assigned":
            raise SessionValidationError("Groups have already been assigned for this session")

        participant = Participant(
            id=self._participant_id_factory(),
            name=name,
            joined_at=datetime.now().isoformat(),
            group=None,
        )
        self._save(session.model_copy(update={"participants": [*self._participants, participant]}))
        logger.info("Participant joined", session_id=session.id, participant_id=participant.id)
        return participant

    def assign_groups(self) -> dict[int, list[str]]:
        session = self._require_session("assign_groups")
        if not self._participants:
            raise SessionValidationError("No participants to assign")

        assigned, groups = partition(self._participants, session.group_count, self._rng)
        self._save(session.model_copy(update={"participants": assigned, "groups": groups, "status": "assigned"}))
        logger.info(
            "Groups assigned",
            session_id=session.id,
            participants=len(assigned),
            groups=len(groups),
        )
        self._emit_groups_assigned(GroupsAssigned(session_id=session.id, groups=self.groups))
        return self.groups

    def reset_groups(self) -> None:
        session = self._require_session("reset_groups")
        cleared = [p.model_copy(update={"group": None}) for p in self._participants]
        self._save(session.model_copy(update={"participants": cleared, "groups": {}, "status": "open"}))
        logger.info("Groups reset", session_id=session.id)

    def clear_session(self) -> None:
        """Deactivate the current session in memory. The durable record is left alone."""
        self._current_session_id = None
        self._participants = []
        self._groups = {}

    # --- Internals ---

    def _require_session(self, operation: str) -> Session:
        session = self.current_session
        if session is None:
            raise NoActiveSessionError(operation)
        return session

    def _activate(self, session: Session) -> None:
        self._current_session_id = session.id
        self._participants = list(session.participants)
        self._groups = dict(session.groups)

    def _save(self, session: Session) -> None:
        session = session.model_copy(update={"last_update": datetime.now().isoformat()})
        self._session_repo.save_session(session)
        self._sessions[session.id] = session
        self._activate(session)
