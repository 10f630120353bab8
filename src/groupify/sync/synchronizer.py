"""Read-only reconciliation of the durable session record into the session store."""

from __future__ import annotations

from typing import Callable

from groupify.infrastructure.logger import logger
from groupify.sessions.repository import SessionRepository
from groupify.sessions.store import SessionStore
from groupify.sessions.types import Session
from groupify.sync.types import DivergenceSignal


# --- Divergence signals ---


def participant_count_changed(record: Session, current: Session | None) -> bool:
    """Admin view: someone joined from another device."""
    return len(record.participants) != (len(current.participants) if current else 0)


def groups_changed(record: Session, current: Session | None) -> bool:
    """Join view: assignments appeared (or were reset) since the last load."""
    return record.groups != (current.groups if current else {})


def last_update_changed(record: Session, current: Session | None) -> bool:
    """Generic update hook: any mutation restamps ``last_update``."""
    return current is None or record.last_update != current.last_update


SIGNALS: dict[str, DivergenceSignal] = {
    "admin": participant_count_changed,
    "join": groups_changed,
    "update": last_update_changed,
}


def signal_for(mode: str) -> DivergenceSignal:
    try:
        return SIGNALS[mode]
    except KeyError:
        raise ValueError(f"Unknown sync mode: {mode!r} (expected one of {', '.join(SIGNALS)})") from None


class Synchronizer:
    """Compares the durable record with the in-memory view and reloads on divergence.

    Never writes. Concurrent writers on the durable store are not merged;
    whatever record is there when the tick reads it wins.
    """

    def __init__(
        self,
        store: SessionStore,
        session_repo: SessionRepository,
        signal: DivergenceSignal,
        on_reload: Callable[[Session], None] | None = None,
    ) -> None:
        self._store = store
        self._session_repo = session_repo
        self._signal = signal
        self._on_reload = on_reload
        self.reload_count = 0

    def tick(self) -> bool:
        """Run one reconciliation. Returns True when the store was refreshed."""
        session_id = self._store.current_session_id
        if session_id is None:
            return False

        record = self._session_repo.get_session(session_id)
        if record is None:
            logger.debug("No durable record for active session", session_id=session_id)
            return False

        if not self._signal(record, self._store.current_session):
            return False

        self._store.set_current_session(session_id)
        self.reload_count += 1
        logger.debug(
            "Session refreshed from durable store",
            session_id=session_id,
            participants=len(record.participants),
            groups=len(record.groups),
        )
        if self._on_reload is not None:
            self._on_reload(record)
        return True

    async def atick(self) -> None:
        self.tick()
