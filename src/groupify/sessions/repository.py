"""Session record persistence in the durable key-value store."""

from __future__ import annotations

from pydantic import ValidationError

from groupify.infrastructure.config import STORAGE_KEY_PREFIX
from groupify.infrastructure.logger import logger
from groupify.infrastructure.storage import KeyValueStore
from groupify.sessions.types import Session


def session_key(session_id: str) -> str:
    return f"{STORAGE_KEY_PREFIX}{session_id}"


class SessionRepository:
    def __init__(self, kv_store: KeyValueStore) -> None:
        self._kv = kv_store

    def get_session(self, session_id: str) -> Session | None:
        """Load a session record. Missing or malformed entries read as None."""
        raw = self._kv.get_item(session_key(session_id))
        if raw is None:
            return None
        try:
            return Session.model_validate_json(raw)
        except ValidationError as err:
            logger.warning("Error parsing session data", session_id=session_id, error=str(err))
            return None

    def save_session(self, session: Session) -> None:
        self._kv.set_item(session_key(session.id), session.model_dump_json())

    def get_all_session_ids(self) -> list[str]:
        return [key[len(STORAGE_KEY_PREFIX) :] for key in self._kv.keys(STORAGE_KEY_PREFIX)]
