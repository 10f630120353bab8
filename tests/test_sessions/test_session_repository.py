"""Tests for session record persistence."""

import json

from groupify.sessions.repository import session_key
from groupify.sessions.types import Participant, Session


def _session(session_id: str = "s1") -> Session:
    return Session(
        id=session_id,
        name="Retro",
        group_count=3,
        created_at="2024-01-01T00:00:00",
        participants=[Participant(id="p1", name="Ann", joined_at="2024-01-01T00:01:00", group=1)],
        groups={1: ["p1"]},
        status="assigned",
    )


class TestSessionRepository:
    def test_save_and_get(self, db):
        db.session_repo.save_session(_session())
        loaded = db.session_repo.get_session("s1")
        assert loaded == _session()
        assert loaded.groups == {1: ["p1"]}

    def test_stored_under_prefixed_key(self, db):
        db.session_repo.save_session(_session())
        assert db.kv_store.get_item("groupify_session_s1") is not None
        assert session_key("s1") == "groupify_session_s1"

    def test_missing_returns_none(self, db):
        assert db.session_repo.get_session("nope") is None

    def test_malformed_json_returns_none(self, db):
        db.kv_store.set_item(session_key("bad"), "{not json")
        assert db.session_repo.get_session("bad") is None

    def test_wrong_shape_returns_none(self, db):
        db.kv_store.set_item(session_key("bad"), '{"id": "bad", "name": "x"}')
        assert db.session_repo.get_session("bad") is None

    def test_all_session_ids(self, db):
        db.session_repo.save_session(_session("s1"))
        db.session_repo.save_session(_session("s2"))
        db.kv_store.set_item("unrelated", "x")
        assert db.session_repo.get_all_session_ids() == ["s1", "s2"]

    def test_group_count_below_minimum_returns_none(self, db):
        record = _session().model_dump(mode="json")
        record["group_count"] = 0
        db.kv_store.set_item(session_key("s1"), json.dumps(record))
        assert db.session_repo.get_session("s1") is None
