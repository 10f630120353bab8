"""Tests for the app composition root and command-line front end."""

import json
import random
import re

import pytest

from groupify.__main__ import build_parser, main
from groupify.app import GroupifyApp
from groupify.infrastructure.database import AppDatabase
from groupify.sessions.repository import session_key


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "groupify.db"


def _run(store_path, *argv: str) -> int:
    return main(["--store", str(store_path), *argv])


def _create(store_path, capsys, name: str = "Retro", groups: str = "3") -> str:
    assert _run(store_path, "create", name, groups, "--no-qr") == 0
    out = capsys.readouterr().out
    return re.search(r"Session created: (\S+)", out).group(1)


class TestGroupifyApp:
    def test_start_uses_open_database(self):
        db = AppDatabase()
        db._init_test()
        app = GroupifyApp(db, rng=random.Random(0))
        app.start()
        session_id = app.admin_view().create_session("Retro", 2)
        assert app.join_view_for(session_id).session_name == "Retro"

    def test_store_requires_start(self):
        with pytest.raises(AssertionError, match="not started"):
            GroupifyApp().store

    def test_push_feed_needs_file(self):
        db = AppDatabase()
        db._init_test()
        app = GroupifyApp(db)
        app.start()
        with pytest.raises(ValueError, match="file-backed"):
            app.push_feed("admin")

    def test_two_apps_share_file(self, store_path):
        admin_app = GroupifyApp()
        admin_app.start(store_path)
        joiner_app = GroupifyApp()
        joiner_app.start(store_path)

        admin = admin_app.admin_view()
        admin.create_session("Retro", 2)
        joiner_app.join_view(admin.join_url).join("Ann")

        assert admin.synchronizer().tick() is True
        assert [p.name for p in admin.participants] == ["Ann"]
        admin_app.shutdown()
        joiner_app.shutdown()


class TestCli:
    def test_parser_requires_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_create_prints_join_url(self, store_path, capsys):
        assert _run(store_path, "create", "Retro", "3", "--no-qr") == 0
        out = capsys.readouterr().out
        assert "Session created: session-" in out
        assert "/join?sessionId=session-" in out

    def test_create_prints_qr(self, store_path, capsys):
        assert _run(store_path, "create", "Retro", "3") == 0
        out = capsys.readouterr().out
        assert len(out.splitlines()) > 5

    def test_create_rejects_single_group(self, store_path, capsys):
        assert _run(store_path, "create", "Retro", "1", "--no-qr") == 1
        assert "at least 2" in capsys.readouterr().err

    def test_full_flow(self, store_path, capsys):
        session_id = _create(store_path, capsys)
        for name in ("Ann", "Bo", "Cy"):
            assert _run(store_path, "join", session_id, name) == 0
        assert _run(store_path, "join", f"http://localhost:3000/join?sessionId={session_id}", "Di") == 0
        capsys.readouterr()

        assert _run(store_path, "assign", session_id) == 0
        out = capsys.readouterr().out
        assert "status=assigned" in out
        assert "Group 1:" in out and "Group 2:" in out
        assert "Group 3:" not in out

        assert _run(store_path, "reset", session_id) == 0
        out = capsys.readouterr().out
        assert "status=open" in out
        assert "Participants (4)" in out

    def test_join_without_session_id(self, store_path, capsys):
        _create(store_path, capsys)
        assert _run(store_path, "join", "http://localhost:3000/join?x=1", "Ann") == 1
        assert "No session ID provided" in capsys.readouterr().err

    def test_join_url_without_query(self, store_path, capsys):
        assert _run(store_path, "join", "http://localhost:3000/join", "Ann") == 1
        assert "No session ID provided" in capsys.readouterr().err

    def test_assign_record_with_invalid_group_count(self, store_path, capsys):
        session_id = _create(store_path, capsys)
        assert _run(store_path, "join", session_id, "Ann") == 0
        db = AppDatabase()
        db.init(store_path)
        key = session_key(session_id)
        record = json.loads(db.kv_store.get_item(key))
        record["group_count"] = 0
        db.kv_store.set_item(key, json.dumps(record))
        db.close()
        capsys.readouterr()

        assert _run(store_path, "assign", session_id) == 1
        assert "Session not found" in capsys.readouterr().err

    def test_join_unknown_session(self, store_path, capsys):
        assert _run(store_path, "join", "nope", "Ann") == 1
        assert "Session not found" in capsys.readouterr().err

    def test_assign_empty_session(self, store_path, capsys):
        session_id = _create(store_path, capsys)
        assert _run(store_path, "assign", session_id) == 1
        assert "No participants to assign" in capsys.readouterr().err

    def test_show_unknown(self, store_path, capsys):
        assert _run(store_path, "show", "nope") == 1

    def test_show(self, store_path, capsys):
        session_id = _create(store_path, capsys)
        assert _run(store_path, "show", session_id) == 0
        assert "(nobody yet)" in capsys.readouterr().out

    def test_list(self, store_path, capsys):
        first = _create(store_path, capsys, "Retro")
        second = _create(store_path, capsys, "Standup", "2")
        assert _run(store_path, "list") == 0
        out = capsys.readouterr().out
        assert f"{first}  Retro  status=open  participants=0" in out
        assert f"{second}  Standup" in out
