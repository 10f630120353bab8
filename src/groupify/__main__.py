"""Entry point: python -m groupify"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from pathlib import Path

import segno

from groupify.app import GroupifyApp
from groupify.infrastructure.config import ADMIN_POLL_INTERVAL, JOIN_POLL_INTERVAL, UPDATE_POLL_INTERVAL
from groupify.infrastructure.logger import install_exception_hooks, logger
from groupify.sessions.types import Session
from groupify.sync.feeds import PollingChangeFeed
from groupify.sync.synchronizer import SIGNALS, Synchronizer, signal_for

DEFAULT_INTERVALS = {"admin": ADMIN_POLL_INTERVAL, "join": JOIN_POLL_INTERVAL, "update": UPDATE_POLL_INTERVAL}


def print_session(session: Session) -> None:
    print(f"{session.name} [{session.id}] status={session.status} groups requested={session.group_count}")
    by_id = {p.id: p for p in session.participants}
    if session.groups:
        for number in sorted(session.groups):
            names = ", ".join(by_id[pid].name for pid in session.groups[number] if pid in by_id)
            print(f"  Group {number}: {names}")
    else:
        names = ", ".join(p.name for p in session.participants) or "(nobody yet)"
        print(f"  Participants ({len(session.participants)}): {names}")


def _load(app: GroupifyApp, session_id: str) -> Session | None:
    app.store.set_current_session(session_id)
    session = app.store.current_session
    if session is None:
        print(f"Session not found: {session_id}", file=sys.stderr)
    return session


def cmd_create(app: GroupifyApp, args: argparse.Namespace) -> int:
    view = app.admin_view()
    session_id = view.create_session(args.name, args.groups)
    if session_id is None:
        print(view.error, file=sys.stderr)
        return 1
    print(f"Session created: {session_id}")
    print(f"Join URL: {view.join_url}")
    if not args.no_qr:
        segno.make_qr(view.join_url).terminal(compact=True)
    return 0


def cmd_join(app: GroupifyApp, args: argparse.Namespace) -> int:
    target: str = args.target
    is_url = "?" in target or "://" in target
    view = app.join_view(target) if is_url else app.join_view_for(target.strip() or None)
    if view.is_valid and app.store.current_session is None:
        print(f"Session not found: {view.session_id}", file=sys.stderr)
        return 1
    participant = view.join(args.name)
    if participant is None:
        print(view.error, file=sys.stderr)
        return 1
    print(f"{view.success} ({participant.name} in {view.session_name})")
    return 0


def cmd_assign(app: GroupifyApp, args: argparse.Namespace) -> int:
    if _load(app, args.session_id) is None:
        return 1
    view = app.admin_view()
    if view.assign_groups() is None:
        print(view.error, file=sys.stderr)
        return 1
    print_session(app.store.current_session)
    return 0


def cmd_reset(app: GroupifyApp, args: argparse.Namespace) -> int:
    if _load(app, args.session_id) is None:
        return 1
    view = app.admin_view()
    view.reset_groups()
    if view.error:
        print(view.error, file=sys.stderr)
        return 1
    print_session(app.store.current_session)
    return 0


def cmd_list(app: GroupifyApp, args: argparse.Namespace) -> int:
    for session_id in app.db.session_repo.get_all_session_ids():
        session = app.db.session_repo.get_session(session_id)
        if session is None:
            print(f"{session_id}  (unreadable)")
            continue
        print(f"{session_id}  {session.name}  status={session.status}  participants={len(session.participants)}")
    return 0


def cmd_show(app: GroupifyApp, args: argparse.Namespace) -> int:
    session = _load(app, args.session_id)
    if session is None:
        return 1
    print_session(session)
    return 0


async def watch(app: GroupifyApp, session_id: str, mode: str, interval_s: float | None, push: bool) -> None:
    """Print the session every time another process changes it, until SIGINT/SIGTERM."""
    app.store.set_current_session(session_id)
    if app.store.current_session is not None:
        print_session(app.store.current_session)

    if push:
        feed = app.push_feed(mode, on_reload=print_session)
    else:
        synchronizer = Synchronizer(app.store, app.db.session_repo, signal_for(mode), on_reload=print_session)
        feed = PollingChangeFeed(f"{mode} poll", interval_s or DEFAULT_INTERVALS[mode], synchronizer)

    shutdown_event = asyncio.Event()

    def signal_handler() -> None:
        logger.info("Received shutdown signal")
        shutdown_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, signal_handler)

    feed.start()
    try:
        await shutdown_event.wait()
    finally:
        feed.stop()


def cmd_watch(app: GroupifyApp, args: argparse.Namespace) -> int:
    try:
        asyncio.run(watch(app, args.session_id, args.mode, args.interval, args.push))
    except KeyboardInterrupt:
        pass
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="groupify", description="Random, balanced group assignment")
    parser.add_argument("--store", type=Path, help="Durable store file (default: store/groupify.db)")
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create", help="Create a session and print its join URL")
    create.add_argument("name")
    create.add_argument("groups", type=int, help="Requested number of groups (at least 2)")
    create.add_argument("--no-qr", action="store_true", help="Skip the terminal QR code")
    create.set_defaults(func=cmd_create)

    join = sub.add_parser("join", help="Join a session by join URL or session id")
    join.add_argument("target", help="Join URL or session id")
    join.add_argument("name")
    join.set_defaults(func=cmd_join)

    for name, func, help_text in (
        ("assign", cmd_assign, "Shuffle participants into groups"),
        ("reset", cmd_reset, "Clear group assignments"),
        ("show", cmd_show, "Print the session"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("session_id")
        cmd.set_defaults(func=func)

    list_cmd = sub.add_parser("list", help="List every session in the store")
    list_cmd.set_defaults(func=cmd_list)

    watch_cmd = sub.add_parser("watch", help="Follow a session as other processes change it")
    watch_cmd.add_argument("session_id")
    watch_cmd.add_argument("--mode", choices=sorted(SIGNALS), default="update")
    watch_cmd.add_argument("--interval", type=float, help="Poll period in seconds")
    watch_cmd.add_argument("--push", action="store_true", help="React to store file changes instead of polling")
    watch_cmd.set_defaults(func=cmd_watch)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    app = GroupifyApp()
    app.start(args.store)
    try:
        return args.func(app, args)
    finally:
        app.shutdown()


def run() -> None:
    install_exception_hooks()
    sys.exit(main())


if __name__ == "__main__":
    run()
