"""Admin screen view-model: create a session, watch joins, assign and reset groups."""

from __future__ import annotations

from groupify.infrastructure.config import ADMIN_POLL_INTERVAL
from groupify.sessions.types import Participant
from groupify.sync.synchronizer import participant_count_changed
from groupify.views.base import View


class AdminView(View):
    name = "admin"
    signal = participant_count_changed
    poll_interval = ADMIN_POLL_INTERVAL

    def create_session(self, name: str, group_count: int) -> str | None:
        return self._run(
            lambda: self.store.create_session(name, group_count),
            "Failed to create session. Please try again.",
        )

    def assign_groups(self) -> dict[int, list[str]] | None:
        if not self.store.participants:
            self.error = "No participants to assign"
            return None
        return self._run(self.store.assign_groups, "Failed to assign groups. Please try again.")

    def reset_groups(self) -> None:
        self._run(self.store.reset_groups, "Failed to reset groups. Please try again.")

    @property
    def session_id(self) -> str | None:
        return self.store.current_session_id

    @property
    def join_url(self) -> str | None:
        session_id = self.session_id
        return self.store.get_join_url(session_id) if session_id else None

    @property
    def participants(self) -> list[Participant]:
        return self.store.participants

    def group_board(self) -> list[tuple[int, list[str]]]:
        """Group number and member names, in group order."""
        return [
            (number, [p.name for p in self.store.group_members(number)])
            for number in sorted(self.store.groups)
        ]
