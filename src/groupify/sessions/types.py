"""Session domain types."""

from __future__ import annotations

from typing import Callable, Literal

from pydantic import BaseModel, Field

from groupify.infrastructure.config import MIN_GROUP_COUNT

SessionStatus = Literal["open", "assigned"]


class Participant(BaseModel):
    id: str  # Unique within the owning session
    name: str
    joined_at: str
    group: int | None = None  # Set iff the session is assigned


class Session(BaseModel):
    id: str
    name: str
    group_count: int = Field(ge=MIN_GROUP_COUNT)  # Requested number of groups
    status: SessionStatus = "open"
    created_at: str
    last_update: str | None = None
    participants: list[Participant] = Field(default_factory=list)
    groups: dict[int, list[str]] = Field(default_factory=dict)  # group number -> participant ids

    def find_participant_by_name(self, name: str) -> Participant | None:
        return next((p for p in self.participants if p.name == name), None)


class GroupsAssigned(BaseModel):
    """Emitted in-process after a successful group assignment."""

    session_id: str
    groups: dict[int, list[str]]


# Callback types
OnGroupsAssigned = Callable[[GroupsAssigned], None]
