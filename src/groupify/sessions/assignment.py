"""Randomized, size-balanced partitioning of participants into groups."""

from __future__ import annotations

import math
import random
from typing import Protocol

from groupify.sessions.types import Participant


class RandomSource(Protocol):
    """Anything with ``random.Random.shuffle`` semantics; inject a seeded Random in tests."""

    def shuffle(self, x: list) -> None: ...


def group_size_for(participant_count: int, group_count: int) -> int:
    return math.ceil(participant_count / group_count)


def partition(
    participants: list[Participant], group_count: int, rng: RandomSource | None = None
) -> tuple[list[Participant], dict[int, list[str]]]:
    """Shuffle participants and deal them into consecutive groups of ``ceil(n / group_count)``.

    Returns the participants in shuffled order with ``group`` set, plus the
    mapping of group number to participant ids. Groups are numbered from 1;
    only the last group may be smaller, and with few participants fewer than
    ``group_count`` groups come out (4 people into 3 groups gives 2 + 2).
    """
    if not participants:
        raise ValueError("Cannot partition an empty participant list")
    if group_count < 1:
        raise ValueError(f"group_count must be positive, got {group_count}")

    shuffled = list(participants)
    (rng or random.Random()).shuffle(shuffled)
    size = group_size_for(len(shuffled), group_count)

    assigned: list[Participant] = []
    groups: dict[int, list[str]] = {}
    for index, participant in enumerate(shuffled):
        number = index // size + 1
        assigned.append(participant.model_copy(update={"group": number}))
        groups.setdefault(number, []).append(participant.id)
    return assigned, groups
