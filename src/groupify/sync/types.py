"""Change feed protocol and divergence signal types."""

from __future__ import annotations

from typing import Callable, Protocol, runtime_checkable

from groupify.sessions.types import Session


@runtime_checkable
class ChangeFeed(Protocol):
    """Something that keeps the in-memory session view in step with the durable store."""

    name: str

    def start(self) -> None: ...
    def stop(self) -> None: ...
    def is_running(self) -> bool: ...


# (durable record, in-memory session or None) -> should reload
DivergenceSignal = Callable[[Session, Session | None], bool]
