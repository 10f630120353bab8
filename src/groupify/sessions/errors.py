"""Errors raised by session operations. Callers display the message and let the user retry."""

from __future__ import annotations


class GroupifyError(Exception):
    pass


class SessionValidationError(GroupifyError, ValueError):
    """Rejected input: blank names, too few groups, nothing to assign."""


class NoActiveSessionError(GroupifyError, RuntimeError):
    """A participant or group operation was invoked without an active session."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"No active session for {operation}")
        self.operation = operation
