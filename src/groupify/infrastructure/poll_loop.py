"""Shared async polling loop abstraction."""

from __future__ import annotations

import asyncio
from typing import Callable, Awaitable

from groupify.infrastructure.logger import logger


class PollLoop:
    """An async polling loop that calls a function at a fixed period.

    A failing call is logged and the loop carries on at the next period;
    nothing is retried early and there is no backoff.
    """

    def __init__(self, name: str, interval_s: float, fn: Callable[[], Awaitable[None]]) -> None:
        if interval_s <= 0:
            raise ValueError(f"Poll interval must be positive, got {interval_s}")
        self._name = name
        self._interval = interval_s
        self._fn = fn
        self._task: asyncio.Task[None] | None = None
        self._stopped = True

    @property
    def interval(self) -> float:
        return self._interval

    def is_running(self) -> bool:
        return not self._stopped and self._task is not None

    def start(self) -> None:
        """Start the polling loop as a background task. The first call waits one interval."""
        if self.is_running():
            logger.debug(f"{self._name} loop already running")
            return
        self._stopped = False
        self._task = asyncio.create_task(self._loop())
        logger.info(f"{self._name} loop started", interval_s=self._interval)

    def stop(self) -> None:
        """Stop the polling loop."""
        self._stopped = True
        if self._task:
            self._task.cancel()
            self._task = None
            logger.info(f"{self._name} loop stopped")

    async def _loop(self) -> None:
        while not self._stopped:
            await asyncio.sleep(self._interval)
            if self._stopped:
                break
            try:
                await self._fn()
            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception(f"Error in {self._name} loop")


def start_poll_loop(name: str, interval_s: float, fn: Callable[[], Awaitable[None]]) -> PollLoop:
    """Create and start a polling loop. Returns a handle to stop it."""
    loop = PollLoop(name, interval_s, fn)
    loop.start()
    return loop
