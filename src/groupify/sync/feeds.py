"""Change feed adapters: timer-driven polling and file-change push."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, AsyncIterator, Callable

from watchfiles import awatch

from groupify.infrastructure.logger import logger
from groupify.infrastructure.poll_loop import PollLoop
from groupify.sync.synchronizer import Synchronizer

ChangeStream = Callable[[], AsyncIterator[Any]]


class PollingChangeFeed:
    """Reconciles on a fixed period. Works against any store other processes can read."""

    def __init__(self, name: str, interval_s: float, synchronizer: Synchronizer) -> None:
        self.name = name
        self._loop = PollLoop(name, interval_s, synchronizer.atick)

    @property
    def interval(self) -> float:
        return self._loop.interval

    def start(self) -> None:
        self._loop.start()

    def stop(self) -> None:
        self._loop.stop()

    def is_running(self) -> bool:
        return self._loop.is_running()


def watch_store_file(path: Path) -> ChangeStream:
    """Change stream for a SQLite file, including its -wal and -journal siblings."""

    def changes() -> AsyncIterator[Any]:
        return awatch(
            str(path.parent),
            watch_filter=lambda _change, changed: Path(changed).name.startswith(path.name),
        )

    return changes


class PushChangeFeed:
    """Reconciles whenever the change stream reports a batch of writes."""

    def __init__(self, name: str, synchronizer: Synchronizer, changes: ChangeStream) -> None:
        self.name = name
        self._synchronizer = synchronizer
        self._changes = changes
        self._task: asyncio.Task[None] | None = None

    @classmethod
    def for_store_file(cls, name: str, synchronizer: Synchronizer, path: Path | None) -> PushChangeFeed:
        if path is None:
            raise ValueError("Push change feed needs a file-backed store")
        return cls(name, synchronizer, watch_store_file(path))

    def start(self) -> None:
        if self.is_running():
            logger.debug(f"{self.name} feed already running")
            return
        self._task = asyncio.create_task(self._watch_loop())
        logger.info(f"{self.name} feed started")

    def stop(self) -> None:
        if self._task:
            self._task.cancel()
            self._task = None
            logger.info(f"{self.name} feed stopped")

    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _watch_loop(self) -> None:
        try:
            async for _changes in self._changes():
                try:
                    self._synchronizer.tick()
                except Exception:
                    logger.exception(f"Error in {self.name} feed")
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception(f"{self.name} change stream failed")
