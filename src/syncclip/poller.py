#!/usr/bin/env python3
"""Fixed-interval scheduling of a coroutine.

Each tick launches the coroutine as its own task and does not wait for it,
so a stalled engine call cannot delay later ticks. Overlapping runs are
expected; callers whose work is a total-state replacement tolerate them.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)


class Poller:
    """Run ``job`` now and then every ``interval`` seconds until stopped."""

    def __init__(self, job: Callable[[], Awaitable[Any]], interval: float) -> None:
        self.job = job
        self.interval = interval
        self._ticker: asyncio.Task[None] | None = None
        self._in_flight: set[asyncio.Task[Any]] = set()

    @property
    def running(self) -> bool:
        return self._ticker is not None and not self._ticker.done()

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    def start(self) -> None:
        """Start ticking. A second start while running is a no-op."""
        if self.running:
            return
        self._ticker = asyncio.create_task(self._tick_forever())

    async def stop(self) -> None:
        """Stop scheduling new ticks.

        Jobs already in flight are left to finish; no engine call is
        cancelled midway.
        """
        if self._ticker is None:
            return
        ticker, self._ticker = self._ticker, None
        ticker.cancel()
        with suppress(asyncio.CancelledError):
            await ticker

    async def _tick_forever(self) -> None:
        while True:
            self._launch()
            await asyncio.sleep(self.interval)

    def _launch(self) -> None:
        task = asyncio.create_task(self.job())
        self._in_flight.add(task)
        task.add_done_callback(self._finished)

    def _finished(self, task: asyncio.Task[Any]) -> None:
        self._in_flight.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Polled job failed: %s", task.exception())
