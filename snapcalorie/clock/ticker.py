# -*- coding: utf-8 -*-
"""Clock — periodic reconciliation task."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class ClockTicker:
    """Runs ``check`` every ``interval`` seconds from the running event loop.

    The check runs in a worker thread, where it may wait on the tracker lock.

    The check only has to fire once between two real midnights for the clock
    to stay correct; the short default interval just makes rollovers prompt.
    """

    def __init__(self, check: Callable[[], object], interval: float = 1.0) -> None:
        self.check = check
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        try:
            while True:
                try:
                    await asyncio.to_thread(self.check)
                except Exception as exc:
                    logger.error("Clock reconciliation failed: %s", exc, exc_info=True)
                await asyncio.sleep(self.interval)
        except asyncio.CancelledError:
            logger.info("Clock ticker stopped")
            raise
