"""Periodic timer that drives the recording clock."""

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class IntervalTicker:
    """Calls ``callback`` once per ``interval`` seconds on the running event loop.

    Ticks are scheduled against the loop clock, so a slow callback delays one
    tick without pushing every later tick back.
    """

    def __init__(self, callback: Callable[[], None], interval: float = 1.0):
        self.callback = callback
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self.interval
        while True:
            await asyncio.sleep(max(0.0, next_tick - loop.time()))
            next_tick += self.interval
            self.callback()
