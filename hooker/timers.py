"""Timer services used for hook and global deadlines."""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class TimerService(Protocol):
    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> Any: ...

    def cancel(self, handle: Any) -> None: ...


class AsyncioTimerService:
    """Schedules deadlines on an asyncio event loop.

    The loop is resolved on first use, so registries that never arm a
    deadline can be driven without one.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay_ms / 1000.0, callback)

    def cancel(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()


@dataclass(order=True)
class ManualTimer:
    due_ms: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)


class ManualTimerService:
    """Virtual clock driven explicitly through ``advance``.

    Cancelled timers are dropped from the queue once they make up more than
    half of it, so a long-lived clock does not grow with cancellations.
    """

    def __init__(self, now_ms: float = 0.0) -> None:
        self.now_ms = now_ms
        self._queue: list[ManualTimer] = []
        self._seq = itertools.count()
        self._cancelled = 0

    @property
    def pending(self) -> int:
        return len(self._queue) - self._cancelled

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(due_ms=self.now_ms + delay_ms, seq=next(self._seq), callback=callback)
        heapq.heappush(self._queue, timer)
        return timer

    def cancel(self, handle: ManualTimer) -> None:
        if handle.cancelled:
            return
        handle.cancelled = True
        self._cancelled += 1
        if self._cancelled * 2 > len(self._queue):
            self._queue = [timer for timer in self._queue if not timer.cancelled]
            heapq.heapify(self._queue)
            self._cancelled = 0

    def advance(self, ms: float) -> int:
        """Move the clock forward, firing every timer that falls due. Returns the number fired."""
        target = self.now_ms + ms
        fired = 0
        while self._queue and self._queue[0].due_ms <= target:
            timer = heapq.heappop(self._queue)
            if timer.cancelled:
                self._cancelled -= 1
                continue
            self.now_ms = timer.due_ms
            timer.cancelled = True
            timer.callback()
            fired += 1
        self.now_ms = max(self.now_ms, target)
        if fired:
            logger.debug("manual clock at %sms fired %d timer(s)", self.now_ms, fired)
        return fired
