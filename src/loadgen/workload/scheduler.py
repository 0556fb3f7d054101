"""
Timer abstraction for the load runner.

The runner only needs "call this after N ms" with a cancellable handle.
AsyncioScheduler backs it with the event loop; ManualScheduler is a clock
that only moves when advanced, for deterministic tests.
"""

import asyncio
import heapq
import itertools
from collections.abc import Callable
from typing import Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle: ...


class AsyncioScheduler:
    """Schedule callbacks on an asyncio event loop (must be called from the loop's thread)."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop or asyncio.get_running_loop()

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self._loop.call_later(max(0.0, delay_ms) / 1000.0, callback)


class ManualTimer:
    __slots__ = ("due_ms", "callback", "cancelled")

    def __init__(self, due_ms: float, callback: Callable[[], None]):
        self.due_ms = due_ms
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual clock. Timers fire in due order (FIFO on ties) when the clock is advanced."""

    def __init__(self) -> None:
        self.now_ms = 0.0
        self._queue: list[tuple[float, int, ManualTimer]] = []
        self._seq = itertools.count()

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self.now_ms + max(0.0, delay_ms), callback)
        heapq.heappush(self._queue, (timer.due_ms, next(self._seq), timer))
        return timer

    def advance(self, delta_ms: float) -> int:
        """Move the clock forward, firing every timer due by then; return how many fired.

        Timers scheduled by a callback fire in the same call if they fall inside the window.
        """
        target = self.now_ms + max(0.0, delta_ms)
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, timer = heapq.heappop(self._queue)
            self.now_ms = due
            if timer.cancelled:
                continue
            timer.callback()
            fired += 1
        self.now_ms = target
        return fired

    def run_until_idle(self, max_steps: int = 10_000) -> int:
        """Fire queued timers until none remain. Only terminates once nothing reschedules itself."""
        fired = 0
        for _ in range(max_steps):
            if not self._queue:
                break
            fired += self.advance(self._queue[0][0] - self.now_ms)
        return fired

    @property
    def pending(self) -> int:
        return sum(1 for _, _, t in self._queue if not t.cancelled)
