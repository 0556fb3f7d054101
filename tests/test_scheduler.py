"""Tests for the manual clock and the asyncio-backed scheduler."""

import asyncio

from loadgen.workload import AsyncioScheduler, ManualScheduler


def test_manual_scheduler_fires_in_due_order() -> None:
    scheduler = ManualScheduler()
    fired: list[str] = []
    scheduler.call_later(30, lambda: fired.append("c"))
    scheduler.call_later(10, lambda: fired.append("a"))
    scheduler.call_later(10, lambda: fired.append("b"))

    assert scheduler.advance(29) == 2
    assert fired == ["a", "b"]
    assert scheduler.now_ms == 29

    scheduler.advance(1)
    assert fired == ["a", "b", "c"]


def test_cancelled_timer_never_fires() -> None:
    scheduler = ManualScheduler()
    fired: list[int] = []
    handle = scheduler.call_later(5, lambda: fired.append(1))
    handle.cancel()

    assert scheduler.pending == 0
    assert scheduler.advance(100) == 0
    assert fired == []


def test_timers_scheduled_inside_window_fire_in_same_advance() -> None:
    """A callback that reschedules within the window runs again before advance returns."""
    scheduler = ManualScheduler()
    ticks: list[float] = []

    def tick() -> None:
        ticks.append(scheduler.now_ms)
        if len(ticks) < 5:
            scheduler.call_later(10, tick)

    scheduler.call_later(10, tick)
    scheduler.advance(35)

    assert ticks == [10, 20, 30]
    assert scheduler.pending == 1


def test_run_until_idle_drains_queue() -> None:
    scheduler = ManualScheduler()
    fired: list[int] = []
    for delay in (300, 100, 200):
        scheduler.call_later(delay, lambda d=delay: fired.append(d))

    assert scheduler.run_until_idle() == 3
    assert fired == [100, 200, 300]
    assert scheduler.now_ms == 300


def test_asyncio_scheduler_fires_and_cancels() -> None:
    fired: list[str] = []

    async def main() -> None:
        scheduler = AsyncioScheduler()
        scheduler.call_later(1, lambda: fired.append("kept"))
        handle = scheduler.call_later(1, lambda: fired.append("cancelled"))
        handle.cancel()
        await asyncio.sleep(0.05)

    asyncio.run(main())

    assert fired == ["kept"]
