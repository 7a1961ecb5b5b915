"""Tests for the shot timer and schedulers."""

import asyncio

import pytest

from espresso_log.timer import AsyncioScheduler, ManualScheduler, ShotTimer


def test_three_ticks_then_stop():
    scheduler = ManualScheduler()
    timer = ShotTimer(scheduler)

    timer.start()
    scheduler.tick(3)
    timer.stop()
    scheduler.tick(5)

    assert timer.elapsed == pytest.approx(0.3)
    assert not timer.running


def test_start_resets_to_zero():
    scheduler = ManualScheduler()
    timer = ShotTimer(scheduler)
    timer.start()
    scheduler.tick(3)
    timer.stop()

    timer.start()

    assert timer.elapsed == 0
    assert timer.running


def test_start_while_running_rearms_single_handle():
    scheduler = ManualScheduler()
    timer = ShotTimer(scheduler)

    timer.start()
    scheduler.tick(4)
    timer.start()
    scheduler.tick(2)

    assert timer.elapsed == pytest.approx(0.2)
    assert scheduler.active == 1


def test_stop_is_idempotent():
    scheduler = ManualScheduler()
    timer = ShotTimer(scheduler)

    timer.stop()
    timer.start()
    timer.stop()
    timer.stop()

    assert scheduler.active == 0


def test_many_ticks_do_not_drift():
    scheduler = ManualScheduler()
    timer = ShotTimer(scheduler)
    timer.start()

    scheduler.tick(300)

    assert timer.elapsed == pytest.approx(30.0, abs=1e-9)


def test_asyncio_scheduler_ticks_until_stopped():
    async def run():
        timer = ShotTimer(AsyncioScheduler(), tick=0.01)
        timer.start()
        await asyncio.sleep(0.1)
        timer.stop()
        stopped_at = timer.elapsed
        await asyncio.sleep(0.05)
        return stopped_at, timer.elapsed

    stopped_at, later = asyncio.run(run())

    assert stopped_at > 0
    assert later == stopped_at
