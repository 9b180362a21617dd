import asyncio

import pytest

from checkin_sync.scheduler import RefreshScheduler


@pytest.mark.asyncio
async def test_tick_skips_refresh_when_cache_valid():
    calls = []

    async def refresh():
        calls.append("refresh")

    scheduler = RefreshScheduler(60, lambda: True, refresh)

    assert scheduler.tick() is None
    assert calls == []


@pytest.mark.asyncio
async def test_tick_refreshes_when_cache_stale():
    calls = []

    async def refresh():
        calls.append("refresh")

    scheduler = RefreshScheduler(60, lambda: False, refresh)
    task = scheduler.tick()
    await task

    assert calls == ["refresh"]


@pytest.mark.asyncio
async def test_running_scheduler_fires_periodically_and_stops():
    calls = []

    async def refresh():
        calls.append("refresh")

    scheduler = RefreshScheduler(0.01, lambda: False, refresh)
    scheduler.start()
    assert scheduler.running
    await asyncio.sleep(0.05)
    scheduler.stop()
    await asyncio.sleep(0.005)
    fired = len(calls)
    await asyncio.sleep(0.03)

    assert fired >= 2
    assert len(calls) == fired
    assert not scheduler.running


@pytest.mark.asyncio
async def test_start_replaces_previous_ticker():
    async def refresh():
        return None

    scheduler = RefreshScheduler(60, lambda: True, refresh)
    scheduler.start()
    first = scheduler._ticker
    scheduler.start()
    await asyncio.sleep(0.01)

    assert first.cancelled()
    assert scheduler._ticker is not first
    scheduler.stop()


@pytest.mark.asyncio
async def test_stop_does_not_cancel_inflight_refresh():
    release = asyncio.Event()
    finished = []

    async def refresh():
        await release.wait()
        finished.append(True)

    scheduler = RefreshScheduler(60, lambda: False, refresh)
    scheduler.start()
    task = scheduler.tick()
    scheduler.stop()
    release.set()
    await task

    assert finished == [True]


@pytest.mark.asyncio
async def test_refresh_errors_are_swallowed():
    async def refresh():
        raise RuntimeError("boom")

    scheduler = RefreshScheduler(60, lambda: False, refresh)
    await scheduler.tick()


def test_interval_must_be_positive():
    async def refresh():  # pragma: no cover
        return None

    with pytest.raises(ValueError):
        RefreshScheduler(0, lambda: True, refresh)
