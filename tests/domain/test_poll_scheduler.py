"""Tests for PollScheduler."""

from __future__ import annotations

import asyncio

import pytest

from fly_poll.domain.services.poll_scheduler import PollScheduler, SchedulerState


@pytest.mark.asyncio
async def test_arm_fires_callback_after_delay() -> None:
    scheduler = PollScheduler()
    fired: list[SchedulerState] = []

    async def _callback() -> None:
        fired.append(scheduler.state)

    scheduler.arm(0.01, _callback)
    assert scheduler.state is SchedulerState.ARMED
    assert scheduler.is_armed

    await asyncio.sleep(0.05)

    assert fired == [SchedulerState.FIRING]
    assert scheduler.state is SchedulerState.IDLE


@pytest.mark.asyncio
async def test_rearm_replaces_pending_timer() -> None:
    scheduler = PollScheduler()
    calls: list[str] = []

    async def _first() -> None:
        calls.append("first")

    async def _second() -> None:
        calls.append("second")

    scheduler.arm(0.02, _first)
    scheduler.arm(0.01, _second)
    await asyncio.sleep(0.06)

    assert calls == ["second"]


@pytest.mark.asyncio
async def test_disarm_cancels_pending_timer() -> None:
    scheduler = PollScheduler()
    calls: list[str] = []

    async def _callback() -> None:
        calls.append("fired")

    scheduler.arm(0.01, _callback)
    scheduler.disarm()
    await asyncio.sleep(0.03)

    assert calls == []
    assert scheduler.state is SchedulerState.IDLE


@pytest.mark.asyncio
async def test_callback_can_rearm() -> None:
    scheduler = PollScheduler()
    calls: list[int] = []

    async def _callback() -> None:
        calls.append(len(calls))
        if len(calls) < 3:
            scheduler.arm(0.005, _callback)

    scheduler.arm(0.005, _callback)
    await asyncio.sleep(0.1)

    assert calls == [0, 1, 2]
    assert scheduler.state is SchedulerState.IDLE


@pytest.mark.asyncio
async def test_disarm_cancels_running_fired_callback() -> None:
    scheduler = PollScheduler()
    started = asyncio.Event()
    cancelled: list[bool] = []

    async def _callback() -> None:
        started.set()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            cancelled.append(True)
            raise

    scheduler.arm(0, _callback)
    await asyncio.wait_for(started.wait(), timeout=1)
    assert scheduler.state is SchedulerState.FIRING

    scheduler.disarm()
    await asyncio.sleep(0)
    await asyncio.sleep(0)

    assert cancelled == [True]
    assert scheduler.state is SchedulerState.IDLE


@pytest.mark.asyncio
async def test_disarm_inside_callback_does_not_cancel_it() -> None:
    scheduler = PollScheduler()
    finished: list[bool] = []

    async def _callback() -> None:
        scheduler.disarm()
        await asyncio.sleep(0)
        finished.append(True)

    scheduler.arm(0, _callback)
    await asyncio.sleep(0.02)

    assert finished == [True]
    assert scheduler.state is SchedulerState.IDLE


@pytest.mark.asyncio
async def test_callback_error_is_logged(caplog) -> None:
    scheduler = PollScheduler()

    async def _callback() -> None:
        raise RuntimeError("poll exploded")

    with caplog.at_level("ERROR"):
        scheduler.arm(0, _callback)
        await asyncio.sleep(0.02)

    assert "Scheduled poll raised" in caplog.text
    assert scheduler.state is SchedulerState.IDLE
