from __future__ import annotations

import logging
import threading

import anyio
import pytest

from calmdown.core.ticker import AnyioTickSource, ThreadTickSource


@pytest.mark.anyio
async def test_anyio_source_runs_immediately_then_every_interval() -> None:
    calls: list[str] = []
    delays: list[float] = []

    with anyio.CancelScope() as scope:

        async def fake_sleep(duration: float) -> None:
            delays.append(duration)
            if len(delays) >= 3:
                scope.cancel()
            await anyio.sleep(0)

        source = AnyioTickSource(sleep=fake_sleep, clock=lambda: 0.0)
        source.schedule_every(lambda: calls.append("tick"), 2.0)
        await source.run()

    assert calls == ["tick", "tick", "tick"]
    assert delays == [2.0, 2.0, 2.0]


@pytest.mark.anyio
async def test_anyio_source_subtracts_task_time_from_interval() -> None:
    readings = iter([0.0, 0.4, 1.0, 2.5])
    delays: list[float] = []

    with anyio.CancelScope() as scope:

        async def fake_sleep(duration: float) -> None:
            delays.append(duration)
            if len(delays) >= 2:
                scope.cancel()
            await anyio.sleep(0)

        source = AnyioTickSource(sleep=fake_sleep, clock=lambda: next(readings))
        source.schedule_every(lambda: None, 1.0)
        await source.run()

    assert delays == [pytest.approx(0.6), 0.0]


@pytest.mark.anyio
async def test_anyio_source_keeps_running_after_task_failure(
    caplog: pytest.LogCaptureFixture,
) -> None:
    calls: list[int] = []

    def flaky() -> None:
        calls.append(len(calls))
        if len(calls) == 1:
            raise RuntimeError("boom")

    delays: list[float] = []
    with anyio.CancelScope() as scope:

        async def fake_sleep(duration: float) -> None:
            delays.append(duration)
            if len(delays) >= 2:
                scope.cancel()
            await anyio.sleep(0)

        source = AnyioTickSource(
            sleep=fake_sleep,
            clock=lambda: 0.0,
            logger=logging.getLogger("test.ticker"),
        )
        source.schedule_every(flaky, 1.0)
        caplog.set_level(logging.ERROR, logger="test.ticker")
        await source.run()

    assert calls == [0, 1]
    assert any(getattr(record, "event", "") == "tick_failed" for record in caplog.records)


@pytest.mark.parametrize("interval", [0, -1.0])
def test_sources_reject_non_positive_interval(interval: float) -> None:
    with pytest.raises(ValueError):
        AnyioTickSource().schedule_every(lambda: None, interval)
    source = ThreadTickSource()
    try:
        with pytest.raises(ValueError):
            source.schedule_every(lambda: None, interval)
    finally:
        source.stop()


def test_thread_source_ticks_until_stopped() -> None:
    ticked = threading.Event()
    calls: list[str] = []

    def task() -> None:
        calls.append(threading.current_thread().name)
        if len(calls) >= 3:
            ticked.set()

    source = ThreadTickSource(name="test-ticker")
    source.schedule_every(task, 0.01)
    try:
        assert ticked.wait(timeout=5.0)
    finally:
        source.stop(timeout=5.0)

    count = len(calls)
    assert count >= 3
    assert all(name == "test-ticker-0" for name in calls)
    assert ticked.is_set()
    assert len(calls) == count


def test_thread_source_refuses_work_after_stop() -> None:
    source = ThreadTickSource()
    source.stop()

    with pytest.raises(RuntimeError):
        source.schedule_every(lambda: None, 1.0)
