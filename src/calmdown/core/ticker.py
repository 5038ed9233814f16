from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Protocol

import anyio

Task = Callable[[], None]

_LOGGER = logging.getLogger(__name__)


class TickSource(Protocol):
    """Host capability that calls ``task`` every ``interval`` seconds.

    Calls for the same registration must never overlap.
    """

    def schedule_every(self, task: Task, interval: float) -> None:
        ...


@dataclass(frozen=True, slots=True)
class _Periodic:
    task: Task
    interval: float


def _validate_interval(interval: float) -> float:
    value = float(interval)
    if value <= 0.0:
        raise ValueError(f"tick interval must be positive, got {interval!r}")
    return value


def _invoke(task: Task, logger: logging.Logger) -> None:
    try:
        task()
    except Exception:  # noqa: BLE001 - keep the schedule alive
        logger.exception("tick_failed", extra={"event": "tick_failed", "task": repr(task)})


class AnyioTickSource:
    """Runs scheduled tasks from an anyio task group once :meth:`run` is awaited.

    The first call happens immediately, then every ``interval`` seconds minus
    the time the task itself took.
    """

    def __init__(
        self,
        *,
        sleep: Callable[[float], Awaitable[None]] = anyio.sleep,
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._sleep = sleep
        self._clock = clock
        self._logger = logger or _LOGGER
        self._scheduled: List[_Periodic] = []

    def schedule_every(self, task: Task, interval: float) -> None:
        self._scheduled.append(_Periodic(task, _validate_interval(interval)))

    async def run(self) -> None:
        async with anyio.create_task_group() as tg:
            for periodic in list(self._scheduled):
                tg.start_soon(self._loop, periodic)

    async def _loop(self, periodic: _Periodic) -> None:
        while True:
            started = self._clock()
            _invoke(periodic.task, self._logger)
            elapsed = self._clock() - started
            await self._sleep(max(0.0, periodic.interval - elapsed))


class ThreadTickSource:
    """Runs each scheduled task on its own daemon thread until :meth:`stop`."""

    def __init__(
        self,
        *,
        name: str = "calmdown-ticker",
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._name = name
        self._clock = clock
        self._logger = logger or _LOGGER
        self._stopped = threading.Event()
        self._threads: List[threading.Thread] = []

    def schedule_every(self, task: Task, interval: float) -> None:
        if self._stopped.is_set():
            raise RuntimeError("ThreadTickSource was stopped")
        periodic = _Periodic(task, _validate_interval(interval))
        thread = threading.Thread(
            target=self._loop,
            args=(periodic,),
            name=f"{self._name}-{len(self._threads)}",
            daemon=True,
        )
        self._threads.append(thread)
        thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stopped.set()
        for thread in self._threads:
            if thread is not threading.current_thread():
                thread.join(timeout)

    def _loop(self, periodic: _Periodic) -> None:
        while not self._stopped.is_set():
            started = self._clock()
            _invoke(periodic.task, self._logger)
            elapsed = self._clock() - started
            self._stopped.wait(max(0.0, periodic.interval - elapsed))


__all__ = ["AnyioTickSource", "Task", "ThreadTickSource", "TickSource"]
