from __future__ import annotations

from collections.abc import Hashable
from typing import Callable

import pytest

from calmdown.core.cooldown import Cooldown
from calmdown.core.ticker import Task


class ManualClock:
    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingStrategy:
    def __init__(self) -> None:
        self.calls: list[tuple[Hashable, Cooldown]] = []

    def __call__(self, key: Hashable, cooldown: Cooldown) -> None:
        self.calls.append((key, cooldown))

    @property
    def keys(self) -> list[Hashable]:
        return [key for key, _ in self.calls]


class StubTickSource:
    def __init__(self) -> None:
        self.scheduled: list[tuple[Task, float]] = []

    def schedule_every(self, task: Task, interval: float) -> None:
        self.scheduled.append((task, interval))

    def tick(self) -> None:
        for task, _ in self.scheduled:
            task()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def make_strategy() -> Callable[[], RecordingStrategy]:
    return RecordingStrategy


@pytest.fixture
def tick_source() -> StubTickSource:
    return StubTickSource()


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
