from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from threading import Lock
from typing import Protocol

TagsKey = tuple[tuple[str, str], ...]


def _normalize_tags(tags: Mapping[str, str] | None) -> TagsKey:
    if not tags:
        return ()
    return tuple(sorted(tags.items()))


@dataclass(frozen=True)
class CounterSnapshot:
    count: int


@dataclass(frozen=True)
class ObservationSnapshot:
    count: int
    minimum: float
    maximum: float
    total: float
    average: float


@dataclass(frozen=True)
class MetricsSnapshot:
    counters: Mapping[str, Mapping[TagsKey, CounterSnapshot]]
    observations: Mapping[str, Mapping[TagsKey, ObservationSnapshot]]


class MetricsRecorder(Protocol):
    def increment(self, name: str, tags: Mapping[str, str] | None = None) -> None:
        ...

    def observe(self, name: str, value: float, tags: Mapping[str, str] | None = None) -> None:
        ...


class NullMetricsRecorder(MetricsRecorder):
    def increment(self, name: str, tags: Mapping[str, str] | None = None) -> None:
        return None

    def observe(self, name: str, value: float, tags: Mapping[str, str] | None = None) -> None:
        return None


NOOP_RECORDER = NullMetricsRecorder()


class InMemoryMetrics(MetricsRecorder):
    """Thread-safe recorder that keeps every counter and observation."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._counters: dict[str, dict[TagsKey, int]] = {}
        self._observations: dict[str, dict[TagsKey, list[float]]] = {}

    def increment(self, name: str, tags: Mapping[str, str] | None = None) -> None:
        key = _normalize_tags(tags)
        with self._lock:
            metric = self._counters.setdefault(name, {})
            metric[key] = metric.get(key, 0) + 1

    def observe(self, name: str, value: float, tags: Mapping[str, str] | None = None) -> None:
        key = _normalize_tags(tags)
        with self._lock:
            metric = self._observations.setdefault(name, {})
            metric.setdefault(key, []).append(float(value))

    def get_count(self, name: str, **tags: str) -> int:
        with self._lock:
            metric = dict(self._counters.get(name, {}))
        expected = tags.items()
        total = 0
        for recorded, count in metric.items():
            recorded_dict = dict(recorded)
            if all(recorded_dict.get(key) == value for key, value in expected):
                total += count
        return total

    def snapshot(self) -> MetricsSnapshot:
        with self._lock:
            counters = {
                name: {tags: CounterSnapshot(count=count) for tags, count in values.items()}
                for name, values in self._counters.items()
            }
            observations = {
                name: {tags: _summarize(samples) for tags, samples in values.items()}
                for name, values in self._observations.items()
            }
        return MetricsSnapshot(counters=counters, observations=observations)


def _summarize(samples: list[float]) -> ObservationSnapshot:
    total = sum(samples)
    count = len(samples)
    return ObservationSnapshot(
        count=count,
        minimum=min(samples),
        maximum=max(samples),
        total=total,
        average=total / count,
    )


__all__ = [
    "CounterSnapshot",
    "InMemoryMetrics",
    "MetricsRecorder",
    "MetricsSnapshot",
    "NOOP_RECORDER",
    "NullMetricsRecorder",
    "ObservationSnapshot",
    "TagsKey",
]
