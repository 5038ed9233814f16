from __future__ import annotations

from .metrics import (
    NOOP_RECORDER,
    CounterSnapshot,
    InMemoryMetrics,
    MetricsRecorder,
    MetricsSnapshot,
    NullMetricsRecorder,
    ObservationSnapshot,
)

__all__ = [
    "CounterSnapshot",
    "InMemoryMetrics",
    "MetricsRecorder",
    "MetricsSnapshot",
    "NOOP_RECORDER",
    "NullMetricsRecorder",
    "ObservationSnapshot",
]
