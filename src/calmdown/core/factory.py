from __future__ import annotations

import logging
from typing import Callable, Optional

from ..infra.metrics import MetricsRecorder
from .builder import CooldownBuilder
from .cooldown import KeyFn
from .refresher import DEFAULT_REFRESH_INTERVAL, RefreshEngine
from .ticker import TickSource


class CooldownFactory:
    """Hands out builders whose cooldowns share one refresh engine."""

    def __init__(
        self,
        engine: RefreshEngine,
        *,
        key_fn: Optional[KeyFn] = None,
        time_fn: Optional[Callable[[], float]] = None,
    ) -> None:
        self._engine = engine
        self._key_fn = key_fn
        self._time_fn = time_fn

    @classmethod
    def create(
        cls,
        tick_source: TickSource,
        *,
        key_fn: Optional[KeyFn] = None,
        interval: float = DEFAULT_REFRESH_INTERVAL,
        metrics: Optional[MetricsRecorder] = None,
        logger: Optional[logging.Logger] = None,
        time_fn: Optional[Callable[[], float]] = None,
    ) -> CooldownFactory:
        """Create a fresh engine and refresh it on ``tick_source`` every ``interval`` seconds."""

        engine = RefreshEngine(logger=logger, metrics=metrics)
        tick_source.schedule_every(engine.refresh, interval)
        return cls(engine, key_fn=key_fn, time_fn=time_fn)

    @property
    def engine(self) -> RefreshEngine:
        return self._engine

    def new_builder(self) -> CooldownBuilder:
        return CooldownBuilder(self._engine, key_fn=self._key_fn, time_fn=self._time_fn)


__all__ = ["CooldownFactory"]
