from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from threading import Lock
from typing import Awaitable, Callable, Dict, Final, Hashable, List, Optional, Set

import anyio

from ..infra.metrics import NOOP_RECORDER, MetricsRecorder
from .cooldown import Cooldown
from .dispatch import CooldownStrategy, differences
from .errors import ConfigurationError

DEFAULT_REFRESH_INTERVAL: Final[float] = 1.0


@dataclass(slots=True)
class _Registration:
    cooldown: Cooldown
    last_known: Set[Hashable] = field(default_factory=set)


class RefreshEngine:
    """Fire expiry strategies by diffing each cooldown between ticks.

    Every registered cooldown keeps the set of keys seen active on the
    previous tick. On each tick the engine takes one snapshot per cooldown,
    starts tracking newly active keys and fires the expiry strategy once for
    every tracked key that is no longer active. Keys removed through
    ``release``/``clear`` are indistinguishable from expired ones and fire as
    well, provided a tick observed them while active.
    """

    def __init__(
        self,
        *,
        logger: Optional[logging.Logger] = None,
        metrics: Optional[MetricsRecorder] = None,
        perf_counter: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self._metrics = metrics or NOOP_RECORDER
        self._perf_counter = perf_counter
        self._lock = Lock()
        self._registrations: Dict[Cooldown, _Registration] = {}

    def register(self, cooldown: Cooldown, expiry_strategy: Optional[CooldownStrategy] = None) -> None:
        """Track ``cooldown`` and fire its expiry strategy on every tick.

        A given ``expiry_strategy`` replaces the one on the cooldown, so
        ``cooldown.expiry_strategy`` always names what the engine fires.
        Registering again keeps the keys already tracked.
        """

        if expiry_strategy is not None:
            cooldown._attach_expiry_strategy(expiry_strategy)
        elif cooldown.expiry_strategy is None:
            raise ConfigurationError(f"{cooldown.name} has no expiry strategy to register")
        with self._lock:
            if cooldown in self._registrations:
                return
            self._registrations[cooldown] = _Registration(cooldown)
        self._logger.info(
            "cooldown_registered",
            extra={"event": "cooldown_registered", "cooldown": cooldown.name},
        )

    def is_registered(self, cooldown: Cooldown) -> bool:
        with self._lock:
            return cooldown in self._registrations

    def refresh(self) -> None:
        """Run one tick over every registered cooldown."""

        with self._lock:
            registrations: List[_Registration] = list(self._registrations.values())
        start = self._perf_counter()
        for registration in registrations:
            self._refresh(registration)
        self._metrics.observe("cooldown.refresh_seconds", self._perf_counter() - start)

    async def run_forever(
        self,
        interval: float = DEFAULT_REFRESH_INTERVAL,
        *,
        sleep: Callable[[float], Awaitable[None]] = anyio.sleep,
    ) -> None:
        while True:
            started = self._perf_counter()
            self.refresh()
            elapsed = self._perf_counter() - started
            await sleep(max(0.0, interval - elapsed))

    def _refresh(self, registration: _Registration) -> None:
        cooldown = registration.cooldown
        tracked = registration.last_known
        current = cooldown.snapshot().keys()

        tracked.update(differences(current, tracked))

        for key in differences(tracked, current):
            tracked.discard(key)
            self._fire(registration, key)

    def _fire(self, registration: _Registration, key: Hashable) -> None:
        cooldown = registration.cooldown
        strategy = cooldown.expiry_strategy
        if strategy is None:
            return
        tags = {"cooldown": cooldown.name}
        try:
            strategy(key, cooldown)
        except Exception:  # noqa: BLE001 - isolated per key
            self._metrics.increment("cooldown.expiry_failures", tags)
            self._logger.exception(
                "cooldown_expiry_failed",
                extra={
                    "event": "cooldown_expiry_failed",
                    "cooldown": cooldown.name,
                    "key": str(key),
                },
            )
            return
        self._metrics.increment("cooldown.expired", tags)
        self._logger.debug(
            "cooldown_expired",
            extra={"event": "cooldown_expired", "cooldown": cooldown.name, "key": str(key)},
        )


__all__ = ["DEFAULT_REFRESH_INTERVAL", "RefreshEngine"]
