from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Optional

from .cooldown import Cooldown, Duration, KeyFn
from .dispatch import CooldownStrategy

if TYPE_CHECKING:
    from .refresher import RefreshEngine

_LOGGER = logging.getLogger(__name__)


class CooldownBuilder:
    def __init__(
        self,
        engine: "RefreshEngine",
        *,
        key_fn: Optional[KeyFn] = None,
        time_fn: Optional[Callable[[], float]] = None,
    ) -> None:
        self._engine = engine
        self._key_fn = key_fn
        self._time_fn = time_fn
        self._name = "cooldown"
        self._default_duration: Optional[Duration] = None
        self._rejection_strategy: Optional[CooldownStrategy] = None
        self._expiry_strategy: Optional[CooldownStrategy] = None

    def named(self, name: str) -> CooldownBuilder:
        self._name = name
        return self

    def with_default_duration(self, duration: Duration) -> CooldownBuilder:
        self._default_duration = duration
        return self

    def rejects_with(self, strategy: CooldownStrategy) -> CooldownBuilder:
        self._rejection_strategy = strategy
        return self

    def when_over(self, strategy: CooldownStrategy) -> CooldownBuilder:
        self._expiry_strategy = strategy
        return self

    def build(self) -> Cooldown:
        """Create the cooldown, registering it for expiry notification first."""

        cooldown = Cooldown(
            name=self._name,
            key_fn=self._key_fn,
            default_duration=self._default_duration,
            rejection_strategy=self._rejection_strategy,
            expiry_strategy=self._expiry_strategy,
            time_fn=self._time_fn,
        )
        if self._expiry_strategy is not None:
            self._engine.register(cooldown)
        _LOGGER.debug(
            "cooldown_built",
            extra={
                "event": "cooldown_built",
                "cooldown": cooldown.name,
                "tracked": self._expiry_strategy is not None,
            },
        )
        return cooldown


__all__ = ["CooldownBuilder"]
