from __future__ import annotations

import math
import time
from datetime import timedelta
from threading import Lock
from typing import Any, Callable, Dict, Hashable, Optional, Union

from .dispatch import CooldownStrategy
from .errors import ConfigurationError

Duration = Union[timedelta, int, float]
KeyFn = Callable[[Any], Optional[Hashable]]


def to_seconds(duration: Duration) -> float:
    if isinstance(duration, timedelta):
        return duration.total_seconds()
    if isinstance(duration, bool) or not isinstance(duration, (int, float)):
        raise TypeError(f"duration must be a timedelta or a number of seconds, got {duration!r}")
    seconds = float(duration)
    if not math.isfinite(seconds):
        raise ValueError(f"duration must be finite, got {duration!r}")
    return seconds


class Cooldown:
    """A period that subjects are forced to wait before acting again.

    Entries map a subject key to an absolute expiry timestamp taken from
    ``time_fn``. A key whose expiry is not in the future is stale: every
    query treats it as absent, but it stays in the map until :meth:`snapshot`
    sweeps it. ``put`` always overwrites, durations never stack.

    Every method accepts a *subject*. With a ``key_fn`` the subject is
    converted to its key first; without one the subject is used as the key.
    """

    def __init__(
        self,
        *,
        name: str = "cooldown",
        key_fn: Optional[KeyFn] = None,
        default_duration: Optional[Duration] = None,
        rejection_strategy: Optional[CooldownStrategy] = None,
        expiry_strategy: Optional[CooldownStrategy] = None,
        time_fn: Optional[Callable[[], float]] = None,
    ) -> None:
        self.name = name
        self._key_fn = key_fn
        self._default_duration = default_duration
        self._rejection_strategy = rejection_strategy
        self._expiry_strategy = expiry_strategy
        self._time = time_fn or time.time
        self._lock = Lock()
        self._expiry_by_key: Dict[Hashable, float] = {}

    def __repr__(self) -> str:
        return f"Cooldown(name={self.name!r})"

    @property
    def default_duration(self) -> Optional[Duration]:
        return self._default_duration

    @default_duration.setter
    def default_duration(self, duration: Optional[Duration]) -> None:
        self._default_duration = duration

    @property
    def rejection_strategy(self) -> Optional[CooldownStrategy]:
        return self._rejection_strategy

    @rejection_strategy.setter
    def rejection_strategy(self, strategy: Optional[CooldownStrategy]) -> None:
        self._rejection_strategy = strategy

    @property
    def expiry_strategy(self) -> Optional[CooldownStrategy]:
        return self._expiry_strategy

    def _attach_expiry_strategy(self, strategy: CooldownStrategy) -> None:
        # RefreshEngine.register is the only caller
        self._expiry_strategy = strategy

    def put(self, subject: Any, duration: Optional[Duration] = None) -> None:
        """Put ``subject`` on this cooldown for ``duration`` (or the default).

        A negative duration is accepted and expires immediately.
        """

        key = self.key_of(subject)
        if duration is None:
            if self._default_duration is None:
                raise ConfigurationError(
                    f"cannot put {subject!r} on {self.name} for the default duration: none was set"
                )
            duration = self._default_duration
        seconds = to_seconds(duration)
        with self._lock:
            self._expiry_by_key[key] = self._time() + seconds

    def is_active(self, subject: Any) -> bool:
        key = self.key_of(subject)
        with self._lock:
            return self._remaining(key, self._time()) is not None

    def release(self, subject: Any) -> None:
        key = self.key_of(subject)
        with self._lock:
            self._expiry_by_key.pop(key, None)

    def clear(self) -> None:
        """Remove every subject. Nothing is notified here; see RefreshEngine."""

        with self._lock:
            self._expiry_by_key.clear()

    def time_left(self, subject: Any) -> Optional[timedelta]:
        return self.time_left_of_key(self.key_of(subject))

    def time_left_of_key(self, key: Hashable) -> Optional[timedelta]:
        """Like :meth:`time_left` for an already resolved key.

        Strategies receive keys, not subjects; this skips ``key_fn``.
        """

        with self._lock:
            remaining = self._remaining(key, self._time())
        if remaining is None:
            return None
        return timedelta(seconds=remaining)

    def test(self, subject: Any) -> bool:
        """Return ``True`` if ``subject`` may act.

        When the subject is on cooldown the rejection strategy is called with
        ``(key, self)`` and ``False`` is returned. Strategy errors propagate.
        """

        strategy = self._rejection_strategy
        if strategy is None:
            raise ConfigurationError(f"{self.name} has no rejection strategy to test subjects with")
        key = self.key_of(subject)
        with self._lock:
            active = self._remaining(key, self._time()) is not None
        if not active:
            return True
        strategy(key, self)
        return False

    def snapshot(self) -> Dict[Hashable, float]:
        """Return the active ``key -> expiry`` entries, dropping stale ones.

        This is the only operation that sweeps the store.
        """

        with self._lock:
            now = self._time()
            stale = [key for key, expiry in self._expiry_by_key.items() if now >= expiry]
            for key in stale:
                del self._expiry_by_key[key]
            return dict(self._expiry_by_key)

    def key_of(self, subject: Any) -> Hashable:
        if subject is None:
            raise ConfigurationError(f"a subject must be provided to {self.name}")
        if self._key_fn is None:
            return subject
        key = self._key_fn(subject)
        if key is None:
            raise ConfigurationError(f"resolving the key of {subject!r} returned None")
        return key

    def _remaining(self, key: Hashable, now: float) -> Optional[float]:
        expiry = self._expiry_by_key.get(key)
        if expiry is None or now >= expiry:
            return None
        return expiry - now


__all__ = ["Cooldown", "Duration", "KeyFn", "to_seconds"]
