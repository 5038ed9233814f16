from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Hashable, Iterable, List, Optional, Protocol, TypeVar

if TYPE_CHECKING:
    from .cooldown import Cooldown

T = TypeVar("T", bound=Hashable)

SubjectLookup = Callable[[Hashable], Optional[Any]]
SubjectAction = Callable[[Any, Hashable, "Cooldown"], None]

_LOGGER = logging.getLogger(__name__)


class CooldownStrategy(Protocol):
    """What a cooldown does with a subject when it is rejected or released."""

    def __call__(self, key: Hashable, cooldown: "Cooldown") -> None:
        ...


def differences(first: Iterable[T], second: Iterable[T]) -> List[T]:
    """Return the elements of ``first`` that are absent from ``second``."""

    lookup = second if isinstance(second, (set, frozenset)) else set(second)
    return [element for element in first if element not in lookup]


class OnlineGuard:
    """Run ``action`` only when the key still resolves to a live subject.

    ``lookup`` is consulted right before every invocation; a ``None`` result
    (e.g. the user disconnected) turns the call into a no-op. ``action``
    receives ``(subject, key, cooldown)``: the live subject plus the key it
    was resolved from, which is what the cooldown itself is indexed by.
    """

    def __init__(
        self,
        lookup: SubjectLookup,
        action: SubjectAction,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._lookup = lookup
        self._action = action
        self._logger = logger or _LOGGER

    def __call__(self, key: Hashable, cooldown: "Cooldown") -> None:
        subject = self._lookup(key)
        if subject is None:
            self._logger.debug(
                "cooldown_subject_offline",
                extra={
                    "event": "cooldown_subject_offline",
                    "cooldown": cooldown.name,
                    "key": str(key),
                },
            )
            return
        self._action(subject, key, cooldown)


__all__ = [
    "CooldownStrategy",
    "OnlineGuard",
    "SubjectAction",
    "SubjectLookup",
    "differences",
]
