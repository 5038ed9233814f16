from __future__ import annotations

from datetime import timedelta
from typing import Final, List, Tuple, Union

_UNITS: Final[Tuple[Tuple[str, int], ...]] = (
    ("day", 86400),
    ("hour", 3600),
    ("minute", 60),
    ("second", 1),
)


def describe_duration(duration: Union[timedelta, int, float]) -> str:
    """Describe ``duration`` in words, e.g. ``"1 hour, 2 minutes and 5 seconds"``.

    A partial second counts as a whole one so a subject never reads
    "0 seconds" while still on cooldown.
    """

    if not isinstance(duration, timedelta):
        duration = timedelta(seconds=duration)
    if duration <= timedelta(0):
        return "0 seconds"

    remaining = duration.days * 86400 + duration.seconds
    if duration.microseconds:
        remaining += 1

    parts: List[str] = []
    for unit, unit_seconds in _UNITS:
        amount, remaining = divmod(remaining, unit_seconds)
        if amount:
            parts.append(f"{amount} {unit}" if amount == 1 else f"{amount} {unit}s")

    if len(parts) == 1:
        return parts[0]
    return f"{', '.join(parts[:-1])} and {parts[-1]}"


__all__ = ["describe_duration"]
