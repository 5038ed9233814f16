from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Hashable, List, Optional, Sequence

from ..core.dispatch import OnlineGuard, SubjectLookup
from .durations import describe_duration

if TYPE_CHECKING:
    from ..core.cooldown import Cooldown

SendFn = Callable[[Any, Sequence[str]], None]
NameFn = Callable[[Any], str]

PLAYER_PLACEHOLDER = "player"
TIME_PLACEHOLDER = "time"


class _Placeholders(dict):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def render_messages(
    templates: Sequence[str],
    subject: Any,
    key: Hashable,
    cooldown: "Cooldown",
    *,
    name_of: NameFn = str,
) -> List[str]:
    """Fill ``{player}`` and ``{time}`` in every template.

    ``subject`` is what ``{player}`` names; ``key`` is the cooldown entry the
    remaining ``{time}`` is read from. ``{time}`` is only substituted while
    that entry is active; otherwise, like any unknown placeholder, it is left
    untouched.
    """

    values = _Placeholders({PLAYER_PLACEHOLDER: name_of(subject)})
    time_left = cooldown.time_left_of_key(key)
    if time_left is not None:
        values[TIME_PLACEHOLDER] = describe_duration(time_left)
    return [template.format_map(values) for template in templates]


class MessageStrategy(OnlineGuard):
    """Send rendered templates to a subject that is still reachable."""

    def __init__(
        self,
        lookup: SubjectLookup,
        send: SendFn,
        *templates: str,
        name_of: NameFn = str,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if not templates:
            raise ValueError("MessageStrategy needs at least one template")
        self.templates = tuple(templates)
        self._send = send
        self._name_of = name_of
        super().__init__(lookup, self._deliver, logger=logger)

    def _deliver(self, subject: Any, key: Hashable, cooldown: "Cooldown") -> None:
        messages = render_messages(self.templates, subject, key, cooldown, name_of=self._name_of)
        self._send(subject, messages)


__all__ = ["MessageStrategy", "NameFn", "SendFn", "render_messages"]
