from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

import pytest

from calmdown.core.cooldown import Cooldown
from calmdown.features.messages import MessageStrategy, render_messages

if TYPE_CHECKING:
    from conftest import ManualClock


class Player:
    def __init__(self, uuid: str, name: str) -> None:
        self.uuid = uuid
        self.name = name


class Inbox:
    def __init__(self) -> None:
        self.delivered: list[tuple[Any, list[str]]] = []

    def __call__(self, subject: Any, messages: Sequence[str]) -> None:
        self.delivered.append((subject, list(messages)))


def test_render_substitutes_player_and_time(clock: ManualClock) -> None:
    alice = Player("u-1", "Alice")
    cooldown = Cooldown(key_fn=lambda player: player.uuid, time_fn=clock)
    cooldown.put(alice, 65)

    messages = render_messages(
        ["{player}, wait {time}.", "Still {time}!"],
        alice,
        "u-1",
        cooldown,
        name_of=lambda player: player.name,
    )

    assert messages == ["Alice, wait 1 minute and 5 seconds.", "Still 1 minute and 5 seconds!"]


def test_render_leaves_time_when_not_on_cooldown(clock: ManualClock) -> None:
    cooldown = Cooldown(time_fn=clock)

    assert render_messages(["{player} is free ({time})"], "alice", "alice", cooldown) == [
        "alice is free ({time})"
    ]


def test_render_leaves_unknown_placeholders(clock: ManualClock) -> None:
    cooldown = Cooldown(time_fn=clock)

    assert render_messages(["{player} {unknown}"], "bob", "bob", cooldown) == ["bob {unknown}"]


def test_message_strategy_rejects_with_rendered_message(clock: ManualClock) -> None:
    alice = Player("u-1", "Alice")
    online = {"u-1": alice}
    inbox = Inbox()
    strategy = MessageStrategy(
        online.get,
        inbox,
        "{player}, you can heal again in {time}.",
        name_of=lambda player: player.name,
    )
    cooldown = Cooldown(key_fn=lambda player: player.uuid, rejection_strategy=strategy, time_fn=clock)
    cooldown.put(alice, 30)
    clock.advance(10)

    assert cooldown.test(alice) is False
    assert inbox.delivered == [(alice, ["Alice, you can heal again in 20 seconds."])]


def test_message_strategy_reads_time_by_key_without_key_fn(clock: ManualClock) -> None:
    alice = Player("u-1", "Alice")
    inbox = Inbox()
    strategy = MessageStrategy({"u-1": alice}.get, inbox, "wait {time}")
    cooldown = Cooldown(rejection_strategy=strategy, time_fn=clock)
    cooldown.put("u-1", 30)

    assert cooldown.test("u-1") is False
    assert inbox.delivered == [(alice, ["wait 30 seconds"])]


def test_message_strategy_accepts_unhashable_subjects(clock: ManualClock) -> None:
    profile = {"name": "Alice"}
    inbox = Inbox()
    strategy = MessageStrategy(
        {"u-1": profile}.get,
        inbox,
        "{player}: {time}",
        name_of=lambda subject: subject["name"],
    )
    cooldown = Cooldown(rejection_strategy=strategy, time_fn=clock)
    cooldown.put("u-1", 90)

    cooldown.test("u-1")

    assert inbox.delivered == [(profile, ["Alice: 1 minute and 30 seconds"])]


def test_message_strategy_skips_offline_subjects(clock: ManualClock) -> None:
    inbox = Inbox()
    strategy = MessageStrategy(lambda key: None, inbox, "hello {player}")
    cooldown = Cooldown(time_fn=clock)

    strategy("u-1", cooldown)

    assert inbox.delivered == []


def test_message_strategy_needs_templates() -> None:
    with pytest.raises(ValueError):
        MessageStrategy(lambda key: None, Inbox())
