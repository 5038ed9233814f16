from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from ..config.cooldowns import CooldownConfig, load_cooldown_settings
from ..core.builder import CooldownBuilder
from ..core.cooldown import Cooldown, KeyFn
from ..core.dispatch import SubjectLookup
from ..core.factory import CooldownFactory
from ..core.ticker import TickSource
from ..features.messages import MessageStrategy, NameFn, SendFn
from ..infra.metrics import MetricsRecorder

_LOGGER = logging.getLogger(__name__)


def setup_runtime(
    settings: Mapping[str, Any],
    *,
    tick_source: TickSource,
    lookup: SubjectLookup,
    send: SendFn,
    key_fn: Optional[KeyFn] = None,
    name_of: NameFn = str,
    metrics: Optional[MetricsRecorder] = None,
    logger: Optional[logging.Logger] = None,
    time_fn: Optional[Callable[[], float]] = None,
) -> Tuple[CooldownFactory, Dict[str, Cooldown]]:
    """Build a factory on ``tick_source`` and one cooldown per configured definition."""

    log = logger or _LOGGER
    cooldown_settings = load_cooldown_settings(settings)
    factory = CooldownFactory.create(
        tick_source,
        key_fn=key_fn,
        interval=cooldown_settings.refresh_interval_seconds,
        metrics=metrics,
        logger=log,
        time_fn=time_fn,
    )
    cooldowns: Dict[str, Cooldown] = {}
    for name, definition in cooldown_settings.definitions.items():
        builder = _configure(factory.new_builder(), definition, lookup=lookup, send=send, name_of=name_of)
        cooldowns[name] = builder.build()
    log.info(
        "cooldowns_ready",
        extra={
            "event": "cooldowns_ready",
            "cooldowns": sorted(cooldowns),
            "refresh_interval_sec": cooldown_settings.refresh_interval_seconds,
        },
    )
    return factory, cooldowns


def _configure(
    builder: CooldownBuilder,
    definition: CooldownConfig,
    *,
    lookup: SubjectLookup,
    send: SendFn,
    name_of: NameFn,
) -> CooldownBuilder:
    builder.named(definition.name)
    if definition.default_seconds is not None:
        builder.with_default_duration(definition.default_seconds)
    if definition.reject_messages:
        builder.rejects_with(MessageStrategy(lookup, send, *definition.reject_messages, name_of=name_of))
    if definition.over_messages:
        builder.when_over(MessageStrategy(lookup, send, *definition.over_messages, name_of=name_of))
    return builder


__all__ = ["setup_runtime"]
