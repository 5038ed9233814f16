from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple

DEFAULT_REFRESH_INTERVAL_SECONDS = 1.0


@dataclass(frozen=True)
class CooldownConfig:
    name: str
    default_seconds: Optional[float] = None
    reject_messages: Tuple[str, ...] = ()
    over_messages: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CooldownSettings:
    refresh_interval_seconds: float = DEFAULT_REFRESH_INTERVAL_SECONDS
    definitions: Mapping[str, CooldownConfig] = field(default_factory=dict)


def _ensure_positive_number(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ValueError(f"cooldowns.{field_name} must be a positive number")
    if not math.isfinite(value):
        raise ValueError(f"cooldowns.{field_name} must be finite")
    return float(value)


def _ensure_messages(value: Any, field_name: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, (list, tuple)) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"cooldowns.{field_name} must be a string or a list of strings")
    return tuple(value)


def _load_definition(name: str, raw: Any) -> CooldownConfig:
    if raw is None:
        return CooldownConfig(name=name)
    if not isinstance(raw, Mapping):
        raise ValueError(f"cooldowns.definitions.{name} must be a mapping")
    default_raw = raw.get("default_sec")
    default_seconds = (
        None
        if default_raw is None
        else _ensure_positive_number(default_raw, f"definitions.{name}.default_sec")
    )
    return CooldownConfig(
        name=name,
        default_seconds=default_seconds,
        reject_messages=_ensure_messages(raw.get("reject_messages"), f"definitions.{name}.reject_messages"),
        over_messages=_ensure_messages(raw.get("over_messages"), f"definitions.{name}.over_messages"),
    )


def load_cooldown_settings(settings: Mapping[str, Any]) -> CooldownSettings:
    block = settings.get("cooldowns")
    if block is None:
        return CooldownSettings()
    if not isinstance(block, Mapping):
        raise ValueError("cooldowns must be a mapping")

    interval_raw = block.get("refresh_interval_sec")
    interval = (
        DEFAULT_REFRESH_INTERVAL_SECONDS
        if interval_raw is None
        else _ensure_positive_number(interval_raw, "refresh_interval_sec")
    )

    definitions_raw = block.get("definitions") or {}
    if not isinstance(definitions_raw, Mapping):
        raise ValueError("cooldowns.definitions must be a mapping")

    definitions = {
        str(name): _load_definition(str(name), raw) for name, raw in definitions_raw.items()
    }
    return CooldownSettings(refresh_interval_seconds=interval, definitions=definitions)


__all__ = [
    "CooldownConfig",
    "CooldownSettings",
    "DEFAULT_REFRESH_INTERVAL_SECONDS",
    "load_cooldown_settings",
]
