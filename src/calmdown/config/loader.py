from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Mapping

import yaml

_LOGGER = logging.getLogger(__name__)

_YAML_SUFFIXES = (".yaml", ".yml")


class Settings:
    def __init__(self, path: str):
        self.path = path
        self._data: Dict[str, Any] = {}
        self._mtime = 0.0
        self.reload(force=True)

    @property
    def data(self) -> Dict[str, Any]:
        self.reload()  # hot reload if changed
        return self._data

    def reload(self, force: bool = False) -> None:
        try:
            st = os.stat(self.path)
            if force or st.st_mtime > self._mtime:
                with open(self.path, "r", encoding="utf-8") as f:
                    new_data = _parse(self.path, f.read())
                diff = _diff_mapping(self._data, new_data)
                if diff:
                    _LOGGER.info(
                        "settings_reload",
                        extra={
                            "event": "settings_reload",
                            "path": self.path,
                            "previous": self._data,
                            "current": new_data,
                            "diff": diff,
                        },
                    )
                self._data = new_data
                self._mtime = st.st_mtime
        except FileNotFoundError:
            # use empty defaults
            self._data = {}
        except (json.JSONDecodeError, yaml.YAMLError, ValueError, OSError) as exc:
            _LOGGER.warning("Failed to reload settings from %s: %s", self.path, exc)


def _parse(path: str, text: str) -> Dict[str, Any]:
    if path.lower().endswith(_YAML_SUFFIXES):
        data = yaml.safe_load(text)
    else:
        data = json.loads(text)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"settings root must be a mapping, got {type(data).__name__}")
    return data


_MISSING = object()


def _diff_mapping(old: Mapping[str, Any], new: Mapping[str, Any]) -> Dict[str, Dict[str, Any]]:
    diff: Dict[str, Dict[str, Any]] = {}

    def _walk(old_value: Any, new_value: Any, path: tuple[str, ...]) -> None:
        if isinstance(old_value, Mapping) and isinstance(new_value, Mapping):
            for key in sorted(set(old_value) | set(new_value), key=str):
                prev = old_value.get(key, _MISSING)
                curr = new_value.get(key, _MISSING)
                child_path = path + (str(key),)
                if prev is _MISSING or curr is _MISSING:
                    diff[".".join(child_path)] = {
                        "old": None if prev is _MISSING else prev,
                        "new": None if curr is _MISSING else curr,
                    }
                else:
                    _walk(prev, curr, child_path)
            return

        if old_value != new_value:
            diff[".".join(path) or "<root>"] = {"old": old_value, "new": new_value}

    _walk(old, new, ())
    return diff


__all__ = ["Settings"]
