"""User preferences for new workouts.

Preferences are kept in a JSON list of ``{"key", "value", "type"}``
mappings so the file keeps the order entries were added in.  Only the
defaults applied to exercises added during a live workout live here.
"""

from __future__ import annotations

from pathlib import Path
import json
import logging
from typing import Any, List, Dict

from liftlog import DEFAULT_DATA_DIR, DEFAULT_REST_DURATION, DEFAULT_SETS_PER_EXERCISE

SETTINGS_PATH = DEFAULT_DATA_DIR / "settings.json"

DEFAULT_SETTINGS: List[Dict[str, Any]] = [
    {"key": "default_rest_seconds", "value": DEFAULT_REST_DURATION, "type": "int"},
    {"key": "default_sets", "value": DEFAULT_SETS_PER_EXERCISE, "type": "int"},
]

# Loaded settings per file, so each file is read from disk once.
_settings_cache: Dict[Path, List[Dict[str, Any]]] = {}


def _resolve(path: Path | None) -> Path:
    return Path(path) if path is not None else Path(SETTINGS_PATH)


def load_settings(path: Path | None = None) -> List[Dict[str, Any]]:
    """Read the settings at ``path``, writing the defaults if it is missing.

    A file that cannot be parsed is replaced by the defaults.
    """
    path = _resolve(path)
    if path.exists():
        try:
            with path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError):
            logging.warning("Ignoring unreadable settings file %s", path)
        else:
            if isinstance(data, list):
                return data
            logging.warning("Ignoring settings file %s: expected a list", path)
    defaults = [dict(item) for item in DEFAULT_SETTINGS]
    save_settings(defaults, path)
    return defaults


def save_settings(settings: List[Dict[str, Any]], path: Path | None = None) -> None:
    path = _resolve(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(settings, fh, indent=2)


def get_settings(path: Path | None = None) -> List[Dict[str, Any]]:
    path = _resolve(path)
    if path not in _settings_cache:
        _settings_cache[path] = load_settings(path)
    return _settings_cache[path]


def reset_cache() -> None:
    _settings_cache.clear()


def get_value(key: str, default: Any = None, path: Path | None = None) -> Any:
    """Return the value stored for ``key`` or ``default``."""
    for item in get_settings(path):
        if item.get("key") == key:
            return item.get("value")
    return default


def set_value(key: str, value: Any, path: Path | None = None) -> None:
    """Store ``value`` under ``key`` and write the file immediately."""
    settings = get_settings(path)
    for item in settings:
        if item.get("key") == key:
            item["value"] = value
            break
    else:
        settings.append({"key": key, "value": value, "type": type(value).__name__})
    save_settings(settings, path)
