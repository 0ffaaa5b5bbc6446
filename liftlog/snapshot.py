"""Crash and suspend recovery for the active workout session.

The roster of an in-progress workout is serialised into a
:class:`SessionSnapshot` and written to a :class:`JsonSnapshotStore`.  The
store keeps its data in two JSON files so that a write interrupted by the
operating system killing the app still leaves one readable copy behind.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from liftlog import DEFAULT_SNAPSHOT_BASE, SESSION_KEYS
from liftlog.entries import ExerciseEntry


class SnapshotError(ValueError):
    """Raised when a serialised snapshot cannot be decoded."""


class SessionOwnershipError(RuntimeError):
    """Raised when a second coordinator tries to use an owned store."""


class SessionSnapshot:
    """Serializable projection of the session roster."""

    def __init__(
        self,
        workout_name: str,
        exercises: list[ExerciseEntry],
        current_index: int = 0,
    ) -> None:
        self.workout_name = workout_name
        self.exercises = exercises
        self.current_index = current_index

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SessionSnapshot):
            return NotImplemented
        return (
            self.workout_name == other.workout_name
            and self.exercises == other.exercises
            and self.current_index == other.current_index
        )

    def to_dict(self) -> dict:
        return {
            "workout_name": self.workout_name,
            "current_index": self.current_index,
            "exercises": [ex.to_dict() for ex in self.exercises],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)

    @classmethod
    def from_json(cls, text: str) -> "SessionSnapshot":
        """Decode ``text`` produced by :meth:`to_json`.

        Any malformed payload is reported as :class:`SnapshotError`.
        """

        try:
            data = json.loads(text)
            name = data["workout_name"]
            index = data.get("current_index", 0)
            if not isinstance(name, str):
                raise TypeError("workout_name must be a string")
            if isinstance(index, bool) or not isinstance(index, int):
                raise TypeError("current_index must be an integer")
            raw_exercises = data["exercises"]
            if not isinstance(raw_exercises, list):
                raise TypeError("exercises must be a list")
            exercises = [ExerciseEntry.from_dict(item) for item in raw_exercises]
        except (TypeError, ValueError, KeyError, AttributeError) as exc:
            raise SnapshotError(f"Invalid session snapshot: {exc}") from exc
        return cls(name, exercises, index)


class JsonSnapshotStore:
    """Single-slot key-value store persisted as JSON.

    Every write goes to ``<base>_1.json`` and ``<base>_2.json``.  Reads use
    the first file that parses.  Only one coordinator may own a store at a
    time; see :meth:`claim`.
    """

    def __init__(self, base: Path = DEFAULT_SNAPSHOT_BASE) -> None:
        self.base = Path(base)
        self.paths = (
            self.base.with_name(self.base.name + "_1.json"),
            self.base.with_name(self.base.name + "_2.json"),
        )
        self._owner: object | None = None
        self._data: dict[str, Any] = self._load()

    # ------------------------------------------------------------------
    # Ownership
    # ------------------------------------------------------------------

    def claim(self, owner: object) -> None:
        """Register ``owner`` as the only session coordinator for this store."""

        if self._owner is not None and self._owner is not owner:
            raise SessionOwnershipError("Snapshot store already has an active owner")
        self._owner = owner

    def release(self, owner: object) -> None:
        if self._owner is owner:
            self._owner = None

    @property
    def owner(self) -> object | None:
        return self._owner

    # ------------------------------------------------------------------
    # Key-value access
    # ------------------------------------------------------------------

    def _load(self) -> dict[str, Any]:
        for path in self.paths:
            try:
                if not path.exists():
                    continue
                text = path.read_text(encoding="utf-8").strip()
                if not text:
                    continue
                data = json.loads(text)
            except (OSError, ValueError):
                logging.warning("Unreadable snapshot file %s", path)
                continue
            if isinstance(data, dict):
                return data
        return {}

    def _write(self) -> None:
        payload = json.dumps(self._data, sort_keys=True)
        try:
            self.base.parent.mkdir(parents=True, exist_ok=True)
            for path in self.paths:
                path.write_text(payload, encoding="utf-8")
        except OSError:
            logging.exception("Failed to persist session snapshot to %s", self.base)

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._write()

    def update(self, values: dict[str, Any]) -> None:
        self._data.update(values)
        self._write()

    def remove(self, *keys: str) -> None:
        for key in keys:
            self._data.pop(key, None)
        self._write()

    def clear_session(self) -> None:
        """Remove every durable session key."""
        self.remove(*SESSION_KEYS)

    def reload(self) -> None:
        """Re-read the persisted files, discarding in-memory state."""
        self._data = self._load()
