"""Value types for the exercises and sets of a live workout."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import List, Optional

from liftlog import DEFAULT_REST_DURATION, DEFAULT_SETS_PER_EXERCISE, UNKNOWN_EXERCISE_NAME


@dataclass
class SetEntry:
    """A single planned or performed set."""

    reps: int = 0
    weight: float = 0.0
    completed: bool = False

    def to_dict(self) -> dict:
        return {"reps": self.reps, "weight": self.weight, "completed": self.completed}

    @classmethod
    def from_dict(cls, data: dict) -> "SetEntry":
        reps = data.get("reps", 0)
        weight = data.get("weight", 0.0)
        completed = data.get("completed", False)
        if isinstance(reps, bool) or not isinstance(reps, int):
            raise TypeError(f"Invalid reps value: {reps!r}")
        if isinstance(weight, bool) or not isinstance(weight, (int, float)):
            raise TypeError(f"Invalid weight value: {weight!r}")
        if not isinstance(completed, bool):
            raise TypeError(f"Invalid completed value: {completed!r}")
        return cls(reps=max(0, reps), weight=max(0.0, float(weight)), completed=completed)


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class ExerciseEntry:
    """An exercise on the workout roster together with its sets.

    ``id`` is assigned once and never changes, so it can be used to find an
    entry again after the roster has been reordered or restored from a
    snapshot.  ``catalog_id`` optionally points at the catalog row the entry
    was created from.
    """

    name: str
    target_muscle: Optional[str] = None
    instructions: Optional[str] = None
    image_ref: Optional[str] = None
    rest_seconds: int = DEFAULT_REST_DURATION
    sets: List[SetEntry] = field(default_factory=list)
    catalog_id: Optional[int] = None
    id: str = field(default_factory=_new_id)

    @property
    def is_completed(self) -> bool:
        """``True`` when every set has been marked completed."""
        return all(s.completed for s in self.sets)

    @property
    def completed_set_count(self) -> int:
        return sum(1 for s in self.sets if s.completed)

    def add_set(self, reps: int = 0, weight: float = 0.0) -> SetEntry:
        new_set = SetEntry(reps=max(0, int(reps)), weight=max(0.0, float(weight)))
        self.sets.append(new_set)
        return new_set

    @classmethod
    def from_catalog(
        cls,
        exercise: dict,
        *,
        sets: int = DEFAULT_SETS_PER_EXERCISE,
        rest_seconds: int = DEFAULT_REST_DURATION,
    ) -> "ExerciseEntry":
        """Build an entry from a catalog row with ``sets`` empty sets."""

        entry = cls(
            name=exercise.get("name") or UNKNOWN_EXERCISE_NAME,
            target_muscle=exercise.get("target_muscle"),
            instructions=exercise.get("instructions"),
            image_ref=exercise.get("image_ref"),
            rest_seconds=max(0, int(rest_seconds)),
            catalog_id=exercise.get("id"),
        )
        for _ in range(sets):
            entry.add_set()
        return entry

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "target_muscle": self.target_muscle,
            "instructions": self.instructions,
            "image_ref": self.image_ref,
            "rest_seconds": self.rest_seconds,
            "catalog_id": self.catalog_id,
            "sets": [s.to_dict() for s in self.sets],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ExerciseEntry":
        """Reconstruct an entry from :meth:`to_dict` output.

        Raises ``KeyError``, ``TypeError`` or ``ValueError`` if ``data`` does
        not have the expected shape.
        """

        name = data["name"]
        entry_id = data["id"]
        rest = data.get("rest_seconds", DEFAULT_REST_DURATION)
        if not isinstance(name, str) or not isinstance(entry_id, str):
            raise TypeError("Exercise name and id must be strings")
        if isinstance(rest, bool) or not isinstance(rest, int):
            raise TypeError(f"Invalid rest value: {rest!r}")
        sets = data.get("sets", [])
        if not isinstance(sets, list):
            raise TypeError("Exercise sets must be a list")
        return cls(
            name=name,
            target_muscle=data.get("target_muscle"),
            instructions=data.get("instructions"),
            image_ref=data.get("image_ref"),
            rest_seconds=max(0, rest),
            sets=[SetEntry.from_dict(s) for s in sets],
            catalog_id=data.get("catalog_id"),
            id=entry_id,
        )
