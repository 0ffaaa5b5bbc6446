"""Finalisation of a live workout into permanent history.

The in-memory roster is the user's record of what they did, so a workout is
always saved even if some exercises can no longer be matched to the
catalog.  Those exercises are left out of the stored workout and a warning is
logged.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - for type checkers only
    from liftlog.entries import ExerciseEntry
    from liftlog.workout_store import WorkoutStore


def resolve_catalog_exercise(entry: "ExerciseEntry", store: "WorkoutStore") -> dict | None:
    """Return the catalog row for ``entry``.

    The stored ``catalog_id`` is tried first; entries without one (or whose
    catalog row has since been removed) fall back to an exact name match.
    """

    if entry.catalog_id is not None:
        found = store.find_exercise_by_id(entry.catalog_id)
        if found is not None:
            return found
    return store.find_exercise_by_name(entry.name)


def build_workout_exercises(
    exercises: list["ExerciseEntry"], store: "WorkoutStore"
) -> list[dict]:
    """Map the roster to child records for :meth:`WorkoutStore.append`.

    ``order`` is the entry's position in the roster, so positions of dropped
    entries are simply skipped.
    """

    records: list[dict] = []
    for index, entry in enumerate(exercises):
        catalog = resolve_catalog_exercise(entry, store)
        if catalog is None:
            logging.warning(
                "Dropping exercise '%s' from saved workout: not in catalog",
                entry.name,
            )
            continue
        records.append(
            {
                "exercise_name": catalog["name"],
                "exercise_id": catalog["id"],
                "order": index,
                "completed": entry.is_completed,
                "rest_seconds": entry.rest_seconds,
                "sets": [s.to_dict() for s in entry.sets],
            }
        )
    return records


def save_completed_session(
    store: "WorkoutStore",
    workout_name: str,
    start_time: float,
    end_time: float,
    exercises: list["ExerciseEntry"],
    user_id: str | None = None,
) -> int:
    """Write the finished session to ``store`` and return the workout id.

    Storage errors propagate as :class:`~liftlog.workout_store.WorkoutStoreError`.
    """

    duration = max(0, int(end_time - start_time))
    records = build_workout_exercises(exercises, store)
    workout_id = store.append(
        workout_name,
        start_time,
        end_time,
        duration,
        records,
        user_id=user_id,
    )
    logging.info(
        "Saved workout '%s' (%d of %d exercises, %ds)",
        workout_name,
        len(records),
        len(exercises),
        duration,
    )
    return workout_id
