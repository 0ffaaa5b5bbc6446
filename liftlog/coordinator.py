"""Owner of the workout that is currently in progress.

:class:`SessionCoordinator` keeps the roster of the live workout, the
elapsed-time clock and the pointer to the exercise on screen.  It survives
the app being suspended or killed by persisting a snapshot of the roster to
a :class:`~liftlog.snapshot.JsonSnapshotStore`.  Elapsed time is always
derived from the start time written when the session began, never from a
counter, so time spent suspended is accounted for on resume.

Operations that are not allowed in the current state (editing while idle,
removing the last set, moving past either end of the roster) do nothing and
return ``False``.
"""

from __future__ import annotations

import copy
import math
import logging
import sqlite3
import time
from typing import Callable

from liftlog import (
    DEFAULT_REST_DURATION,
    DEFAULT_SETS_PER_EXERCISE,
    DEFAULT_WORKOUT_NAME,
    EMPTY_WORKOUT_NAME,
    KEY_ACTIVE,
    KEY_EXERCISES_SNAPSHOT,
    KEY_START_TIME,
    KEY_WORKOUT_NAME,
    UNKNOWN_EXERCISE_NAME,
)
from liftlog.entries import ExerciseEntry
from liftlog.rest_timer import RestTimer
from liftlog.sessions import save_completed_session
from liftlog.snapshot import JsonSnapshotStore, SessionSnapshot, SnapshotError
from liftlog.ticker import default_ticker
from liftlog.workout_store import WorkoutStore, WorkoutStoreError


def translate_index(current: int, from_index: int, to_index: int) -> int:
    """Return where ``current`` points after moving ``from_index`` to ``to_index``.

    ``to_index`` is the position the moved item ends up at.  The pointer
    keeps referring to the same item it referred to before the move.
    """

    if from_index == current:
        return to_index
    if from_index < current <= to_index:
        return current - 1
    if to_index <= current < from_index:
        return current + 1
    return current


class SessionCoordinator:
    """State machine for a single live workout.

    The coordinator is idle until one of :meth:`start_from_template`,
    :meth:`start_empty` or :meth:`resume_if_persisted` succeeds, and goes
    back to idle only through :meth:`end`.  Only one coordinator may use a
    snapshot store at a time; constructing a second one raises
    :class:`~liftlog.snapshot.SessionOwnershipError`.
    """

    def __init__(
        self,
        snapshot_store: JsonSnapshotStore,
        *,
        ticker=None,
        now: Callable[[], float] = time.time,
        rest_timer: RestTimer | None = None,
        default_sets: int = DEFAULT_SETS_PER_EXERCISE,
        default_rest: int = DEFAULT_REST_DURATION,
    ) -> None:
        snapshot_store.claim(self)
        self.snapshot_store = snapshot_store
        self.ticker = ticker if ticker is not None else default_ticker()
        self.now = now
        self.rest_timer = rest_timer
        self.default_sets = default_sets
        self.default_rest = default_rest

        self.is_active = False
        self.workout_name = DEFAULT_WORKOUT_NAME
        self.start_time: float | None = None
        self.current_duration_seconds = 0
        self.exercises: list[ExerciseEntry] = []
        self.current_exercise_index = 0
        self._clock_event = None

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def current_exercise(self) -> ExerciseEntry | None:
        if 0 <= self.current_exercise_index < len(self.exercises):
            return self.exercises[self.current_exercise_index]
        return None

    @property
    def formatted_duration(self) -> str:
        hours, rem = divmod(self.current_duration_seconds, 3600)
        minutes, seconds = divmod(rem, 60)
        if hours > 0:
            return f"{hours}:{minutes:02d}:{seconds:02d}"
        return f"{minutes}:{seconds:02d}"

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            self.workout_name, copy.deepcopy(self.exercises), self.current_exercise_index
        )

    def _find(self, exercise_id: str) -> ExerciseEntry | None:
        for entry in self.exercises:
            if entry.id == exercise_id:
                return entry
        return None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start_from_template(
        self, template: dict, template_exercises: list[dict] | None = None
    ) -> bool:
        """Start a workout pre-populated from ``template``.

        ``template_exercises`` defaults to ``template["exercises"]``.  Each
        config provides ``sets`` planned sets at its ``reps``/``weight``.
        Configs whose catalog exercise is missing get a placeholder name.
        """

        if self.is_active:
            return False
        if template_exercises is None:
            template_exercises = template.get("exercises") or []
        exercises: list[ExerciseEntry] = []
        for config in template_exercises:
            entry = ExerciseEntry(
                name=config.get("name") or UNKNOWN_EXERCISE_NAME,
                target_muscle=config.get("target_muscle"),
                instructions=config.get("instructions"),
                image_ref=config.get("image_ref"),
                rest_seconds=max(0, int(config.get("rest_seconds") or 0)),
                catalog_id=config.get("catalog_id"),
            )
            # every entry keeps at least one set
            for _ in range(max(1, int(config.get("sets") or 0))):
                entry.add_set(
                    reps=config.get("reps") or 0, weight=config.get("weight") or 0.0
                )
            exercises.append(entry)
        self._start(template.get("name") or DEFAULT_WORKOUT_NAME, exercises)
        return True

    def start_empty(self) -> bool:
        if self.is_active:
            return False
        self._start(EMPTY_WORKOUT_NAME, [])
        return True

    def _start(self, name: str, exercises: list[ExerciseEntry]) -> None:
        self.workout_name = name
        self.exercises = exercises
        self.current_exercise_index = 0
        self.start_time = self.now()
        self.current_duration_seconds = 0
        self.is_active = True
        # start time and active flag are written once here and never again
        self.snapshot_store.update(
            {
                KEY_ACTIVE: True,
                KEY_START_TIME: self.start_time,
                KEY_WORKOUT_NAME: self.workout_name,
                KEY_EXERCISES_SNAPSHOT: self.snapshot().to_json(),
            }
        )
        self._start_clock()
        logging.info(
            "Started workout '%s' with %d exercises", name, len(exercises)
        )

    def resume_if_persisted(self) -> bool:
        """Restore a session left behind by a suspended or killed app.

        Safe to call on every launch: returns ``False`` without changes if
        a session is already active or nothing was persisted.
        """

        if self.is_active:
            return False
        store = self.snapshot_store
        start_time = store.get(KEY_START_TIME)
        if not store.get(KEY_ACTIVE) or start_time is None:
            return False
        if (
            isinstance(start_time, bool)
            or not isinstance(start_time, (int, float))
            or not math.isfinite(start_time)
        ):
            logging.warning("Ignoring persisted session with bad start time %r", start_time)
            return False

        exercises: list[ExerciseEntry] = []
        index = 0
        text = store.get(KEY_EXERCISES_SNAPSHOT)
        if text is not None:
            try:
                restored = SessionSnapshot.from_json(text)
            except SnapshotError:
                logging.warning(
                    "Could not restore exercises of persisted session; starting empty",
                    exc_info=True,
                )
            else:
                exercises = restored.exercises
                index = restored.current_index

        self.workout_name = store.get(KEY_WORKOUT_NAME) or DEFAULT_WORKOUT_NAME
        self.exercises = exercises
        self.current_exercise_index = min(max(0, index), max(0, len(exercises) - 1))
        self.start_time = float(start_time)
        self.is_active = True
        self._recompute_duration()
        self._start_clock()
        logging.info(
            "Resumed workout '%s' after %ds", self.workout_name, self.current_duration_seconds
        )
        return True

    def enter_background(self) -> None:
        """Persist the roster before the app is suspended."""

        if not self.is_active:
            return
        self.snapshot_store.set(KEY_EXERCISES_SNAPSHOT, self.snapshot().to_json())

    def enter_foreground(self) -> None:
        """Correct the elapsed time after the app comes back."""

        if self.is_active:
            self._recompute_duration()

    def end(self, store: WorkoutStore, user_id: str | None) -> int | None:
        """Finish the workout and write it to ``store``.

        Returns the stored workout id, or ``None`` if the session is not
        active, no user is signed in, or the write failed.  On a failed
        write the session stays active and its snapshot is kept so ending
        can be retried.
        """

        if not self.is_active:
            return None
        if user_id is None:
            logging.warning("Cannot end workout '%s' without a user", self.workout_name)
            return None

        self._recompute_duration()
        end_time = max(self.now(), self.start_time)
        try:
            workout_id = save_completed_session(
                store,
                self.workout_name,
                self.start_time,
                end_time,
                self.exercises,
                user_id=user_id,
            )
        except (WorkoutStoreError, sqlite3.Error):
            logging.exception("Failed to save workout '%s'", self.workout_name)
            return None

        self._stop_clock()
        if self.rest_timer is not None:
            self.rest_timer.stop()
        self.snapshot_store.clear_session()
        self._reset()
        return workout_id

    def close(self) -> None:
        """Stop all timers and give up ownership of the snapshot store.

        The persisted session is left in place so it can be resumed later.
        """

        self._stop_clock()
        if self.rest_timer is not None:
            self.rest_timer.stop()
        self.snapshot_store.release(self)

    def _reset(self) -> None:
        self.is_active = False
        self.workout_name = DEFAULT_WORKOUT_NAME
        self.start_time = None
        self.current_duration_seconds = 0
        self.exercises = []
        self.current_exercise_index = 0

    # ------------------------------------------------------------------
    # Duration clock
    # ------------------------------------------------------------------

    def _start_clock(self) -> None:
        self._stop_clock()
        self._clock_event = self.ticker.schedule_interval(self._on_clock_tick, 1.0)

    def _stop_clock(self) -> None:
        if self._clock_event is not None:
            self._clock_event.cancel()
            self._clock_event = None

    def _on_clock_tick(self, *_args):
        if not self.is_active:
            self._stop_clock()
            return False
        self._recompute_duration()
        return None

    def _recompute_duration(self) -> None:
        if self.start_time is None:
            self.current_duration_seconds = 0
            return
        self.current_duration_seconds = max(0, int(self.now() - self.start_time))

    # ------------------------------------------------------------------
    # Roster
    # ------------------------------------------------------------------

    def add_exercise(self, entry: ExerciseEntry) -> bool:
        if not self.is_active:
            return False
        self.exercises.append(entry)
        return True

    def add_catalog_exercise(self, exercise: dict) -> ExerciseEntry | None:
        """Append a new entry built from the catalog row ``exercise``."""

        if not self.is_active:
            return None
        entry = ExerciseEntry.from_catalog(
            exercise, sets=self.default_sets, rest_seconds=self.default_rest
        )
        self.exercises.append(entry)
        return entry

    def remove_exercise(self, exercise_id: str) -> bool:
        if not self.is_active:
            return False
        for index, entry in enumerate(self.exercises):
            if entry.id == exercise_id:
                break
        else:
            return False
        del self.exercises[index]
        if index < self.current_exercise_index:
            self.current_exercise_index -= 1
        self.current_exercise_index = min(
            self.current_exercise_index, max(0, len(self.exercises) - 1)
        )
        return True

    def move_exercise(self, from_index: int, to_index: int) -> bool:
        """Move the entry at ``from_index`` so it ends up at ``to_index``."""

        if not self.is_active:
            return False
        count = len(self.exercises)
        if not (0 <= from_index < count and 0 <= to_index < count):
            return False
        if from_index == to_index:
            return False
        entry = self.exercises.pop(from_index)
        self.exercises.insert(to_index, entry)
        self.current_exercise_index = translate_index(
            self.current_exercise_index, from_index, to_index
        )
        return True

    def advance_to_next(self) -> bool:
        if not self.is_active or self.current_exercise_index >= len(self.exercises) - 1:
            return False
        self.current_exercise_index += 1
        return True

    def advance_to_previous(self) -> bool:
        if not self.is_active or self.current_exercise_index <= 0:
            return False
        self.current_exercise_index -= 1
        return True

    # ------------------------------------------------------------------
    # Sets
    # ------------------------------------------------------------------

    def add_set(self, exercise_id: str) -> bool:
        entry = self._find(exercise_id) if self.is_active else None
        if entry is None:
            return False
        entry.add_set()
        return True

    def remove_set(self, exercise_id: str, index: int) -> bool:
        """Remove a set; the last remaining set can never be removed."""

        entry = self._find(exercise_id) if self.is_active else None
        if entry is None or len(entry.sets) <= 1:
            return False
        if not 0 <= index < len(entry.sets):
            return False
        del entry.sets[index]
        return True

    def update_set(
        self,
        exercise_id: str,
        index: int,
        reps: int | None = None,
        weight: float | None = None,
    ) -> bool:
        entry = self._find(exercise_id) if self.is_active else None
        if entry is None or not 0 <= index < len(entry.sets):
            return False
        item = entry.sets[index]
        if reps is not None:
            item.reps = max(0, int(reps))
        if weight is not None:
            item.weight = max(0.0, float(weight))
        return True

    def toggle_set_completion(self, exercise_id: str, index: int) -> bool:
        """Flip a set's completion flag.

        Completing a set with reps starts the rest timer for the exercise's
        rest period.
        """

        entry = self._find(exercise_id) if self.is_active else None
        if entry is None or not 0 <= index < len(entry.sets):
            return False
        item = entry.sets[index]
        item.completed = not item.completed
        if (
            item.completed
            and item.reps > 0
            and entry.rest_seconds > 0
            and self.rest_timer is not None
        ):
            self.rest_timer.start(entry.rest_seconds)
        return True
