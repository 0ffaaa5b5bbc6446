"""SQLite storage for finished workouts, the exercise catalog and body weight.

Finished sessions are written as one ``workout_workouts`` row with child
``workout_exercises`` rows and grandchild ``workout_sets`` rows.  History
queries return plain dictionaries so screens can render them directly.
"""

from __future__ import annotations

import math
import sqlite3
from pathlib import Path

from liftlog import DEFAULT_DB_PATH, MAX_BODY_WEIGHT, MIN_BODY_WEIGHT

SCHEMA_PATH = Path(__file__).resolve().parent / "workout_schema.sql"


class WorkoutStoreError(RuntimeError):
    """Raised when the underlying database rejects a read or write."""


def _exercise_row_to_dict(row) -> dict:
    ex_id, name, target, instructions, image_ref = row
    return {
        "id": ex_id,
        "name": name,
        "target_muscle": target,
        "instructions": instructions,
        "image_ref": image_ref,
    }


class WorkoutStore:
    """Durable workout history backed by the database at ``db_path``."""

    def __init__(self, db_path: Path = DEFAULT_DB_PATH) -> None:
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self.db_path))

    def ensure_schema(self) -> None:
        """Create any missing tables."""

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with SCHEMA_PATH.open("r", encoding="utf-8") as fh:
            script = fh.read()
        try:
            with self._connect() as conn:
                conn.executescript(script)
        except sqlite3.Error as exc:
            raise WorkoutStoreError(str(exc)) from exc

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def add_catalog_exercise(
        self,
        name: str,
        target_muscle: str | None = None,
        instructions: str | None = None,
        image_ref: str | None = None,
    ) -> int:
        """Insert ``name`` into the catalog and return its id."""

        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                INSERT INTO library_exercises (name, target_muscle, instructions, image_ref)
                VALUES (?, ?, ?, ?)
                """,
                (name, target_muscle, instructions, image_ref),
            )
            return cur.lastrowid

    def find_exercise_by_name(self, name: str) -> dict | None:
        """Return the catalog exercise named exactly ``name``.

        Matching is case-sensitive.  ``None`` is returned on a miss.
        """

        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT id, name, target_muscle, instructions, image_ref
                  FROM library_exercises
                 WHERE name = ? AND deleted = 0
                 ORDER BY id LIMIT 1
                """,
                (name,),
            ).fetchone()
        return _exercise_row_to_dict(row) if row else None

    def find_exercise_by_id(self, exercise_id: int) -> dict | None:
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT id, name, target_muscle, instructions, image_ref
                  FROM library_exercises
                 WHERE id = ? AND deleted = 0
                """,
                (exercise_id,),
            ).fetchone()
        return _exercise_row_to_dict(row) if row else None

    def list_exercises(self) -> list[dict]:
        """Return every catalog exercise ordered by name."""

        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT id, name, target_muscle, instructions, image_ref
                  FROM library_exercises
                 WHERE deleted = 0
                 ORDER BY name
                """
            ).fetchall()
        return [_exercise_row_to_dict(r) for r in rows]

    # ------------------------------------------------------------------
    # Workout history
    # ------------------------------------------------------------------

    def append(
        self,
        workout_name: str,
        start_time: float,
        end_time: float,
        duration_seconds: int,
        exercises: list[dict],
        user_id: str | None = None,
    ) -> int:
        """Persist a finished workout and return its id.

        ``exercises`` holds mappings with ``exercise_name``, ``exercise_id``,
        ``order``, ``completed``, ``rest_seconds`` and a ``sets`` list of
        ``reps``/``weight``/``completed`` mappings.  Everything is written in
        one transaction.  If a workout for the same user and start time is
        already stored its id is returned and nothing is written.
        """

        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    SELECT id FROM workout_workouts
                     WHERE user_id IS ? AND started_at = ? AND deleted = 0
                    """,
                    (user_id, start_time),
                )
                existing = cursor.fetchone()
                if existing:
                    return existing[0]

                cursor.execute(
                    """
                    INSERT INTO workout_workouts
                        (user_id, name, started_at, ended_at, duration, completed)
                    VALUES (?, ?, ?, ?, ?, 1)
                    """,
                    (user_id, workout_name, start_time, end_time, int(duration_seconds)),
                )
                workout_id = cursor.lastrowid

                for ex in exercises:
                    cursor.execute(
                        """
                        INSERT INTO workout_exercises
                            (workout_id, library_exercise_id, exercise_name,
                             position, completed, rest_time)
                        VALUES (?, ?, ?, ?, ?, ?)
                        """,
                        (
                            workout_id,
                            ex.get("exercise_id"),
                            ex["exercise_name"],
                            ex["order"],
                            int(bool(ex.get("completed"))),
                            ex.get("rest_seconds", 0),
                        ),
                    )
                    workout_ex_id = cursor.lastrowid
                    for set_number, item in enumerate(ex.get("sets", []), 1):
                        cursor.execute(
                            """
                            INSERT INTO workout_sets
                                (workout_exercise_id, set_number, reps, weight, completed)
                            VALUES (?, ?, ?, ?, ?)
                            """,
                            (
                                workout_ex_id,
                                set_number,
                                item.get("reps", 0),
                                item.get("weight", 0.0),
                                int(bool(item.get("completed"))),
                            ),
                        )
        except sqlite3.Error as exc:
            raise WorkoutStoreError(str(exc)) from exc
        return workout_id

    def get_workout_history(
        self, limit: int | None = None, user_id: str | None = None
    ) -> list[dict]:
        """Return finished workouts, most recent first.

        Each item has ``id``, ``name``, ``started_at``, ``ended_at``,
        ``duration``, ``exercise_count`` and ``set_count`` keys.
        """

        query = """
            SELECT w.id, w.name, w.started_at, w.ended_at, w.duration,
                   (SELECT COUNT(*) FROM workout_exercises e
                     WHERE e.workout_id = w.id AND e.deleted = 0),
                   (SELECT COUNT(*) FROM workout_sets s
                      JOIN workout_exercises e ON s.workout_exercise_id = e.id
                     WHERE e.workout_id = w.id AND s.deleted = 0 AND e.deleted = 0)
              FROM workout_workouts w
             WHERE w.deleted = 0
        """
        params: list = []
        if user_id is not None:
            query += " AND w.user_id = ?"
            params.append(user_id)
        query += " ORDER BY w.started_at DESC"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [
            {
                "id": wid,
                "name": name,
                "started_at": started,
                "ended_at": ended,
                "duration": duration,
                "exercise_count": ex_count,
                "set_count": set_count,
            }
            for wid, name, started, ended, duration, ex_count, set_count in rows
        ]

    def get_workout_details(self, workout_id: int) -> dict:
        """Return the workout ``workout_id`` with its exercises and sets.

        An empty mapping is returned if the workout does not exist.
        """

        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT name, started_at, ended_at, duration, user_id
                  FROM workout_workouts
                 WHERE id = ? AND deleted = 0
                """,
                (workout_id,),
            )
            row = cur.fetchone()
            if row is None:
                return {}
            name, started, ended, duration, user_id = row

            cur.execute(
                """
                SELECT id, exercise_name, position, completed, rest_time
                  FROM workout_exercises
                 WHERE workout_id = ? AND deleted = 0
                 ORDER BY position
                """,
                (workout_id,),
            )
            exercises: list[dict] = []
            for ex_id, ex_name, position, completed, rest in cur.fetchall():
                cur.execute(
                    """
                    SELECT set_number, reps, weight, completed
                      FROM workout_sets
                     WHERE workout_exercise_id = ? AND deleted = 0
                     ORDER BY set_number
                    """,
                    (ex_id,),
                )
                sets = [
                    {"number": num, "reps": reps, "weight": weight, "completed": bool(done)}
                    for num, reps, weight, done in cur.fetchall()
                ]
                exercises.append(
                    {
                        "name": ex_name,
                        "order": position,
                        "completed": bool(completed),
                        "rest_seconds": rest,
                        "sets": sets,
                    }
                )

        return {
            "id": workout_id,
            "name": name,
            "user_id": user_id,
            "started_at": started,
            "ended_at": ended,
            "duration": duration,
            "exercises": exercises,
        }

    def get_personal_records(self, user_id: str | None = None) -> list[dict]:
        """Return the heaviest completed set for every exercise.

        Ties on weight are broken by reps, then by the earliest workout.
        """

        query = """
            SELECT e.exercise_name, s.weight, s.reps, w.started_at
              FROM workout_sets s
              JOIN workout_exercises e ON s.workout_exercise_id = e.id
              JOIN workout_workouts w ON e.workout_id = w.id
             WHERE s.completed = 1 AND s.deleted = 0 AND e.deleted = 0 AND w.deleted = 0
        """
        params: list = []
        if user_id is not None:
            query += " AND w.user_id = ?"
            params.append(user_id)
        query += " ORDER BY e.exercise_name, s.weight DESC, s.reps DESC, w.started_at"
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        records: dict[str, dict] = {}
        for name, weight, reps, started in rows:
            if name not in records:
                records[name] = {
                    "exercise_name": name,
                    "weight": weight,
                    "reps": reps,
                    "achieved_at": started,
                }
        return list(records.values())

    # ------------------------------------------------------------------
    # Body weight
    # ------------------------------------------------------------------

    @staticmethod
    def _check_body_weight(weight: float) -> float:
        if isinstance(weight, bool) or not isinstance(weight, (int, float)):
            raise ValueError(f"Body weight must be a number, got {weight!r}")
        if not math.isfinite(weight) or not MIN_BODY_WEIGHT <= weight <= MAX_BODY_WEIGHT:
            raise ValueError(
                f"Body weight must be between {MIN_BODY_WEIGHT:g} and {MAX_BODY_WEIGHT:g} kg"
            )
        return float(weight)

    def add_weight_entry(
        self, weight: float, logged_at: float, user_id: str | None = None
    ) -> int:
        """Record a body weight measurement and return its id.

        Raises ``ValueError`` for weights outside the accepted range.
        """

        weight = self._check_body_weight(weight)
        try:
            with self._connect() as conn:
                cur = conn.execute(
                    "INSERT INTO weight_entries (user_id, weight, logged_at) VALUES (?, ?, ?)",
                    (user_id, weight, logged_at),
                )
                return cur.lastrowid
        except sqlite3.Error as exc:
            raise WorkoutStoreError(str(exc)) from exc

    def get_weight_history(
        self, user_id: str | None = None, limit: int | None = None
    ) -> list[dict]:
        """Return logged body weights, oldest first.

        With ``limit`` only the most recent ``limit`` entries are returned.
        """

        query = """
            SELECT id, weight, logged_at FROM weight_entries
             WHERE user_id IS ? AND deleted = 0
             ORDER BY logged_at DESC, id DESC
        """
        params: list = [user_id]
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [
            {"id": entry_id, "weight": weight, "logged_at": logged_at}
            for entry_id, weight, logged_at in reversed(rows)
        ]

    def set_target_weight(self, weight: float, user_id: str | None = None) -> None:
        weight = self._check_body_weight(weight)
        try:
            with self._connect() as conn:
                conn.execute("DELETE FROM weight_targets WHERE user_id IS ?", (user_id,))
                conn.execute(
                    "INSERT INTO weight_targets (user_id, target_weight) VALUES (?, ?)",
                    (user_id, weight),
                )
        except sqlite3.Error as exc:
            raise WorkoutStoreError(str(exc)) from exc

    def get_target_weight(self, user_id: str | None = None) -> float | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT target_weight FROM weight_targets WHERE user_id IS ?",
                (user_id,),
            ).fetchone()
        return row[0] if row else None
