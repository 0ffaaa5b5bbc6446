from __future__ import annotations

import sqlite3
from pathlib import Path

from liftlog import DEFAULT_DB_PATH, DEFAULT_REST_DURATION, DEFAULT_SETS_PER_EXERCISE

# Will hold template data loaded from the database. Each item is a dict with
#   {'name': <template name>,
#    'exercises': [{'name': <exercise name or None>, 'sets': <number_of_sets>,
#                   'reps': ..., 'weight': ..., 'rest_seconds': ...}, ...]}
WORKOUT_TEMPLATES: list[dict] = []

_TEMPLATE_EXERCISE_QUERY = """
    SELECT le.name, le.target_muscle, le.instructions, le.image_ref, le.id,
           te.number_of_sets, te.reps, te.weight, te.rest_time
      FROM template_exercises te
      LEFT JOIN library_exercises le
             ON le.id = te.library_exercise_id AND le.deleted = 0
     WHERE te.template_id = ? AND te.deleted = 0
     ORDER BY te.position
"""


def _template_exercises(cursor: sqlite3.Cursor, template_id: int) -> list[dict]:
    cursor.execute(_TEMPLATE_EXERCISE_QUERY, (template_id,))
    return [
        {
            "name": name,
            "target_muscle": target,
            "instructions": instructions,
            "image_ref": image_ref,
            "catalog_id": lib_id,
            "sets": sets,
            "reps": reps,
            "weight": weight,
            "rest_seconds": rest,
        }
        for (
            name,
            target,
            instructions,
            image_ref,
            lib_id,
            sets,
            reps,
            weight,
            rest,
        ) in cursor.fetchall()
    ]


def load_workout_templates(db_path: Path = DEFAULT_DB_PATH) -> list[dict]:
    """Load workout templates from the SQLite database into WORKOUT_TEMPLATES."""
    global WORKOUT_TEMPLATES

    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        cursor.execute(
            "SELECT id, name FROM template_templates WHERE deleted = 0 ORDER BY id"
        )
        templates: list[dict] = []
        for template_id, name in cursor.fetchall():
            templates.append(
                {"name": name, "exercises": _template_exercises(cursor, template_id)}
            )

    WORKOUT_TEMPLATES = templates
    return templates


def get_template(name: str, db_path: Path = DEFAULT_DB_PATH) -> dict | None:
    """Return the template called ``name`` or ``None`` if it does not exist."""

    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        cursor.execute(
            "SELECT id, name FROM template_templates WHERE name = ? AND deleted = 0",
            (name,),
        )
        row = cursor.fetchone()
        if not row:
            return None
        return {"name": row[1], "exercises": _template_exercises(cursor, row[0])}


def save_template(name: str, exercises: list[dict], db_path: Path = DEFAULT_DB_PATH) -> int:
    """Create or replace the template ``name`` and return its id.

    Each item of ``exercises`` needs a ``catalog_id`` and may provide
    ``sets``, ``reps``, ``weight`` and ``rest_seconds``.
    """

    if not name.strip():
        raise ValueError("Template name cannot be empty")

    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        cursor.execute(
            "SELECT id FROM template_templates WHERE name = ? AND deleted = 0",
            (name,),
        )
        row = cursor.fetchone()
        if row:
            template_id = row[0]
            cursor.execute(
                "UPDATE template_exercises SET deleted = 1 WHERE template_id = ?",
                (template_id,),
            )
        else:
            cursor.execute("INSERT INTO template_templates (name) VALUES (?)", (name,))
            template_id = cursor.lastrowid

        for position, ex in enumerate(exercises):
            cursor.execute(
                """
                INSERT INTO template_exercises
                    (template_id, library_exercise_id, position,
                     number_of_sets, reps, weight, rest_time)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    template_id,
                    ex.get("catalog_id"),
                    position,
                    ex.get("sets", DEFAULT_SETS_PER_EXERCISE),
                    ex.get("reps", 0),
                    ex.get("weight", 0.0),
                    ex.get("rest_seconds", DEFAULT_REST_DURATION),
                ),
            )
    return template_id
