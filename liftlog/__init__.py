"""Shared constants and defaults for the live workout session modules."""

from __future__ import annotations

from pathlib import Path

# Defaults applied when an exercise is added to a running workout
DEFAULT_SETS_PER_EXERCISE = 3
DEFAULT_REST_DURATION = 60

# Names used when a template or catalog row does not provide one
DEFAULT_WORKOUT_NAME = "Workout"
EMPTY_WORKOUT_NAME = "Quick Workout"
UNKNOWN_EXERCISE_NAME = "Unknown"

# Accepted body weights in kilograms
MIN_BODY_WEIGHT = 30.0
MAX_BODY_WEIGHT = 300.0

# Display marker for a zero rest period (exercises performed back to back)
SUPERSET_MARKER = "SS"

# Durable keys written to the snapshot store while a session is active
KEY_ACTIVE = "session.active"
KEY_START_TIME = "session.startTime"
KEY_WORKOUT_NAME = "session.workoutName"
KEY_EXERCISES_SNAPSHOT = "session.exercisesSnapshot"

SESSION_KEYS = (
    KEY_ACTIVE,
    KEY_START_TIME,
    KEY_WORKOUT_NAME,
    KEY_EXERCISES_SNAPSHOT,
)

# Application data lives next to the package so it survives restarts
DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / "data"
DEFAULT_DB_PATH = DEFAULT_DATA_DIR / "workout.db"
DEFAULT_SNAPSHOT_BASE = DEFAULT_DATA_DIR / "session_recovery"

__all__ = [
    "DEFAULT_SETS_PER_EXERCISE",
    "DEFAULT_REST_DURATION",
    "DEFAULT_WORKOUT_NAME",
    "EMPTY_WORKOUT_NAME",
    "UNKNOWN_EXERCISE_NAME",
    "MIN_BODY_WEIGHT",
    "MAX_BODY_WEIGHT",
    "SUPERSET_MARKER",
    "KEY_ACTIVE",
    "KEY_START_TIME",
    "KEY_WORKOUT_NAME",
    "KEY_EXERCISES_SNAPSHOT",
    "SESSION_KEYS",
    "DEFAULT_DATA_DIR",
    "DEFAULT_DB_PATH",
    "DEFAULT_SNAPSHOT_BASE",
]
