import pytest

from liftlog import KEY_ACTIVE, KEY_START_TIME, SESSION_KEYS
from liftlog.entries import ExerciseEntry
from liftlog.sessions import build_workout_exercises, resolve_catalog_exercise
from liftlog.workout_store import WorkoutStoreError


def _entry(name, sets=2, reps=10, weight=50.0, catalog_id=None) -> ExerciseEntry:
    entry = ExerciseEntry(name, rest_seconds=90, catalog_id=catalog_id)
    for _ in range(sets):
        entry.add_set(reps=reps, weight=weight)
    return entry


def test_end_saves_completed_workout(coordinator, workout_store, snapshot_store, clock):
    coordinator.start_empty()
    bench = _entry("Bench Press", sets=2, reps=8, weight=60.0)
    coordinator.add_exercise(bench)
    coordinator.toggle_set_completion(bench.id, 0)
    coordinator.toggle_set_completion(bench.id, 1)
    clock.advance(300)

    workout_id = coordinator.end(workout_store, user_id="u1")

    assert workout_id is not None
    details = workout_store.get_workout_details(workout_id)
    assert details["name"] == "Quick Workout"
    assert details["user_id"] == "u1"
    assert details["duration"] == 300
    assert len(details["exercises"]) == 1
    saved = details["exercises"][0]
    assert saved["name"] == "Bench Press"
    assert saved["completed"] is True
    assert saved["rest_seconds"] == 90
    assert [(s["number"], s["reps"], s["weight"], s["completed"]) for s in saved["sets"]] == [
        (1, 8, 60.0, True),
        (2, 8, 60.0, True),
    ]

    assert not coordinator.is_active
    assert coordinator.exercises == []
    assert coordinator.start_time is None
    assert coordinator.current_duration_seconds == 0
    for key in SESSION_KEYS:
        assert snapshot_store.get(key) is None


def test_end_cancels_timers(coordinator, workout_store, ticker, rest_timer):
    coordinator.start_empty()
    bench = _entry("Bench Press", sets=2)
    coordinator.add_exercise(bench)
    coordinator.toggle_set_completion(bench.id, 0)
    assert rest_timer.is_active
    assert len(ticker.events) == 2

    assert coordinator.end(workout_store, user_id="u1") is not None
    assert ticker.events == []
    assert not rest_timer.is_active


def test_unknown_exercise_is_dropped(coordinator, workout_store):
    coordinator.start_empty()
    coordinator.add_exercise(_entry("Mystery Lift"))
    coordinator.add_exercise(_entry("Squat"))
    workout_id = coordinator.end(workout_store, user_id="u1")

    exercises = workout_store.get_workout_details(workout_id)["exercises"]
    assert [e["name"] for e in exercises] == ["Squat"]
    assert exercises[0]["order"] == 1
    assert exercises[0]["completed"] is False


def test_empty_workout_still_saves(coordinator, workout_store):
    coordinator.start_empty()
    workout_id = coordinator.end(workout_store, user_id="u1")
    assert workout_store.get_workout_details(workout_id)["exercises"] == []
    assert workout_store.get_workout_history()[0]["exercise_count"] == 0


def test_end_without_user_changes_nothing(coordinator, workout_store, snapshot_store):
    coordinator.start_empty()
    coordinator.add_exercise(_entry("Squat"))
    assert coordinator.end(workout_store, user_id=None) is None
    assert coordinator.is_active
    assert len(coordinator.exercises) == 1
    assert snapshot_store.get(KEY_ACTIVE) is True
    assert workout_store.get_workout_history() == []


def test_end_when_idle_returns_none(coordinator, workout_store):
    assert coordinator.end(workout_store, user_id="u1") is None
    assert workout_store.get_workout_history() == []


def test_failed_write_keeps_session(coordinator, workout_store, snapshot_store, monkeypatch):
    coordinator.start_empty()
    coordinator.add_exercise(_entry("Squat"))
    started = snapshot_store.get(KEY_START_TIME)

    def broken_append(*args, **kwargs):
        raise WorkoutStoreError("disk full")

    monkeypatch.setattr(workout_store, "append", broken_append)
    assert coordinator.end(workout_store, user_id="u1") is None
    assert coordinator.is_active
    assert len(coordinator.exercises) == 1
    assert snapshot_store.get(KEY_ACTIVE) is True
    assert snapshot_store.get(KEY_START_TIME) == started

    monkeypatch.undo()
    assert coordinator.end(workout_store, user_id="u1") is not None
    assert not coordinator.is_active


def test_append_is_idempotent(workout_store):
    records = [
        {
            "exercise_name": "Squat",
            "exercise_id": 2,
            "order": 0,
            "completed": True,
            "rest_seconds": 60,
            "sets": [{"reps": 5, "weight": 100.0, "completed": True}],
        }
    ]
    first = workout_store.append("Legs", 1000.0, 1600.0, 600, records, user_id="u1")
    second = workout_store.append("Legs", 1000.0, 1600.0, 600, records, user_id="u1")
    assert first == second
    history = workout_store.get_workout_history()
    assert len(history) == 1
    assert history[0]["set_count"] == 1


def test_resolve_prefers_catalog_id(workout_store):
    entry = _entry("Renamed Bench", catalog_id=1)
    assert resolve_catalog_exercise(entry, workout_store)["name"] == "Bench Press"


def test_resolve_falls_back_to_name(workout_store):
    entry = _entry("Push-up", catalog_id=99)
    assert resolve_catalog_exercise(entry, workout_store)["id"] == 3


def test_resolve_name_is_case_sensitive(workout_store):
    assert resolve_catalog_exercise(_entry("bench press"), workout_store) is None


def test_build_records_use_roster_order(workout_store):
    roster = [_entry("Squat"), _entry("Nope"), _entry("Bench Press")]
    roster[2].sets[0].completed = True
    records = build_workout_exercises(roster, workout_store)
    assert [(r["exercise_name"], r["order"]) for r in records] == [
        ("Squat", 0),
        ("Bench Press", 2),
    ]
    assert records[1]["completed"] is False
    assert records[1]["sets"][0]["completed"] is True


@pytest.mark.parametrize("user", ["u1", "u2"])
def test_history_filters_by_user(workout_store, user):
    workout_store.append("A", 1.0, 2.0, 1, [], user_id="u1")
    workout_store.append("B", 3.0, 4.0, 1, [], user_id="u2")
    names = [w["name"] for w in workout_store.get_workout_history(user_id=user)]
    assert names == (["A"] if user == "u1" else ["B"])
