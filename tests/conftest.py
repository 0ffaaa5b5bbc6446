import os
import sys
from pathlib import Path

import pytest

# Importing kivy must never try to parse pytest's command line
os.environ.setdefault("KIVY_NO_ARGS", "1")

sys.path.append(str(Path(__file__).resolve().parents[1]))
sys.path.insert(0, str(Path(__file__).resolve().parent))

from liftlog.coordinator import SessionCoordinator
from liftlog.rest_timer import RestTimer
from liftlog.snapshot import JsonSnapshotStore
from utils import ManualClock, ManualTicker
from liftlog.workout_store import WorkoutStore


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(start=1_700_000_000.0)


@pytest.fixture
def ticker(clock) -> ManualTicker:
    return ManualTicker(clock)


@pytest.fixture
def snapshot_store(tmp_path: Path) -> JsonSnapshotStore:
    return JsonSnapshotStore(tmp_path / "session_recovery")


@pytest.fixture
def sample_db(tmp_path: Path) -> Path:
    """Create a temporary database with a small exercise catalog."""
    db_path = tmp_path / "workout.db"
    store = WorkoutStore(db_path)
    store.ensure_schema()
    store.add_catalog_exercise("Bench Press", "Chest", "Press the bar", "bench.svg")
    store.add_catalog_exercise("Squat", "Legs", "Sit back and stand", "squat.svg")
    store.add_catalog_exercise("Push-up", "Chest", None, None)
    return db_path


@pytest.fixture
def workout_store(sample_db) -> WorkoutStore:
    return WorkoutStore(sample_db)


@pytest.fixture
def rest_timer(ticker) -> RestTimer:
    return RestTimer(ticker)


@pytest.fixture
def coordinator(snapshot_store, ticker, clock, rest_timer) -> SessionCoordinator:
    session = SessionCoordinator(
        snapshot_store, ticker=ticker, now=clock, rest_timer=rest_timer
    )
    yield session
    session.close()
