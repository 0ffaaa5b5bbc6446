import pytest

from liftlog.entries import ExerciseEntry
from liftlog.live_view import IDLE_TITLE, LiveWorkoutView


@pytest.fixture
def view(coordinator, rest_timer, ticker):
    live = LiveWorkoutView(coordinator, rest_timer, ticker=ticker)
    yield live
    live.stop()


def test_idle_labels(view):
    labels = view.labels()
    assert labels == {
        "active": False,
        "workout": IDLE_TITLE,
        "duration": "0:00",
        "exercise": "",
        "rest": "",
    }


def test_labels_keep_moving_without_user_input(view, coordinator, ticker):
    pushed = []
    coordinator.start_empty()
    view.start(pushed.append)
    assert pushed[-1]["duration"] == "0:00"

    ticker.tick(5)
    assert pushed[-1]["duration"] == "0:05"
    assert pushed[-1]["workout"] == "Quick Workout"
    assert pushed[-1]["exercise"] == "No exercises yet"


def test_rest_countdown_is_shown(view, coordinator, ticker):
    pushed = []
    coordinator.start_empty()
    entry = ExerciseEntry("Squat", rest_seconds=90)
    entry.add_set(reps=5, weight=100.0)
    entry.add_set(reps=5, weight=100.0)
    coordinator.add_exercise(entry)
    view.start(pushed.append)

    coordinator.toggle_set_completion(entry.id, 0)
    ticker.tick(30)
    view.refresh()
    labels = pushed[-1]
    assert labels["rest"] == "Rest 1m"
    assert labels["exercise"] == "Squat (1/1) 1/2 sets"

    view.rest_timer.toggle_pause()
    ticker.tick(1)
    assert pushed[-1]["rest"] == "Rest 1m (paused)"


def test_stop_cancels_refresh(view, coordinator, ticker):
    pushed = []
    coordinator.start_empty()
    view.start(pushed.append)
    view.stop()
    count = len(pushed)
    ticker.tick(3)
    assert len(pushed) == count
    assert not view.is_running
    # only the session clock is left
    assert len(ticker.events) == 1


def test_restart_replaces_previous_schedule(view, ticker):
    first, second = [], []
    view.start(first.append)
    view.start(second.append)
    ticker.tick(1)
    assert len(first) == 1
    assert len(second) == 3
