"""Display state for the live workout screen.

:class:`LiveWorkoutView` reads the session and rest timer and produces the
strings the screen shows.  While the screen is visible it refreshes them on
a ticker, so the elapsed time and rest countdown keep moving without any
button being pressed.
"""

from __future__ import annotations

from typing import Callable

from liftlog.ticker import default_ticker

REFRESH_INTERVAL = 0.5
IDLE_TITLE = "Ready to Workout?"


class LiveWorkoutView:
    def __init__(self, coordinator, rest_timer, ticker=None) -> None:
        self.coordinator = coordinator
        self.rest_timer = rest_timer
        self.ticker = ticker if ticker is not None else default_ticker()
        self._on_refresh: Callable[[dict], None] | None = None
        self._event = None

    @property
    def is_running(self) -> bool:
        return self._event is not None

    def labels(self) -> dict:
        session = self.coordinator
        timer = self.rest_timer
        labels = {
            "active": session.is_active,
            "workout": IDLE_TITLE,
            "duration": "0:00",
            "exercise": "",
            "rest": "",
        }
        if session.is_active:
            labels["workout"] = session.workout_name
            labels["duration"] = session.formatted_duration
            current = session.current_exercise
            if current is None:
                labels["exercise"] = "No exercises yet"
            else:
                labels["exercise"] = (
                    f"{current.name} "
                    f"({session.current_exercise_index + 1}/{len(session.exercises)}) "
                    f"{current.completed_set_count}/{len(current.sets)} sets"
                )
        if timer is not None and timer.is_active:
            paused = " (paused)" if timer.is_paused else ""
            labels["rest"] = f"Rest {timer.formatted_time}{paused}"
        return labels

    def start(self, on_refresh: Callable[[dict], None]) -> None:
        """Push labels to ``on_refresh`` now and every refresh interval."""

        self.stop()
        self._on_refresh = on_refresh
        self._event = self.ticker.schedule_interval(self._tick, REFRESH_INTERVAL)
        self.refresh()

    def stop(self) -> None:
        if self._event is not None:
            self._event.cancel()
            self._event = None
        self._on_refresh = None

    def refresh(self) -> None:
        if self._on_refresh is not None:
            self._on_refresh(self.labels())

    def _tick(self, *_args) -> None:
        self.refresh()
