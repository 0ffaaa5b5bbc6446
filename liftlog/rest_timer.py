"""Countdown shown between sets."""

from __future__ import annotations

from liftlog import SUPERSET_MARKER
from liftlog.ticker import default_ticker


def format_rest_time(seconds: int) -> str:
    """Return a compact label for a rest duration.

    ``0`` is shown as the superset marker, durations under a minute as
    ``"45s"`` and longer ones as ``"2m"`` or ``"1m 30s"``.
    """

    if seconds <= 0:
        return SUPERSET_MARKER
    if seconds < 60:
        return f"{seconds}s"
    minutes, secs = divmod(seconds, 60)
    if secs == 0:
        return f"{minutes}m"
    return f"{minutes}m {secs}s"


class RestTimer:
    """One-shot countdown, restarted for every rest period.

    The timer decrements ``remaining_seconds`` once per tick unless paused
    and stops itself when it reaches zero.  ``total_seconds`` keeps the last
    configured duration after the timer stops.
    """

    def __init__(self, ticker=None) -> None:
        self.ticker = ticker if ticker is not None else default_ticker()
        self.is_active = False
        self.is_paused = False
        self.remaining_seconds = 0
        self.total_seconds = 0
        self._event = None

    @property
    def formatted_time(self) -> str:
        return format_rest_time(self.remaining_seconds)

    @property
    def progress(self) -> float:
        """Fraction of the configured rest that has elapsed."""
        if self.total_seconds <= 0:
            return 0.0
        done = self.total_seconds - self.remaining_seconds
        return min(1.0, max(0.0, done / self.total_seconds))

    def start(self, duration: int) -> None:
        self._cancel_event()
        self.total_seconds = duration
        self.remaining_seconds = duration
        self.is_active = True
        self.is_paused = False
        self._event = self.ticker.schedule_interval(self.tick, 1.0)

    def tick(self, *_args) -> None:
        if not self.is_active:
            # A callback that outlived stop(); make sure it is gone.
            self._cancel_event()
            return
        if self.is_paused:
            return
        self.remaining_seconds -= 1
        if self.remaining_seconds <= 0:
            self.stop()

    def stop(self) -> None:
        self._cancel_event()
        self.is_active = False
        self.is_paused = False
        self.remaining_seconds = 0

    def skip(self) -> None:
        """End the current rest early."""
        self.stop()

    def toggle_pause(self) -> None:
        if not self.is_active:
            return
        self.is_paused = not self.is_paused

    def add_time(self, seconds: int) -> None:
        self.remaining_seconds = max(0, self.remaining_seconds + seconds)

    def _cancel_event(self) -> None:
        if self._event is not None:
            self._event.cancel()
            self._event = None
