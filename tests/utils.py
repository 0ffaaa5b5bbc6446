from __future__ import annotations

from typing import Callable


class ManualClock:
    """Callable wall clock that only moves when told to."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = float(start)

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ManualEvent:
    def __init__(self, ticker: "ManualTicker", callback: Callable, interval: float) -> None:
        self.ticker = ticker
        self.callback = callback
        self.interval = interval
        self.next_due = ticker.elapsed + interval
        self.is_triggered = True

    def cancel(self) -> None:
        self.is_triggered = False
        if self in self.ticker.events:
            self.ticker.events.remove(self)


class ManualTicker:
    """Stand-in for ``kivy.clock.Clock`` that fires only from :meth:`advance`.

    An attached :class:`ManualClock` moves forward in step with the ticker,
    like a foreground app where both advance together.
    """

    def __init__(self, clock: ManualClock | None = None) -> None:
        self.clock = clock
        self.elapsed = 0.0
        self.events: list[ManualEvent] = []

    def schedule_interval(self, callback: Callable, interval: float) -> ManualEvent:
        event = ManualEvent(self, callback, interval)
        self.events.append(event)
        return event

    def advance(self, seconds: float, step: float = 1.0) -> None:
        remaining = seconds
        while remaining > 1e-9:
            delta = min(step, remaining)
            remaining -= delta
            self.elapsed += delta
            if self.clock is not None:
                self.clock.advance(delta)
            for event in list(self.events):
                while event.is_triggered and event.next_due <= self.elapsed + 1e-9:
                    event.next_due += event.interval
                    # Kivy unschedules an interval callback that returns False
                    if event.callback(event.interval) is False:
                        event.cancel()

    def tick(self, count: int = 1) -> None:
        self.advance(float(count))
