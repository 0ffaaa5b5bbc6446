"""Repeating-callback scheduling used by the session and rest timers.

A ticker is any object offering ``schedule_interval(callback, interval)``
that returns an event with a ``cancel()`` method.  Kivy's global
:data:`kivy.clock.Clock` already has exactly this shape, so it is used
directly in the running app.
"""

from __future__ import annotations


def default_ticker():
    """Return the Kivy clock.

    Imported lazily so that modules using a ticker can be imported without
    initialising Kivy.
    """

    from kivy.clock import Clock

    return Clock
