from kivymd.app import MDApp
from kivy.lang import Builder
from kivy.clock import Clock
from kivy.properties import StringProperty, BooleanProperty
from kivymd.uix.screen import MDScreen
from kivymd.uix.screenmanager import MDScreenManager
from kivymd.uix.dialog import MDDialog
from kivymd.uix.button import MDFlatButton
import logging

from liftlog import (
    DEFAULT_DB_PATH,
    DEFAULT_REST_DURATION,
    DEFAULT_SETS_PER_EXERCISE,
    DEFAULT_SNAPSHOT_BASE,
)
from liftlog import settings
from liftlog.coordinator import SessionCoordinator
from liftlog.live_view import IDLE_TITLE, LiveWorkoutView
from liftlog.rest_timer import RestTimer
from liftlog.snapshot import JsonSnapshotStore
from liftlog.templates import load_workout_templates
from liftlog.workout_store import WorkoutStore


KV = """
<LiveWorkoutScreen>:
    MDBoxLayout:
        orientation: "vertical"
        padding: "16dp"
        spacing: "12dp"

        MDLabel:
            text: root.workout_label
            font_style: "H5"
            halign: "center"
        MDLabel:
            text: root.duration_label
            halign: "center"
        MDLabel:
            text: root.exercise_label
            halign: "center"
        MDLabel:
            text: root.rest_label
            halign: "center"

        MDBoxLayout:
            spacing: "8dp"
            size_hint_y: None
            height: "48dp"
            MDRaisedButton:
                text: "Previous"
                disabled: not root.active
                on_release: app.coordinator.advance_to_previous(); root.refresh()
            MDRaisedButton:
                text: "Next"
                disabled: not root.active
                on_release: app.coordinator.advance_to_next(); root.refresh()
            MDRaisedButton:
                text: "Skip Rest"
                on_release: app.rest_timer.skip(); root.refresh()
            MDRaisedButton:
                text: "Pause Rest"
                on_release: app.rest_timer.toggle_pause(); root.refresh()

        MDBoxLayout:
            spacing: "8dp"
            size_hint_y: None
            height: "48dp"
            MDRaisedButton:
                text: "Start Empty Workout"
                disabled: root.active
                on_release: app.start_empty_workout()
            MDRaisedButton:
                text: "Start Template"
                disabled: root.active
                on_release: app.start_first_template()
            MDRaisedButton:
                text: "End"
                disabled: not root.active
                on_release: root.confirm_end()
"""


class LiveWorkoutScreen(MDScreen):
    """Single screen showing the live workout and its rest timer."""

    workout_label = StringProperty(IDLE_TITLE)
    duration_label = StringProperty("0:00")
    exercise_label = StringProperty("")
    rest_label = StringProperty("")
    active = BooleanProperty(False)

    def on_enter(self, *args):
        MDApp.get_running_app().live_view.start(self.apply_labels)
        return super().on_enter(*args)

    def on_leave(self, *args):
        MDApp.get_running_app().live_view.stop()
        return super().on_leave(*args)

    def apply_labels(self, labels: dict):
        self.active = labels["active"]
        self.workout_label = labels["workout"]
        self.duration_label = labels["duration"]
        self.exercise_label = labels["exercise"]
        self.rest_label = labels["rest"]

    def refresh(self):
        self.apply_labels(MDApp.get_running_app().live_view.labels())

    def confirm_end(self):
        dialog = MDDialog(
            title="End Workout",
            text="Are you sure you want to end this workout? Your progress will be saved.",
            buttons=[
                MDFlatButton(text="Cancel", on_release=lambda *_: dialog.dismiss()),
                MDFlatButton(
                    text="End Workout",
                    on_release=lambda *_: (dialog.dismiss(), self._end()),
                ),
            ],
        )
        dialog.open()

    def _end(self):
        MDApp.get_running_app().end_workout()


class LiftLogApp(MDApp):
    """Owns the live workout and forwards app lifecycle events to it."""

    user_id = "local"

    def build(self):
        self.workout_store = WorkoutStore(DEFAULT_DB_PATH)
        self.workout_store.ensure_schema()
        self.rest_timer = RestTimer(Clock)
        self.coordinator = SessionCoordinator(
            JsonSnapshotStore(DEFAULT_SNAPSHOT_BASE),
            ticker=Clock,
            rest_timer=self.rest_timer,
            default_sets=settings.get_value("default_sets", DEFAULT_SETS_PER_EXERCISE),
            default_rest=settings.get_value("default_rest_seconds", DEFAULT_REST_DURATION),
        )
        self.live_view = LiveWorkoutView(self.coordinator, self.rest_timer, ticker=Clock)
        Builder.load_string(KV)
        # on_enter/on_leave are only dispatched by a screen manager
        manager = MDScreenManager()
        manager.add_widget(LiveWorkoutScreen(name="live_workout"))
        return manager

    def on_start(self):
        if self.coordinator.resume_if_persisted():
            logging.info("Recovered workout in progress")
        self.live_view.refresh()

    def on_pause(self):
        self.coordinator.enter_background()
        return True

    def on_resume(self):
        self.coordinator.enter_foreground()
        self.live_view.refresh()

    def on_stop(self):
        self.live_view.stop()
        self.coordinator.enter_background()
        self.coordinator.close()

    def start_empty_workout(self):
        self.coordinator.start_empty()
        self.live_view.refresh()

    def start_first_template(self):
        templates = load_workout_templates(DEFAULT_DB_PATH)
        if templates:
            self.coordinator.start_from_template(templates[0])
        else:
            self.coordinator.start_empty()
        self.live_view.refresh()

    def end_workout(self):
        workout_id = self.coordinator.end(self.workout_store, self.user_id)
        if workout_id is None:
            logging.warning("Workout could not be saved; it is still in progress")
        self.live_view.refresh()


if __name__ == "__main__":
    LiftLogApp().run()
