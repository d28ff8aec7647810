"""NiceGUI web UI for the interval timer."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from nicegui import ui

from intervaltimer.feedback.cues import HapticCue
from intervaltimer.feedback.dispatch import BroadcastCuePlayer, FeedbackDispatcher
from intervaltimer.feedback.preferences import Preferences, load_preferences, save_preferences
from intervaltimer.feedback.sounds import TONE_CATALOG, ResolvedSound
from intervaltimer.ui.controller import TimerController, format_duration
from intervaltimer.workout.library import build_workout_from_template, list_templates
from intervaltimer.workout.model import Workout
from intervaltimer.workout.store import list_workouts

REFRESH_SEC = 0.1
WORK_BEEP_HZ = 880
REST_BEEP_HZ = 520
TONE_BEEP_HZ = {1013: 988, 1105: 660, 1007: 440}
FINISH_VIBRATE_MS = [80, 60, 80]
IMPACT_VIBRATE_MS = 120


@dataclass(frozen=True)
class WorkoutOption:
    label: str
    workout: Workout


class BrowserCuePlayer:
    """Queues cues for one page; they are flushed from that page's refresh timer."""

    def __init__(self) -> None:
        self._scripts: list[str] = []

    def play_sound(self, sound: ResolvedSound) -> None:
        if sound.path is not None:
            hz = REST_BEEP_HZ if sound.path.stem == "rest" else WORK_BEEP_HZ
        else:
            hz = TONE_BEEP_HZ.get(sound.tone_id, WORK_BEEP_HZ)
        self._scripts.append(
            f"""
            (() => {{
              const ctx = new (window.AudioContext || window.webkitAudioContext)();
              const osc = ctx.createOscillator();
              const gain = ctx.createGain();
              osc.type = 'sine';
              osc.frequency.value = {hz};
              gain.gain.value = 0.05;
              osc.connect(gain);
              gain.connect(ctx.destination);
              osc.start();
              setTimeout(() => {{ osc.stop(); ctx.close(); }}, 180);
            }})();
            """
        )

    def haptic(self, cue: HapticCue) -> None:
        pattern = FINISH_VIBRATE_MS if cue is HapticCue.SUCCESS else IMPACT_VIBRATE_MS
        self._scripts.append(f"if (navigator.vibrate) {{ navigator.vibrate({pattern}); }}")

    def drain(self) -> list[str]:
        scripts, self._scripts = self._scripts, []
        return scripts


def _workout_options(library_dir: Path | None) -> list[WorkoutOption]:
    options = [
        WorkoutOption(
            label=f"{item.category} | {item.name}",
            workout=build_workout_from_template(item.key),
        )
        for item in list_templates()
    ]
    for workout in list_workouts(base_dir=library_dir):
        options.append(WorkoutOption(label=f"Saved | {workout.name}", workout=workout))
    return options


def run_web_ui(
    *,
    host: str = "127.0.0.1",
    port: int = 8090,
    tick_sec: float = 0.1,
    library_dir: Path | None = None,
    preferences_path: Path | None = None,
) -> int:
    prefs = load_preferences(preferences_path)
    broadcast = BroadcastCuePlayer()
    dispatcher = FeedbackDispatcher(prefs.to_feedback_config(), broadcast)
    options = _workout_options(library_dir)
    option_by_label = {option.label: option for option in options}
    controller = TimerController(options[0].workout, dispatcher=dispatcher, tick_sec=tick_sec)
    selected_label = options[0].label

    @ui.page("/")
    def index() -> None:
        player = BrowserCuePlayer()
        client = ui.context.client
        detach = broadcast.attach(player)
        client.on_connect(lambda: broadcast.attach(player))
        client.on_disconnect(detach)

        ui.add_head_html(
            """
            <style>
              body { background: #0b1220; color: #e5e7eb; font-family: Arial, "Segoe UI", sans-serif; }
              .it-clock { font-size: 6rem; font-weight: 700; font-variant-numeric: tabular-nums; }
              .it-muted { color: #9caecf; }
            </style>
            """
        )

        with ui.column().classes("w-full items-center gap-4"):
            ui.label("INTERVAL TIMER").classes("text-xl font-semibold tracking-wide")
            with ui.row().classes("items-end gap-2"):
                workout_select = ui.select(
                    [option.label for option in options],
                    value=selected_label,
                    label="Workout",
                ).classes("min-w-[320px]")
                rounds_input = ui.number(
                    "Rounds", value=controller.workout.total_rounds, min=1, max=99
                )
            summary_label = ui.label("").classes("it-muted")
            name_label = ui.label("").classes("text-3xl font-bold")
            headline_label = ui.label("").classes("text-2xl")
            clock_label = ui.label("").classes("it-clock")
            round_label = ui.label("").classes("it-muted")
            with ui.row().classes("gap-3"):
                prev_set_btn = ui.button(icon="skip_previous")
                prev_seg_btn = ui.button(icon="fast_rewind")
                play_btn = ui.button("Start")
                next_seg_btn = ui.button(icon="fast_forward")
                next_set_btn = ui.button(icon="skip_next")
                stop_btn = ui.button(icon="stop")
            with ui.expansion("Settings").classes("w-96"):
                haptics_switch = ui.switch("Haptics", value=prefs.haptics_enabled)
                sounds_switch = ui.switch("Sounds", value=prefs.sounds_enabled)
                work_tone_select = ui.select(TONE_CATALOG, value=prefs.work_tone_id, label="Tone")
                rest_tone_select = ui.select(TONE_CATALOG, value=prefs.rest_tone_id, label="Rest tone")

        def refresh_ui() -> None:
            view = controller.view()
            workout = controller.workout
            name_label.text = workout.name
            summary_label.text = (
                f"{len(workout.segments)} segments | total {format_duration(workout.total_duration_sec)}"
            )
            headline_label.text = view.headline
            clock_label.text = view.clock
            round_label.text = view.round_label
            play_btn.text = view.play_label
            for button in (prev_set_btn, prev_seg_btn, next_seg_btn, next_set_btn):
                button.set_enabled(view.can_skip)
            for script in player.drain():
                ui.run_javascript(script)

        def on_workout_change() -> None:
            nonlocal selected_label
            option = option_by_label.get(str(workout_select.value))
            if option is None or option.label == selected_label:
                return
            selected_label = option.label
            controller.load(option.workout)
            rounds_input.value = option.workout.total_rounds
            refresh_ui()

        def on_rounds_change() -> None:
            rounds = max(1, int(rounds_input.value or 1))
            if rounds != controller.workout.total_rounds:
                controller.load(controller.workout.with_rounds(rounds))
                refresh_ui()

        def on_settings_change() -> None:
            nonlocal prefs
            prefs = Preferences(
                haptics_enabled=bool(haptics_switch.value),
                sounds_enabled=bool(sounds_switch.value),
                work_tone_id=int(work_tone_select.value or 0),
                rest_tone_id=int(rest_tone_select.value or 0),
            )
            dispatcher.config = prefs.to_feedback_config()
            save_preferences(prefs, preferences_path)

        def on_stop() -> None:
            controller.stop()
            refresh_ui()

        workout_select.on_value_change(lambda _: on_workout_change())
        rounds_input.on_value_change(lambda _: on_rounds_change())
        for control in (haptics_switch, sounds_switch, work_tone_select, rest_tone_select):
            control.on_value_change(lambda _: on_settings_change())
        play_btn.on_click(controller.toggle)
        prev_set_btn.on_click(controller.previous_set)
        prev_seg_btn.on_click(controller.previous_segment)
        next_seg_btn.on_click(controller.next_segment)
        next_set_btn.on_click(controller.next_set)
        stop_btn.on_click(on_stop)

        refresh_ui()
        ui.timer(REFRESH_SEC, refresh_ui)

    ui.run(host=host, port=port, reload=False, title="Interval Timer")
    return 0
