"""Terminal CLI entrypoint for the interval timer."""

from __future__ import annotations

import argparse
import asyncio
import logging
from dataclasses import replace
from pathlib import Path

from intervaltimer.feedback.dispatch import FeedbackDispatcher, TerminalBellPlayer
from intervaltimer.feedback.preferences import load_preferences
from intervaltimer.ui.controller import TimerController, format_duration
from intervaltimer.workout.library import build_workout_from_template, list_templates
from intervaltimer.workout.model import Workout
from intervaltimer.workout.parser import load_workout_file
from intervaltimer.workout.runner import RunnerState
from intervaltimer.workout.store import save_workout


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Interval timer")
    parser.add_argument(
        "--list-templates", action="store_true", help="List built-in workout templates"
    )
    parser.add_argument("--template", default=None, help="Run a built-in template by key")
    parser.add_argument("--workout", default=None, help="Run a workout file (.json or .csv)")
    parser.add_argument(
        "--rounds",
        type=int,
        default=None,
        help="Override the number of rounds",
    )
    parser.add_argument(
        "--save",
        action="store_true",
        help="Save the selected workout to the local library instead of running it",
    )
    parser.add_argument(
        "--tick",
        type=float,
        default=0.1,
        help="Countdown tick in seconds",
    )
    parser.add_argument(
        "--library",
        type=Path,
        default=None,
        help="Library directory (default: ~/.interval-timer)",
    )
    parser.add_argument("--no-sounds", action="store_true", help="Disable sound cues")
    parser.add_argument("--no-haptics", action="store_true", help="Disable haptic cues")
    parser.add_argument(
        "--ui-web",
        action="store_true",
        help="Launch web UI (NiceGUI) with transport controls",
    )
    parser.add_argument("--web-host", default="127.0.0.1", help="Host bind for --ui-web")
    parser.add_argument("--web-port", type=int, default=8090, help="Port for --ui-web")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def run_list_templates() -> int:
    for item in list_templates():
        workout = build_workout_from_template(item.key)
        print(
            f"{item.key:<16} {item.name:<24} [{item.category}] "
            f"{len(workout.segments)} segments x {workout.total_rounds} "
            f"= {format_duration(workout.total_duration_sec)}"
        )
    return 0


async def run_session(workout: Workout, dispatcher: FeedbackDispatcher, tick_sec: float) -> int:
    controller = TimerController(workout, dispatcher=dispatcher, tick_sec=tick_sec)
    last_line = ""

    def on_state(_state: RunnerState) -> None:
        nonlocal last_line
        view = controller.view()
        line = f"{view.headline:<16} {view.clock}  {view.round_label}"
        if line != last_line:
            print(f"\r{line}", end="", flush=True)
            last_line = line

    controller.subscribe(on_state)
    print(f"{workout.name} | total {format_duration(workout.total_duration_sec)}")
    controller.toggle()
    try:
        await controller.runner.wait_closed()
    except asyncio.CancelledError:
        controller.stop()
        raise
    print()
    return 0


def _select_workout(args: argparse.Namespace) -> Workout | None:
    if args.template is not None:
        workout = build_workout_from_template(args.template)
    elif args.workout is not None:
        workout = load_workout_file(args.workout)
    else:
        return None
    if args.rounds is not None:
        workout = workout.with_rounds(args.rounds)
    return workout


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.ui_web:
        from intervaltimer.ui.web_app import run_web_ui

        return run_web_ui(
            host=args.web_host,
            port=args.web_port,
            tick_sec=args.tick,
            library_dir=args.library,
        )

    if args.list_templates:
        return run_list_templates()

    try:
        workout = _select_workout(args)
    except (ValueError, OSError) as exc:
        print(f"Error: {exc}")
        return 2
    if workout is None:
        parser.print_help()
        return 1

    if args.save:
        path = save_workout(workout, base_dir=args.library)
        print(f"Saved {workout.name} to {path}")
        return 0

    config = load_preferences().to_feedback_config()
    if args.no_sounds:
        config = replace(config, sounds_enabled=False)
    if args.no_haptics:
        config = replace(config, haptics_enabled=False)
    dispatcher = FeedbackDispatcher(config, TerminalBellPlayer())

    try:
        return asyncio.run(run_session(workout, dispatcher, args.tick))
    except KeyboardInterrupt:
        print("\nStopped")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
