"""Timer controller shared by the CLI and the web UI."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable

from intervaltimer.feedback.cues import TransitionEvent
from intervaltimer.feedback.dispatch import FeedbackDispatcher
from intervaltimer.workout.model import Workout
from intervaltimer.workout.runner import (
    DEFAULT_TICK_SEC,
    Finished,
    Paused,
    Runner,
    RunnerState,
    Running,
)


@dataclass(frozen=True)
class TimerView:
    headline: str
    clock: str
    round_label: str
    play_label: str
    can_skip: bool


def format_clock(seconds: float) -> str:
    total = max(0, int(math.ceil(round(seconds, 6))))
    return f"{total // 60:02d}:{total % 60:02d}"


def format_duration(seconds: float) -> str:
    total = int(round(seconds))
    return f"{total // 60}m {total % 60:02d}s"


class TimerController:
    def __init__(
        self,
        workout: Workout,
        dispatcher: FeedbackDispatcher | None = None,
        tick_sec: float = DEFAULT_TICK_SEC,
    ) -> None:
        self._workout = workout
        self._runner = Runner(dispatcher=dispatcher, tick_sec=tick_sec)

    @property
    def workout(self) -> Workout:
        return self._workout

    @property
    def runner(self) -> Runner:
        return self._runner

    @property
    def state(self) -> RunnerState:
        return self._runner.state

    def load(self, workout: Workout) -> None:
        """Swap the workout; any session in progress is stopped first."""
        self._runner.stop()
        self._workout = workout

    def subscribe(self, callback: Callable[[RunnerState], None]) -> Callable[[], None]:
        return self._runner.subscribe(callback)

    def on_transition(self, callback: Callable[[TransitionEvent], None]) -> Callable[[], None]:
        return self._runner.on_transition(callback)

    def toggle(self) -> None:
        state = self._runner.state
        if isinstance(state, Running):
            self._runner.pause()
        elif isinstance(state, Paused):
            self._runner.resume(self._workout)
        else:
            self._runner.start(self._workout)

    def stop(self) -> None:
        self._runner.stop()

    def next_segment(self) -> None:
        self._runner.skip_to_next_segment(self._workout)

    def previous_segment(self) -> None:
        self._runner.skip_to_previous_segment(self._workout)

    def next_set(self) -> None:
        self._runner.skip_to_next_set(self._workout)

    def previous_set(self) -> None:
        self._runner.skip_to_previous_set(self._workout)

    @property
    def can_skip(self) -> bool:
        return isinstance(self._runner.state, (Running, Paused))

    def view(self) -> TimerView:
        state = self._runner.state
        rounds = self._workout.total_rounds
        if isinstance(state, (Running, Paused)):
            segments = self._workout.ordered_segments()
            index = min(state.segment_index, len(segments) - 1)
            return TimerView(
                headline=segments[index].display_title,
                clock=format_clock(state.remaining_sec),
                round_label=f"Round {state.round} / {rounds}",
                play_label="Pause" if isinstance(state, Running) else "Resume",
                can_skip=True,
            )
        finished = isinstance(state, Finished)
        return TimerView(
            headline="Done!" if finished else "Ready",
            clock=format_clock(0 if finished else self._first_duration()),
            round_label=f"{rounds} round{'s' if rounds != 1 else ''}",
            play_label="Start",
            can_skip=False,
        )

    def _first_duration(self) -> float:
        segments = self._workout.ordered_segments()
        return segments[0].duration_sec if segments else 0.0
