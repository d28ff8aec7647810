"""Interval session state machine driven by an asyncio countdown task."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Generic, Optional, Sequence, TypeVar, Union

from intervaltimer.feedback.cues import TransitionEvent
from intervaltimer.feedback.dispatch import FeedbackDispatcher
from intervaltimer.workout.model import Segment, SegmentKind, Workout

logger = logging.getLogger(__name__)

DEFAULT_TICK_SEC = 0.1


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Running:
    segment_index: int
    round: int
    remaining_sec: float


@dataclass(frozen=True)
class Paused:
    segment_index: int
    round: int
    remaining_sec: float


@dataclass(frozen=True)
class Finished:
    pass


RunnerState = Union[Idle, Running, Paused, Finished]
StateCallback = Callable[[RunnerState], None]
TransitionCallback = Callable[[TransitionEvent], None]

T = TypeVar("T")


class _Listeners(Generic[T]):
    def __init__(self) -> None:
        self._callbacks: list[Callable[[T], None]] = []

    def add(self, callback: Callable[[T], None]) -> Callable[[], None]:
        self._callbacks.append(callback)

        def remove() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return remove

    def notify(self, value: T) -> None:
        for callback in list(self._callbacks):
            try:
                callback(value)
            except Exception:
                logger.exception("Runner listener %r failed", callback)


class Runner:
    """Plays a workout segment by segment, round by round.

    Operations are plain methods meant to be called from the event loop that
    owns the countdown; ``start``, ``resume`` and the skips schedule a task
    on the running loop, and raise ``RuntimeError`` without changing state
    when there is none. Each countdown run gets its own cancel token and
    checks it before each segment starts and right after every tick sleep,
    before touching any state.
    """

    def __init__(
        self,
        dispatcher: FeedbackDispatcher | None = None,
        tick_sec: float = DEFAULT_TICK_SEC,
    ) -> None:
        if tick_sec <= 0:
            raise ValueError("tick_sec must be > 0")
        self._dispatcher = dispatcher
        self._tick_sec = tick_sec
        self._state: RunnerState = Idle()
        self._task: Optional[asyncio.Task[None]] = None
        self._cancel = asyncio.Event()
        self._segment_index = 0
        self._round = 1
        self._paused: tuple[int, int, float] | None = None
        self._state_listeners: _Listeners[RunnerState] = _Listeners()
        self._transition_listeners: _Listeners[TransitionEvent] = _Listeners()

    @property
    def state(self) -> RunnerState:
        return self._state

    @property
    def tick_sec(self) -> float:
        return self._tick_sec

    @property
    def is_running(self) -> bool:
        return isinstance(self._state, Running)

    def subscribe(self, callback: StateCallback) -> Callable[[], None]:
        return self._state_listeners.add(callback)

    def on_transition(self, callback: TransitionCallback) -> Callable[[], None]:
        return self._transition_listeners.add(callback)

    def start(self, workout: Workout) -> None:
        self._cancel_countdown()
        self._paused = None
        self._segment_index = 0
        self._round = 1
        segments = workout.ordered_segments()
        if not segments:
            logger.warning("Workout '%s' has no segments; nothing to run", workout.name)
            self._publish(Finished())
            return
        logger.info(
            "Starting '%s': %d segments x %d rounds",
            workout.name,
            len(segments),
            workout.total_rounds,
        )
        loop = asyncio.get_running_loop()
        self._publish(Running(0, 1, segments[0].duration_sec))
        self._run(loop, workout, resume_remaining=None)

    def pause(self) -> None:
        state = self._state
        if not isinstance(state, Running):
            logger.debug("pause() ignored in state %s", type(state).__name__)
            return
        # Snapshot first: the in-flight tick may still be sleeping when the token is set.
        self._paused = (state.segment_index, state.round, state.remaining_sec)
        self._cancel_countdown()
        self._publish(Paused(state.segment_index, state.round, state.remaining_sec))

    def resume(self, workout: Workout) -> None:
        state = self._state
        if isinstance(state, Paused):
            snapshot = (state.segment_index, state.round, state.remaining_sec)
        elif self._paused is not None:
            snapshot = self._paused
        else:
            logger.debug("resume() ignored in state %s", type(state).__name__)
            return
        loop = asyncio.get_running_loop()
        index, round_, remaining = snapshot
        self._segment_index = index
        self._round = round_
        self._publish(Running(index, round_, remaining))
        self._run(loop, workout, resume_remaining=remaining)

    def skip_to_next_segment(self, workout: Workout) -> None:
        position = self._position()
        if position is None:
            return
        index, round_ = position
        segments = workout.ordered_segments()
        if index < len(segments) - 1:
            index += 1
        elif round_ < workout.total_rounds:
            index, round_ = 0, round_ + 1
        else:
            self._finish_early()
            return
        self._restart_at(workout, index, round_)

    def skip_to_previous_segment(self, workout: Workout) -> None:
        position = self._position()
        if position is None:
            return
        index, round_ = position
        segments = workout.ordered_segments()
        if index > 0:
            index -= 1
        elif round_ > 1:
            index, round_ = max(0, len(segments) - 1), round_ - 1
        else:
            index = 0
        self._restart_at(workout, index, round_)

    def skip_to_next_set(self, workout: Workout) -> None:
        position = self._position()
        if position is None:
            return
        _, round_ = position
        if round_ < workout.total_rounds:
            self._restart_at(workout, 0, round_ + 1)
        else:
            self._finish_early()

    def skip_to_previous_set(self, workout: Workout) -> None:
        position = self._position()
        if position is None:
            return
        _, round_ = position
        # Round 1 restarts from its first segment.
        self._restart_at(workout, 0, max(1, round_ - 1))

    def stop(self) -> None:
        self._cancel_countdown()
        self._paused = None
        self._segment_index = 0
        self._round = 1
        self._publish(Idle())

    async def wait_closed(self) -> None:
        """Wait until no countdown task is pending (finished, paused or stopped)."""
        while self._task is not None:
            task = self._task
            await task
            if self._task is task:
                break

    def _position(self) -> tuple[int, int] | None:
        state = self._state
        if isinstance(state, (Running, Paused)):
            return state.segment_index, state.round
        logger.debug("skip ignored in state %s", type(state).__name__)
        return None

    def _restart_at(self, workout: Workout, index: int, round_: int) -> None:
        segments = workout.ordered_segments()
        if not segments:
            self._finish_early()
            return
        loop = asyncio.get_running_loop()
        self._cancel_countdown()
        index = min(index, len(segments) - 1)
        self._segment_index = index
        self._round = round_
        self._publish(Running(index, round_, segments[index].duration_sec))
        self._run(loop, workout, resume_remaining=None)

    def _finish_early(self) -> None:
        self._cancel_countdown()
        self._paused = None
        logger.info("Session skipped to the end")
        self._publish(Finished())

    def _cancel_countdown(self) -> None:
        self._cancel.set()
        self._task = None

    def _run(
        self,
        loop: asyncio.AbstractEventLoop,
        workout: Workout,
        resume_remaining: float | None,
    ) -> None:
        self._cancel_countdown()
        self._paused = None
        cancel = asyncio.Event()
        self._cancel = cancel
        self._task = loop.create_task(
            self._countdown(
                workout.ordered_segments(),
                workout.total_rounds,
                resume_remaining,
                cancel,
            )
        )

    async def _countdown(
        self,
        segments: Sequence[Segment],
        total_rounds: int,
        resume_remaining: float | None,
        cancel: asyncio.Event,
    ) -> None:
        remaining_for_current = resume_remaining
        while self._round <= total_rounds:
            while self._segment_index < len(segments):
                if cancel.is_set():
                    return
                segment = segments[self._segment_index]
                if remaining_for_current is None:
                    remaining = segment.duration_sec
                    if remaining > 0:
                        self._publish(Running(self._segment_index, self._round, remaining))
                else:
                    remaining = min(remaining_for_current, segment.duration_sec)
                    remaining_for_current = None

                while remaining > 0:
                    await asyncio.sleep(self._tick_sec)
                    if cancel.is_set():
                        return
                    remaining = max(0.0, round(remaining - self._tick_sec, 6))
                    self._publish(Running(self._segment_index, self._round, remaining))
                    if cancel.is_set():
                        return

                self._emit_transition(self._transition_after(segments, total_rounds))
                if cancel.is_set():
                    return
                self._segment_index += 1

            self._segment_index = 0
            self._round += 1

        self._task = None
        logger.info("Session finished after %d rounds", total_rounds)
        self._publish(Finished())

    def _transition_after(self, segments: Sequence[Segment], total_rounds: int) -> TransitionEvent:
        index, round_ = self._segment_index, self._round
        if index < len(segments) - 1:
            next_kind: SegmentKind | None = segments[index + 1].kind
        elif round_ < total_rounds:
            next_kind = segments[0].kind
        else:
            next_kind = None
        return TransitionEvent(
            next_is_rest=next_kind is SegmentKind.REST,
            is_session_end=next_kind is None,
            next_kind=next_kind,
            segment_index=index,
            round=round_,
        )

    def _emit_transition(self, event: TransitionEvent) -> None:
        logger.debug("Transition %s", event)
        self._transition_listeners.notify(event)
        if self._dispatcher is not None:
            self._dispatcher.dispatch(event)

    def _publish(self, state: RunnerState) -> None:
        if state == self._state:
            return
        self._state = state
        self._state_listeners.notify(state)
