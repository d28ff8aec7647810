"""Transition events and the cue each one maps to."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from intervaltimer.workout.model import SegmentKind


class HapticCue(str, Enum):
    SUCCESS = "success"
    IMPACT = "impact"


class ToneKind(str, Enum):
    WORK = "work"
    REST = "rest"


@dataclass(frozen=True)
class TransitionEvent:
    """Emitted when a segment counts down to zero.

    ``segment_index``/``round`` locate the segment that just ended;
    ``next_kind`` is None at session end.
    """

    next_is_rest: bool
    is_session_end: bool
    next_kind: SegmentKind | None = None
    segment_index: int = 0
    round: int = 1


@dataclass(frozen=True)
class Cue:
    haptic: HapticCue
    tone: ToneKind


def select_cue(event: TransitionEvent) -> Cue:
    haptic = HapticCue.SUCCESS if event.is_session_end else HapticCue.IMPACT
    tone = ToneKind.REST if event.next_is_rest and not event.is_session_end else ToneKind.WORK
    return Cue(haptic=haptic, tone=tone)
