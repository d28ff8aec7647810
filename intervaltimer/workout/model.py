"""Workout domain models."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4


def new_id() -> str:
    return uuid4().hex


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class SegmentKind(str, Enum):
    WORK = "work"
    REST = "rest"
    PAUSE = "pause"
    WARMUP = "warmup"
    COOLDOWN = "cooldown"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, raw: object) -> SegmentKind:
        """Unknown kinds fall back to CUSTOM."""
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.CUSTOM


@dataclass(frozen=True)
class Segment:
    order: int
    kind: SegmentKind
    duration_sec: float
    title: str | None = None
    id: str = field(default_factory=new_id)
    workout_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "duration_sec", max(0.0, float(self.duration_sec)))

    @property
    def display_title(self) -> str:
        if self.title and self.title.strip():
            return self.title
        return self.kind.value.capitalize()


@dataclass(frozen=True)
class Workout:
    name: str
    segments: tuple[Segment, ...] = ()
    total_rounds: int = 1
    notes: str | None = None
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "total_rounds", max(1, int(self.total_rounds)))
        if self.updated_at is None:
            object.__setattr__(self, "updated_at", self.created_at)
        object.__setattr__(
            self,
            "segments",
            tuple(
                seg if seg.workout_id == self.id else replace(seg, workout_id=self.id)
                for seg in self.segments
            ),
        )

    @property
    def round_duration_sec(self) -> float:
        return sum(seg.duration_sec for seg in self.segments)

    @property
    def total_duration_sec(self) -> float:
        return self.round_duration_sec * self.total_rounds

    def ordered_segments(self) -> tuple[Segment, ...]:
        return tuple(sorted(self.segments, key=lambda seg: seg.order))

    def add_segment(
        self,
        kind: SegmentKind,
        duration_sec: float,
        title: str | None = None,
        *,
        at: int | None = None,
    ) -> Workout:
        """Insert a segment (appends when ``at`` is None) and renumber orders."""
        segments = list(self.ordered_segments())
        segment = Segment(order=0, kind=kind, duration_sec=duration_sec, title=title)
        if at is None:
            segments.append(segment)
        else:
            segments.insert(max(0, min(at, len(segments))), segment)
        return self._with_segments(segments)

    def remove_segment(self, segment_id: str) -> Workout:
        segments = [seg for seg in self.ordered_segments() if seg.id != segment_id]
        if len(segments) == len(self.segments):
            raise ValueError(f"Unknown segment '{segment_id}'")
        return self._with_segments(segments)

    def move_segment(self, source: int, destination: int) -> Workout:
        segments = list(self.ordered_segments())
        if not 0 <= source < len(segments):
            raise ValueError(f"Segment position {source} out of range")
        moved = segments.pop(source)
        segments.insert(max(0, min(destination, len(segments))), moved)
        return self._with_segments(segments)

    def with_rounds(self, total_rounds: int) -> Workout:
        return replace(self, total_rounds=total_rounds, updated_at=utc_now())

    def _with_segments(self, segments: list[Segment]) -> Workout:
        renumbered = tuple(
            replace(seg, order=index) for index, seg in enumerate(segments)
        )
        return replace(self, segments=renumbered, updated_at=utc_now())
