"""Saved workout presets grouped in folders.

A preset is a flat snapshot of a workout: rounds plus work/rest segments,
with no template hierarchy behind it.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from intervaltimer.workout.model import Segment, SegmentKind, Workout, new_id


@dataclass(frozen=True)
class PresetSegment:
    order: int
    kind: SegmentKind
    duration_sec: float
    title: str | None = None

    def __post_init__(self) -> None:
        kind = SegmentKind.WORK if self.kind is SegmentKind.WORK else SegmentKind.REST
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "duration_sec", max(0.0, float(self.duration_sec)))


@dataclass(frozen=True)
class WorkoutPreset:
    name: str
    total_rounds: int = 1
    segments: tuple[PresetSegment, ...] = ()
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        object.__setattr__(self, "total_rounds", max(1, int(self.total_rounds)))


@dataclass(frozen=True)
class PresetFolder:
    name: str
    presets: tuple[WorkoutPreset, ...] = ()
    id: str = field(default_factory=new_id)

    def with_preset(self, preset: WorkoutPreset) -> PresetFolder:
        kept = tuple(item for item in self.presets if item.id != preset.id)
        return replace(self, presets=kept + (preset,))

    def without_preset(self, preset_id: str) -> PresetFolder:
        return replace(self, presets=tuple(p for p in self.presets if p.id != preset_id))


def preset_from_workout(workout: Workout) -> WorkoutPreset:
    """Snapshot a workout; every non-work kind is stored as rest."""
    return WorkoutPreset(
        name=workout.name,
        total_rounds=workout.total_rounds,
        segments=tuple(
            PresetSegment(
                order=seg.order,
                kind=seg.kind,
                duration_sec=seg.duration_sec,
                title=seg.title,
            )
            for seg in workout.ordered_segments()
        ),
    )


def workout_from_preset(preset: WorkoutPreset) -> Workout:
    return Workout(
        name=preset.name,
        total_rounds=preset.total_rounds,
        segments=tuple(
            Segment(order=seg.order, kind=seg.kind, duration_sec=seg.duration_sec, title=seg.title)
            for seg in preset.segments
        ),
    )
