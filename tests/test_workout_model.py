from __future__ import annotations

import pytest

from intervaltimer.workout.model import Segment, SegmentKind, Workout


def _workout(rounds: int = 1) -> Workout:
    return Workout(
        name="7/3 x 6",
        total_rounds=rounds,
        segments=(
            Segment(order=1, kind=SegmentKind.REST, duration_sec=3, title="Rest"),
            Segment(order=0, kind=SegmentKind.WORK, duration_sec=7, title="Hang"),
        ),
    )


def test_segment_duration_clamped_to_zero() -> None:
    segment = Segment(order=0, kind=SegmentKind.WORK, duration_sec=-5)
    assert segment.duration_sec == 0.0


def test_segment_display_title_falls_back_to_kind() -> None:
    assert Segment(0, SegmentKind.COOLDOWN, 10).display_title == "Cooldown"
    assert Segment(0, SegmentKind.WORK, 10, title="  ").display_title == "Work"
    assert Segment(0, SegmentKind.WORK, 10, title="Hang").display_title == "Hang"


def test_segment_kind_parse_unknown_is_custom() -> None:
    assert SegmentKind.parse("REST") is SegmentKind.REST
    assert SegmentKind.parse("stretch") is SegmentKind.CUSTOM


def test_total_duration_multiplies_rounds() -> None:
    workout = _workout(rounds=6)
    assert workout.round_duration_sec == 10
    assert workout.total_duration_sec == 60


def test_total_rounds_clamped_to_one() -> None:
    assert Workout(name="x", total_rounds=0).total_rounds == 1
    assert Workout(name="x", total_rounds=-3).total_duration_sec == 0


def test_segments_get_workout_back_reference() -> None:
    workout = _workout()
    assert all(seg.workout_id == workout.id for seg in workout.segments)


def test_ordered_segments_sorts_by_order() -> None:
    titles = [seg.title for seg in _workout().ordered_segments()]
    assert titles == ["Hang", "Rest"]


def test_add_segment_renumbers_and_touches_updated_at() -> None:
    workout = _workout()
    edited = workout.add_segment(SegmentKind.WARMUP, 30, "Warmup", at=0)

    ordered = edited.ordered_segments()
    assert [seg.title for seg in ordered] == ["Warmup", "Hang", "Rest"]
    assert [seg.order for seg in ordered] == [0, 1, 2]
    assert ordered[0].workout_id == edited.id
    assert edited.updated_at is not None and edited.updated_at >= workout.created_at
    assert len(workout.segments) == 2


def test_remove_and_move_segment() -> None:
    workout = _workout().add_segment(SegmentKind.COOLDOWN, 60, "Cool")
    hang = workout.ordered_segments()[0]

    removed = workout.remove_segment(hang.id)
    assert [seg.title for seg in removed.ordered_segments()] == ["Rest", "Cool"]

    moved = workout.move_segment(2, 0)
    assert [seg.title for seg in moved.ordered_segments()] == ["Cool", "Hang", "Rest"]
    assert [seg.order for seg in moved.ordered_segments()] == [0, 1, 2]

    with pytest.raises(ValueError):
        workout.remove_segment("missing")
    with pytest.raises(ValueError):
        workout.move_segment(5, 0)


def test_with_rounds_keeps_segments() -> None:
    workout = _workout().with_rounds(4)
    assert workout.total_rounds == 4
    assert len(workout.segments) == 2
