from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from intervaltimer.workout.model import Segment, SegmentKind, Workout
from intervaltimer.workout.parser import WorkoutParseError
from intervaltimer.workout.presets import PresetFolder, preset_from_workout
from intervaltimer.workout.store import (
    delete_preset_folder,
    delete_template,
    delete_workout,
    instantiate_and_save,
    list_preset_folders,
    list_templates,
    list_workouts,
    load_template,
    load_workout,
    save_preset_folder,
    save_template,
    save_workout,
)
from intervaltimer.workout.template import TemplateBlock, WorkoutTemplate


def _workout(name: str, created_at: datetime | None = None) -> Workout:
    extra = {"created_at": created_at} if created_at is not None else {}
    return Workout(
        name=name,
        notes="grip",
        total_rounds=6,
        segments=(
            Segment(order=0, kind=SegmentKind.WORK, duration_sec=7, title="Hang"),
            Segment(order=1, kind=SegmentKind.REST, duration_sec=3, title="Rest"),
        ),
        **extra,
    )


def test_save_list_load_delete_workout(tmp_path: Path) -> None:
    now = datetime(2026, 10, 1, tzinfo=timezone.utc)
    older = _workout("Older", created_at=now - timedelta(days=1))
    newer = _workout("Newer", created_at=now)
    save_workout(older, base_dir=tmp_path)
    saved = save_workout(newer, base_dir=tmp_path)
    assert saved.exists()

    items = list_workouts(base_dir=tmp_path)
    assert [item.name for item in items] == ["Newer", "Older"]

    loaded = load_workout(newer.id, base_dir=tmp_path)
    assert loaded.id == newer.id
    assert loaded.notes == "grip"
    assert loaded.total_rounds == 6
    assert loaded.created_at == now
    assert [seg.title for seg in loaded.ordered_segments()] == ["Hang", "Rest"]
    assert all(seg.workout_id == newer.id for seg in loaded.segments)
    assert loaded.total_duration_sec == newer.total_duration_sec

    assert delete_workout(newer.id, base_dir=tmp_path) is True
    assert delete_workout(newer.id, base_dir=tmp_path) is False
    with pytest.raises(FileNotFoundError):
        load_workout(newer.id, base_dir=tmp_path)
    assert [item.name for item in list_workouts(base_dir=tmp_path)] == ["Older"]


def test_template_round_trip_and_instantiate(tmp_path: Path) -> None:
    template = WorkoutTemplate(
        name="Repeaters",
        blocks=(
            TemplateBlock(0, sets=2, reps=3, work_duration_sec=7, rest_between_reps_sec=3, rest_between_sets_sec=30, title="Hang"),
        ),
    )
    save_template(template, base_dir=tmp_path)

    loaded = load_template(template.id, base_dir=tmp_path)
    assert loaded.blocks[0].sets == 2
    assert loaded.blocks[0].template_id == template.id
    assert [t.name for t in list_templates(base_dir=tmp_path)] == ["Repeaters"]

    workout = instantiate_and_save(loaded, rounds=2, base_dir=tmp_path)
    assert load_workout(workout.id, base_dir=tmp_path).total_rounds == 2
    assert len(workout.segments) == 11

    assert delete_template(template.id, base_dir=tmp_path) is True
    assert list_templates(base_dir=tmp_path) == []


def test_preset_folders_cascade_on_delete(tmp_path: Path) -> None:
    folder = PresetFolder(name="Fingers").with_preset(preset_from_workout(_workout("7/3")))
    save_preset_folder(folder, base_dir=tmp_path)

    folders = list_preset_folders(base_dir=tmp_path)
    assert len(folders) == 1
    assert folders[0].presets[0].name == "7/3"
    assert folders[0].presets[0].total_rounds == 6

    delete_preset_folder(folder.id, base_dir=tmp_path)
    assert list_preset_folders(base_dir=tmp_path) == []


def test_unreadable_files_are_skipped_when_listing(tmp_path: Path) -> None:
    save_workout(_workout("Good"), base_dir=tmp_path)
    (tmp_path / "workouts" / "broken.json").write_text("{", encoding="utf-8")
    (tmp_path / "workouts" / "shape.json").write_text('{"name": "x"}', encoding="utf-8")

    assert [item.name for item in list_workouts(base_dir=tmp_path)] == ["Good"]


def test_undecodable_file_is_skipped_when_listing(tmp_path: Path) -> None:
    save_workout(_workout("Good"), base_dir=tmp_path)
    (tmp_path / "workouts" / "binary.json").write_bytes(b"\xff\xfe\x00garbage")

    assert [item.name for item in list_workouts(base_dir=tmp_path)] == ["Good"]
    with pytest.raises(WorkoutParseError):
        load_workout("binary", base_dir=tmp_path)


def test_naive_and_aware_timestamps_sort_together(tmp_path: Path) -> None:
    save_workout(_workout("Aware", created_at=datetime(2026, 10, 2, tzinfo=timezone.utc)), base_dir=tmp_path)
    (tmp_path / "workouts" / "handmade.json").write_text(
        '{"name": "Handmade", "created_at": "2026-10-03T00:00:00", "segments": []}',
        encoding="utf-8",
    )

    assert [item.name for item in list_workouts(base_dir=tmp_path)] == ["Handmade", "Aware"]


def test_missing_library_lists_empty(tmp_path: Path) -> None:
    assert list_workouts(base_dir=tmp_path / "nope") == []
    assert list_templates(base_dir=tmp_path / "nope") == []
