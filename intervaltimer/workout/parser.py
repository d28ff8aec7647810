"""Workout/template (de)serialization and file parser (CSV/JSON)."""

from __future__ import annotations

import csv
import json
import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from intervaltimer.workout.model import Segment, SegmentKind, Workout, new_id
from intervaltimer.workout.presets import PresetFolder, PresetSegment, WorkoutPreset
from intervaltimer.workout.template import TemplateBlock, WorkoutTemplate


class WorkoutParseError(ValueError):
    """Raised when a workout or template payload is invalid."""


def load_workout_file(path: str | Path) -> Workout:
    file_path = Path(path)
    suffix = file_path.suffix.lower()
    if suffix == ".json":
        return _load_json(file_path)
    if suffix == ".csv":
        return _load_csv(file_path)
    raise WorkoutParseError(
        f"Unsupported workout format '{file_path.suffix}'. Use .json or .csv"
    )


def _load_json(path: Path) -> Workout:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise WorkoutParseError(f"Invalid JSON: {exc}") from exc
    if isinstance(data, dict) and "name" not in data:
        data = {**data, "name": path.stem}
    return workout_from_dict(data)


def _load_csv(path: Path) -> Workout:
    segments: list[Segment] = []
    with path.open("r", encoding="utf-8", newline="") as handle:
        reader = csv.DictReader(handle)
        fields = set(reader.fieldnames or [])
        required = {"kind", "duration_sec"}
        if not required.issubset(fields):
            raise WorkoutParseError("CSV must contain headers: kind,duration_sec[,title,order]")

        for i, row in enumerate(reader):
            segments.append(_segment_from_dict(row, index=i))

    return Workout(name=path.stem, segments=tuple(segments))


def workout_from_dict(data: object) -> Workout:
    if not isinstance(data, dict):
        raise WorkoutParseError("Workout must be an object")

    name = _parse_name(data.get("name"), kind="Workout")
    segments_obj = data.get("segments")
    if not isinstance(segments_obj, list):
        raise WorkoutParseError("Workout field 'segments' must be an array")

    segments = tuple(_segment_from_dict(raw, index=i) for i, raw in enumerate(segments_obj))
    created_at = _parse_datetime(data.get("created_at"), field_name="created_at")
    extra: dict[str, Any] = {}
    if created_at is not None:
        extra["created_at"] = created_at
        extra["updated_at"] = _parse_datetime(data.get("updated_at"), field_name="updated_at")
    return Workout(
        name=name,
        notes=_parse_optional_text(data.get("notes")),
        total_rounds=_parse_count(data.get("total_rounds", 1), field_name="total_rounds", index=None),
        segments=segments,
        id=str(data.get("id") or new_id()),
        **extra,
    )


def workout_to_dict(workout: Workout) -> dict[str, Any]:
    return {
        "id": workout.id,
        "name": workout.name,
        "notes": workout.notes,
        "total_rounds": workout.total_rounds,
        "created_at": workout.created_at.isoformat(),
        "updated_at": workout.updated_at.isoformat() if workout.updated_at else None,
        "segments": [
            {
                "id": seg.id,
                "order": seg.order,
                "kind": seg.kind.value,
                "duration_sec": seg.duration_sec,
                "title": seg.title,
            }
            for seg in workout.ordered_segments()
        ],
    }


def template_from_dict(data: object) -> WorkoutTemplate:
    if not isinstance(data, dict):
        raise WorkoutParseError("Template must be an object")

    name = _parse_name(data.get("name"), kind="Template")
    blocks_obj = data.get("blocks")
    if not isinstance(blocks_obj, list):
        raise WorkoutParseError("Template field 'blocks' must be an array")

    blocks: list[TemplateBlock] = []
    for i, raw in enumerate(blocks_obj):
        if not isinstance(raw, dict):
            raise WorkoutParseError(f"Block {i + 1}: must be an object")
        blocks.append(
            TemplateBlock(
                order=_parse_int(raw.get("order", i), field_name="order", index=i),
                title=_parse_optional_text(raw.get("title")),
                sets=_parse_count(raw.get("sets", 1), field_name="sets", index=i),
                reps=_parse_count(raw.get("reps", 1), field_name="reps", index=i),
                work_duration_sec=_parse_duration(raw.get("work_duration_sec"), field_name="work_duration_sec", index=i),
                rest_between_reps_sec=_parse_duration(
                    raw.get("rest_between_reps_sec", 0), field_name="rest_between_reps_sec", index=i
                ),
                rest_between_sets_sec=_parse_duration(
                    raw.get("rest_between_sets_sec", 0), field_name="rest_between_sets_sec", index=i
                ),
                id=str(raw.get("id") or new_id()),
            )
        )

    return WorkoutTemplate(
        name=name,
        notes=_parse_optional_text(data.get("notes")),
        blocks=tuple(blocks),
        id=str(data.get("id") or new_id()),
    )


def template_to_dict(template: WorkoutTemplate) -> dict[str, Any]:
    return {
        "id": template.id,
        "name": template.name,
        "notes": template.notes,
        "blocks": [
            {
                "id": block.id,
                "order": block.order,
                "title": block.title,
                "sets": block.sets,
                "reps": block.reps,
                "work_duration_sec": block.work_duration_sec,
                "rest_between_reps_sec": block.rest_between_reps_sec,
                "rest_between_sets_sec": block.rest_between_sets_sec,
            }
            for block in template.ordered_blocks()
        ],
    }


def preset_folder_from_dict(data: object) -> PresetFolder:
    if not isinstance(data, dict):
        raise WorkoutParseError("Preset folder must be an object")
    presets_obj = data.get("presets", [])
    if not isinstance(presets_obj, list):
        raise WorkoutParseError("Preset folder field 'presets' must be an array")

    presets: list[WorkoutPreset] = []
    for raw in presets_obj:
        if not isinstance(raw, dict) or not isinstance(raw.get("segments"), list):
            raise WorkoutParseError("Preset must be an object with a 'segments' array")
        segments = [_segment_from_dict(seg, index=i) for i, seg in enumerate(raw["segments"])]
        presets.append(
            WorkoutPreset(
                name=_parse_name(raw.get("name"), kind="Preset"),
                total_rounds=_parse_count(raw.get("total_rounds", 1), field_name="total_rounds", index=None),
                segments=tuple(
                    PresetSegment(seg.order, seg.kind, seg.duration_sec, seg.title) for seg in segments
                ),
                id=str(raw.get("id") or new_id()),
            )
        )
    return PresetFolder(
        name=_parse_name(data.get("name"), kind="Preset folder"),
        presets=tuple(presets),
        id=str(data.get("id") or new_id()),
    )


def preset_folder_to_dict(folder: PresetFolder) -> dict[str, Any]:
    return {
        "id": folder.id,
        "name": folder.name,
        "presets": [
            {
                "id": preset.id,
                "name": preset.name,
                "total_rounds": preset.total_rounds,
                "segments": [
                    {
                        "order": seg.order,
                        "kind": seg.kind.value,
                        "duration_sec": seg.duration_sec,
                        "title": seg.title,
                    }
                    for seg in preset.segments
                ],
            }
            for preset in folder.presets
        ],
    }


def _segment_from_dict(raw: object, *, index: int) -> Segment:
    if not isinstance(raw, dict):
        raise WorkoutParseError(f"Segment {index + 1}: must be an object")
    order_obj = raw.get("order")
    if order_obj is None or (isinstance(order_obj, str) and order_obj.strip() == ""):
        order_obj = index
    kind_obj = raw.get("kind")
    if kind_obj is None:
        raise WorkoutParseError(f"Segment {index + 1}: missing kind")
    extra: dict[str, Any] = {}
    if raw.get("id"):
        extra["id"] = str(raw["id"])
    return Segment(
        order=_parse_int(order_obj, field_name="order", index=index),
        kind=SegmentKind.parse(kind_obj),
        duration_sec=_parse_duration(raw.get("duration_sec"), field_name="duration_sec", index=index),
        title=_parse_optional_text(raw.get("title")),
        **extra,
    )


def _parse_name(raw: object, *, kind: str) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise WorkoutParseError(f"{kind} field 'name' must be a non-empty string")
    return raw.strip()


def _parse_optional_text(raw: object) -> str | None:
    if raw is None:
        return None
    return str(raw).strip() or None


def _where(index: int | None) -> str:
    return "" if index is None else f"Item {index + 1}: "


def _parse_int(raw: object, *, field_name: str, index: int | None) -> int:
    if raw is None or isinstance(raw, bool):
        raise WorkoutParseError(f"{_where(index)}invalid {field_name}")
    try:
        value = float(str(raw).strip())
        if not math.isfinite(value):
            raise ValueError(value)
        return int(value)
    except (ValueError, OverflowError) as exc:
        raise WorkoutParseError(f"{_where(index)}invalid {field_name}") from exc


def _parse_count(raw: object, *, field_name: str, index: int | None) -> int:
    # Counts below one are clamped by the models, not rejected.
    return _parse_int(raw, field_name=field_name, index=index)


def _parse_duration(raw: object, *, field_name: str, index: int | None) -> float:
    if raw is None or isinstance(raw, bool):
        raise WorkoutParseError(f"{_where(index)}invalid {field_name}")
    try:
        value = float(str(raw).strip())
    except ValueError as exc:
        raise WorkoutParseError(f"{_where(index)}invalid {field_name}") from exc
    if not math.isfinite(value):
        raise WorkoutParseError(f"{_where(index)}{field_name} must be finite")
    return value


def _parse_datetime(raw: object, *, field_name: str) -> datetime | None:
    if raw is None:
        return None
    try:
        parsed = datetime.fromisoformat(str(raw))
    except ValueError as exc:
        raise WorkoutParseError(f"invalid {field_name}") from exc
    # Hand-written timestamps without an offset are taken as UTC.
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
