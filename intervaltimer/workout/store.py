"""Local JSON library for workouts, templates and preset folders.

Each aggregate is one file named after its id; segments and blocks live inside
their parent's file, so deleting the parent removes its children too.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, TypeVar

from intervaltimer.workout.model import Workout
from intervaltimer.workout.parser import (
    WorkoutParseError,
    preset_folder_from_dict,
    preset_folder_to_dict,
    template_from_dict,
    template_to_dict,
    workout_from_dict,
    workout_to_dict,
)
from intervaltimer.workout.presets import PresetFolder
from intervaltimer.workout.template import WorkoutTemplate, instantiate

logger = logging.getLogger(__name__)

T = TypeVar("T")


def default_library_dir() -> Path:
    return Path.home() / ".interval-timer"


def _dir(base_dir: Path | None, name: str) -> Path:
    return (base_dir or default_library_dir()) / name


def _write(path: Path, payload: dict[str, Any]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=True, indent=2), encoding="utf-8")
    return path


def _read(path: Path, decode: Callable[[object], T]) -> T:
    if not path.exists():
        raise FileNotFoundError(f"No library record at {path}")
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise WorkoutParseError(f"Invalid JSON in {path.name}: {exc}") from exc
    return decode(payload)


def _list(root: Path, decode: Callable[[object], T]) -> list[T]:
    if not root.exists():
        return []
    out: list[T] = []
    for file in sorted(root.glob("*.json")):
        try:
            out.append(_read(file, decode))
        except WorkoutParseError as exc:
            logger.warning("Skipping unreadable library file %s: %s", file, exc)
    return out


def _delete(path: Path) -> bool:
    if not path.exists():
        return False
    path.unlink()
    logger.info("Deleted %s", path)
    return True


def save_workout(workout: Workout, base_dir: Path | None = None) -> Path:
    out = _write(_dir(base_dir, "workouts") / f"{workout.id}.json", workout_to_dict(workout))
    logger.info("Saved workout '%s' (%d segments) to %s", workout.name, len(workout.segments), out)
    return out


def load_workout(workout_id: str, base_dir: Path | None = None) -> Workout:
    return _read(_dir(base_dir, "workouts") / f"{workout_id}.json", workout_from_dict)


def list_workouts(base_dir: Path | None = None) -> list[Workout]:
    workouts = _list(_dir(base_dir, "workouts"), workout_from_dict)
    return sorted(workouts, key=lambda item: item.created_at, reverse=True)


def delete_workout(workout_id: str, base_dir: Path | None = None) -> bool:
    return _delete(_dir(base_dir, "workouts") / f"{workout_id}.json")


def save_template(template: WorkoutTemplate, base_dir: Path | None = None) -> Path:
    out = _write(_dir(base_dir, "templates") / f"{template.id}.json", template_to_dict(template))
    logger.info("Saved template '%s' (%d blocks) to %s", template.name, len(template.blocks), out)
    return out


def load_template(template_id: str, base_dir: Path | None = None) -> WorkoutTemplate:
    return _read(_dir(base_dir, "templates") / f"{template_id}.json", template_from_dict)


def list_templates(base_dir: Path | None = None) -> list[WorkoutTemplate]:
    return sorted(_list(_dir(base_dir, "templates"), template_from_dict), key=lambda t: t.name)


def delete_template(template_id: str, base_dir: Path | None = None) -> bool:
    return _delete(_dir(base_dir, "templates") / f"{template_id}.json")


def instantiate_and_save(
    template: WorkoutTemplate, rounds: int = 1, base_dir: Path | None = None
) -> Workout:
    workout = instantiate(template, rounds=rounds)
    save_workout(workout, base_dir=base_dir)
    return workout


def save_preset_folder(folder: PresetFolder, base_dir: Path | None = None) -> Path:
    return _write(_dir(base_dir, "presets") / f"{folder.id}.json", preset_folder_to_dict(folder))


def list_preset_folders(base_dir: Path | None = None) -> list[PresetFolder]:
    return sorted(_list(_dir(base_dir, "presets"), preset_folder_from_dict), key=lambda f: f.name)


def delete_preset_folder(folder_id: str, base_dir: Path | None = None) -> bool:
    return _delete(_dir(base_dir, "presets") / f"{folder_id}.json")
