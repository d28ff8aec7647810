"""User feedback preferences stored locally."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path

from intervaltimer.feedback.dispatch import FeedbackConfig

logger = logging.getLogger(__name__)


def _default_preferences_path() -> Path:
    return Path.home() / ".interval-timer" / "preferences.json"


@dataclass(frozen=True)
class Preferences:
    haptics_enabled: bool = True
    sounds_enabled: bool = True
    work_tone_id: int = 0
    rest_tone_id: int = 0

    def to_feedback_config(self) -> FeedbackConfig:
        return FeedbackConfig(
            haptics_enabled=self.haptics_enabled,
            sounds_enabled=self.sounds_enabled,
            work_tone_id=self.work_tone_id,
            rest_tone_id=self.rest_tone_id,
        )


def load_preferences(path: Path | None = None) -> Preferences:
    target = path or _default_preferences_path()
    if not target.exists():
        return Preferences()
    try:
        payload = json.loads(target.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable preferences %s: %s", target, exc)
        return Preferences()
    if not isinstance(payload, dict):
        return Preferences()

    values: dict[str, bool | int] = {}
    for item in fields(Preferences):
        raw = payload.get(item.name)
        if raw is None:
            continue
        if item.name.endswith("_enabled"):
            values[item.name] = bool(raw)
        else:
            try:
                values[item.name] = int(raw)
            except (TypeError, ValueError):
                logger.warning("Ignoring invalid preference %s=%r", item.name, raw)
    return Preferences(**values)


def save_preferences(prefs: Preferences, path: Path | None = None) -> Path:
    target = path or _default_preferences_path()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(asdict(prefs), indent=2), encoding="utf-8")
    return target
