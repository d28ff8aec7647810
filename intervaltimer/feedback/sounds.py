"""Tone selection to playable sound resolution."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

BUNDLED_TONE = 0
FALLBACK_TONE_ID = 1007

TONE_CATALOG: dict[int, str] = {
    BUNDLED_TONE: "Bundled bell (default)",
    1013: "Ding",
    1105: "Chime",
    FALLBACK_TONE_ID: "Tock",
}

_SOUND_EXTENSIONS = (".wav", ".caf")


@dataclass(frozen=True)
class ResolvedSound:
    path: Path | None
    tone_id: int

    @property
    def is_file(self) -> bool:
        return self.path is not None


def default_sound_dir() -> Path:
    return Path(__file__).resolve().parent / "sounds"


def resolve_sound(selection: int, is_rest: bool, sound_dir: Path | None = None) -> ResolvedSound:
    """Resolve a user tone selection.

    Selection 0 prefers a bundled file (``rest`` first for rest cues, ``bell``
    first otherwise) and falls back to the built-in Tock tone. Any other value
    is a built-in tone id.
    """
    if selection != BUNDLED_TONE:
        return ResolvedSound(path=None, tone_id=int(selection))
    bundled = _bundled_path(is_rest, sound_dir or default_sound_dir())
    if bundled is not None:
        return ResolvedSound(path=bundled, tone_id=BUNDLED_TONE)
    return ResolvedSound(path=None, tone_id=FALLBACK_TONE_ID)


def _bundled_path(is_rest: bool, sound_dir: Path) -> Path | None:
    names = ("rest", "bell") if is_rest else ("bell", "rest")
    for name in names:
        for ext in _SOUND_EXTENSIONS:
            candidate = sound_dir / f"{name}{ext}"
            if candidate.is_file():
                return candidate
    return None
