"""Best-effort delivery of transition cues to sound/haptic players."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Protocol

from intervaltimer.feedback.cues import Cue, HapticCue, ToneKind, TransitionEvent, select_cue
from intervaltimer.feedback.sounds import FALLBACK_TONE_ID, ResolvedSound, resolve_sound

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedbackConfig:
    haptics_enabled: bool = True
    sounds_enabled: bool = True
    work_tone_id: int = 0
    rest_tone_id: int = 0

    def tone_for(self, tone: ToneKind) -> int:
        return self.rest_tone_id if tone is ToneKind.REST else self.work_tone_id


class CuePlayer(Protocol):
    def play_sound(self, sound: ResolvedSound) -> None: ...

    def haptic(self, cue: HapticCue) -> None: ...


class LoggingCuePlayer:
    """Records cues in the log only; used when no output device is available."""

    def play_sound(self, sound: ResolvedSound) -> None:
        logger.info("Sound cue: %s", sound.path or f"tone {sound.tone_id}")

    def haptic(self, cue: HapticCue) -> None:
        logger.info("Haptic cue: %s", cue.value)


class TerminalBellPlayer(LoggingCuePlayer):
    def play_sound(self, sound: ResolvedSound) -> None:
        super().play_sound(sound)
        sys.stdout.write("\a")
        sys.stdout.flush()


class BroadcastCuePlayer:
    """Forwards every cue to each attached player, e.g. one per open page."""

    def __init__(self) -> None:
        self._players: list[CuePlayer] = []

    def attach(self, player: CuePlayer) -> Callable[[], None]:
        if player not in self._players:
            self._players.append(player)

        def detach() -> None:
            if player in self._players:
                self._players.remove(player)

        return detach

    def play_sound(self, sound: ResolvedSound) -> None:
        for player in list(self._players):
            player.play_sound(sound)

    def haptic(self, cue: HapticCue) -> None:
        for player in list(self._players):
            player.haptic(cue)


class FeedbackDispatcher:
    def __init__(
        self,
        config: FeedbackConfig | None = None,
        player: CuePlayer | None = None,
        sound_dir: Path | None = None,
    ) -> None:
        self.config = config or FeedbackConfig()
        self._player: CuePlayer = player or LoggingCuePlayer()
        self._sound_dir = sound_dir

    def dispatch(self, event: TransitionEvent) -> Cue:
        cue = select_cue(event)
        if self.config.haptics_enabled:
            try:
                self._player.haptic(cue.haptic)
            except Exception as exc:
                logger.warning("Haptic cue %s failed: %s", cue.haptic.value, exc)
        if self.config.sounds_enabled:
            self._play(cue.tone)
        return cue

    def _play(self, tone: ToneKind) -> None:
        sound = resolve_sound(
            self.config.tone_for(tone),
            is_rest=tone is ToneKind.REST,
            sound_dir=self._sound_dir,
        )
        try:
            self._player.play_sound(sound)
            return
        except Exception as exc:
            if not sound.is_file:
                logger.warning("Tone %d failed: %s", sound.tone_id, exc)
                return
            logger.warning("Bundled sound %s failed (%s), falling back to tone", sound.path, exc)
        try:
            self._player.play_sound(ResolvedSound(path=None, tone_id=FALLBACK_TONE_ID))
        except Exception as exc:
            logger.warning("Fallback tone failed: %s", exc)
