from __future__ import annotations

import asyncio
from pathlib import Path

from intervaltimer.feedback.cues import Cue, HapticCue, ToneKind, TransitionEvent, select_cue
from intervaltimer.feedback.dispatch import BroadcastCuePlayer, FeedbackConfig, FeedbackDispatcher
from intervaltimer.feedback.sounds import FALLBACK_TONE_ID, ResolvedSound, resolve_sound
from intervaltimer.workout.model import Segment, SegmentKind, Workout
from intervaltimer.workout.runner import Runner


class RecordingPlayer:
    def __init__(self, fail_files: bool = False, fail_haptics: bool = False) -> None:
        self.sounds: list[ResolvedSound] = []
        self.haptics: list[HapticCue] = []
        self._fail_files = fail_files
        self._fail_haptics = fail_haptics

    def play_sound(self, sound: ResolvedSound) -> None:
        if self._fail_files and sound.is_file:
            raise OSError("cannot decode")
        self.sounds.append(sound)

    def haptic(self, cue: HapticCue) -> None:
        if self._fail_haptics:
            raise RuntimeError("no vibration motor")
        self.haptics.append(cue)


def test_select_cue_mapping_is_total() -> None:
    assert select_cue(TransitionEvent(next_is_rest=True, is_session_end=False)) == Cue(
        HapticCue.IMPACT, ToneKind.REST
    )
    assert select_cue(TransitionEvent(next_is_rest=False, is_session_end=False)) == Cue(
        HapticCue.IMPACT, ToneKind.WORK
    )
    assert select_cue(TransitionEvent(next_is_rest=True, is_session_end=True)) == Cue(
        HapticCue.SUCCESS, ToneKind.WORK
    )
    assert select_cue(TransitionEvent(next_is_rest=False, is_session_end=True)) == Cue(
        HapticCue.SUCCESS, ToneKind.WORK
    )


def test_resolve_sound_prefers_bundled_files(tmp_path: Path) -> None:
    assert resolve_sound(0, is_rest=True, sound_dir=tmp_path) == ResolvedSound(None, FALLBACK_TONE_ID)

    bell = tmp_path / "bell.wav"
    bell.write_bytes(b"RIFF")
    assert resolve_sound(0, is_rest=True, sound_dir=tmp_path).path == bell

    rest = tmp_path / "rest.caf"
    rest.write_bytes(b"caff")
    assert resolve_sound(0, is_rest=True, sound_dir=tmp_path).path == rest
    assert resolve_sound(0, is_rest=False, sound_dir=tmp_path).path == bell


def test_resolve_sound_non_zero_selection_is_builtin_tone(tmp_path: Path) -> None:
    (tmp_path / "bell.wav").write_bytes(b"RIFF")
    resolved = resolve_sound(1105, is_rest=False, sound_dir=tmp_path)
    assert resolved == ResolvedSound(path=None, tone_id=1105)
    assert not resolved.is_file


def test_dispatcher_plays_configured_tones(tmp_path: Path) -> None:
    player = RecordingPlayer()
    dispatcher = FeedbackDispatcher(
        FeedbackConfig(work_tone_id=1013, rest_tone_id=1105), player, sound_dir=tmp_path
    )

    dispatcher.dispatch(TransitionEvent(next_is_rest=True, is_session_end=False))
    dispatcher.dispatch(TransitionEvent(next_is_rest=False, is_session_end=True))

    assert [s.tone_id for s in player.sounds] == [1105, 1013]
    assert player.haptics == [HapticCue.IMPACT, HapticCue.SUCCESS]


def test_dispatcher_honors_disabled_flags(tmp_path: Path) -> None:
    player = RecordingPlayer()
    dispatcher = FeedbackDispatcher(
        FeedbackConfig(haptics_enabled=False, sounds_enabled=False), player, sound_dir=tmp_path
    )
    cue = dispatcher.dispatch(TransitionEvent(next_is_rest=True, is_session_end=False))
    assert cue.tone is ToneKind.REST
    assert player.sounds == []
    assert player.haptics == []


def test_failed_file_playback_falls_back_to_builtin_tone(tmp_path: Path) -> None:
    (tmp_path / "bell.wav").write_bytes(b"RIFF")
    player = RecordingPlayer(fail_files=True, fail_haptics=True)
    dispatcher = FeedbackDispatcher(FeedbackConfig(), player, sound_dir=tmp_path)

    dispatcher.dispatch(TransitionEvent(next_is_rest=False, is_session_end=False))

    assert player.sounds == [ResolvedSound(path=None, tone_id=FALLBACK_TONE_ID)]
    assert player.haptics == []


def test_runner_dispatches_cues_at_transitions(tmp_path: Path) -> None:
    async def _run() -> None:
        player = RecordingPlayer()
        dispatcher = FeedbackDispatcher(
            FeedbackConfig(work_tone_id=1013, rest_tone_id=1105), player, sound_dir=tmp_path
        )
        runner = Runner(dispatcher=dispatcher, tick_sec=0.01)
        workout = Workout(
            name="Cues",
            segments=(
                Segment(0, SegmentKind.WORK, 0.02),
                Segment(1, SegmentKind.REST, 0.02),
            ),
        )
        runner.start(workout)
        await asyncio.wait_for(runner.wait_closed(), timeout=2.0)

        assert player.haptics == [HapticCue.IMPACT, HapticCue.SUCCESS]
        assert [s.tone_id for s in player.sounds] == [1105, 1013]

    asyncio.run(_run())


def test_broadcast_delivers_each_cue_to_every_attached_player(tmp_path: Path) -> None:
    first, second = RecordingPlayer(), RecordingPlayer()
    broadcast = BroadcastCuePlayer()
    broadcast.attach(first)
    detach_second = broadcast.attach(second)
    dispatcher = FeedbackDispatcher(FeedbackConfig(work_tone_id=1013), broadcast, sound_dir=tmp_path)

    dispatcher.dispatch(TransitionEvent(next_is_rest=False, is_session_end=False))
    assert first.haptics == second.haptics == [HapticCue.IMPACT]
    assert [s.tone_id for s in first.sounds] == [s.tone_id for s in second.sounds] == [1013]

    detach_second()
    dispatcher.dispatch(TransitionEvent(next_is_rest=False, is_session_end=True))
    assert first.haptics == [HapticCue.IMPACT, HapticCue.SUCCESS]
    assert second.haptics == [HapticCue.IMPACT]
