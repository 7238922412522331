"""Tests for cue synthesis, the sound sink and its system-beep fallback."""

from __future__ import annotations

import io
import wave

import pytest
from PyQt6.QtWidgets import QApplication

from intervaltimer.audio import sounds as sounds_mod
from intervaltimer.audio.sounds import (
    SoundManager,
    AudioActivationError,
    SOUND_NAMES,
    EVENT_SOUNDS,
    _generate_work_end,
    _generate_round_end,
)
from intervaltimer.timer.engine import TimerEngine, NotificationEvent, Phase

from helpers import tick_n


@pytest.fixture
def beeps(monkeypatch):
    calls: list[bool] = []
    monkeypatch.setattr(QApplication, "beep", staticmethod(lambda: calls.append(True)))
    return calls


@pytest.fixture
def with_device(monkeypatch):
    monkeypatch.setattr(sounds_mod, "_audio_output_available", lambda: True)


@pytest.fixture
def without_device(monkeypatch):
    monkeypatch.setattr(sounds_mod, "_audio_output_available", lambda: False)


# ═══════════════════════════════════════════════════════════════════════
#  SOUND SYNTHESIS
# ═══════════════════════════════════════════════════════════════════════


class TestSoundGeneration:

    @pytest.mark.parametrize("gen_fn", [_generate_work_end, _generate_round_end])
    def test_generator_produces_wav(self, gen_fn):
        data = gen_fn()
        assert data[:4] == b"RIFF"
        with wave.open(io.BytesIO(data), "rb") as wf:
            assert wf.getnchannels() == 1
            assert wf.getsampwidth() == 2
            assert wf.getframerate() == 44100
            assert wf.getnframes() > 0

    def test_every_event_has_a_sound(self):
        for event in NotificationEvent:
            assert EVENT_SOUNDS[event] in SOUND_NAMES


# ═══════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════


@pytest.mark.usefixtures("qapp")
class TestSoundManager:

    def test_nothing_written_before_activation(self, tmp_path):
        SoundManager(sounds_dir=tmp_path / "cache")
        assert not (tmp_path / "cache").exists()

    def test_activate_writes_cues(self, tmp_path, with_device):
        mgr = SoundManager(sounds_dir=tmp_path)
        mgr.activate()
        for name in SOUND_NAMES:
            path = tmp_path / f"{name}.wav"
            assert path.exists(), f"Missing WAV: {name}"
            assert path.stat().st_size > 100
            assert name in mgr._effects

    def test_activate_without_device_raises(self, tmp_path, without_device):
        mgr = SoundManager(sounds_dir=tmp_path)
        with pytest.raises(AudioActivationError):
            mgr.activate()
        # cues are still prepared for a device that shows up later
        assert set(mgr._effects) == set(SOUND_NAMES)

    def test_activate_twice_keeps_effects(self, tmp_path, with_device):
        mgr = SoundManager(sounds_dir=tmp_path)
        mgr.activate()
        effect = mgr._effects["work_end"]
        mgr.activate()
        assert mgr._effects["work_end"] is effect

    def test_unwritable_cache_raises_activation_error(self, tmp_path, with_device):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("x")
        mgr = SoundManager(sounds_dir=blocker / "sounds")
        with pytest.raises(AudioActivationError):
            mgr.activate()

    def test_set_volume_clamps(self, tmp_path):
        mgr = SoundManager(sounds_dir=tmp_path)
        mgr.set_volume(30)
        assert mgr.volume == 30
        mgr.set_volume(200)
        assert mgr.volume == 100
        mgr.set_volume(-10)
        assert mgr.volume == 0

    def test_set_enabled(self, tmp_path):
        mgr = SoundManager(sounds_dir=tmp_path)
        assert mgr.enabled is True
        mgr.set_enabled(False)
        assert mgr.enabled is False

    def test_play_disabled_is_silent(self, tmp_path, beeps):
        mgr = SoundManager(sounds_dir=tmp_path)
        mgr.set_enabled(False)
        mgr.play("work_end")
        assert beeps == []

    def test_play_before_activation_beeps(self, tmp_path, beeps):
        mgr = SoundManager(sounds_dir=tmp_path)
        mgr.play("work_end")
        assert beeps == [True]

    def test_unknown_name_beeps_once(self, tmp_path, beeps, with_device):
        mgr = SoundManager(sounds_dir=tmp_path)
        mgr.activate()
        mgr.play("nonexistent_sound")
        assert beeps == [True]

    def test_missing_custom_round_sound_falls_back(self, tmp_path, beeps, with_device):
        mgr = SoundManager(
            sounds_dir=tmp_path, custom_round_sound=tmp_path / "missing.wav",
        )
        mgr.activate()
        assert "round_end" not in mgr._effects
        mgr.notify(NotificationEvent.ROUND_COMPLETE)
        assert beeps == [True]

    def test_custom_round_sound_used(self, tmp_path, with_device):
        custom = tmp_path / "gong.wav"
        custom.write_bytes(_generate_work_end())
        mgr = SoundManager(sounds_dir=tmp_path / "cache", custom_round_sound=custom)
        mgr.activate()
        assert mgr._effects["round_end"].source().toLocalFile() == str(custom)


# ═══════════════════════════════════════════════════════════════════════
#  ENGINE + SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════


@pytest.mark.usefixtures("qapp")
class TestEngineWithSounds:

    def test_start_without_device_keeps_counting(self, tmp_path, clock, without_device):
        mgr = SoundManager(sounds_dir=tmp_path)
        eng = TimerEngine(sink=mgr, clock=clock, work_duration=2, rest_duration=2)
        eng.start()
        assert eng.running is True
        tick_n(eng, clock, 2)
        assert eng.phase == Phase.REST

    def test_transitions_play_cues(self, tmp_path, clock, with_device, monkeypatch):
        played: list[str] = []
        mgr = SoundManager(sounds_dir=tmp_path)
        monkeypatch.setattr(mgr, "play", played.append)
        eng = TimerEngine(sink=mgr, clock=clock, work_duration=2, rest_duration=1)
        eng.start()
        tick_n(eng, clock, 3)
        assert played == ["work_end", "round_end"]
