"""Transition cues: numpy synthesis + QSoundEffect playback.

The cues are generated as WAV files (sine waves shaped by an ADSR
envelope) and cached in the sounds directory, so later launches only load
them.

Sound names
-----------
- ``work_end``   — two short beeps, work phase is over
- ``round_end``  — rising arpeggio, rest is over and a new round begins

A custom ``round_end`` file can replace the synthesized arpeggio.  When a
cue cannot be found or fails to load, the generic system beep is played
instead.
"""

from __future__ import annotations

import io
import wave
from pathlib import Path

import numpy as np
from loguru import logger
from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QMediaDevices, QSoundEffect
from PyQt6.QtWidgets import QApplication

from ..timer.engine import NotificationEvent


# ── paths ────────────────────────────────────────────────────────────────

APP_DATA_DIR = Path.home() / ".local" / "share" / "IntervalTimer"
SOUNDS_DIR = APP_DATA_DIR / "sounds"

SOUND_NAMES = ("work_end", "round_end")

EVENT_SOUNDS: dict[NotificationEvent, str] = {
    NotificationEvent.PHASE_END_WORK: "work_end",
    NotificationEvent.ROUND_COMPLETE: "round_end",
}

SAMPLE_RATE = 44100


class AudioActivationError(RuntimeError):
    """No usable audio output for the cues."""


# ═══════════════════════════════════════════════════════════════════════════
#  WAV SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _envelope(
    length: int,
    attack: int,
    decay: int,
    sustain_level: float,
    release: int,
) -> np.ndarray:
    """ADSR envelope, all durations in samples."""
    env = np.full(length, sustain_level, dtype=np.float64)
    a = min(attack, length)
    if a > 0:
        env[:a] = np.linspace(0.0, 1.0, a)
    d_end = min(a + decay, length)
    if d_end > a:
        env[a:d_end] = np.linspace(1.0, sustain_level, d_end - a)
    r_start = max(length - release, d_end)
    if length > r_start:
        env[r_start:] = np.linspace(env[r_start - 1] if r_start else 1.0, 0.0, length - r_start)
    return env


def _tone(freq: float, seconds: float, amplitude: float) -> np.ndarray:
    t = np.arange(int(SAMPLE_RATE * seconds)) / SAMPLE_RATE
    return amplitude * np.sin(2 * np.pi * freq * t)


def _silence(seconds: float) -> np.ndarray:
    return np.zeros(int(SAMPLE_RATE * seconds))


def _to_wav_bytes(samples: np.ndarray) -> bytes:
    """Mono 16-bit PCM WAV from floats in -1..1."""
    pcm = (np.clip(samples, -1.0, 1.0) * 32767).astype(np.int16)
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(pcm.tobytes())
    return buf.getvalue()


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND GENERATORS
# ═══════════════════════════════════════════════════════════════════════════


def _generate_work_end() -> bytes:
    """Two 880 Hz beeps, 120 ms apart."""
    beep = _tone(880.0, 0.12, 0.5)
    beep = beep * _envelope(len(beep), attack=80, decay=300, sustain_level=0.6, release=600)
    return _to_wav_bytes(np.concatenate([beep, _silence(0.12), beep, _silence(0.05)]))


def _generate_round_end() -> bytes:
    """Rising A4 → C#5 → E5 → A5 arpeggio with a held top note."""
    notes = [440.00, 554.37, 659.25, 880.00]
    parts: list[np.ndarray] = []
    for i, freq in enumerate(notes):
        last = i == len(notes) - 1
        tone = _tone(freq, 0.4 if last else 0.11, 0.5)
        if last:
            tone = tone + _tone(freq * 2, 0.4, 0.08)
            env = _envelope(len(tone), attack=100, decay=400, sustain_level=0.5, release=9000)
        else:
            env = _envelope(len(tone), attack=60, decay=200, sustain_level=0.35, release=300)
        parts.append(tone * env)
        if not last:
            parts.append(_silence(0.025))
    return _to_wav_bytes(np.concatenate(parts))


_GENERATORS = {
    "work_end": _generate_work_end,
    "round_end": _generate_round_end,
}


def _audio_output_available() -> bool:
    return not QMediaDevices.defaultAudioOutput().isNull()


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════════


class SoundManager(QObject):
    """Notification sink that turns timer transitions into sounds.

    Usage::

        sounds = SoundManager(parent=app)
        engine = TimerEngine(sink=sounds)
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
        custom_round_sound: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._enabled = True
        self._volume = 0.7  # 0.0–1.0
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._custom_round_sound = custom_round_sound
        self._effects: dict[str, QSoundEffect] = {}
        self._active = False

    # ── sink interface ────────────────────────────────────────────────

    def activate(self) -> None:
        """Prepare the cues and check that sound can actually be heard.

        Raises ``AudioActivationError`` when no output device exists.  The
        cues stay loaded either way so a device plugged in later works.
        """
        if not self._active:
            try:
                self._ensure_wav_files()
            except OSError as exc:
                raise AudioActivationError(f"cannot write sound cache: {exc}") from exc
            self._load_effects()
            self._active = True
        if not _audio_output_available():
            raise AudioActivationError("no audio output device")

    def notify(self, event: NotificationEvent) -> None:
        self.play(EVENT_SOUNDS[event])

    # ── public API ────────────────────────────────────────────────────

    def set_volume(self, level: int) -> None:
        """Set volume (0-100).  Updates all loaded effects."""
        self._volume = max(0, min(level, 100)) / 100.0
        for effect in self._effects.values():
            effect.setVolume(self._volume)

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def play(self, name: str) -> None:
        """Play a cue by name, or the system beep if it is unavailable."""
        if not self._enabled:
            return
        effect = self._effects.get(name)
        if effect is None or effect.status() == QSoundEffect.Status.Error:
            logger.debug("Sound {!r} unavailable, using system beep", name)
            QApplication.beep()
            return
        effect.play()

    @property
    def volume(self) -> int:
        """Current volume as 0-100 integer."""
        return round(self._volume * 100)

    @property
    def enabled(self) -> bool:
        return self._enabled

    # ── internal ──────────────────────────────────────────────────────

    def _ensure_wav_files(self) -> None:
        self._sounds_dir.mkdir(parents=True, exist_ok=True)
        for name, gen_fn in _GENERATORS.items():
            path = self._sounds_dir / f"{name}.wav"
            if not path.exists():
                path.write_bytes(gen_fn())

    def _source_for(self, name: str) -> Path | None:
        if name == "round_end" and self._custom_round_sound is not None:
            if self._custom_round_sound.exists():
                return self._custom_round_sound
            logger.warning("Custom round sound {} not found", self._custom_round_sound)
            return None
        path = self._sounds_dir / f"{name}.wav"
        return path if path.exists() else None

    def _load_effects(self) -> None:
        for name in SOUND_NAMES:
            path = self._source_for(name)
            if path is None:
                continue
            effect = QSoundEffect(self)
            effect.setSource(QUrl.fromLocalFile(str(path)))
            effect.setVolume(self._volume)
            self._effects[name] = effect
