"""Audio package."""

from .sounds import SoundManager, AudioActivationError, SOUND_NAMES

__all__ = ["SoundManager", "AudioActivationError", "SOUND_NAMES"]
