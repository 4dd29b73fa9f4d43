"""Audio package."""

from .sounds import SoundManager, SoundScheme, SoundSink, SOUND_NAMES, SOUND_LABELS

__all__ = ["SoundManager", "SoundScheme", "SoundSink", "SOUND_NAMES", "SOUND_LABELS"]
