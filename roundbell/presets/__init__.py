"""Saved workout presets."""

from .ordering import duplicate_insertion_date
from .preset import WorkoutPreset
from .store import PresetStore

__all__ = ["WorkoutPreset", "PresetStore", "duplicate_insertion_date"]
