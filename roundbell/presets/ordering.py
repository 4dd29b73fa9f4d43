"""Placement of duplicated presets in the newest-first list."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Sequence

from .preset import WorkoutPreset


ONE_SECOND = timedelta(seconds=1)


def duplicate_insertion_date(
    preset: WorkoutPreset, presets: Sequence[WorkoutPreset],
) -> datetime:
    """``created_at`` for a copy of *preset* that sorts directly below it.

    *presets* is ordered newest first.  The copy lands halfway between
    *preset* and the next older one; when there is no next preset (or
    the timestamps do not leave room) it is one second older.
    """
    index = next(
        (i for i, p in enumerate(presets) if p.id == preset.id), None,
    )
    if index is None or index + 1 >= len(presets):
        return preset.created_at - ONE_SECOND

    interval = preset.created_at - presets[index + 1].created_at
    if interval <= timedelta(0):
        return preset.created_at - ONE_SECOND
    return preset.created_at - interval / 2
