"""Preset persistence on top of the ``presets`` table."""

from __future__ import annotations

import json
import logging
import uuid

from ..audio.sounds import SoundScheme
from ..database.db import get_session
from ..database.models import Preset
from ..timer.engine import DEFAULT_WARNING_TIME, TimerEngine
from ..timer.errors import TimerError
from ..timer.plan import RoundPlan, UniformPlan
from .ordering import duplicate_insertion_date
from .preset import WorkoutPreset


logger = logging.getLogger(__name__)


# ── row ↔ preset conversion ──────────────────────────────────────────────


def _row_to_preset(row: Preset) -> WorkoutPreset:
    return WorkoutPreset(
        id=uuid.UUID(row.id),
        name=row.name,
        plan=_decode_plan(row),
        round_warning_time=_decode_warning(row.round_warning_time, row.id),
        rest_warning_time=_decode_warning(row.rest_warning_time, row.id),
        sounds=_decode_sounds(row.sounds_json),
        created_at=row.created_at,
    )


def _decode_plan(row: Preset) -> RoundPlan:
    """Stored plan, or a uniform plan built from the summary columns."""
    if row.plan_json:
        try:
            return RoundPlan.from_dict(json.loads(row.plan_json))
        except (ValueError, TimerError) as exc:
            logger.warning("Preset %s has an unreadable plan (%s); "
                           "using summary columns", row.id, exc)
    return UniformPlan(
        round_duration=row.round_duration,
        rest_duration=row.rest_duration,
        count=row.number_of_rounds,
    )


def _decode_warning(value: int | None, preset_id: str) -> int:
    if value is None or value < 0:
        logger.warning("Preset %s has warning time %r; using %ss",
                       preset_id, value, DEFAULT_WARNING_TIME)
        return DEFAULT_WARNING_TIME
    return value


def _decode_sounds(raw: str | None) -> SoundScheme:
    if not raw:
        return SoundScheme()
    try:
        return SoundScheme.from_dict(json.loads(raw))
    except ValueError:
        logger.warning("Unreadable sound scheme %r; using defaults", raw)
        return SoundScheme()


def _write_row(row: Preset, preset: WorkoutPreset) -> None:
    row.name = preset.name
    row.round_duration = preset.round_duration
    row.rest_duration = preset.rest_duration
    row.number_of_rounds = preset.number_of_rounds
    row.round_warning_time = preset.round_warning_time
    row.rest_warning_time = preset.rest_warning_time
    row.plan_json = json.dumps(preset.plan.to_dict())
    row.sounds_json = json.dumps(preset.sounds.to_dict())
    row.created_at = preset.created_at


# ── store ────────────────────────────────────────────────────────────────


class PresetStore:
    """CRUD for saved workouts.  Lists are newest first."""

    def list_presets(self) -> list[WorkoutPreset]:
        with get_session() as db:
            rows = db.query(Preset).order_by(Preset.created_at.desc()).all()
            return [_row_to_preset(r) for r in rows]

    def get(self, preset_id: uuid.UUID) -> WorkoutPreset | None:
        with get_session() as db:
            row = db.get(Preset, str(preset_id))
            return _row_to_preset(row) if row else None

    def save(self, preset: WorkoutPreset) -> WorkoutPreset:
        """Insert *preset*, or overwrite the stored one with the same id."""
        with get_session() as db:
            row = db.get(Preset, str(preset.id))
            if row is None:
                row = Preset(id=str(preset.id))
                db.add(row)
            _write_row(row, preset)
            db.commit()
        logger.info("Saved preset %r", preset.name)
        return preset

    def save_from_engine(
        self,
        name: str,
        engine: TimerEngine,
        sounds: SoundScheme | None = None,
    ) -> WorkoutPreset:
        return self.save(WorkoutPreset.from_engine(name, engine, sounds))

    def rename(self, preset_id: uuid.UUID, name: str) -> WorkoutPreset:
        preset = self._require(preset_id)
        return self.save(preset.renamed(name))

    def delete(self, preset_id: uuid.UUID) -> bool:
        """Remove a preset.  Returns False when it did not exist."""
        with get_session() as db:
            row = db.get(Preset, str(preset_id))
            if row is None:
                return False
            db.delete(row)
            db.commit()
            return True

    def duplicate(self, preset_id: uuid.UUID) -> WorkoutPreset:
        """Copy a preset so the copy sorts directly below the source."""
        source = self._require(preset_id)
        created_at = duplicate_insertion_date(source, self.list_presets())
        copy = WorkoutPreset(
            name=f"{source.name} Copy",
            plan=source.plan,
            round_warning_time=source.round_warning_time,
            rest_warning_time=source.rest_warning_time,
            sounds=source.sounds,
            created_at=created_at,
        )
        return self.save(copy)

    def _require(self, preset_id: uuid.UUID) -> WorkoutPreset:
        preset = self.get(preset_id)
        if preset is None:
            raise KeyError(preset_id)
        return preset
