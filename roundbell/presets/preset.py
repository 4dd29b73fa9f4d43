"""WorkoutPreset: a named, saved workout."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from ..audio.sounds import SoundScheme
from ..timer.engine import DEFAULT_WARNING_TIME, TimerEngine
from ..timer.errors import InvalidConfiguration, InvalidWarningThreshold
from ..timer.plan import RoundPlan, UniformPlan


@dataclass(frozen=True)
class WorkoutPreset:
    name: str
    plan: RoundPlan = field(default_factory=UniformPlan)
    round_warning_time: int = DEFAULT_WARNING_TIME
    rest_warning_time: int = DEFAULT_WARNING_TIME
    sounds: SoundScheme = field(default_factory=SoundScheme)
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_engine(
        cls,
        name: str,
        engine: TimerEngine,
        sounds: SoundScheme | None = None,
    ) -> WorkoutPreset:
        """Snapshot the engine's current configuration."""
        return cls(
            name=name,
            plan=engine.plan,
            round_warning_time=engine.round_warning_time,
            rest_warning_time=engine.rest_warning_time,
            sounds=sounds or SoundScheme(),
        )

    def apply_to(self, engine: TimerEngine) -> None:
        """Load this preset's plan and warning defaults into *engine*.

        All or nothing: raises ``InvalidState`` when the engine is
        mid-workout and ``InvalidWarningThreshold`` for a negative
        warning time, in both cases before the engine is touched.
        """
        if self.round_warning_time < 0 or self.rest_warning_time < 0:
            raise InvalidWarningThreshold(
                f"preset {self.name!r} has a negative warning time"
            )
        engine.set_warning_defaults(self.round_warning_time, self.rest_warning_time)
        engine.set_round_plan(self.plan)

    def renamed(self, name: str) -> WorkoutPreset:
        return replace(self, name=name)

    # ── summary values for list rows and legacy columns ──────────────

    @property
    def number_of_rounds(self) -> int:
        return self.plan.number_of_rounds

    @property
    def round_duration(self) -> int:
        first = self.plan.configuration(1)
        return first.round_duration if first else 0

    @property
    def rest_duration(self) -> int:
        first = self.plan.configuration(1)
        return first.rest_duration if first else 0

    # ── interchange ──────────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "name": self.name,
            "plan": self.plan.to_dict(),
            "round_warning_time": self.round_warning_time,
            "rest_warning_time": self.rest_warning_time,
            "sounds": self.sounds.to_dict(),
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkoutPreset:
        try:
            preset = cls(
                id=uuid.UUID(data["id"]),
                name=str(data["name"]),
                plan=RoundPlan.from_dict(data["plan"]),
                round_warning_time=int(data.get("round_warning_time", DEFAULT_WARNING_TIME)),
                rest_warning_time=int(data.get("rest_warning_time", DEFAULT_WARNING_TIME)),
                sounds=SoundScheme.from_dict(data.get("sounds")),
                created_at=datetime.fromisoformat(data["created_at"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidConfiguration(f"malformed preset: {exc}") from exc
        if preset.round_warning_time < 0 or preset.rest_warning_time < 0:
            raise InvalidConfiguration(
                f"preset {preset.name!r} has a negative warning time"
            )
        return preset
