"""Round plans: the round/rest structure of a workout.

A plan is either *uniform* (one round duration, one rest duration, a
repeat count) or *individual* (an explicit list of ``RoundConfig``
entries).  Both are immutable; every edit returns a new plan so a
running engine never sees its configuration change under it.

Round numbers are 1-based (``configuration(1)`` is the first round);
list edits take 0-based indices, like the editor's rows.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from typing import Any, ClassVar

from .errors import InvalidConfiguration, InvalidWarningThreshold


DEFAULT_ROUND_DURATION = 180
DEFAULT_REST_DURATION = 60

# Synthesized uniform rounds get ids derived from their position.
_UNIFORM_NAMESPACE = uuid.UUID("6f1c1f3e-52a4-4f53-9a43-1f6c0be0b0a1")


def _valid_warning(warning: int | None, duration: int) -> int | None:
    """Return *warning* if it can fire within *duration*, else None."""
    if warning is None or warning < 0 or warning >= duration:
        return None
    return warning


# ── round config ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class RoundConfig:
    """One round of work plus the rest that follows it.

    ``None`` warning times defer to the engine's global defaults.
    """

    round_duration: int
    rest_duration: int
    round_warning_time: int | None = None
    rest_warning_time: int | None = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def clone(self) -> RoundConfig:
        """Same durations and warnings, fresh identifier."""
        return replace(self, id=uuid.uuid4())

    def with_values(self, **changes: Any) -> RoundConfig:
        """Edited copy that keeps the identifier."""
        changes.pop("id", None)
        return replace(self, **changes)

    def validate_warnings(self, *, rest_entered: bool = True) -> None:
        w = self.round_warning_time
        if w is not None and (w < 0 or w >= self.round_duration):
            raise InvalidWarningThreshold(
                f"round warning {w}s must be below the "
                f"{self.round_duration}s round"
            )
        w = self.rest_warning_time
        if rest_entered and w is not None and (w < 0 or w >= self.rest_duration):
            raise InvalidWarningThreshold(
                f"rest warning {w}s must be below the "
                f"{self.rest_duration}s rest"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "round_duration": self.round_duration,
            "rest_duration": self.rest_duration,
            "round_warning_time": self.round_warning_time,
            "rest_warning_time": self.rest_warning_time,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RoundConfig:
        try:
            return cls(
                round_duration=int(data["round_duration"]),
                rest_duration=int(data["rest_duration"]),
                round_warning_time=_optional_int(data.get("round_warning_time")),
                rest_warning_time=_optional_int(data.get("rest_warning_time")),
                id=uuid.UUID(data["id"]) if data.get("id") else uuid.uuid4(),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidConfiguration(f"malformed round: {data!r}") from exc


def _optional_int(value: Any) -> int | None:
    return None if value is None else int(value)


DEFAULT_TEMPLATE = RoundConfig(DEFAULT_ROUND_DURATION, DEFAULT_REST_DURATION)


# ── plans ────────────────────────────────────────────────────────────────


class RoundPlan:
    """Shared queries and edits for both plan variants."""

    mode: ClassVar[str]

    @property
    def number_of_rounds(self) -> int:
        raise NotImplementedError

    @property
    def rounds(self) -> tuple[RoundConfig, ...]:
        raise NotImplementedError

    def with_round_count(self, new_count: int) -> RoundPlan:
        raise NotImplementedError

    def to_dict(self) -> dict[str, Any]:
        raise NotImplementedError

    # ── derived queries ───────────────────────────────────────────────

    @property
    def is_empty(self) -> bool:
        return self.number_of_rounds == 0

    def configuration(self, round_number: int) -> RoundConfig | None:
        """The config for 1-based *round_number*, or None if out of range."""
        if round_number < 1 or round_number > self.number_of_rounds:
            return None
        return self.rounds[round_number - 1]

    @property
    def total_duration(self) -> int:
        """Work plus rest, without the rest after the final round."""
        rounds = self.rounds
        if not rounds:
            return 0
        total = sum(r.round_duration + r.rest_duration for r in rounds)
        return total - rounds[-1].rest_duration

    def is_uniform_shape(self) -> bool:
        rounds = self.rounds
        if not rounds:
            return True
        first = rounds[0]
        return all(
            r.round_duration == first.round_duration
            and r.rest_duration == first.rest_duration
            and r.round_warning_time == first.round_warning_time
            and r.rest_warning_time == first.rest_warning_time
            for r in rounds
        )

    # ── validation ────────────────────────────────────────────────────

    def validate(self, *, check_warnings: bool = True) -> None:
        """Raise if this plan cannot be run.

        ``InvalidConfiguration`` covers structure and durations;
        ``InvalidWarningThreshold`` covers per-round warnings and is
        skipped when *check_warnings* is false (the engine clamps those).
        """
        rounds = self.rounds
        if not rounds:
            raise InvalidConfiguration("plan has no rounds")

        seen: set[uuid.UUID] = set()
        last = len(rounds) - 1
        for index, rnd in enumerate(rounds):
            number = index + 1
            if rnd.id in seen:
                raise InvalidConfiguration(f"round {number} reuses id {rnd.id}")
            seen.add(rnd.id)
            if rnd.round_duration <= 0:
                raise InvalidConfiguration(
                    f"round {number} must last at least one second"
                )
            if index < last and rnd.rest_duration <= 0:
                raise InvalidConfiguration(
                    f"rest after round {number} must last at least one second"
                )
            if rnd.rest_duration < 0:
                raise InvalidConfiguration(
                    f"rest after round {number} cannot be negative"
                )
            if check_warnings:
                rnd.validate_warnings(rest_entered=index < last)

    # ── edits (always return a new plan) ──────────────────────────────

    def to_individual(self) -> IndividualPlan:
        return IndividualPlan(self.rounds)

    def with_duplicated_round(self, index: int) -> IndividualPlan:
        """Insert a copy of round *index* right after it."""
        rounds = list(self.rounds)
        _check_index(index, len(rounds))
        rounds.insert(index + 1, rounds[index].clone())
        return IndividualPlan(rounds)

    def with_round_removed(self, index: int) -> IndividualPlan:
        rounds = list(self.rounds)
        _check_index(index, len(rounds))
        del rounds[index]
        return IndividualPlan(rounds)

    def with_rounds_reordered(self, source: int, destination: int) -> IndividualPlan:
        """Move round *source* so it ends up at *destination*."""
        rounds = list(self.rounds)
        _check_index(source, len(rounds))
        _check_index(destination, len(rounds))
        rounds.insert(destination, rounds.pop(source))
        return IndividualPlan(rounds)

    def with_round_replaced(self, config: RoundConfig) -> IndividualPlan:
        """Swap in *config* for the round with the same id."""
        rounds = list(self.rounds)
        for index, rnd in enumerate(rounds):
            if rnd.id == config.id:
                rounds[index] = config
                return IndividualPlan(rounds)
        raise KeyError(config.id)

    def with_round_appended(self) -> IndividualPlan:
        """Add one round cloned from the last (or the default template)."""
        return self.to_individual().with_round_count(self.number_of_rounds + 1)

    @staticmethod
    def from_dict(data: dict[str, Any]) -> RoundPlan:
        mode = data.get("mode") if isinstance(data, dict) else None
        if mode == UniformPlan.mode:
            try:
                return UniformPlan(
                    round_duration=int(data["round_duration"]),
                    rest_duration=int(data["rest_duration"]),
                    count=int(data["count"]),
                )
            except (KeyError, TypeError, ValueError) as exc:
                raise InvalidConfiguration(f"malformed uniform plan: {data!r}") from exc
        if mode == IndividualPlan.mode:
            rounds = data.get("rounds")
            if not isinstance(rounds, list):
                raise InvalidConfiguration("individual plan needs a rounds list")
            return IndividualPlan([RoundConfig.from_dict(r) for r in rounds])
        raise InvalidConfiguration(f"unknown plan mode: {mode!r}")


def _check_index(index: int, length: int) -> None:
    if not 0 <= index < length:
        raise IndexError(f"round index {index} out of range for {length} rounds")


@dataclass(frozen=True)
class UniformPlan(RoundPlan):
    """Every round identical: ``count`` x (round + rest)."""

    mode: ClassVar[str] = "uniform"

    round_duration: int = DEFAULT_ROUND_DURATION
    rest_duration: int = DEFAULT_REST_DURATION
    count: int = 3

    @property
    def number_of_rounds(self) -> int:
        return max(0, self.count)

    @property
    def rounds(self) -> tuple[RoundConfig, ...]:
        return tuple(
            RoundConfig(
                self.round_duration,
                self.rest_duration,
                id=uuid.uuid5(_UNIFORM_NAMESPACE, str(index)),
            )
            for index in range(self.number_of_rounds)
        )

    def with_round_count(self, new_count: int) -> UniformPlan:
        """Same round and rest, repeated *new_count* times.  Growing a
        single round with no rest gives the rounds the default rest."""
        new_count = max(1, new_count)
        if new_count == self.count:
            return self
        if new_count > 1 and self.rest_duration <= 0:
            return replace(self, count=new_count, rest_duration=DEFAULT_REST_DURATION)
        return replace(self, count=new_count)

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode,
            "round_duration": self.round_duration,
            "rest_duration": self.rest_duration,
            "count": self.count,
        }


@dataclass(frozen=True)
class IndividualPlan(RoundPlan):
    """Each round configured on its own."""

    mode: ClassVar[str] = "individual"

    entries: tuple[RoundConfig, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", tuple(self.entries))

    @property
    def number_of_rounds(self) -> int:
        return len(self.entries)

    @property
    def rounds(self) -> tuple[RoundConfig, ...]:
        return self.entries

    def to_individual(self) -> IndividualPlan:
        return self

    def with_round_count(self, new_count: int) -> IndividualPlan:
        """Truncate from the end, or grow by cloning the last round.

        A last round with no rest gains one before it stops being last:
        the most recent non-zero rest in the plan, else the default.
        """
        new_count = max(1, new_count)
        current = len(self.entries)
        if new_count == current:
            return self
        if new_count < current:
            return IndividualPlan(self.entries[:new_count])

        entries = list(self.entries)
        template = entries[-1] if entries else DEFAULT_TEMPLATE
        if template.rest_duration <= 0:
            rest = next(
                (r.rest_duration for r in reversed(entries) if r.rest_duration > 0),
                DEFAULT_REST_DURATION,
            )
            template = template.with_values(
                rest_duration=rest,
                rest_warning_time=_valid_warning(template.rest_warning_time, rest),
            )
            entries[-1] = template
        additions = [
            RoundConfig(
                template.round_duration,
                template.rest_duration,
                round_warning_time=_valid_warning(
                    template.round_warning_time, template.round_duration,
                ),
                rest_warning_time=_valid_warning(
                    template.rest_warning_time, template.rest_duration,
                ),
            )
            for _ in range(new_count - current)
        ]
        return IndividualPlan(entries + additions)

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode,
            "rounds": [r.to_dict() for r in self.entries],
        }


# ── editor-only checks ───────────────────────────────────────────────────


def check_warning_defaults(
    plan: RoundPlan,
    round_warning_time: int,
    rest_warning_time: int,
) -> None:
    """Check global warning defaults against the shortest durations.

    Used by the settings editor for inline validation; the engine
    relies on per-round thresholds and never calls this.
    """
    if round_warning_time < 0 or rest_warning_time < 0:
        raise InvalidWarningThreshold("warning times cannot be negative")
    rounds = plan.rounds
    if not rounds:
        return
    shortest_round = min(r.round_duration for r in rounds)
    if round_warning_time >= shortest_round:
        raise InvalidWarningThreshold(
            f"round warning {round_warning_time}s must be below the "
            f"shortest round ({shortest_round}s)"
        )
    rests = [r.rest_duration for r in rounds[:-1]]
    if rests:
        shortest_rest = min(rests)
        if rest_warning_time >= shortest_rest:
            raise InvalidWarningThreshold(
                f"rest warning {rest_warning_time}s must be below the "
                f"shortest rest ({shortest_rest}s)"
            )
