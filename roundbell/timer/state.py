"""Timer state shapes.

States
------
IDLE            No workout in progress, nothing on the clock.
RUNNING(phase)  Counting down a round or a rest.
PAUSED(phase)   Countdown frozen at the current phase and time.
FINISHED        All rounds done; stays here until reset or start.

A phase is either ``round(n)`` or ``rest(after_round=n)``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PhaseKind(Enum):
    ROUND = "round"
    REST = "rest"


class TimerStatus(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    FINISHED = "finished"


@dataclass(frozen=True)
class Phase:
    """A round, or the rest that follows round ``round_number``."""

    kind: PhaseKind
    round_number: int

    @classmethod
    def round(cls, number: int) -> Phase:
        return cls(PhaseKind.ROUND, number)

    @classmethod
    def rest(cls, after_round: int) -> Phase:
        return cls(PhaseKind.REST, after_round)

    @property
    def is_round(self) -> bool:
        return self.kind is PhaseKind.ROUND

    @property
    def is_rest(self) -> bool:
        return self.kind is PhaseKind.REST

    @property
    def after_round(self) -> int:
        """For a rest phase, the round it follows."""
        return self.round_number

    def __str__(self) -> str:
        if self.is_round:
            return f"round({self.round_number})"
        return f"rest(after_round={self.round_number})"


@dataclass(frozen=True)
class TimerState:
    """Status plus the active phase (only while running or paused)."""

    status: TimerStatus
    phase: Phase | None = None

    def __post_init__(self) -> None:
        needs_phase = self.status in (TimerStatus.RUNNING, TimerStatus.PAUSED)
        if needs_phase != (self.phase is not None):
            raise ValueError(
                f"{self.status.value} state "
                f"{'requires' if needs_phase else 'cannot have'} a phase"
            )

    @classmethod
    def idle(cls) -> TimerState:
        return cls(TimerStatus.IDLE)

    @classmethod
    def running(cls, phase: Phase) -> TimerState:
        return cls(TimerStatus.RUNNING, phase)

    @classmethod
    def paused(cls, phase: Phase) -> TimerState:
        return cls(TimerStatus.PAUSED, phase)

    @classmethod
    def finished(cls) -> TimerState:
        return cls(TimerStatus.FINISHED)

    @property
    def is_idle(self) -> bool:
        return self.status is TimerStatus.IDLE

    @property
    def is_running(self) -> bool:
        return self.status is TimerStatus.RUNNING

    @property
    def is_paused(self) -> bool:
        return self.status is TimerStatus.PAUSED

    @property
    def is_finished(self) -> bool:
        return self.status is TimerStatus.FINISHED

    def __str__(self) -> str:
        if self.phase is None:
            return self.status.value
        return f"{self.status.value}({self.phase})"


@dataclass(frozen=True)
class LiveStatus:
    """Snapshot for glanceable displays (tray icon, tooltip)."""

    time_remaining: int
    current_round: int
    number_of_rounds: int
    phase: str              # round | rest | finished | idle
    is_paused: bool
    workout_name: str = ""
