"""Events emitted by the timer engine and the sink interface that
receives them.

Sinks are fire-and-forget side channels (sound, tray status, ...).
The engine calls ``handle(event)`` synchronously at the moment of the
transition, after its own state has been updated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from .state import Phase, PhaseKind


class TimerEvent:
    """Base class for everything the engine emits."""

    __slots__ = ()


@dataclass(frozen=True)
class RoundStarted(TimerEvent):
    round_number: int


@dataclass(frozen=True)
class RestStarted(TimerEvent):
    after_round: int


@dataclass(frozen=True)
class WorkoutCompleted(TimerEvent):
    pass


@dataclass(frozen=True)
class Paused(TimerEvent):
    phase: Phase


@dataclass(frozen=True)
class Resumed(TimerEvent):
    phase: Phase


@dataclass(frozen=True)
class Reset(TimerEvent):
    pass


@dataclass(frozen=True)
class PhaseWarning(TimerEvent):
    """The active phase just reached its warning threshold."""

    kind: PhaseKind
    round_number: int


@runtime_checkable
class NotificationSink(Protocol):
    def handle(self, event: TimerEvent) -> None: ...


class NullSink:
    """Sink that ignores everything."""

    def handle(self, event: TimerEvent) -> None:
        pass
