"""Round/rest state machine for RoundBell.

Transitions
-----------
IDLE | FINISHED  → RUNNING(round 1)          (start)
RUNNING(phase)   → PAUSED(phase)             (pause)
PAUSED(phase)    → RUNNING(phase)            (start, same time left)
RUNNING(round n) → RUNNING(rest after n)     (clock hits 0, n < total)
RUNNING(round n) → FINISHED                  (clock hits 0, n == total)
RUNNING(rest n)  → RUNNING(round n + 1)      (clock hits 0)
Any              → IDLE                      (reset)

Everything not listed is a no-op.  The engine owns its state; other
components only issue commands and listen to signals or sinks.
"""

from __future__ import annotations

import logging
from typing import Iterable

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from .errors import InvalidState, InvalidWarningThreshold
from .events import (
    NotificationSink,
    Paused,
    PhaseWarning,
    Reset,
    RestStarted,
    Resumed,
    RoundStarted,
    TimerEvent,
    WorkoutCompleted,
)
from .plan import RoundConfig, RoundPlan, UniformPlan
from .state import LiveStatus, Phase, PhaseKind, TimerState, TimerStatus


logger = logging.getLogger(__name__)

TICK_INTERVAL_MS = 1000
DEFAULT_WARNING_TIME = 10  # seconds before a phase ends


class TimerEngine(QObject):
    """Qt-driven interval timer.

    A one-second ``QTimer`` calls :meth:`tick` while running.  Tests
    call :meth:`tick` directly; the event loop never needs to spin.

    Signals
    -------
    state_changed(state: TimerState)
        Emitted on every state transition.
    remaining_changed(remaining_seconds: int)
        Emitted after every tick and whenever a phase is loaded.
    event_emitted(event: TimerEvent)
        Emitted for each engine event, right after the sinks ran.
    """

    state_changed = pyqtSignal(object)
    remaining_changed = pyqtSignal(int)
    event_emitted = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        plan: RoundPlan | None = None,
        sinks: Iterable[NotificationSink] = (),
        round_warning_time: int = DEFAULT_WARNING_TIME,
        rest_warning_time: int = DEFAULT_WARNING_TIME,
    ) -> None:
        super().__init__(parent)

        # ── configuration ─────────────────────────────────────────────
        self._plan: RoundPlan = plan if plan is not None else UniformPlan()
        self._round_warning_time: int = round_warning_time
        self._rest_warning_time: int = rest_warning_time
        self._sinks: list[NotificationSink] = list(sinks)

        # ── state ─────────────────────────────────────────────────────
        self._state: TimerState = TimerState.idle()
        self._remaining: int = 0
        self._phase_duration: int = 0
        self._has_started: bool = False

        # ── Qt timer ──────────────────────────────────────────────────
        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(TICK_INTERVAL_MS)
        self._qt_timer.timeout.connect(self.tick)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def status(self) -> TimerStatus:
        return self._state.status

    @property
    def phase(self) -> Phase | None:
        return self._state.phase

    @property
    def time_remaining(self) -> int:
        """Seconds left in the active phase (0 when idle or finished)."""
        return self._remaining

    @property
    def phase_duration(self) -> int:
        """Full length of the active phase."""
        return self._phase_duration

    @property
    def plan(self) -> RoundPlan:
        return self._plan

    @property
    def number_of_rounds(self) -> int:
        return self._plan.number_of_rounds

    @property
    def round_warning_time(self) -> int:
        return self._round_warning_time

    @property
    def rest_warning_time(self) -> int:
        return self._rest_warning_time

    @property
    def has_started(self) -> bool:
        """True once the engine has left IDLE at least once."""
        return self._has_started

    @property
    def is_running(self) -> bool:
        return self._state.is_running

    @property
    def can_start(self) -> bool:
        return not self._state.is_running and not self._plan.is_empty

    @property
    def is_clock_active(self) -> bool:
        return self._qt_timer.isActive()

    @property
    def current_round_number(self) -> int:
        """Round shown to the user: the upcoming one when idle, the last
        one when finished."""
        phase = self._state.phase
        if phase is not None:
            return phase.round_number
        if self._state.is_finished:
            return self._plan.number_of_rounds
        return 1

    @property
    def completed_round_count(self) -> int:
        phase = self._state.phase
        if phase is not None:
            return phase.round_number if phase.is_rest else phase.round_number - 1
        if self._state.is_finished:
            return self._plan.number_of_rounds
        return 0

    @property
    def phase_progress(self) -> float:
        """0.0 → 1.0 progress through the active phase."""
        if self._state.is_finished:
            return 1.0
        if self._state.phase is None or self._phase_duration <= 0:
            return 0.0
        elapsed = self._phase_duration - self._remaining
        return max(0.0, min(1.0, elapsed / self._phase_duration))

    @property
    def is_in_warning_window(self) -> bool:
        if self._state.phase is None:
            return False
        threshold = self._warning_threshold()
        return threshold is not None and 0 < self._remaining <= threshold

    @property
    def total_time_remaining(self) -> int:
        """Seconds left in the whole workout, including later phases."""
        phase = self._state.phase
        if self._state.is_finished:
            return 0
        if phase is None:
            return self._plan.total_duration

        total = self._remaining
        rounds = self._plan.rounds
        n = phase.round_number
        if phase.is_round and n < len(rounds):
            total += rounds[n - 1].rest_duration
        for index in range(n, len(rounds)):
            total += rounds[index].round_duration
            if index < len(rounds) - 1:
                total += rounds[index].rest_duration
        return total

    def live_status(self, workout_name: str = "") -> LiveStatus:
        phase = self._state.phase
        if phase is not None:
            label = phase.kind.value
        elif self._state.is_finished:
            label = "finished"
        else:
            label = "idle"
        return LiveStatus(
            time_remaining=self._remaining,
            current_round=self.current_round_number,
            number_of_rounds=self._plan.number_of_rounds,
            phase=label,
            is_paused=self._state.is_paused,
            workout_name=workout_name,
        )

    # ══════════════════════════════════════════════════════════════════
    #  CONFIGURATION
    # ══════════════════════════════════════════════════════════════════

    def set_round_plan(self, plan: RoundPlan) -> None:
        """Swap the plan.  Only allowed while idle or finished."""
        self._require_stopped("change the round plan")
        self._plan = plan

    def set_warning_defaults(
        self, round_warning_time: int, rest_warning_time: int,
    ) -> None:
        """Global warning times used by rounds without their own."""
        self._require_stopped("change warning times")
        if round_warning_time < 0 or rest_warning_time < 0:
            raise InvalidWarningThreshold("warning times cannot be negative")
        self._round_warning_time = round_warning_time
        self._rest_warning_time = rest_warning_time

    def add_sink(self, sink: NotificationSink) -> None:
        if sink not in self._sinks:
            self._sinks.append(sink)

    def remove_sink(self, sink: NotificationSink) -> None:
        if sink in self._sinks:
            self._sinks.remove(sink)

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> None:
        """Begin a workout, or resume a paused one.  No-op while running.

        Raises ``InvalidConfiguration`` (state untouched) when the plan
        cannot be run.
        """
        status = self._state.status
        if status is TimerStatus.RUNNING:
            return

        if status is TimerStatus.PAUSED:
            phase = self._state.phase
            self._set_state(TimerState.running(phase))
            self._qt_timer.start()
            self._emit(Resumed(phase))
            return

        self._plan.validate(check_warnings=False)
        self._has_started = True
        self._qt_timer.start()
        self._enter_round(1)

    def pause(self) -> None:
        if not self._state.is_running:
            return
        self._qt_timer.stop()
        phase = self._state.phase
        self._set_state(TimerState.paused(phase))
        self._emit(Paused(phase))

    def reset(self) -> None:
        """Cancel everything and return to IDLE with nothing on the clock."""
        self._qt_timer.stop()
        was_idle = self._state.is_idle and self._remaining == 0
        self._remaining = 0
        self._phase_duration = 0
        if was_idle:
            return
        self._set_state(TimerState.idle())
        self.remaining_changed.emit(0)
        self._emit(Reset())

    def toggle(self) -> None:
        """Start, pause or resume depending on the current state."""
        if self._state.is_running:
            self.pause()
        else:
            self.start()

    def tick(self) -> None:
        """Advance the clock by one second.  No-op unless running."""
        if not self._state.is_running:
            return

        self._remaining = max(0, self._remaining - 1)
        if self._remaining == 0:
            self._complete_phase()
            return

        self.remaining_changed.emit(self._remaining)
        if self._remaining == self._warning_threshold():
            phase = self._state.phase
            self._emit(PhaseWarning(phase.kind, phase.round_number))

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _complete_phase(self) -> None:
        phase = self._state.phase
        if phase.is_rest:
            self._enter_round(phase.round_number + 1)
            return

        if phase.round_number < self._plan.number_of_rounds:
            config = self._config_for(phase.round_number)
            self._load(config.rest_duration)
            self._set_state(TimerState.running(Phase.rest(phase.round_number)))
            self.remaining_changed.emit(self._remaining)
            self._emit(RestStarted(phase.round_number))
            return

        self._qt_timer.stop()
        self._load(0)
        self._set_state(TimerState.finished())
        self.remaining_changed.emit(0)
        self._emit(WorkoutCompleted())

    def _enter_round(self, number: int) -> None:
        self._load(self._config_for(number).round_duration)
        self._set_state(TimerState.running(Phase.round(number)))
        self.remaining_changed.emit(self._remaining)
        self._emit(RoundStarted(number))

    def _load(self, duration: int) -> None:
        self._remaining = duration
        self._phase_duration = duration

    def _config_for(self, round_number: int) -> RoundConfig:
        config = self._plan.configuration(round_number)
        if config is None:
            raise RuntimeError(f"plan has no round {round_number}")
        return config

    def _warning_threshold(self) -> int | None:
        """Effective warning time for the active phase, or None when it
        can never fire (unset, zero, or not below the phase length)."""
        phase = self._state.phase
        if phase is None:
            return None
        config = self._plan.configuration(phase.round_number)
        if config is None:
            return None
        if phase.kind is PhaseKind.ROUND:
            threshold = config.round_warning_time
            if threshold is None:
                threshold = self._round_warning_time
        else:
            threshold = config.rest_warning_time
            if threshold is None:
                threshold = self._rest_warning_time
        if threshold <= 0 or threshold >= self._phase_duration:
            return None
        return threshold

    def _require_stopped(self, action: str) -> None:
        if self._state.status in (TimerStatus.RUNNING, TimerStatus.PAUSED):
            raise InvalidState(f"cannot {action} while {self._state}")

    def _set_state(self, new_state: TimerState) -> None:
        self._state = new_state
        self.state_changed.emit(new_state)

    def _emit(self, event: TimerEvent) -> None:
        for sink in list(self._sinks):
            try:
                sink.handle(event)
            except Exception:
                logger.exception("Notification sink %r failed on %r", sink, event)
        self.event_emitted.emit(event)
