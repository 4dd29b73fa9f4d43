"""Main timer display widget.

Layout (top → bottom):
    - Workout name (current preset, if any)
    - ProgressRing (large, centred)
    - Reset / Start-Pause-Resume buttons
    - One dot per round, filled once the round is done
    - Total workout time left
"""

from __future__ import annotations

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout,
    QLabel, QPushButton, QFrame, QSizePolicy,
)

from ..timer.engine import TimerEngine
from ..timer.errors import TimerError
from ..timer.events import RestStarted, RoundStarted, TimerEvent, WorkoutCompleted
from ..timer.state import TimerState, TimerStatus
from .progress_ring import ProgressRing
from .styles import PALETTE, display_key


MAX_ROUND_DOTS = 15


# ── formatting ───────────────────────────────────────────────────────────


def format_time(seconds: int) -> str:
    """``MM:SS``; minutes keep counting past 59."""
    seconds = max(0, int(seconds))
    minutes, secs = divmod(seconds, 60)
    return f"{minutes:02d}:{secs:02d}"


def format_total_time(seconds: int) -> str:
    """``M:SS`` under an hour, ``H:MM:SS`` from an hour up."""
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def status_text(engine: TimerEngine) -> str:
    """Headline under the clock.  Pausing keeps the phase label."""
    status = engine.status
    if status is TimerStatus.IDLE:
        return "READY"
    if status is TimerStatus.FINISHED:
        return "WORKOUT COMPLETE"
    phase = engine.phase
    if phase.is_round:
        return f"ROUND {phase.round_number}"
    return "REST"


def round_text(engine: TimerEngine) -> str:
    total = engine.number_of_rounds
    if total == 0:
        return "No rounds"
    return f"Round {engine.current_round_number} of {total}"


def button_text(engine: TimerEngine) -> str:
    status = engine.status
    if status is TimerStatus.RUNNING:
        return "Pause"
    if status is TimerStatus.PAUSED:
        return "Resume"
    if status is TimerStatus.FINISHED:
        return "Restart"
    return "Start"


# ── widget ───────────────────────────────────────────────────────────────


class TimerWidget(QWidget):
    """The timer card in the main window."""

    def __init__(self, engine: TimerEngine, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._engine = engine
        self._workout_name = ""
        self._dots: list[QLabel] = []
        self._build_ui()
        self._connect_signals()
        self.refresh()

    # ── build ─────────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.setSpacing(0)

        card = QFrame(self)
        card.setObjectName("card")
        root.addWidget(card)

        layout = QVBoxLayout(card)
        layout.setContentsMargins(32, 20, 32, 24)
        layout.setSpacing(0)
        layout.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._name_label = QLabel("", card)
        self._name_label.setObjectName("sectionLabel")
        self._name_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._name_label)

        layout.addSpacing(8)

        ring_container = QHBoxLayout()
        ring_container.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._ring = ProgressRing(card)
        self._ring.setSizePolicy(QSizePolicy.Policy.Fixed, QSizePolicy.Policy.Fixed)
        self._ring.setFixedSize(320, 320)
        ring_container.addWidget(self._ring)
        layout.addLayout(ring_container)

        layout.addSpacing(12)

        btn_row = QHBoxLayout()
        btn_row.setSpacing(12)
        btn_row.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._reset_btn = QPushButton("Reset", card)
        self._reset_btn.setObjectName("dangerButton")

        self._start_pause_btn = QPushButton("Start", card)
        self._start_pause_btn.setObjectName("primaryButton")

        btn_row.addWidget(self._reset_btn)
        btn_row.addWidget(self._start_pause_btn)
        layout.addLayout(btn_row)

        layout.addSpacing(14)

        self._dot_row = QHBoxLayout()
        self._dot_row.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._dot_row.setSpacing(8)
        layout.addLayout(self._dot_row)

        layout.addSpacing(8)

        self._total_label = QLabel("", card)
        self._total_label.setObjectName("totalTimeLabel")
        self._total_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._total_label)

        self._card = card

    # ── signals ───────────────────────────────────────────────────────────

    def _connect_signals(self) -> None:
        self._start_pause_btn.clicked.connect(self._on_start_pause)
        self._reset_btn.clicked.connect(self._engine.reset)
        self._engine.remaining_changed.connect(self._on_remaining_changed)
        self._engine.state_changed.connect(self._on_state_changed)
        self._engine.event_emitted.connect(self._on_event)

    # ── public ────────────────────────────────────────────────────────────

    @property
    def ring(self) -> ProgressRing:
        return self._ring

    @property
    def start_pause_button(self) -> QPushButton:
        return self._start_pause_btn

    @property
    def reset_button(self) -> QPushButton:
        return self._reset_btn

    @property
    def total_time_text(self) -> str:
        return self._total_label.text()

    def filled_dot_count(self) -> int:
        return sum(1 for d in self._dots if d.text() == "●")

    def set_workout_name(self, name: str) -> None:
        self._workout_name = name
        self._name_label.setText(name.upper())
        self._name_label.setVisible(bool(name))

    def refresh(self) -> None:
        """Redraw everything, e.g. after the plan changed."""
        self._rebuild_dots()
        self._on_state_changed(self._engine.state)

    # ── slots ─────────────────────────────────────────────────────────────

    def _on_start_pause(self) -> None:
        try:
            self._engine.toggle()
        except TimerError as exc:
            self._ring.set_status_text("CHECK ROUNDS")
            self._total_label.setText(str(exc).capitalize())

    def _on_state_changed(self, state: TimerState) -> None:
        self._start_pause_btn.setText(button_text(self._engine))
        self._start_pause_btn.setEnabled(
            self._engine.is_running or self._engine.can_start
        )
        self._reset_btn.setVisible(not state.is_idle)
        self._ring.set_status_text(status_text(self._engine))
        self._ring.set_round_text(round_text(self._engine))
        self._update_dots()
        self._on_remaining_changed(self._engine.time_remaining)

    def _on_event(self, event: TimerEvent) -> None:
        if isinstance(event, WorkoutCompleted):
            self._ring.strike(3)
        elif isinstance(event, (RoundStarted, RestStarted)):
            self._ring.strike()

    def _on_remaining_changed(self, remaining: int) -> None:
        engine = self._engine
        if engine.state.is_idle:
            first = engine.plan.configuration(1)
            shown = first.round_duration if first else 0
        else:
            shown = remaining
        self._ring.set_time_text(format_time(shown))
        self._ring.set_percent(engine.phase_progress)
        self._ring.apply_state(display_key(engine))
        self._total_label.setText(
            f"Total {format_total_time(engine.total_time_remaining)}"
        )

    # ── round dots ────────────────────────────────────────────────────────

    def _rebuild_dots(self) -> None:
        for dot in self._dots:
            self._dot_row.removeWidget(dot)
            dot.deleteLater()
        self._dots = []
        count = self._engine.number_of_rounds
        if count > MAX_ROUND_DOTS:
            return
        for _ in range(count):
            dot = QLabel("○", self._card)
            dot.setAlignment(Qt.AlignmentFlag.AlignCenter)
            self._dots.append(dot)
            self._dot_row.addWidget(dot)

    def _update_dots(self) -> None:
        if len(self._dots) != self._engine.number_of_rounds:
            self._rebuild_dots()
        done = self._engine.completed_round_count
        for i, dot in enumerate(self._dots):
            if i < done:
                dot.setText("●")
                dot.setStyleSheet(f"font-size: 16px; color: {PALETTE['accent']};")
            else:
                dot.setText("○")
                dot.setStyleSheet(f"font-size: 16px; color: {PALETTE['text_muted']};")
