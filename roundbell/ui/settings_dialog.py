"""Settings dialog for RoundBell.

A modal dialog that configures the workout (rounds, durations, warning
times), the sound for each transition, and window preferences.  Changes
are saved to disk immediately and pushed into the engine.  While a
workout is running or paused the workout section is locked.
"""

from __future__ import annotations

from typing import Callable

from PyQt6.QtCore import Qt, QTime, pyqtSignal
from PyQt6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QFormLayout,
    QLabel, QSpinBox, QSlider, QCheckBox, QPushButton,
    QFrame, QWidget, QComboBox, QTimeEdit, QInputDialog,
)

from ..audio.sounds import SOUND_LABELS, SOUND_NAMES, SoundScheme
from ..settings import Settings, save_settings, store_plan
from ..timer.engine import TimerEngine
from ..timer.errors import InvalidWarningThreshold
from ..timer.plan import IndividualPlan, RoundPlan, UniformPlan, check_warning_defaults
from .timer_widget import format_total_time


SOUND_SLOTS: tuple[tuple[str, str], ...] = (
    ("round_start", "Round start:"),
    ("rest_start", "Rest start:"),
    ("round_warning", "Round warning:"),
    ("rest_warning", "Rest warning:"),
    ("workout_complete", "Workout complete:"),
)


# ── duration editor helpers ──────────────────────────────────────────────


def make_duration_edit(minimum: int = 1) -> QTimeEdit:
    """``mm:ss`` editor; read and write with the helpers below."""
    edit = QTimeEdit()
    edit.setDisplayFormat("mm:ss")
    edit.setMinimumTime(QTime(0, 0, 0).addSecs(minimum))
    edit.setMaximumTime(QTime(0, 59, 59))
    return edit


def duration_seconds(edit: QTimeEdit) -> int:
    return QTime(0, 0, 0).secsTo(edit.time())


def set_duration_seconds(edit: QTimeEdit, seconds: int) -> None:
    edit.setTime(QTime(0, 0, 0).addSecs(max(0, min(seconds, 3599))))


class SettingsDialog(QDialog):
    """Modal dialog for the workout and all user preferences."""

    workout_changed = pyqtSignal()
    sounds_changed = pyqtSignal(object)      # SoundScheme
    preset_save_requested = pyqtSignal(str)  # preset name

    def __init__(
        self,
        settings: Settings,
        engine: TimerEngine,
        parent: QWidget | None = None,
        *,
        sound_preview_callback: Callable[[str], None] | None = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Settings")
        self.setMinimumWidth(440)
        self.setModal(True)

        self._settings = settings
        self._engine = engine
        self._sound_preview = sound_preview_callback
        self._populating = False

        self._build_ui()
        self._populate()

    # ══════════════════════════════════════════════════════════════════
    #  BUILD UI
    # ══════════════════════════════════════════════════════════════════

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(24, 20, 24, 20)
        root.setSpacing(14)

        # ── Workout section ──────────────────────────────────────────
        root.addWidget(self._section_label("Workout"))
        self._locked_label = QLabel("Reset the timer to change the workout.")
        self._locked_label.setObjectName("validationLabel")
        root.addWidget(self._locked_label)

        form = QFormLayout()
        form.setContentsMargins(0, 0, 0, 0)
        form.setHorizontalSpacing(20)
        form.setVerticalSpacing(10)

        self._rounds_spin = QSpinBox()
        self._rounds_spin.setRange(1, 99)
        self._rounds_spin.valueChanged.connect(self._on_round_count_changed)
        form.addRow("Number of rounds:", self._rounds_spin)

        self._round_edit = make_duration_edit()
        self._round_edit.timeChanged.connect(self._on_durations_changed)
        form.addRow("Round duration:", self._round_edit)

        self._rest_edit = make_duration_edit()
        self._rest_edit.timeChanged.connect(self._on_durations_changed)
        form.addRow("Rest duration:", self._rest_edit)

        self._plan_summary = QLabel("")
        self._plan_summary.setObjectName("totalTimeLabel")
        form.addRow("", self._plan_summary)

        rounds_row = QHBoxLayout()
        self._edit_rounds_btn = QPushButton("Edit individual rounds…")
        self._edit_rounds_btn.setObjectName("secondaryButton")
        self._edit_rounds_btn.clicked.connect(self._open_rounds_editor)
        self._uniform_btn = QPushButton("Make uniform")
        self._uniform_btn.setObjectName("secondaryButton")
        self._uniform_btn.clicked.connect(self._make_uniform)
        rounds_row.addWidget(self._edit_rounds_btn)
        rounds_row.addWidget(self._uniform_btn)
        rounds_wrapper = QWidget()
        rounds_wrapper.setLayout(rounds_row)
        form.addRow("", rounds_wrapper)

        self._round_warn_spin = QSpinBox()
        self._round_warn_spin.setRange(0, 3599)
        self._round_warn_spin.setSuffix(" s")
        self._round_warn_spin.valueChanged.connect(self._on_warnings_changed)
        form.addRow("Round warning:", self._round_warn_spin)

        self._rest_warn_spin = QSpinBox()
        self._rest_warn_spin.setRange(0, 3599)
        self._rest_warn_spin.setSuffix(" s")
        self._rest_warn_spin.valueChanged.connect(self._on_warnings_changed)
        form.addRow("Rest warning:", self._rest_warn_spin)

        self._warning_error = QLabel("")
        self._warning_error.setObjectName("validationLabel")
        self._warning_error.setWordWrap(True)
        form.addRow("", self._warning_error)

        self._workout_form = QWidget()
        self._workout_form.setLayout(form)
        root.addWidget(self._workout_form)

        root.addWidget(self._separator())

        # ── Sounds section ───────────────────────────────────────────
        root.addWidget(self._section_label("Sounds"))
        snd_form = QFormLayout()
        snd_form.setContentsMargins(0, 0, 0, 0)
        snd_form.setHorizontalSpacing(20)
        snd_form.setVerticalSpacing(8)

        self._sound_cb = QCheckBox("Sound effects")
        self._sound_cb.toggled.connect(self._on_toggle_changed)
        snd_form.addRow("", self._sound_cb)

        self._sound_combos: dict[str, QComboBox] = {}
        for slot, label in SOUND_SLOTS:
            row = QHBoxLayout()
            combo = QComboBox()
            for name in SOUND_NAMES:
                combo.addItem(SOUND_LABELS[name], name)
            combo.currentIndexChanged.connect(self._on_sounds_changed)
            preview = QPushButton("▶")
            preview.setObjectName("secondaryButton")
            preview.setFixedWidth(44)
            preview.clicked.connect(lambda _=False, c=combo: self._preview(c.currentData()))
            row.addWidget(combo, 1)
            row.addWidget(preview)
            wrapper = QWidget()
            wrapper.setLayout(row)
            snd_form.addRow(label, wrapper)
            self._sound_combos[slot] = combo

        vol_row = QHBoxLayout()
        vol_row.setSpacing(10)
        self._vol_slider = QSlider(Qt.Orientation.Horizontal)
        self._vol_slider.setRange(0, 100)
        self._vol_slider.setTickInterval(10)
        self._vol_label = QLabel("70%")
        self._vol_label.setMinimumWidth(36)
        self._vol_slider.valueChanged.connect(self._on_volume_changed)
        self._vol_slider.sliderReleased.connect(
            lambda: self._preview(self._sound_combos["round_start"].currentData())
        )
        vol_row.addWidget(self._vol_slider)
        vol_row.addWidget(self._vol_label)
        vol_wrapper = QWidget()
        vol_wrapper.setLayout(vol_row)
        snd_form.addRow("Volume:", vol_wrapper)

        root.addLayout(snd_form)
        root.addWidget(self._separator())

        # ── Window section ───────────────────────────────────────────
        root.addWidget(self._section_label("Window"))
        win_form = QFormLayout()
        win_form.setContentsMargins(0, 0, 0, 0)

        self._notif_cb = QCheckBox("Show live status in the menu bar")
        self._notif_cb.toggled.connect(self._on_toggle_changed)
        win_form.addRow("", self._notif_cb)

        self._tray_cb = QCheckBox("Minimize to menu bar on close")
        self._tray_cb.toggled.connect(self._on_toggle_changed)
        win_form.addRow("", self._tray_cb)

        root.addLayout(win_form)

        # ── buttons ──────────────────────────────────────────────────
        root.addStretch()
        btn_row = QHBoxLayout()
        self._save_preset_btn = QPushButton("Save as Preset…")
        self._save_preset_btn.setObjectName("secondaryButton")
        self._save_preset_btn.clicked.connect(self._on_save_preset)
        btn_row.addWidget(self._save_preset_btn)
        btn_row.addStretch()
        close_btn = QPushButton("Close")
        close_btn.setObjectName("secondaryButton")
        close_btn.clicked.connect(self.accept)
        btn_row.addWidget(close_btn)
        root.addLayout(btn_row)

    # ── helpers ──────────────────────────────────────────────────────

    @staticmethod
    def _section_label(text: str) -> QLabel:
        lbl = QLabel(text)
        lbl.setStyleSheet("font-size: 15px; font-weight: 700; margin-top: 4px;")
        return lbl

    @staticmethod
    def _separator() -> QFrame:
        line = QFrame()
        line.setFrameShape(QFrame.Shape.HLine)
        line.setFixedHeight(1)
        line.setStyleSheet("background-color: rgba(255,255,255,0.08);")
        return line

    def _preview(self, name: str | None) -> None:
        if self._sound_preview and name:
            self._sound_preview(name)

    # ══════════════════════════════════════════════════════════════════
    #  POPULATE
    # ══════════════════════════════════════════════════════════════════

    def _populate(self) -> None:
        self._populating = True
        try:
            s = self._settings
            self._round_warn_spin.setValue(self._engine.round_warning_time)
            self._rest_warn_spin.setValue(self._engine.rest_warning_time)
            scheme = SoundScheme.from_dict(s.sounds)
            for slot, combo in self._sound_combos.items():
                combo.setCurrentIndex(combo.findData(getattr(scheme, slot)))
            self._sound_cb.setChecked(s.sound_enabled)
            self._vol_slider.setValue(s.sound_volume)
            self._vol_label.setText(f"{s.sound_volume}%")
            self._notif_cb.setChecked(s.notifications_enabled)
            self._tray_cb.setChecked(s.minimize_to_tray)
            self._show_plan(self._engine.plan)
        finally:
            self._populating = False

        locked = self._engine.state.is_running or self._engine.state.is_paused
        self._workout_form.setEnabled(not locked)
        self._save_preset_btn.setEnabled(not locked)
        self._locked_label.setVisible(locked)
        self._validate_warnings()

    def _show_plan(self, plan: RoundPlan) -> None:
        was_populating = self._populating
        self._populating = True
        try:
            uniform = isinstance(plan, UniformPlan)
            self._rounds_spin.setValue(max(1, plan.number_of_rounds))
            first = plan.configuration(1)
            if first is not None:
                set_duration_seconds(self._round_edit, first.round_duration)
                set_duration_seconds(self._rest_edit, first.rest_duration)
            self._round_edit.setEnabled(uniform)
            self._rest_edit.setEnabled(uniform)
            self._uniform_btn.setVisible(not uniform)
            mode = "uniform" if uniform else "individually configured"
            self._plan_summary.setText(
                f"{plan.number_of_rounds} rounds, {mode} · "
                f"total {format_total_time(plan.total_duration)}"
            )
        finally:
            self._populating = was_populating

    # ══════════════════════════════════════════════════════════════════
    #  CHANGE HANDLERS: apply and save immediately
    # ══════════════════════════════════════════════════════════════════

    def _apply_plan(self, plan: RoundPlan) -> None:
        self._engine.set_round_plan(plan)
        store_plan(self._settings, plan)
        self._save()
        self._show_plan(plan)
        self._validate_warnings()
        self.workout_changed.emit()

    def _on_round_count_changed(self, value: int) -> None:
        if self._populating:
            return
        self._apply_plan(self._engine.plan.with_round_count(value))

    def _on_durations_changed(self) -> None:
        if self._populating or not isinstance(self._engine.plan, UniformPlan):
            return
        self._apply_plan(UniformPlan(
            round_duration=duration_seconds(self._round_edit),
            rest_duration=duration_seconds(self._rest_edit),
            count=self._rounds_spin.value(),
        ))

    def _make_uniform(self) -> None:
        first = self._engine.plan.configuration(1)
        if first is None:
            plan = UniformPlan()
        else:
            plan = UniformPlan(
                first.round_duration, first.rest_duration,
                self._engine.plan.number_of_rounds,
            )
        self._apply_plan(plan)

    def _open_rounds_editor(self) -> None:
        from .rounds_editor import RoundsEditorDialog

        dialog = RoundsEditorDialog(
            self._engine.plan.to_individual(),
            self,
            round_warning_time=self._round_warn_spin.value(),
            rest_warning_time=self._rest_warn_spin.value(),
        )
        if dialog.exec() == QDialog.DialogCode.Accepted:
            plan: IndividualPlan = dialog.plan
            self._apply_plan(plan)

    def _validate_warnings(self) -> bool:
        try:
            check_warning_defaults(
                self._engine.plan,
                self._round_warn_spin.value(),
                self._rest_warn_spin.value(),
            )
        except InvalidWarningThreshold as exc:
            self._warning_error.setText(str(exc).capitalize() + ".")
            self._warning_error.setVisible(True)
            return False
        self._warning_error.setText("")
        self._warning_error.setVisible(False)
        return True

    def _on_warnings_changed(self) -> None:
        if self._populating:
            return
        if not self._validate_warnings():
            return
        round_w = self._round_warn_spin.value()
        rest_w = self._rest_warn_spin.value()
        self._engine.set_warning_defaults(round_w, rest_w)
        self._settings.round_warning_time = round_w
        self._settings.rest_warning_time = rest_w
        self._save()
        self.workout_changed.emit()

    def _on_sounds_changed(self) -> None:
        if self._populating:
            return
        scheme = self.sound_scheme
        self._settings.sounds = scheme.to_dict()
        self._save()
        self.sounds_changed.emit(scheme)

    def _on_toggle_changed(self) -> None:
        if self._populating:
            return
        self._settings.sound_enabled = self._sound_cb.isChecked()
        self._settings.notifications_enabled = self._notif_cb.isChecked()
        self._settings.minimize_to_tray = self._tray_cb.isChecked()
        self._save()

    def _on_volume_changed(self, value: int) -> None:
        self._vol_label.setText(f"{value}%")
        if self._populating:
            return
        self._settings.sound_volume = value
        self._save()

    def _on_save_preset(self) -> None:
        default = self._settings.current_preset_name or "My Workout"
        name, ok = QInputDialog.getText(self, "Save Preset", "Preset name:", text=default)
        name = name.strip()
        if ok and name:
            self.preset_save_requested.emit(name)

    def _save(self) -> None:
        save_settings(self._settings)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC
    # ══════════════════════════════════════════════════════════════════

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def sound_scheme(self) -> SoundScheme:
        return SoundScheme(**{
            slot: combo.currentData() for slot, combo in self._sound_combos.items()
        })

    @property
    def warning_error(self) -> str:
        return self._warning_error.text()
