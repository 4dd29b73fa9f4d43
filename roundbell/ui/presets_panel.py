"""Saved presets list: newest first, one row per preset.

Each row shows the name and a summary ("3 x 3:00 / 1:00") with Load,
Duplicate and Delete actions.  Loading emits ``preset_chosen`` and
leaves applying it to the engine to the main window.
"""

from __future__ import annotations

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QFrame, QPushButton,
    QSizePolicy,
)

from ..presets.preset import WorkoutPreset
from ..presets.store import PresetStore
from ..timer.plan import UniformPlan
from .styles import PALETTE
from .timer_widget import format_time, format_total_time


def _hex_to_rgba(hex_color: str, alpha: float) -> str:
    """Convert '#RRGGBB' to 'rgba(R, G, B, alpha)'."""
    h = hex_color.lstrip("#")
    r, g, b = int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)
    return f"rgba({r}, {g}, {b}, {alpha})"


def preset_summary(preset: WorkoutPreset) -> str:
    plan = preset.plan
    if isinstance(plan, UniformPlan):
        text = f"{plan.count} x {format_time(plan.round_duration)}"
        if plan.count > 1:
            text += f" / {format_time(plan.rest_duration)}"
    else:
        text = f"{plan.number_of_rounds} custom rounds"
    return f"{text} · {format_total_time(plan.total_duration)}"


class PresetsPanel(QWidget):
    """Lists saved presets and offers load / duplicate / delete."""

    preset_chosen = pyqtSignal(object)   # WorkoutPreset

    def __init__(self, store: PresetStore, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._store = store
        self._presets: list[WorkoutPreset] = []
        self._current_id = None
        self._build_ui()

    # ── build ─────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 8, 0, 0)
        layout.setSpacing(6)

        header = QLabel("PRESETS")
        header.setObjectName("sectionLabel")
        header.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(header)

        self._rows_container = QVBoxLayout()
        self._rows_container.setSpacing(4)
        layout.addLayout(self._rows_container)

        self._empty_label = QLabel("No presets yet. Save one from Settings.")
        self._empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._empty_label.setStyleSheet(f"font-size: 12px; color: {PALETTE['text_muted']};")
        layout.addWidget(self._empty_label)

        self._row_widgets: list[QWidget] = []

    # ── refresh ───────────────────────────────────────────────────────

    def refresh(self) -> None:
        """Reload presets from the database."""
        for w in self._row_widgets:
            w.setParent(None)
            w.deleteLater()
        self._row_widgets.clear()

        self._presets = self._store.list_presets()
        self._empty_label.setVisible(not self._presets)
        for preset in self._presets:
            row = self._make_row(preset)
            self._rows_container.addWidget(row)
            self._row_widgets.append(row)

    def set_current(self, preset_id) -> None:
        self._current_id = preset_id
        self.refresh()

    @property
    def presets(self) -> list[WorkoutPreset]:
        return list(self._presets)

    # ── row builder ───────────────────────────────────────────────────

    def _make_row(self, preset: WorkoutPreset) -> QWidget:
        is_current = preset.id == self._current_id
        accent = PALETTE["accent"]
        frame = QFrame(self)
        frame.setStyleSheet(
            f"QFrame {{ background: {_hex_to_rgba(accent, 0.10) if is_current else 'transparent'};"
            f"  border-radius: 6px; }}"
            f"QFrame:hover {{ background: {_hex_to_rgba(accent, 0.06)}; }}"
        )
        row = QHBoxLayout(frame)
        row.setContentsMargins(8, 4, 8, 4)
        row.setSpacing(8)

        text_col = QVBoxLayout()
        text_col.setSpacing(0)
        name_lbl = QLabel(preset.name)
        name_lbl.setStyleSheet(f"font-size: 13px; font-weight: 600; color: {PALETTE['text']};")
        summary_lbl = QLabel(preset_summary(preset))
        summary_lbl.setStyleSheet(f"font-size: 11px; color: {PALETTE['text_muted']};")
        text_col.addWidget(name_lbl)
        text_col.addWidget(summary_lbl)
        text_wrapper = QWidget(frame)
        text_wrapper.setLayout(text_col)
        text_wrapper.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Preferred)
        row.addWidget(text_wrapper)

        load_btn = QPushButton("Load", frame)
        load_btn.setObjectName("secondaryButton")
        load_btn.clicked.connect(lambda _=False, p=preset: self.preset_chosen.emit(p))
        dup_btn = QPushButton("Duplicate", frame)
        dup_btn.setObjectName("secondaryButton")
        dup_btn.clicked.connect(lambda _=False, p=preset: self.duplicate(p.id))
        del_btn = QPushButton("Delete", frame)
        del_btn.setObjectName("dangerButton")
        del_btn.clicked.connect(lambda _=False, p=preset: self.delete(p.id))
        for btn in (load_btn, dup_btn, del_btn):
            row.addWidget(btn)

        return frame

    # ── actions ───────────────────────────────────────────────────────

    def duplicate(self, preset_id) -> WorkoutPreset:
        copy = self._store.duplicate(preset_id)
        self.refresh()
        return copy

    def delete(self, preset_id) -> None:
        self._store.delete(preset_id)
        if preset_id == self._current_id:
            self._current_id = None
        self.refresh()
