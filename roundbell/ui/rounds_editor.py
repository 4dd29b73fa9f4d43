"""Editor for individually configured rounds.

Left: the list of rounds.  Right: durations and optional warning
overrides for the selected round.  Every edit goes through the
immutable ``IndividualPlan`` API, so identifiers survive reordering
and duplication.
"""

from __future__ import annotations

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QFormLayout,
    QLabel, QListWidget, QListWidgetItem, QPushButton,
    QCheckBox, QSpinBox, QWidget, QDialogButtonBox,
)

from ..timer.errors import TimerError
from ..timer.plan import IndividualPlan, RoundConfig
from .settings_dialog import duration_seconds, make_duration_edit, set_duration_seconds
from .timer_widget import format_time, format_total_time


def round_row_text(number: int, config: RoundConfig, is_last: bool) -> str:
    text = f"Round {number}   {format_time(config.round_duration)}"
    if not is_last:
        text += f"   rest {format_time(config.rest_duration)}"
    return text


class RoundsEditorDialog(QDialog):
    """Modal editor; read the result from :attr:`plan` after ``exec()``."""

    def __init__(
        self,
        plan: IndividualPlan,
        parent: QWidget | None = None,
        *,
        round_warning_time: int = 10,
        rest_warning_time: int = 10,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Individual Rounds")
        self.setMinimumSize(620, 420)
        self.setModal(True)

        self._plan = plan
        self._default_round_warning = round_warning_time
        self._default_rest_warning = rest_warning_time
        self._loading = False

        self._build_ui()
        self._reload(select=0)

    # ── build ─────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(20, 16, 20, 16)
        root.setSpacing(12)

        body = QHBoxLayout()
        body.setSpacing(16)

        # ── list + list actions ──────────────────────────────────────
        left = QVBoxLayout()
        self._list = QListWidget()
        self._list.currentRowChanged.connect(self._on_selection_changed)
        left.addWidget(self._list)

        actions = QHBoxLayout()
        self._add_btn = self._action_button("Add", self._on_add)
        self._dup_btn = self._action_button("Duplicate", self._on_duplicate)
        self._del_btn = self._action_button("Delete", self._on_delete)
        self._del_btn.setObjectName("dangerButton")
        self._up_btn = self._action_button("↑", self._on_move_up)
        self._down_btn = self._action_button("↓", self._on_move_down)
        for btn in (self._add_btn, self._dup_btn, self._del_btn, self._up_btn, self._down_btn):
            actions.addWidget(btn)
        left.addLayout(actions)
        body.addLayout(left, 3)

        # ── detail form ──────────────────────────────────────────────
        form = QFormLayout()
        form.setVerticalSpacing(10)

        self._round_edit = make_duration_edit()
        self._round_edit.timeChanged.connect(self._on_detail_changed)
        form.addRow("Round:", self._round_edit)

        self._rest_edit = make_duration_edit(minimum=0)
        self._rest_edit.timeChanged.connect(self._on_detail_changed)
        form.addRow("Rest:", self._rest_edit)

        self._round_warn_cb = QCheckBox("Custom round warning")
        self._round_warn_cb.toggled.connect(self._on_detail_changed)
        self._round_warn_spin = QSpinBox()
        self._round_warn_spin.setRange(0, 3599)
        self._round_warn_spin.setSuffix(" s")
        self._round_warn_spin.valueChanged.connect(self._on_detail_changed)
        form.addRow(self._round_warn_cb)
        form.addRow("", self._round_warn_spin)

        self._rest_warn_cb = QCheckBox("Custom rest warning")
        self._rest_warn_cb.toggled.connect(self._on_detail_changed)
        self._rest_warn_spin = QSpinBox()
        self._rest_warn_spin.setRange(0, 3599)
        self._rest_warn_spin.setSuffix(" s")
        self._rest_warn_spin.valueChanged.connect(self._on_detail_changed)
        form.addRow(self._rest_warn_cb)
        form.addRow("", self._rest_warn_spin)

        self._detail = QWidget()
        self._detail.setLayout(form)
        body.addWidget(self._detail, 2)
        root.addLayout(body)

        # ── footer ───────────────────────────────────────────────────
        self._total_label = QLabel("")
        self._total_label.setObjectName("totalTimeLabel")
        root.addWidget(self._total_label)

        self._error_label = QLabel("")
        self._error_label.setObjectName("validationLabel")
        self._error_label.setWordWrap(True)
        root.addWidget(self._error_label)

        self._buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        self._buttons.accepted.connect(self.accept)
        self._buttons.rejected.connect(self.reject)
        root.addWidget(self._buttons)

    def _action_button(self, text: str, slot) -> QPushButton:
        btn = QPushButton(text)
        btn.setObjectName("secondaryButton")
        btn.clicked.connect(slot)
        return btn

    # ── state sync ────────────────────────────────────────────────────

    def _reload(self, select: int | None = None) -> None:
        """Rebuild the list from the plan and refresh every control."""
        rounds = self._plan.rounds
        if select is None:
            select = self._list.currentRow()
        self._loading = True
        try:
            self._list.clear()
            for i, config in enumerate(rounds):
                item = QListWidgetItem(round_row_text(i + 1, config, i == len(rounds) - 1))
                item.setData(Qt.ItemDataRole.UserRole, str(config.id))
                self._list.addItem(item)
            if rounds:
                self._list.setCurrentRow(max(0, min(select, len(rounds) - 1)))
        finally:
            self._loading = False
        self._load_detail()
        self._refresh_footer()

    def _selected_index(self) -> int | None:
        row = self._list.currentRow()
        if 0 <= row < self._plan.number_of_rounds:
            return row
        return None

    def _load_detail(self) -> None:
        index = self._selected_index()
        has_selection = index is not None
        self._detail.setEnabled(has_selection)
        for btn in (self._dup_btn, self._del_btn):
            btn.setEnabled(has_selection)
        self._up_btn.setEnabled(has_selection and index > 0)
        self._down_btn.setEnabled(
            has_selection and index < self._plan.number_of_rounds - 1
        )
        if not has_selection:
            return

        config = self._plan.rounds[index]
        self._loading = True
        try:
            set_duration_seconds(self._round_edit, config.round_duration)
            set_duration_seconds(self._rest_edit, config.rest_duration)
            self._round_warn_cb.setChecked(config.round_warning_time is not None)
            self._round_warn_spin.setValue(
                config.round_warning_time
                if config.round_warning_time is not None
                else self._default_round_warning
            )
            self._rest_warn_cb.setChecked(config.rest_warning_time is not None)
            self._rest_warn_spin.setValue(
                config.rest_warning_time
                if config.rest_warning_time is not None
                else self._default_rest_warning
            )
            self._round_warn_spin.setEnabled(self._round_warn_cb.isChecked())
            self._rest_warn_spin.setEnabled(self._rest_warn_cb.isChecked())
        finally:
            self._loading = False

    def _refresh_footer(self) -> None:
        self._total_label.setText(
            f"{self._plan.number_of_rounds} rounds · "
            f"total {format_total_time(self._plan.total_duration)}"
        )
        try:
            self._plan.validate()
        except TimerError as exc:
            message = str(exc)
            valid = False
        else:
            message = ""
            valid = True
        self._error_label.setText(message[:1].upper() + message[1:])
        self._error_label.setVisible(not valid)
        self._buttons.button(QDialogButtonBox.StandardButton.Ok).setEnabled(valid)

    # ── slots ─────────────────────────────────────────────────────────

    def _on_selection_changed(self, _row: int) -> None:
        if not self._loading:
            self._load_detail()

    def _on_detail_changed(self) -> None:
        if self._loading:
            return
        index = self._selected_index()
        if index is None:
            return
        self._round_warn_spin.setEnabled(self._round_warn_cb.isChecked())
        self._rest_warn_spin.setEnabled(self._rest_warn_cb.isChecked())
        config = self._plan.rounds[index].with_values(
            round_duration=duration_seconds(self._round_edit),
            rest_duration=duration_seconds(self._rest_edit),
            round_warning_time=(
                self._round_warn_spin.value() if self._round_warn_cb.isChecked() else None
            ),
            rest_warning_time=(
                self._rest_warn_spin.value() if self._rest_warn_cb.isChecked() else None
            ),
        )
        self._plan = self._plan.with_round_replaced(config)
        item = self._list.item(index)
        item.setText(round_row_text(index + 1, config, index == self._plan.number_of_rounds - 1))
        self._refresh_footer()

    def _on_add(self) -> None:
        self._plan = self._plan.with_round_appended()
        self._reload(select=self._plan.number_of_rounds - 1)

    def _on_duplicate(self) -> None:
        index = self._selected_index()
        if index is not None:
            self._plan = self._plan.with_duplicated_round(index)
            self._reload(select=index + 1)

    def _on_delete(self) -> None:
        index = self._selected_index()
        if index is not None:
            self._plan = self._plan.with_round_removed(index)
            self._reload(select=index)

    def _on_move_up(self) -> None:
        index = self._selected_index()
        if index is not None and index > 0:
            self._plan = self._plan.with_rounds_reordered(index, index - 1)
            self._reload(select=index - 1)

    def _on_move_down(self) -> None:
        index = self._selected_index()
        if index is not None and index < self._plan.number_of_rounds - 1:
            self._plan = self._plan.with_rounds_reordered(index, index + 1)
            self._reload(select=index + 1)

    # ── public ────────────────────────────────────────────────────────

    @property
    def plan(self) -> IndividualPlan:
        return self._plan

    def select_row(self, row: int) -> None:
        self._list.setCurrentRow(row)

    def round_labels(self) -> list[str]:
        return [self._list.item(i).text() for i in range(self._list.count())]

    @property
    def error_text(self) -> str:
        return self._error_label.text()
