"""Main application window for RoundBell."""

from __future__ import annotations

import logging
import uuid
from pathlib import Path

from PyQt6.QtCore import Qt, QPointF, QTimer
from PyQt6.QtGui import (
    QAction, QColor, QIcon, QImage, QKeySequence, QPainter, QPainterPath,
    QPen, QPixmap, QPolygonF,
)
from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QStatusBar, QMessageBox,
    QSystemTrayIcon, QMenu, QScrollArea, QApplication,
)

from .audio.sounds import SoundManager, SoundScheme, SoundSink
from .presets.preset import WorkoutPreset
from .presets.store import PresetStore
from .settings import Settings, load_settings, plan_from_settings, save_settings, store_plan
from .timer.engine import TimerEngine
from .timer.errors import TimerError
from .timer.events import (
    Paused, PhaseWarning, Reset, RestStarted, Resumed, RoundStarted,
    TimerEvent, WorkoutCompleted,
)
from .timer.state import LiveStatus, TimerState
from .ui.presets_panel import PresetsPanel
from .ui.styles import build_stylesheet
from .ui.timer_widget import TimerWidget, button_text, format_time


logger = logging.getLogger(__name__)


# ── tray‑icon image generation ────────────────────────────────────────────


def _bell_path(cx: float, top: float, width: float, height: float) -> QPainterPath:
    """Outline of a boxing-ring bell: a dome flaring out to a flat rim."""
    half = width / 2
    rim = top + height
    path = QPainterPath()
    path.moveTo(cx - half, rim)
    path.cubicTo(cx - half * 0.7, rim - height * 0.35,
                 cx - half * 0.75, top, cx, top)
    path.cubicTo(cx + half * 0.75, top,
                 cx + half * 0.7, rim - height * 0.35, cx + half, rim)
    path.closeSubpath()
    return path


def _make_tray_icon(status: LiveStatus) -> QIcon:
    """Generate a monochrome template icon for the macOS menu bar.

    A bell, solid while a round runs and outlined otherwise.  A rest
    hangs the clapper below it, paused shows two bars instead, and a
    finished workout gets a check mark inside.
    """
    size = 64
    img = QImage(size, size, QImage.Format.Format_ARGB32_Premultiplied)
    img.fill(Qt.GlobalColor.transparent)
    painter = QPainter(img)
    painter.setRenderHint(QPainter.RenderHint.Antialiasing)
    ink = QColor(0, 0, 0, 220)  # template image, tinted by macOS

    if status.is_paused:
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(ink)
        for x in (size // 2 - 14, size // 2 + 6):
            painter.drawRoundedRect(x, 18, 8, 28, 3, 3)
    else:
        bell = _bell_path(size / 2, 8, 48, 40)
        if status.phase == "round":
            painter.setPen(Qt.PenStyle.NoPen)
            painter.setBrush(ink)
        else:
            painter.setPen(QPen(ink, 4))
            painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawPath(bell)
        if status.phase == "rest":
            painter.setPen(Qt.PenStyle.NoPen)
            painter.setBrush(ink)
            painter.drawEllipse(size // 2 - 5, 50, 10, 10)
        elif status.phase == "finished":
            painter.drawPolyline(QPolygonF([
                QPointF(22, 32), QPointF(29, 40), QPointF(42, 24),
            ]))

    painter.end()
    img.setDevicePixelRatio(2.0)
    return QIcon(QPixmap.fromImage(img))


def live_status_text(status: LiveStatus) -> str:
    """One-line summary for the tray tooltip."""
    prefix = f"{status.workout_name}: " if status.workout_name else ""
    if status.phase == "idle":
        return f"{prefix}Ready · {status.number_of_rounds} rounds"
    if status.phase == "finished":
        return f"{prefix}Workout complete"
    if status.phase == "round":
        label = f"Round {status.current_round}/{status.number_of_rounds}"
    else:
        label = f"Rest after round {status.current_round}"
    text = f"{prefix}{label} · {format_time(status.time_remaining)}"
    if status.is_paused:
        text += " (paused)"
    return text


EVENT_MESSAGES = {
    RoundStarted: lambda e: f"Round {e.round_number}. Fight!",
    RestStarted: lambda e: f"Rest after round {e.after_round}",
    WorkoutCompleted: lambda e: "Workout complete. Great work!",
    Paused: lambda e: "Paused",
    Resumed: lambda e: "Resumed",
    Reset: lambda e: "Timer reset",
    PhaseWarning: lambda e: f"{e.kind.value.capitalize()} ending soon",
}


class RoundBellApp(QMainWindow):
    """Main application window."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle("RoundBell")
        self.setMinimumSize(420, 620)

        self._geometry_save_timer = QTimer(self)
        self._geometry_save_timer.setSingleShot(True)
        self._geometry_save_timer.setInterval(500)
        self._geometry_save_timer.timeout.connect(self._save_geometry)

        # ── settings ──────────────────────────────────────────────────
        self._settings: Settings = settings if settings is not None else load_settings()

        # ── sound ─────────────────────────────────────────────────────
        self._sound_manager = SoundManager(parent=self, sounds_dir=sounds_dir)
        self._sound_manager.set_volume(self._settings.sound_volume)
        self._sound_manager.set_enabled(self._settings.sound_enabled)
        self._sound_sink = SoundSink(
            self._sound_manager, SoundScheme.from_dict(self._settings.sounds),
        )

        # ── engine ────────────────────────────────────────────────────
        self._engine = TimerEngine(
            self,
            plan=plan_from_settings(self._settings),
            sinks=[self._sound_sink],
            round_warning_time=self._settings.round_warning_time,
            rest_warning_time=self._settings.rest_warning_time,
        )

        # ── presets ───────────────────────────────────────────────────
        self._store = PresetStore()

        self.setStyleSheet(build_stylesheet())

        # ── central widget ────────────────────────────────────────────
        central = QWidget()
        self.setCentralWidget(central)
        root_layout = QVBoxLayout(central)
        root_layout.setContentsMargins(16, 12, 16, 12)
        root_layout.setSpacing(8)

        self._timer_widget = TimerWidget(self._engine, central)
        self._timer_widget.set_workout_name(self._settings.current_preset_name)
        root_layout.addWidget(self._timer_widget)

        self._presets_panel = PresetsPanel(self._store)
        self._presets_panel.preset_chosen.connect(self.load_preset)
        scroll = QScrollArea(central)
        scroll.setWidgetResizable(True)
        scroll.setWidget(self._presets_panel)
        root_layout.addWidget(scroll, 1)
        self._presets_panel.set_current(self._current_preset_id())

        self._status_bar = QStatusBar(self)
        self.setStatusBar(self._status_bar)
        self._status_bar.showMessage("Ready")

        # ── system tray icon ──────────────────────────────────────────
        self._tray_icon = QSystemTrayIcon(self)
        self._tray_icon.activated.connect(self._on_tray_activated)
        self._build_tray_menu()
        self._update_tray()
        self._tray_icon.show()

        # ── native menu bar ────────────────────────────────────────────
        self._build_menu_bar()

        # ── wire signals ──────────────────────────────────────────────
        self._engine.state_changed.connect(self._on_state_changed)
        self._engine.remaining_changed.connect(self._on_remaining_changed)
        self._engine.event_emitted.connect(self._on_event)

        # ── restore window state ───────────────────────────────────────
        self._restore_geometry()
        if self._settings.always_on_top:
            self._apply_always_on_top(True)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC
    # ══════════════════════════════════════════════════════════════════

    @property
    def engine(self) -> TimerEngine:
        return self._engine

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def timer_widget(self) -> TimerWidget:
        return self._timer_widget

    @property
    def presets_panel(self) -> PresetsPanel:
        return self._presets_panel

    @property
    def sound_sink(self) -> SoundSink:
        return self._sound_sink

    @property
    def tray_tooltip(self) -> str:
        return self._tray_icon.toolTip()

    def live_status(self) -> LiveStatus:
        return self._engine.live_status(self._settings.current_preset_name)

    def load_preset(self, preset: WorkoutPreset) -> bool:
        """Apply *preset* to the engine.  Refused mid-workout."""
        state = self._engine.state
        if state.is_running or state.is_paused:
            self._status_bar.showMessage("Reset the timer to load a preset")
            return False

        try:
            preset.apply_to(self._engine)
        except TimerError as exc:
            logger.warning("Cannot load preset %r: %s", preset.name, exc)
            self._status_bar.showMessage(f"Cannot load {preset.name}: {exc}")
            return False
        self._sound_sink.scheme = preset.sounds

        s = self._settings
        store_plan(s, preset.plan)
        s.round_warning_time = preset.round_warning_time
        s.rest_warning_time = preset.rest_warning_time
        s.sounds = preset.sounds.to_dict()
        s.current_preset_name = preset.name
        s.current_preset_id = str(preset.id)
        save_settings(s)

        self._after_workout_changed()
        self._presets_panel.set_current(preset.id)
        self._status_bar.showMessage(f"Loaded {preset.name}")
        logger.info("Loaded preset %r", preset.name)
        return True

    def save_current_as_preset(self, name: str) -> WorkoutPreset:
        preset = self._store.save_from_engine(name, self._engine, self._sound_sink.scheme)
        self._settings.current_preset_name = preset.name
        self._settings.current_preset_id = str(preset.id)
        save_settings(self._settings)
        self._timer_widget.set_workout_name(preset.name)
        self._presets_panel.set_current(preset.id)
        self._update_tray()
        self._status_bar.showMessage(f"Saved {preset.name}")
        return preset

    def _current_preset_id(self) -> uuid.UUID | None:
        raw = self._settings.current_preset_id
        if not raw:
            return None
        try:
            return uuid.UUID(raw)
        except ValueError:
            return None

    def _after_workout_changed(self) -> None:
        self._timer_widget.set_workout_name(self._settings.current_preset_name)
        self._timer_widget.refresh()
        self._update_tray()

    # ══════════════════════════════════════════════════════════════════
    #  SYSTEM TRAY
    # ══════════════════════════════════════════════════════════════════

    def _add_action(
        self,
        menu: QMenu,
        text: str,
        slot,
        shortcut: str | None = None,
        role: QAction.MenuRole | None = None,
    ) -> QAction:
        action = QAction(text, self)
        if shortcut:
            action.setShortcut(QKeySequence(shortcut))
        if role is not None:
            action.setMenuRole(role)
        action.triggered.connect(slot)
        menu.addAction(action)
        return action

    def _build_tray_menu(self) -> None:
        """Start/Reset, show the window, and quit from the tray."""
        menu = QMenu(self)
        self._tray_start_action = self._add_action(menu, "Start", self._on_space)
        self._tray_reset_action = self._add_action(menu, "Reset", self._engine.reset)
        menu.addSeparator()
        self._add_action(menu, "Show RoundBell", self._show_window)
        menu.addSeparator()
        self._add_action(menu, "Quit", self._quit_with_confirm)
        self._tray_icon.setContextMenu(menu)

    def _on_tray_activated(self, reason: QSystemTrayIcon.ActivationReason) -> None:
        if reason == QSystemTrayIcon.ActivationReason.Trigger:
            self._show_window()

    def _show_window(self) -> None:
        self.show()
        self.raise_()
        self.activateWindow()

    def _quit_app(self) -> None:
        self._tray_icon.hide()
        QApplication.instance().quit()

    def _update_tray(self) -> None:
        """Mirror the live status into the tray icon, tooltip and menu."""
        status = self.live_status()
        self._tray_icon.setIcon(_make_tray_icon(status))
        if self._settings.notifications_enabled:
            self._tray_icon.setToolTip(live_status_text(status))
        else:
            self._tray_icon.setToolTip("RoundBell")
        self._tray_start_action.setText(button_text(self._engine))
        self._tray_start_action.setEnabled(
            self._engine.is_running or self._engine.can_start
        )
        self._tray_reset_action.setEnabled(not self._engine.state.is_idle)

    # ══════════════════════════════════════════════════════════════════
    #  NATIVE MENU BAR
    # ══════════════════════════════════════════════════════════════════

    def _build_menu_bar(self) -> None:
        bar = self.menuBar()
        Role = QAction.MenuRole

        app_menu = bar.addMenu("RoundBell")
        self._add_action(app_menu, "About RoundBell", self._show_about, role=Role.AboutRole)
        self._add_action(app_menu, "Preferences…", self._open_settings,
                         "Ctrl+,", Role.PreferencesRole)
        self._add_action(app_menu, "Quit RoundBell", self._quit_with_confirm,
                         "Ctrl+Q", Role.QuitRole)

        timer_menu = bar.addMenu("Timer")
        self._add_action(timer_menu, "Start / Pause", self._on_space)
        self._add_action(timer_menu, "Reset", self._on_escape, "Ctrl+R")
        timer_menu.addSeparator()
        self._add_action(timer_menu, "Save as Preset…", self._prompt_save_preset, "Ctrl+S")

        view_menu = bar.addMenu("View")
        self._aot_action = self._add_action(
            view_menu, "Always on Top", self._toggle_always_on_top,
        )
        self._aot_action.setCheckable(True)
        self._aot_action.setChecked(self._settings.always_on_top)

        window_menu = bar.addMenu("Window")
        self._add_action(window_menu, "Minimize", self.showMinimized, "Ctrl+M")
        self._add_action(window_menu, "Close Window", self.close, "Ctrl+W")

    def _show_about(self) -> None:
        QMessageBox.about(
            self,
            "About RoundBell",
            "<h3>RoundBell</h3>"
            "<p>A round and rest interval timer for boxing workouts.</p>"
            "<p>Built with PyQt6.</p>",
        )

    # ══════════════════════════════════════════════════════════════════
    #  TIMER SIGNALS
    # ══════════════════════════════════════════════════════════════════

    def _on_state_changed(self, state: TimerState) -> None:
        self._update_tray()

    def _on_remaining_changed(self, remaining: int) -> None:
        self._update_tray()

    def _on_event(self, event: TimerEvent) -> None:
        message = EVENT_MESSAGES.get(type(event))
        if message is not None:
            self._status_bar.showMessage(message(event))
        if (
            isinstance(event, WorkoutCompleted)
            and self._settings.notifications_enabled
            and not self.isActiveWindow()
        ):
            self._tray_icon.showMessage("RoundBell", "Workout complete. Great work!")

    # ══════════════════════════════════════════════════════════════════
    #  SETTINGS
    # ══════════════════════════════════════════════════════════════════

    def _open_settings(self) -> None:
        """Open the settings dialog; it applies its changes live."""
        from .ui.settings_dialog import SettingsDialog

        def _preview(name: str) -> None:
            self._apply_settings()
            self._sound_manager.play(name)

        dlg = SettingsDialog(
            self._settings,
            self._engine,
            parent=self,
            sound_preview_callback=_preview,
        )
        dlg.workout_changed.connect(self._on_workout_edited)
        dlg.sounds_changed.connect(self._on_sounds_edited)
        dlg.preset_save_requested.connect(self.save_current_as_preset)
        dlg.exec()

        self._apply_settings()

    def _on_workout_edited(self) -> None:
        # A hand-edited workout no longer matches the loaded preset
        self._settings.current_preset_name = ""
        self._settings.current_preset_id = None
        save_settings(self._settings)
        self._presets_panel.set_current(None)
        self._after_workout_changed()

    def _on_sounds_edited(self, scheme: SoundScheme) -> None:
        self._sound_sink.scheme = scheme

    def _apply_settings(self) -> None:
        s = self._settings
        self._sound_manager.set_volume(s.sound_volume)
        self._sound_manager.set_enabled(s.sound_enabled)
        self._update_tray()

    def _prompt_save_preset(self) -> None:
        from PyQt6.QtWidgets import QInputDialog

        state = self._engine.state
        if state.is_running or state.is_paused:
            self._status_bar.showMessage("Reset the timer to save a preset")
            return
        default = self._settings.current_preset_name or "My Workout"
        name, ok = QInputDialog.getText(self, "Save Preset", "Preset name:", text=default)
        name = name.strip()
        if ok and name:
            self.save_current_as_preset(name)

    # ══════════════════════════════════════════════════════════════════
    #  WINDOW STATE
    # ══════════════════════════════════════════════════════════════════

    def _restore_geometry(self) -> None:
        s = self._settings
        if None not in (s.window_x, s.window_y):
            self.move(s.window_x, s.window_y)
        if s.window_width and s.window_height:
            self.resize(s.window_width, s.window_height)

    def _save_geometry(self) -> None:
        if not self.isVisible():
            return
        s = self._settings
        s.window_x, s.window_y = self.x(), self.y()
        s.window_width, s.window_height = self.width(), self.height()
        save_settings(s)

    def _schedule_geometry_save(self) -> None:
        """Save 500 ms after the last move or resize."""
        if hasattr(self, "_geometry_save_timer"):
            self._geometry_save_timer.start()

    def _toggle_always_on_top(self) -> None:
        on_top = not self._settings.always_on_top
        self._settings.always_on_top = on_top
        save_settings(self._settings)
        self._aot_action.setChecked(on_top)
        self._apply_always_on_top(on_top)

    def _apply_always_on_top(self, on_top: bool) -> None:
        self.setWindowFlag(Qt.WindowType.WindowStaysOnTopHint, on_top)
        self.show()  # changing window flags hides the window

    def _quit_with_confirm(self) -> None:
        """Quit, but ask first if a workout is in progress."""
        state = self._engine.state
        if state.is_running or state.is_paused:
            reply = QMessageBox.question(
                self,
                "Quit RoundBell?",
                "A workout is in progress. Quit anyway?",
                QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
                QMessageBox.StandardButton.No,
            )
            if reply != QMessageBox.StandardButton.Yes:
                return
        self._save_geometry()
        self._quit_app()

    # ══════════════════════════════════════════════════════════════════
    #  KEYBOARD SHORTCUTS
    # ══════════════════════════════════════════════════════════════════

    def _on_space(self) -> None:
        """Start, pause, or resume the timer."""
        try:
            self._engine.toggle()
        except TimerError as exc:
            logger.warning("Cannot start workout: %s", exc)
            self._status_bar.showMessage(f"Cannot start: {exc}")

    def _on_escape(self) -> None:
        """Reset the timer (no-op when idle)."""
        if not self._engine.state.is_idle:
            self._engine.reset()

    # ══════════════════════════════════════════════════════════════════
    #  WINDOW EVENTS
    # ══════════════════════════════════════════════════════════════════

    def closeEvent(self, event) -> None:  # type: ignore[override]
        """Minimize to tray instead of quitting (if enabled)."""
        self._save_geometry()
        if self._settings.minimize_to_tray and self._tray_icon.isVisible():
            event.ignore()
            self.hide()
        else:
            self._tray_icon.hide()
            event.accept()

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._schedule_geometry_save()

    def moveEvent(self, event) -> None:  # type: ignore[override]
        super().moveEvent(event)
        self._schedule_geometry_save()

    def keyPressEvent(self, event) -> None:  # type: ignore[override]
        """Space starts or pauses the workout, Escape resets it."""
        handler = {
            Qt.Key.Key_Space: self._on_space,
            Qt.Key.Key_Escape: self._on_escape,
        }.get(event.key())
        if handler is None or (
            event.key() == Qt.Key.Key_Space and event.modifiers()
        ):
            super().keyPressEvent(event)
            return
        handler()
        event.accept()
