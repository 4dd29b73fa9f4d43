"""Tests for the widgets and the main window.

Covers:
- Time formatting and headline helpers
- TimerWidget buttons, round dots and total time
- RoundsEditorDialog list edits and validation
- SettingsDialog live apply, warning validation and locking
- PresetsPanel rows and actions
- RoundBellApp keyboard handlers, preset loading and tray status
"""

from __future__ import annotations

import pytest
from PyQt6.QtWidgets import QDialogButtonBox, QPushButton

from roundbell.audio.sounds import SoundScheme
from roundbell.database.db import DEFAULT_PRESET_NAME
from roundbell.presets import PresetStore, WorkoutPreset
from roundbell.settings import Settings, load_settings
from roundbell.timer.engine import TimerEngine
from roundbell.timer.plan import IndividualPlan, RoundConfig, UniformPlan
from roundbell.timer.state import LiveStatus
from roundbell.ui.presets_panel import PresetsPanel, preset_summary
from roundbell.ui.progress_ring import PULSE_STEPS, ProgressRing
from roundbell.ui.rounds_editor import RoundsEditorDialog, round_row_text
from roundbell.ui.settings_dialog import SettingsDialog, set_duration_seconds
from roundbell.ui.styles import PALETTE, build_stylesheet, display_key
from roundbell.ui.timer_widget import (
    MAX_ROUND_DOTS,
    TimerWidget,
    button_text,
    format_time,
    format_total_time,
    round_text,
    status_text,
)

from helpers import SignalCollector, finish_phase, run_ticks, run_to_completion


# ═══════════════════════════════════════════════════════════════════════
#  FORMATTING
# ═══════════════════════════════════════════════════════════════════════


class TestFormatting:

    @pytest.mark.parametrize("seconds, expected", [
        (0, "00:00"), (5, "00:05"), (180, "03:00"), (3599, "59:59"), (3600, "60:00"), (-3, "00:00"),
    ])
    def test_format_time(self, seconds, expected):
        assert format_time(seconds) == expected

    @pytest.mark.parametrize("seconds, expected", [
        (0, "0:00"), (660, "11:00"), (3600, "1:00:00"), (3725, "1:02:05"),
    ])
    def test_format_total_time(self, seconds, expected):
        assert format_total_time(seconds) == expected

    def test_round_row_text(self):
        rnd = RoundConfig(180, 60)
        assert round_row_text(1, rnd, False) == "Round 1   03:00   rest 01:00"
        assert round_row_text(3, rnd, True) == "Round 3   03:00"


@pytest.mark.usefixtures("qapp")
class TestHeadlines:

    def test_idle(self, short_engine):
        assert status_text(short_engine) == "READY"
        assert round_text(short_engine) == "Round 1 of 3"
        assert button_text(short_engine) == "Start"
        assert display_key(short_engine) == "idle"

    def test_round_and_rest(self, short_engine):
        short_engine.start()
        assert status_text(short_engine) == "ROUND 1"
        assert button_text(short_engine) == "Pause"
        assert display_key(short_engine) == "round"
        finish_phase(short_engine)
        assert status_text(short_engine) == "REST"
        assert display_key(short_engine) == "rest"

    def test_warning_key(self, short_engine):
        short_engine.start()
        run_ticks(short_engine, 3)
        assert display_key(short_engine) == "warning"

    def test_paused_keeps_phase_label(self, short_engine):
        short_engine.start()
        finish_phase(short_engine)
        finish_phase(short_engine)
        short_engine.pause()
        assert status_text(short_engine) == "ROUND 2"
        assert button_text(short_engine) == "Resume"
        assert display_key(short_engine) == "paused"

    def test_finished(self, short_engine):
        short_engine.start()
        run_to_completion(short_engine)
        assert status_text(short_engine) == "WORKOUT COMPLETE"
        assert button_text(short_engine) == "Restart"
        assert round_text(short_engine) == "Round 3 of 3"
        assert display_key(short_engine) == "finished"

    def test_no_rounds(self, qapp):
        engine = TimerEngine(parent=None, plan=IndividualPlan([]))
        assert round_text(engine) == "No rounds"


# ═══════════════════════════════════════════════════════════════════════
#  TIMER WIDGET
# ═══════════════════════════════════════════════════════════════════════


@pytest.mark.usefixtures("qapp")
class TestTimerWidget:

    def test_idle_shows_first_round(self, engine):
        widget = TimerWidget(engine)
        assert widget.ring.time_text == "03:00"
        assert widget.ring.status_text == "READY"
        assert widget.start_pause_button.text() == "Start"
        assert widget.reset_button.isHidden()
        assert widget.total_time_text == "Total 11:00"

    def test_start_button_runs_engine(self, engine):
        widget = TimerWidget(engine)
        widget.start_pause_button.click()
        assert engine.state.is_running
        assert widget.start_pause_button.text() == "Pause"
        assert not widget.reset_button.isHidden()

    def test_pause_and_resume_via_button(self, engine):
        widget = TimerWidget(engine)
        widget.start_pause_button.click()
        widget.start_pause_button.click()
        assert engine.state.is_paused
        assert widget.start_pause_button.text() == "Resume"

    def test_reset_button(self, engine):
        widget = TimerWidget(engine)
        engine.start()
        widget.reset_button.click()
        assert engine.state.is_idle
        assert widget.ring.time_text == "03:00"

    def test_ticks_update_clock_and_total(self, short_engine):
        widget = TimerWidget(short_engine)
        short_engine.start()
        run_ticks(short_engine, 2)
        assert widget.ring.time_text == "00:03"
        assert widget.total_time_text == "Total 0:19"
        assert widget.ring.display_key == "round"

    def test_round_dots_fill(self, short_engine):
        widget = TimerWidget(short_engine)
        assert widget.filled_dot_count() == 0
        short_engine.start()
        finish_phase(short_engine)
        assert widget.filled_dot_count() == 1
        run_to_completion(short_engine)
        assert widget.filled_dot_count() == 3
        assert widget.start_pause_button.text() == "Restart"

    def test_dots_follow_plan_changes(self, engine):
        widget = TimerWidget(engine)
        engine.set_round_plan(UniformPlan(60, 30, 5))
        widget.refresh()
        assert widget.ring.round_text == "Round 1 of 5"
        assert widget.total_time_text == "Total 7:00"

    def test_too_many_rounds_hide_dots(self, qapp):
        engine = TimerEngine(parent=None, plan=UniformPlan(60, 30, MAX_ROUND_DOTS + 1))
        widget = TimerWidget(engine)
        engine.start()
        finish_phase(engine)
        assert widget.filled_dot_count() == 0

    def test_empty_plan_disables_start(self, qapp):
        widget = TimerWidget(TimerEngine(parent=None, plan=IndividualPlan([])))
        assert widget.start_pause_button.isEnabled() is False

    def test_invalid_plan_reports_instead_of_starting(self, qapp):
        engine = TimerEngine(parent=None, plan=IndividualPlan([RoundConfig(60, 0), RoundConfig(60, 0)]))
        widget = TimerWidget(engine)
        widget.start_pause_button.click()
        assert engine.state.is_idle
        assert widget.ring.status_text == "CHECK ROUNDS"

    def test_workout_name(self, engine):
        widget = TimerWidget(engine)
        widget.set_workout_name("Heavy Bag")
        assert widget._name_label.text() == "HEAVY BAG"

    def test_phase_starts_strike_the_ring(self, short_engine):
        widget = TimerWidget(short_engine)
        short_engine.start()
        assert widget.ring.ripple_count == 1
        finish_phase(short_engine)
        assert widget.ring.ripple_count == 2

    def test_workout_end_strikes_three_times(self, short_engine):
        widget = TimerWidget(short_engine)
        short_engine.start()
        run_to_completion(short_engine)
        assert widget.ring.ripple_count >= 3


# ═══════════════════════════════════════════════════════════════════════
#  PROGRESS RING AND STYLESHEET
# ═══════════════════════════════════════════════════════════════════════


@pytest.mark.usefixtures("qapp")
class TestProgressRing:

    def test_idle_pulses_slowly(self):
        ring = ProgressRing()
        assert ring._pulse_timer.isActive()
        assert ring._pulse_step == PULSE_STEPS["idle"]

    def test_warning_flashes_faster(self):
        ring = ProgressRing()
        ring.apply_state("warning")
        assert ring._pulse_timer.isActive()
        assert ring._pulse_step > PULSE_STEPS["idle"]

    def test_running_round_stops_pulse(self):
        ring = ProgressRing()
        ring.apply_state("round")
        assert not ring._pulse_timer.isActive()
        assert ring._pulse_phase == 0.0

    def test_strike_sends_ripples(self):
        ring = ProgressRing()
        ring.strike(3)
        assert ring.ripple_count == 3
        assert ring._ripple_timer.isActive()

    def test_ripples_fade_out(self):
        ring = ProgressRing()
        ring.strike()
        for _ in range(200):
            ring._on_ripple_tick()
        assert ring.ripple_count == 0
        assert not ring._ripple_timer.isActive()

    def test_colour_change_does_not_strike(self):
        ring = ProgressRing()
        ring.apply_state("finished")
        assert ring.ripple_count == 0

    def test_percent_drops_without_animation(self):
        ring = ProgressRing()
        ring.set_percent(0.8)
        ring.set_percent(0.1)
        assert ring.percent == pytest.approx(0.1)
        assert ring._display_percent == pytest.approx(0.1)

    def test_percent_is_clamped(self):
        ring = ProgressRing()
        ring.set_percent(1.7)
        assert ring.percent == 1.0


@pytest.mark.usefixtures("qapp")
class TestStylesheet:

    @pytest.mark.parametrize("selector", [
        "QPushButton#primaryButton",
        "QPushButton#secondaryButton:hover",
        "QPushButton#dangerButton:hover",
        "QFrame#card",
        "QLabel#validationLabel",
    ])
    def test_object_names_styled(self, selector):
        assert selector in build_stylesheet()

    def test_custom_palette(self):
        palette = dict(PALETTE, accent="#123456")
        assert "#123456" in build_stylesheet(palette)


# ═══════════════════════════════════════════════════════════════════════
#  ROUNDS EDITOR
# ═══════════════════════════════════════════════════════════════════════


def three_round_plan():
    return IndividualPlan([RoundConfig(180, 60), RoundConfig(120, 30), RoundConfig(90, 0)])


def ok_button(dialog):
    return dialog._buttons.button(QDialogButtonBox.StandardButton.Ok)


@pytest.mark.usefixtures("qapp")
class TestRoundsEditor:

    def test_lists_rounds(self):
        dialog = RoundsEditorDialog(three_round_plan())
        assert dialog.round_labels() == [
            "Round 1   03:00   rest 01:00",
            "Round 2   02:00   rest 00:30",
            "Round 3   01:30",
        ]
        assert ok_button(dialog).isEnabled()

    def test_add_clones_last(self):
        dialog = RoundsEditorDialog(three_round_plan())
        dialog._add_btn.click()
        assert dialog.plan.number_of_rounds == 4
        assert dialog.plan.configuration(4).round_duration == 90

    def test_duplicate_selected(self):
        plan = three_round_plan()
        dialog = RoundsEditorDialog(plan)
        dialog.select_row(1)
        dialog._dup_btn.click()
        assert dialog.plan.number_of_rounds == 4
        assert dialog.plan.configuration(3).round_duration == 120
        assert dialog.plan.configuration(3).id != plan.configuration(2).id

    def test_delete_selected(self):
        plan = three_round_plan()
        dialog = RoundsEditorDialog(plan)
        dialog.select_row(0)
        dialog._del_btn.click()
        assert [r.id for r in dialog.plan.rounds] == [r.id for r in plan.rounds[1:]]

    def test_move_down_and_up(self):
        plan = three_round_plan()
        a, b, c = plan.rounds
        dialog = RoundsEditorDialog(plan)
        dialog.select_row(0)
        dialog._down_btn.click()
        assert dialog.plan.rounds == (b, a, c)
        dialog._up_btn.click()
        assert dialog.plan.rounds == (a, b, c)

    def test_move_buttons_disabled_at_edges(self):
        dialog = RoundsEditorDialog(three_round_plan())
        dialog.select_row(0)
        assert dialog._up_btn.isEnabled() is False
        dialog.select_row(2)
        assert dialog._down_btn.isEnabled() is False

    def test_edit_duration_updates_selected_round(self):
        plan = three_round_plan()
        dialog = RoundsEditorDialog(plan)
        dialog.select_row(1)
        set_duration_seconds(dialog._round_edit, 150)
        assert dialog.plan.configuration(2).round_duration == 150
        assert dialog.plan.configuration(2).id == plan.configuration(2).id
        assert dialog.round_labels()[1].startswith("Round 2   02:30")

    def test_custom_warning_toggle(self):
        dialog = RoundsEditorDialog(three_round_plan(), round_warning_time=10)
        dialog.select_row(0)
        dialog._round_warn_cb.setChecked(True)
        assert dialog.plan.configuration(1).round_warning_time == 10
        dialog._round_warn_spin.setValue(25)
        assert dialog.plan.configuration(1).round_warning_time == 25
        dialog._round_warn_cb.setChecked(False)
        assert dialog.plan.configuration(1).round_warning_time is None

    def test_invalid_warning_blocks_ok(self):
        dialog = RoundsEditorDialog(three_round_plan())
        dialog.select_row(2)
        dialog._round_warn_cb.setChecked(True)
        dialog._round_warn_spin.setValue(90)
        assert ok_button(dialog).isEnabled() is False
        assert "round warning" in dialog.error_text.lower()

    def test_deleting_everything_blocks_ok(self):
        dialog = RoundsEditorDialog(IndividualPlan([RoundConfig(60, 0)]))
        dialog._del_btn.click()
        assert dialog.plan.is_empty
        assert ok_button(dialog).isEnabled() is False
        assert dialog.error_text == "Plan has no rounds"


# ═══════════════════════════════════════════════════════════════════════
#  SETTINGS DIALOG
# ═══════════════════════════════════════════════════════════════════════


@pytest.mark.usefixtures("qapp")
class TestSettingsDialog:

    def _dialog(self, engine, settings=None):
        return SettingsDialog(settings or Settings(), engine)

    def test_populates_from_engine(self, engine):
        dialog = self._dialog(engine)
        assert dialog._rounds_spin.value() == 3
        assert dialog._round_warn_spin.value() == 10
        assert dialog.warning_error == ""

    def test_round_count_applies_immediately(self, engine):
        dialog = self._dialog(engine)
        changed = SignalCollector()
        dialog.workout_changed.connect(changed.slot)
        dialog._rounds_spin.setValue(6)
        assert engine.plan == UniformPlan(180, 60, 6)
        assert dialog.settings.plan == UniformPlan(180, 60, 6).to_dict()
        assert len(changed) == 1
        assert load_settings().plan["count"] == 6

    def test_growing_plan_with_restless_last_round_can_start(self, qapp):
        engine = TimerEngine(
            parent=None, plan=IndividualPlan([RoundConfig(180, 60), RoundConfig(120, 0)]),
        )
        dialog = self._dialog(engine)
        dialog._rounds_spin.setValue(3)
        assert engine.plan.number_of_rounds == 3
        engine.start()
        assert engine.state.is_running

    def test_durations_apply_to_uniform_plan(self, engine):
        dialog = self._dialog(engine)
        set_duration_seconds(dialog._round_edit, 120)
        set_duration_seconds(dialog._rest_edit, 45)
        assert engine.plan == UniformPlan(120, 45, 3)

    def test_individual_plan_locks_uniform_editors(self, qapp):
        engine = TimerEngine(parent=None, plan=three_round_plan())
        dialog = self._dialog(engine)
        assert dialog._round_edit.isEnabled() is False
        assert dialog._uniform_btn.isHidden() is False

    def test_make_uniform(self, qapp):
        engine = TimerEngine(parent=None, plan=three_round_plan())
        dialog = self._dialog(engine)
        dialog._uniform_btn.click()
        assert engine.plan == UniformPlan(180, 60, 3)

    def test_valid_warning_applies(self, engine):
        dialog = self._dialog(engine)
        dialog._round_warn_spin.setValue(30)
        assert engine.round_warning_time == 30
        assert dialog.settings.round_warning_time == 30

    def test_warning_too_long_is_rejected_inline(self, engine):
        dialog = self._dialog(engine)
        dialog._rest_warn_spin.setValue(60)
        assert "shortest rest" in dialog.warning_error
        assert engine.rest_warning_time == 10

    def test_workout_locked_while_running(self, engine):
        engine.start()
        dialog = self._dialog(engine)
        assert dialog._workout_form.isEnabled() is False
        assert dialog._save_preset_btn.isEnabled() is False

    def test_sound_choice_emits_scheme(self, engine):
        dialog = self._dialog(engine)
        schemes = SignalCollector()
        dialog.sounds_changed.connect(schemes.slot)
        combo = dialog._sound_combos["round_start"]
        combo.setCurrentIndex(combo.findData("fanfare"))
        assert schemes.last.round_start == "fanfare"
        assert dialog.settings.sounds["round_start"] == "fanfare"

    def test_sound_preview(self, engine):
        previews = []
        dialog = SettingsDialog(Settings(), engine, sound_preview_callback=previews.append)
        dialog._preview("chime")
        assert previews == ["chime"]

    def test_volume_saved(self, engine):
        dialog = self._dialog(engine)
        dialog._vol_slider.setValue(35)
        assert dialog.settings.sound_volume == 35
        assert dialog._vol_label.text() == "35%"


# ═══════════════════════════════════════════════════════════════════════
#  PRESETS PANEL
# ═══════════════════════════════════════════════════════════════════════


@pytest.mark.usefixtures("qapp")
class TestPresetsPanel:

    def _buttons(self, panel, text):
        return [b for b in panel.findChildren(QPushButton) if b.text() == text]

    def test_summary_uniform(self):
        assert preset_summary(WorkoutPreset("X")) == "3 x 03:00 / 01:00 · 11:00"

    def test_summary_single_round(self):
        assert preset_summary(WorkoutPreset("X", plan=UniformPlan(120, 60, 1))) == "1 x 02:00 · 2:00"

    def test_summary_individual(self):
        preset = WorkoutPreset("X", plan=three_round_plan())
        assert preset_summary(preset) == "3 custom rounds · 8:00"

    def test_refresh_lists_seeded_preset(self):
        panel = PresetsPanel(PresetStore())
        panel.refresh()
        assert [p.name for p in panel.presets] == [DEFAULT_PRESET_NAME]
        assert len(self._buttons(panel, "Load")) == 1

    def test_load_emits_preset(self):
        panel = PresetsPanel(PresetStore())
        panel.refresh()
        chosen = SignalCollector()
        panel.preset_chosen.connect(chosen.slot)
        self._buttons(panel, "Load")[0].click()
        assert chosen.last.name == DEFAULT_PRESET_NAME

    def test_duplicate_adds_row(self):
        panel = PresetsPanel(PresetStore())
        panel.refresh()
        copy = panel.duplicate(panel.presets[0].id)
        assert [p.name for p in panel.presets] == [DEFAULT_PRESET_NAME, copy.name]

    def test_delete_current_clears_selection(self):
        store = PresetStore()
        panel = PresetsPanel(store)
        preset_id = store.list_presets()[0].id
        panel.set_current(preset_id)
        panel.delete(preset_id)
        assert panel.presets == []
        assert panel._current_id is None
        assert panel._empty_label.isHidden() is False


# ═══════════════════════════════════════════════════════════════════════
#  MAIN WINDOW
# ═══════════════════════════════════════════════════════════════════════


@pytest.mark.usefixtures("qapp")
class TestRoundBellApp:

    @pytest.fixture
    def window(self, tmp_path):
        from roundbell.app import RoundBellApp
        return RoundBellApp(Settings(), sounds_dir=tmp_path / "sounds")

    def test_engine_built_from_settings(self, tmp_path):
        from roundbell.app import RoundBellApp
        settings = Settings(round_warning_time=20, sounds={"round_start": "chime"})
        settings.plan = UniformPlan(120, 30, 5).to_dict()
        window = RoundBellApp(settings, sounds_dir=tmp_path / "sounds")
        assert window.engine.plan == UniformPlan(120, 30, 5)
        assert window.engine.round_warning_time == 20
        assert window.sound_sink.scheme.round_start == "chime"

    def test_on_space_starts_and_pauses(self, window):
        window._on_space()
        assert window.engine.state.is_running
        window._on_space()
        assert window.engine.state.is_paused

    def test_on_space_with_invalid_plan_does_not_raise(self, tmp_path):
        from roundbell.app import RoundBellApp
        settings = Settings()
        settings.plan = IndividualPlan([RoundConfig(60, 0), RoundConfig(60, 0)]).to_dict()
        window = RoundBellApp(settings, sounds_dir=tmp_path / "sounds")
        window._on_space()
        assert window.engine.state.is_idle

    def test_on_escape_resets(self, window):
        window._on_space()
        window._on_escape()
        assert window.engine.state.is_idle

    def test_on_escape_noop_when_idle(self, window):
        window._on_escape()
        assert window.engine.state.is_idle

    def test_tray_tooltip_follows_engine(self, window):
        assert window.tray_tooltip == "Ready · 3 rounds"
        window._on_space()
        assert window.tray_tooltip == "Round 1/3 · 03:00"
        window._on_space()
        assert window.tray_tooltip == "Round 1/3 · 03:00 (paused)"

    def test_tray_tooltip_when_status_disabled(self, tmp_path):
        from roundbell.app import RoundBellApp
        window = RoundBellApp(Settings(notifications_enabled=False), sounds_dir=tmp_path / "sounds")
        assert window.tray_tooltip == "RoundBell"

    def test_load_preset_when_idle(self, window):
        preset = WorkoutPreset(
            "Sparring", plan=UniformPlan(120, 60, 8), rest_warning_time=5,
            sounds=SoundScheme(round_start="fanfare"),
        )
        assert window.load_preset(preset) is True
        assert window.engine.plan == UniformPlan(120, 60, 8)
        assert window.engine.rest_warning_time == 5
        assert window.sound_sink.scheme.round_start == "fanfare"
        assert window.settings.current_preset_name == "Sparring"
        assert window.live_status().workout_name == "Sparring"
        assert load_settings().current_preset_id == str(preset.id)

    def test_load_preset_refused_mid_workout(self, window):
        window._on_space()
        preset = WorkoutPreset("Sparring", plan=UniformPlan(120, 60, 8))
        assert window.load_preset(preset) is False
        assert window.engine.number_of_rounds == 3
        assert window.engine.state.is_running

    def test_load_preset_with_negative_warning_leaves_workout_alone(self, window):
        preset = WorkoutPreset("Broken", plan=UniformPlan(120, 60, 8), round_warning_time=-1)
        assert window.load_preset(preset) is False
        assert window.engine.plan == UniformPlan()
        assert window.engine.round_warning_time == 10
        assert window.settings.current_preset_name == ""
        assert "Cannot load Broken" in window.statusBar().currentMessage()

    def test_save_current_as_preset(self, window):
        preset = window.save_current_as_preset("Morning")
        stored = PresetStore().get(preset.id)
        assert stored.plan == window.engine.plan
        assert "Morning" in [p.name for p in window.presets_panel.presets]
        assert window.settings.current_preset_name == "Morning"

    def test_hand_edit_clears_current_preset(self, window):
        window.load_preset(WorkoutPreset("Sparring"))
        window._on_workout_edited()
        assert window.settings.current_preset_name == ""
        assert window.settings.current_preset_id is None

    def test_status_bar_reports_events(self, window):
        window._on_space()
        assert window.statusBar().currentMessage() == "Round 1. Fight!"


class TestLiveStatusText:

    def _status(self, **kwargs):
        values = dict(
            time_remaining=95, current_round=2, number_of_rounds=5,
            phase="round", is_paused=False,
        )
        values.update(kwargs)
        return LiveStatus(**values)

    def test_round(self):
        from roundbell.app import live_status_text
        assert live_status_text(self._status()) == "Round 2/5 · 01:35"

    def test_rest_with_name(self):
        from roundbell.app import live_status_text
        status = self._status(phase="rest", workout_name="Pads")
        assert live_status_text(status) == "Pads: Rest after round 2 · 01:35"

    def test_finished(self):
        from roundbell.app import live_status_text
        assert live_status_text(self._status(phase="finished")) == "Workout complete"
