"""Tests for the JSON settings file and the default workout it stores."""

from __future__ import annotations

import json

from roundbell import settings as settings_module
from roundbell.settings import (
    Settings, load_settings, plan_from_settings, save_settings, store_plan,
)
from roundbell.timer.plan import IndividualPlan, RoundConfig, UniformPlan


# ═══════════════════════════════════════════════════════════════════════
#  DEFAULTS
# ═══════════════════════════════════════════════════════════════════════


class TestSettingsDefaults:
    def test_default_plan_is_three_by_three(self):
        assert plan_from_settings(Settings()) == UniformPlan(180, 60, 3)

    def test_warning_defaults(self):
        s = Settings()
        assert s.round_warning_time == 10
        assert s.rest_warning_time == 10

    def test_sound_defaults(self):
        s = Settings()
        assert s.sound_enabled is True
        assert s.sound_volume == 70
        assert s.sounds == {}

    def test_window_defaults(self):
        s = Settings()
        assert s.window_x is None
        assert s.window_y is None
        assert s.minimize_to_tray is True
        assert s.always_on_top is False

    def test_no_preset_loaded(self):
        s = Settings()
        assert s.current_preset_name == ""
        assert s.current_preset_id is None


# ═══════════════════════════════════════════════════════════════════════
#  PERSISTENCE
# ═══════════════════════════════════════════════════════════════════════


class TestSettingsPersistence:
    def test_round_trip(self):
        original = Settings(sound_volume=42, round_warning_time=15, window_x=100, window_y=200)
        save_settings(original)
        loaded = load_settings()
        assert loaded == original

    def test_explicit_path(self, tmp_path):
        path = tmp_path / "nested" / "prefs.json"
        save_settings(Settings(always_on_top=True), path)
        assert load_settings(path).always_on_top is True

    def test_missing_file_returns_defaults(self, tmp_path):
        assert load_settings(tmp_path / "nonexistent.json") == Settings()

    def test_invalid_json_returns_defaults(self, caplog):
        settings_module.SETTINGS_PATH.write_text("NOT VALID JSON", encoding="utf-8")
        assert load_settings() == Settings()
        assert "using default settings" in caplog.text

    def test_extra_keys_ignored(self):
        data = {"sound_volume": 10, "unknown_future_key": True}
        settings_module.SETTINGS_PATH.write_text(json.dumps(data), encoding="utf-8")
        s = load_settings()
        assert s.sound_volume == 10
        assert not hasattr(s, "unknown_future_key")

    def test_individual_plan_survives_round_trip(self):
        plan = IndividualPlan([RoundConfig(90, 30, round_warning_time=5), RoundConfig(60, 0)])
        s = Settings()
        store_plan(s, plan)
        save_settings(s)
        assert plan_from_settings(load_settings()) == plan


# ═══════════════════════════════════════════════════════════════════════
#  STORED PLAN
# ═══════════════════════════════════════════════════════════════════════


class TestStoredPlan:
    def test_store_and_read_uniform(self):
        s = Settings()
        store_plan(s, UniformPlan(120, 30, 8))
        assert plan_from_settings(s) == UniformPlan(120, 30, 8)

    def test_invalid_plan_falls_back(self, caplog):
        s = Settings(plan={"mode": "pyramid"})
        assert plan_from_settings(s) == UniformPlan()
        assert "invalid" in caplog.text

    def test_empty_plan_falls_back(self):
        s = Settings(plan={"mode": "individual", "rounds": []})
        assert plan_from_settings(s) == UniformPlan()
