"""Shared pytest fixtures for RoundBell tests."""

import sys
import pytest

from PyQt6.QtWidgets import QApplication

from roundbell.database.db import configure_engine, init_db
from roundbell.timer.engine import TimerEngine
from roundbell.timer.plan import UniformPlan


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture(autouse=True)
def app_dirs(tmp_path, monkeypatch):
    """Keep settings and cached sounds out of the real home directory."""
    monkeypatch.setattr("roundbell.settings.SETTINGS_PATH", tmp_path / "settings.json")
    monkeypatch.setattr("roundbell.settings.APP_SUPPORT_DIR", tmp_path)
    monkeypatch.setattr("roundbell.audio.sounds.SOUNDS_DIR", tmp_path / "sounds")
    yield tmp_path


@pytest.fixture
def engine(qapp):
    """Fresh TimerEngine with the stock 3 x 3:00 / 1:00 plan."""
    return TimerEngine(parent=None)


@pytest.fixture
def short_engine(qapp):
    """Three 5-second rounds with 3-second rests and 2-second warnings."""
    return TimerEngine(
        parent=None,
        plan=UniformPlan(round_duration=5, rest_duration=3, count=3),
        round_warning_time=2,
        rest_warning_time=2,
    )
