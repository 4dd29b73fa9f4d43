"""Application settings with JSON persistence.

Settings are stored at:
    ~/Library/Application Support/RoundBell/settings.json

Usage::

    settings = load_settings()
    settings.sound_volume = 50
    save_settings(settings)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, field, fields
from pathlib import Path

from .timer.engine import DEFAULT_WARNING_TIME
from .timer.errors import TimerError
from .timer.plan import RoundPlan, UniformPlan


logger = logging.getLogger(__name__)

# Same app-support directory as db.py
APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "RoundBell"
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── workout ───────────────────────────────────────────────────────
    plan: dict = field(default_factory=lambda: UniformPlan().to_dict())
    round_warning_time: int = DEFAULT_WARNING_TIME   # seconds
    rest_warning_time: int = DEFAULT_WARNING_TIME
    current_preset_name: str = ""
    current_preset_id: str | None = None

    # ── audio ─────────────────────────────────────────────────────────
    sound_enabled: bool = True
    sound_volume: int = 70                 # 0-100
    sounds: dict = field(default_factory=dict)

    # ── notifications ─────────────────────────────────────────────────
    notifications_enabled: bool = True

    # ── window ────────────────────────────────────────────────────────
    minimize_to_tray: bool = True
    window_x: int | None = None
    window_y: int | None = None
    window_width: int = 460
    window_height: int = 680
    always_on_top: bool = False


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from disk, falling back to defaults."""
    path = path or SETTINGS_PATH
    try:
        if path.exists():
            data = json.loads(path.read_text(encoding="utf-8"))
            # Only use keys that exist in the dataclass
            valid_keys = {f.name for f in fields(Settings)}
            filtered = {k: v for k, v in data.items() if k in valid_keys}
            return Settings(**filtered)
    except Exception:
        logger.warning("Could not read %s; using default settings", path, exc_info=True)
    return Settings()


def save_settings(settings: Settings, path: Path | None = None) -> None:
    """Write settings to disk as JSON."""
    path = path or SETTINGS_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )


def plan_from_settings(settings: Settings) -> RoundPlan:
    """The stored default plan, or the stock 3 x 3:00 plan if unreadable."""
    try:
        plan = RoundPlan.from_dict(settings.plan)
    except TimerError:
        logger.warning("Stored plan is invalid; using the default plan")
        return UniformPlan()
    if plan.is_empty:
        return UniformPlan()
    return plan


def store_plan(settings: Settings, plan: RoundPlan) -> None:
    settings.plan = plan.to_dict()
