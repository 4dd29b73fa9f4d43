"""UI package."""

from .timer_widget import TimerWidget, format_time, format_total_time
from .progress_ring import ProgressRing
from .presets_panel import PresetsPanel

__all__ = [
    "TimerWidget",
    "ProgressRing",
    "PresetsPanel",
    "format_time",
    "format_total_time",
]
