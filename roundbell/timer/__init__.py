"""Timer package."""

from .engine import TimerEngine, DEFAULT_WARNING_TIME
from .errors import (
    TimerError,
    InvalidConfiguration,
    InvalidWarningThreshold,
    InvalidState,
)
from .events import (
    TimerEvent,
    RoundStarted,
    RestStarted,
    WorkoutCompleted,
    Paused,
    Resumed,
    Reset,
    PhaseWarning,
    NotificationSink,
    NullSink,
)
from .plan import (
    RoundConfig,
    RoundPlan,
    UniformPlan,
    IndividualPlan,
    DEFAULT_ROUND_DURATION,
    DEFAULT_REST_DURATION,
    check_warning_defaults,
)
from .state import LiveStatus, Phase, PhaseKind, TimerState, TimerStatus

__all__ = [
    "TimerEngine",
    "DEFAULT_WARNING_TIME",
    "TimerError",
    "InvalidConfiguration",
    "InvalidWarningThreshold",
    "InvalidState",
    "TimerEvent",
    "RoundStarted",
    "RestStarted",
    "WorkoutCompleted",
    "Paused",
    "Resumed",
    "Reset",
    "PhaseWarning",
    "NotificationSink",
    "NullSink",
    "RoundConfig",
    "RoundPlan",
    "UniformPlan",
    "IndividualPlan",
    "DEFAULT_ROUND_DURATION",
    "DEFAULT_REST_DURATION",
    "check_warning_defaults",
    "LiveStatus",
    "Phase",
    "PhaseKind",
    "TimerState",
    "TimerStatus",
]
