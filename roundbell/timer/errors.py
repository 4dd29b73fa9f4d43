"""Exceptions raised by the round plan and the timer engine.

Every check runs before any mutation, so catching one of these always
leaves the engine exactly as it was before the call.
"""

from __future__ import annotations


class TimerError(Exception):
    """Base class for all RoundBell timer errors."""


class InvalidConfiguration(TimerError):
    """The round plan cannot be run (no rounds, bad durations, ...)."""


class InvalidWarningThreshold(TimerError):
    """A warning time is negative or not below its governing duration."""


class InvalidState(TimerError):
    """The command is not allowed in the engine's current state."""
