"""Sound synthesis and playback using numpy + QSoundEffect.

All sounds are generated programmatically as WAV files using sine-wave
synthesis with ADSR envelopes.  Files are cached to disk so subsequent
app launches are instant.

Sound names
-----------
- ``bell``        boxing ring bell, struck three times
- ``beep``        short electronic beep
- ``complete``    final triple bell with a long ring-out
- ``chime``       three ascending notes (C5, E5, G5)
- ``fanfare``     four-note fanfare (G4, B4, D5, G5)
- ``double_tap``  two quick taps at 800 Hz
"""

from __future__ import annotations

import io
import logging
import wave
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Callable

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..timer.events import (
    PhaseWarning,
    RestStarted,
    RoundStarted,
    TimerEvent,
    WorkoutCompleted,
)
from ..timer.state import PhaseKind


logger = logging.getLogger(__name__)

# ── paths ────────────────────────────────────────────────────────────────

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "RoundBell"
SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"

SOUND_NAMES = (
    "bell",
    "beep",
    "complete",
    "chime",
    "fanfare",
    "double_tap",
)

SOUND_LABELS = {
    "bell": "Boxing Bell",
    "beep": "Beep",
    "complete": "Final Bell",
    "chime": "Chime",
    "fanfare": "Fanfare",
    "double_tap": "Double Tap",
}

SAMPLE_RATE = 44100


# ═══════════════════════════════════════════════════════════════════════════
#  WAV SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _make_envelope(
    length: int,
    attack: int = 200,
    decay: int = 400,
    sustain_level: float = 0.7,
    release: int = 800,
) -> np.ndarray:
    """ADSR envelope (all durations in samples)."""
    env = np.ones(length, dtype=np.float64)
    a = min(attack, length)
    if a > 0:
        env[:a] = np.linspace(0.0, 1.0, a)
    d_end = min(a + decay, length)
    if decay > 0 and d_end > a:
        env[a:d_end] = np.linspace(1.0, sustain_level, d_end - a)
    s_end = max(length - release, d_end)
    if s_end > d_end:
        env[d_end:s_end] = sustain_level
    if release > 0 and s_end < length:
        env[s_end:] = np.linspace(sustain_level, 0.0, length - s_end)
    return env


def _sine(freq: float, duration_s: float) -> np.ndarray:
    """Pure sine wave at *freq* Hz for *duration_s* seconds."""
    t = np.linspace(0, duration_s, int(SAMPLE_RATE * duration_s), endpoint=False)
    return np.sin(2 * np.pi * freq * t)


def _silence(duration_s: float) -> np.ndarray:
    return np.zeros(int(SAMPLE_RATE * duration_s))


def _to_wav_bytes(samples: np.ndarray) -> bytes:
    """Convert a float64 numpy array (-1..1) to 16-bit PCM WAV bytes."""
    samples = np.clip(samples, -1.0, 1.0)
    int_samples = (samples * 32767).astype(np.int16)

    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(int_samples.tobytes())
    return buf.getvalue()


def _note(
    freq: float,
    duration: float,
    level: float,
    *,
    octave: float = 0.0,
    attack: int = 80,
    decay: int = 200,
    sustain: float = 0.4,
    release: int = 250,
) -> np.ndarray:
    """One enveloped note, optionally with its octave mixed in."""
    tone = _sine(freq, duration) * level
    if octave:
        tone = tone + _sine(freq * 2, duration) * octave
    return tone * _make_envelope(len(tone), attack, decay, sustain, release)


def _phrase(notes: list[np.ndarray], gap: float, tail: float = 0.0) -> bytes:
    """Join *notes* with *gap* seconds of silence between them."""
    parts: list[np.ndarray] = []
    for note in notes:
        parts.extend((note, _silence(gap)))
    parts[-1] = _silence(gap + tail)
    return _to_wav_bytes(np.concatenate(parts))


def _strike(duration: float, level: float = 0.5) -> np.ndarray:
    """One metallic bell strike: inharmonic partials, fast attack, long decay."""
    partials = ((830.0, 1.0), (1660.0, 0.45), (2290.0, 0.3), (3120.0, 0.15))
    tone = sum(_sine(freq, duration) * weight for freq, weight in partials)
    tone = tone / sum(weight for _, weight in partials) * level
    env = _make_envelope(
        len(tone),
        attack=int(SAMPLE_RATE * 0.003),
        decay=int(SAMPLE_RATE * 0.12),
        sustain_level=0.35,
        release=int(SAMPLE_RATE * duration * 0.6),
    )
    return tone * env


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND GENERATORS
# ═══════════════════════════════════════════════════════════════════════════


def _generate_bell() -> bytes:
    """Round start: three quick strikes of the ring bell, then a longer one."""
    return _phrase([_strike(0.28)] * 3 + [_strike(0.6)], gap=0.04)


def _generate_beep() -> bytes:
    """Rest start and warnings: a single square-ish beep at 1 kHz."""
    duration = 0.18
    tone = _sine(1000.0, duration) * 0.4 + _sine(3000.0, duration) * 0.08
    env = _make_envelope(len(tone), attack=60, decay=200, sustain_level=0.8, release=400)
    return _to_wav_bytes(np.concatenate([tone * env, _silence(0.05)]))


def _generate_complete() -> bytes:
    """Workout complete: three slow strikes, the last ringing out."""
    return _phrase(
        [_strike(0.45, level=0.55)] * 2 + [_strike(1.6, level=0.6)], gap=0.08,
    )


def _generate_chime() -> bytes:
    """Three ascending notes (C5→E5→G5)."""
    return _phrase(
        [_note(f, 0.12, 0.6, attack=100, release=300) for f in (523.25, 659.25, 783.99)],
        gap=0.03, tail=0.05,
    )


def _generate_fanfare() -> bytes:
    """Fanfare (G4→B4→D5→G5) with a held final note."""
    lead = [_note(f, 0.15, 0.5) for f in (392.00, 493.88, 587.33)]
    held = _note(783.99, 0.5, 0.55, octave=0.1, attack=100, decay=400,
                 sustain=0.5, release=800)
    return _phrase(lead + [held], gap=0.03)


def _generate_double_tap() -> bytes:
    """Two short taps at 800 Hz, 80 ms apart."""
    tap = _note(800.0, 0.04, 0.35, attack=40, decay=100, sustain=0.2, release=200)
    return _phrase([tap, tap], gap=0.08)


_GENERATORS: dict[str, Callable[[], bytes]] = {
    "bell": _generate_bell,
    "beep": _generate_beep,
    "complete": _generate_complete,
    "chime": _generate_chime,
    "fanfare": _generate_fanfare,
    "double_tap": _generate_double_tap,
}


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND SCHEME
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class SoundScheme:
    """Which sound plays for each kind of transition."""

    round_start: str = "bell"
    rest_start: str = "beep"
    round_warning: str = "beep"
    rest_warning: str = "beep"
    workout_complete: str = "complete"

    def sound_for(self, event: TimerEvent) -> str | None:
        """Sound name for *event*, or None when the event is silent."""
        if isinstance(event, RoundStarted):
            return self.round_start
        if isinstance(event, RestStarted):
            return self.rest_start
        if isinstance(event, WorkoutCompleted):
            return self.workout_complete
        if isinstance(event, PhaseWarning):
            if event.kind is PhaseKind.ROUND:
                return self.round_warning
            return self.rest_warning
        return None

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> SoundScheme:
        """Decode a stored scheme; unknown names fall back to the slot default."""
        if not isinstance(data, dict):
            return cls()
        defaults = cls()
        values: dict[str, str] = {}
        for f in fields(cls):
            name = data.get(f.name)
            if name in SOUND_NAMES:
                values[f.name] = name
            else:
                if name is not None:
                    logger.warning("Unknown sound %r for %s", name, f.name)
                values[f.name] = getattr(defaults, f.name)
        return cls(**values)


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════════


class SoundManager(QObject):
    """Owns one QSoundEffect per built-in sound, synthesized on first run.

    Usage::

        mgr = SoundManager(parent=self)
        mgr.set_volume(70)
        mgr.play("bell")
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._enabled = True
        self._volume = 70  # percent
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._effects: dict[str, QSoundEffect] = {}

        self._load_sounds()

    # ── public API ────────────────────────────────────────────────────

    def set_volume(self, level: int) -> None:
        """Clamp *level* to 0-100 and apply it to every loaded sound."""
        self._volume = max(0, min(level, 100))
        for effect in self._effects.values():
            effect.setVolume(self._volume / 100)

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def play(self, name: str) -> None:
        """Play a sound by name.  No-op if disabled or name unknown."""
        if not self._enabled:
            return
        effect = self._effects.get(name)
        if effect is not None:
            effect.play()

    @property
    def volume(self) -> int:
        return self._volume

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def loaded_sounds(self) -> tuple[str, ...]:
        return tuple(self._effects)

    # ── internal ──────────────────────────────────────────────────────

    def _load_sounds(self) -> None:
        """Synthesize whatever is missing from the cache, then load it all."""
        self._sounds_dir.mkdir(parents=True, exist_ok=True)
        for name, generate in _GENERATORS.items():
            path = self._sounds_dir / f"{name}.wav"
            if not path.exists():
                logger.debug("Synthesizing %s", path)
                path.write_bytes(generate())
            effect = QSoundEffect(self)
            effect.setSource(QUrl.fromLocalFile(str(path)))
            effect.setVolume(self._volume / 100)
            self._effects[name] = effect


# ═══════════════════════════════════════════════════════════════════════════
#  ENGINE SINK
# ═══════════════════════════════════════════════════════════════════════════


class SoundSink:
    """Notification sink that plays the scheme's sound for each event.

    *player* is anything with ``play(name)``; normally a SoundManager.
    """

    def __init__(self, player, scheme: SoundScheme | None = None) -> None:
        self._player = player
        self.scheme = scheme or SoundScheme()

    def handle(self, event: TimerEvent) -> None:
        name = self.scheme.sound_for(event)
        if name is not None:
            self._player.play(name)
