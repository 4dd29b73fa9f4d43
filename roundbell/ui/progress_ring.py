"""Circular progress ring widget rendered with QPainter.

The ring is the centrepiece of the main window:
- Fills clockwise as the current round or rest runs down.
- Colour-coded by phase (round=red, rest=teal, last seconds=amber).
- Shows MM:SS in bold at the centre plus a status label and
  "Round n of N".
- Animated colour transitions between phases.
- Slow glow while idle, fast flashing glow in the warning window.
- Bell-strike ripples spreading out from the ring when a phase starts,
  three of them when the workout is over.
"""

from __future__ import annotations

import math

from PyQt6.QtCore import Qt, QRectF, QTimer, QVariantAnimation, QEasingCurve
from PyQt6.QtGui import QPainter, QPen, QColor, QConicalGradient, QFont
from PyQt6.QtWidgets import QWidget

from .styles import PHASE_COLORS, PALETTE


# Radians per 33 ms frame for the display keys that pulse
PULSE_STEPS: dict[str, float] = {
    "idle": 0.04,
    "warning": 0.38,
}

RIPPLE_SPACING = 0.35   # life units between ripples of one strike
RIPPLE_REACH = 18.0     # px a ripple travels outside the ring


# ── helpers ──────────────────────────────────────────────────────────────────

def _blend(start: QColor, end: QColor, t: float) -> QColor:
    t = max(0.0, min(1.0, t))
    return QColor(*(
        int(a + (b - a) * t) for a, b in zip(start.getRgb(), end.getRgb())
    ))


def _text_font(pixel_size: int, weight: QFont.Weight, spacing: float = 0.0) -> QFont:
    font = QFont()
    font.setPixelSize(pixel_size)
    font.setWeight(weight)
    if spacing:
        font.setLetterSpacing(QFont.SpacingType.AbsoluteSpacing, spacing)
    return font


class _Ripple:
    """One expanding ring left behind by a bell strike.

    ``age`` starts at or below zero (a delayed ripple) and the ripple is
    drawn while it is between 0 and 1.
    """

    __slots__ = ("age", "color")

    def __init__(self, color: QColor, delay: float = 0.0) -> None:
        self.age = -delay
        self.color = QColor(color)

    def advance(self, dt: float) -> bool:
        self.age += dt * 1.4
        return self.age < 1.0

    @property
    def visible(self) -> bool:
        return self.age >= 0.0


# ── main widget ──────────────────────────────────────────────────────────────


class ProgressRing(QWidget):
    """Custom-painted round timer."""

    RING_DIAMETER = 280
    RING_THICKNESS = 14

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        margin = 2 * int(RIPPLE_REACH) + 4
        self.setMinimumSize(self.RING_DIAMETER + margin, self.RING_DIAMETER + margin)

        # ── display state ──────────────────────────────────────────────
        self._percent: float = 0.0
        self._display_percent: float = 0.0
        self._time_text: str = "00:00"
        self._status_text: str = "READY"
        self._round_text: str = ""
        self._key: str = "idle"

        primary, secondary = (QColor(c) for c in PHASE_COLORS["idle"])
        self._primary_color, self._secondary_color = primary, secondary
        self._from_colors = (QColor(primary), QColor(secondary))
        self._to_colors = (QColor(primary), QColor(secondary))

        self._text_color = QColor(PALETTE["text"])
        self._muted_color = QColor(PALETTE["text_muted"])

        # ── animations ─────────────────────────────────────────────────
        self._arc_anim = self._make_animation(
            400, QEasingCurve.Type.OutCubic, self._on_arc_anim,
        )
        self._color_anim = self._make_animation(
            500, QEasingCurve.Type.InOutQuad, self._on_color_anim,
        )
        self._color_anim.setStartValue(0.0)
        self._color_anim.setEndValue(1.0)

        # ── glow pulse ─────────────────────────────────────────────────
        self._pulse_phase: float = 0.0
        self._pulse_step: float = PULSE_STEPS["idle"]
        self._pulse_timer = self._make_frame_timer(33, self._on_pulse_tick)

        # ── bell ripples ───────────────────────────────────────────────
        self._ripples: list[_Ripple] = []
        self._ripple_timer = self._make_frame_timer(16, self._on_ripple_tick)

        self._pulse_timer.start()

    def _make_animation(self, duration_ms: int, curve: QEasingCurve.Type, slot) -> QVariantAnimation:
        anim = QVariantAnimation(self)
        anim.setDuration(duration_ms)
        anim.setEasingCurve(curve)
        anim.valueChanged.connect(slot)
        return anim

    def _make_frame_timer(self, interval_ms: int, slot) -> QTimer:
        timer = QTimer(self)
        timer.setInterval(interval_ms)
        timer.timeout.connect(slot)
        return timer

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC API
    # ══════════════════════════════════════════════════════════════════

    @property
    def display_key(self) -> str:
        return self._key

    @property
    def time_text(self) -> str:
        return self._time_text

    @property
    def status_text(self) -> str:
        return self._status_text

    @property
    def round_text(self) -> str:
        return self._round_text

    @property
    def percent(self) -> float:
        return self._percent

    @property
    def ripple_count(self) -> int:
        return len(self._ripples)

    def set_percent(self, pct: float) -> None:
        """Update the arc fill (0..1).  Jumps back to empty without
        animating when a new phase starts."""
        pct = max(0.0, min(1.0, pct))
        self._arc_anim.stop()
        dropped = pct < self._percent
        self._percent = pct
        if dropped:
            self._display_percent = pct
            self.update()
            return
        self._arc_anim.setStartValue(self._display_percent)
        self._arc_anim.setEndValue(pct)
        self._arc_anim.start()

    def set_time_text(self, text: str) -> None:
        self._time_text = text
        self.update()

    def set_status_text(self, text: str) -> None:
        self._status_text = text
        self.update()

    def set_round_text(self, text: str) -> None:
        self._round_text = text
        self.update()

    def apply_state(self, key: str) -> None:
        """Switch colours and the glow pulse to a PHASE_COLORS display key."""
        if key == self._key:
            return
        self._key = key

        self._from_colors = (QColor(self._primary_color), QColor(self._secondary_color))
        self._to_colors = tuple(
            QColor(c) for c in PHASE_COLORS.get(key, PHASE_COLORS["idle"])
        )
        self._color_anim.stop()
        self._color_anim.start()

        step = PULSE_STEPS.get(key)
        if step is None:
            self._pulse_timer.stop()
            self._pulse_phase = 0.0
        else:
            self._pulse_step = step
            if not self._pulse_timer.isActive():
                self._pulse_timer.start()

    def strike(self, times: int = 1) -> None:
        """Send out *times* ripples, one after another, like bell strikes."""
        color = QColor(PHASE_COLORS.get(self._key, PHASE_COLORS["idle"])[0])
        for i in range(times):
            self._ripples.append(_Ripple(color, delay=i * RIPPLE_SPACING))
        if not self._ripple_timer.isActive():
            self._ripple_timer.start()

    # ══════════════════════════════════════════════════════════════════
    #  ANIMATION SLOTS
    # ══════════════════════════════════════════════════════════════════

    def _on_arc_anim(self, value: object) -> None:
        self._display_percent = float(value)  # type: ignore[arg-type]
        self.update()

    def _on_color_anim(self, value: object) -> None:
        t = float(value)  # type: ignore[arg-type]
        (old_primary, old_secondary), (new_primary, new_secondary) = (
            self._from_colors, self._to_colors,
        )
        self._primary_color = _blend(old_primary, new_primary, t)
        self._secondary_color = _blend(old_secondary, new_secondary, t)
        self.update()

    def _on_pulse_tick(self) -> None:
        self._pulse_phase = (self._pulse_phase + self._pulse_step) % (2 * math.pi)
        self.update()

    def _on_ripple_tick(self) -> None:
        interval = self._ripple_timer.interval() / 1000
        self._ripples = [r for r in self._ripples if r.advance(interval)]
        if not self._ripples:
            self._ripple_timer.stop()
        self.update()

    # ══════════════════════════════════════════════════════════════════
    #  PAINTING
    # ══════════════════════════════════════════════════════════════════

    def paintEvent(self, event) -> None:  # type: ignore[override]
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        cx, cy = self.width() / 2, self.height() / 2
        diameter = max(100, min(self.width(), self.height()) - 2 * RIPPLE_REACH - 4)
        radius = diameter / 2
        thickness = self.RING_THICKNESS
        ring_rect = QRectF(cx - radius, cy - radius, diameter, diameter)

        def stroke(color: QColor | QConicalGradient, width: float) -> None:
            pen = QPen(color, width, Qt.PenStyle.SolidLine)
            pen.setCapStyle(Qt.PenCapStyle.RoundCap)
            painter.setPen(pen)

        # ── track ────────────────────────────────────────────────────
        track = QColor(self._primary_color)
        track.setAlpha(35)
        stroke(track, thickness)
        painter.drawEllipse(ring_rect)

        # ── pulse glow (idle breathing, warning flash) ───────────────
        if self._key in PULSE_STEPS and self._pulse_phase > 0:
            wave = math.sin(self._pulse_phase)
            strength = 2.5 if self._key == "warning" else 1.0
            glow = QColor(self._primary_color)
            glow.setAlpha(min(255, int((25 + 20 * wave) * strength)))
            stroke(glow, thickness + 2 + 3 * wave * strength)
            painter.drawEllipse(ring_rect)

        # ── elapsed arc ──────────────────────────────────────────────
        pct = self._display_percent
        if pct > 0.001:
            sweep = QConicalGradient(cx, cy, 90)
            for stop, color in ((0.0, self._primary_color),
                                (0.5, self._secondary_color),
                                (1.0, self._primary_color)):
                sweep.setColorAt(stop, color)
            stroke(sweep, thickness)
            # 16ths of a degree from 12 o'clock, negative is clockwise
            painter.drawArc(ring_rect, 90 * 16, -int(pct * 360 * 16))

        # ── bell ripples ─────────────────────────────────────────────
        for ripple in self._ripples:
            if not ripple.visible:
                continue
            fade = QColor(ripple.color)
            fade.setAlpha(int(180 * (1.0 - ripple.age)))
            stroke(fade, 3)
            spread = thickness / 2 + RIPPLE_REACH * ripple.age
            painter.drawEllipse(ring_rect.adjusted(-spread, -spread, spread, spread))

        # ── centre text ──────────────────────────────────────────────
        status_color = QColor(self._primary_color)
        status_color.setAlpha(220)
        lines = (
            (self._time_text, -16, _text_font(56, QFont.Weight.Bold, 2), self._text_color),
            (self._status_text, 34, _text_font(14, QFont.Weight.DemiBold, 3), status_color),
            (self._round_text, 60, _text_font(12, QFont.Weight.Normal), self._muted_color),
        )
        for text, offset, font, color in lines:
            if not text:
                continue
            painter.setFont(font)
            painter.setPen(color)
            painter.drawText(
                ring_rect.translated(0, offset), Qt.AlignmentFlag.AlignCenter, text,
            )

        painter.end()
