"""QSS stylesheet, palette, and phase colors for RoundBell."""

from __future__ import annotations

from ..timer.engine import TimerEngine
from ..timer.state import PhaseKind, TimerStatus

# ── phase colors (ring gradient pairs) ──────────────────────────────────
#    Each display key maps to (primary, secondary) for the conical gradient.

PHASE_COLORS: dict[str, tuple[str, str]] = {
    "round":    ("#E63946", "#FF7B54"),   # fight red
    "rest":     ("#2A9D8F", "#4ECDC4"),   # recovery teal
    "warning":  ("#F4A261", "#FFD166"),   # last seconds amber
    "paused":   ("#6C7086", "#585B70"),   # desaturated gray
    "finished": ("#A6E3A1", "#57CC99"),   # done green
    "idle":     ("#4A4A5E", "#3A3A4E"),   # neutral dim
}

PALETTE: dict[str, str] = {
    "bg":           "#16161E",
    "bg_secondary": "#20202C",
    "surface":      "#2A2A3A",
    "accent":       "#E63946",
    "accent2":      "#FF7B54",
    "text":         "#ECECF4",
    "text_muted":   "#80809A",
    "success":      "#A6E3A1",
    "warning":      "#F4A261",
    "danger":       "#F38BA8",
    "border":       "#32324A",
}


def display_key(engine: TimerEngine) -> str:
    """Which PHASE_COLORS entry describes the engine right now."""
    status = engine.status
    if status is TimerStatus.IDLE:
        return "idle"
    if status is TimerStatus.FINISHED:
        return "finished"
    if status is TimerStatus.PAUSED:
        return "paused"
    if engine.is_in_warning_window:
        return "warning"
    return "round" if engine.phase.kind is PhaseKind.ROUND else "rest"


# ── font resolution ───────────────────────────────────────────────────

_resolved_font: str | None = None


def resolve_font_family() -> str:
    """Detect the best available system font.  Must be called after
    QApplication is created (font database needs the app context)."""
    global _resolved_font
    if _resolved_font is None:
        from PyQt6.QtGui import QFontDatabase
        families = set(QFontDatabase.families())
        for candidate in ("SF Pro", ".AppleSystemUIFont"):
            if candidate in families:
                _resolved_font = candidate
                break
        else:
            _resolved_font = "Helvetica Neue"
    return _resolved_font


# ── QSS builder ───────────────────────────────────────────────────────
#    Pill buttons (secondary, danger) share one shape and differ only in
#    their text and hover colours.

_PILL_BUTTONS: dict[str, tuple[str, str, str]] = {
    # object name: (text, hover background, hover text)
    "secondaryButton": ("text_muted", "surface", "text"),
    "dangerButton":    ("danger", "danger", "bg"),
}


def _pill_rules(p: dict[str, str]) -> str:
    names = ", ".join(f"QPushButton#{name}" for name in _PILL_BUTTONS)
    rules = [f"""
    {names} {{
        background-color: transparent;
        border: 1px solid {p['border']};
        border-radius: 8px;
        padding: 8px 16px;
        font-size: 13px;
    }}
    """]
    for name, (text, hover_bg, hover_text) in _PILL_BUTTONS.items():
        rules.append(f"""
    QPushButton#{name} {{ color: {p[text]}; }}
    QPushButton#{name}:hover {{
        background-color: {p[hover_bg]};
        color: {p[hover_text]};
        border-color: {p[hover_bg]};
    }}
    """)
    return "".join(rules)


def build_stylesheet(palette: dict[str, str] | None = None) -> str:
    p = palette or PALETTE
    font = resolve_font_family()
    return f"""
    /* ── window ──────────────────────────────────── */
    QWidget {{
        background-color: {p['bg']};
        color: {p['text']};
        font-family: "{font}", "Helvetica Neue", Arial;
        font-size: 14px;
    }}

    QFrame#card {{
        background-color: {p['bg']};
        border: none;
    }}

    /* ── buttons ─────────────────────────────────── */
    QPushButton {{
        background-color: {p['bg_secondary']};
        border: 1px solid {p['border']};
        border-radius: 10px;
        padding: 10px 24px;
        font-weight: 600;
    }}

    QPushButton:hover {{ border-color: {p['accent']}; }}
    QPushButton:disabled {{ color: {p['text_muted']}; }}

    QPushButton#primaryButton {{
        background-color: {p['accent']};
        color: {p['text']};
        border: none;
        border-radius: 12px;
        padding: 14px 44px;
        font-size: 17px;
        font-weight: 800;
        letter-spacing: 2px;
    }}

    QPushButton#primaryButton:hover {{ background-color: {p['accent2']}; }}
    {_pill_rules(p)}
    /* ── workout inputs ──────────────────────────── */
    QLineEdit, QSpinBox, QComboBox {{
        background-color: {p['bg_secondary']};
        border: 1px solid {p['border']};
        border-radius: 8px;
        padding: 6px 10px;
        font-size: 13px;
    }}

    QLineEdit:focus, QSpinBox:focus, QComboBox:focus {{
        border-color: {p['accent']};
    }}

    /* ── round and preset lists ──────────────────── */
    QListWidget {{
        background-color: {p['bg_secondary']};
        border: 1px solid {p['border']};
        border-radius: 10px;
        padding: 4px;
    }}

    QListWidget::item {{ padding: 8px; border-radius: 6px; }}
    QListWidget::item:selected {{ background-color: {p['surface']}; }}

    /* ── labels ──────────────────────────────────── */
    QLabel#totalTimeLabel {{ color: {p['text_muted']}; font-size: 13px; }}
    QLabel#validationLabel {{ color: {p['danger']}; font-size: 12px; }}
    QLabel#sectionLabel {{
        color: {p['text_muted']};
        font-size: 12px;
        font-weight: 700;
        letter-spacing: 1px;
    }}

    QStatusBar {{
        color: {p['text_muted']};
        font-size: 12px;
        border-top: 1px solid {p['border']};
    }}
    """
