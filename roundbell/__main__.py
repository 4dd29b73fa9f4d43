"""Allow running RoundBell as a module: python -m roundbell."""

import logging
import sys

from PyQt6.QtGui import QIcon, QPixmap, QPainter, QColor
from PyQt6.QtWidgets import QApplication

from .database.db import init_db
from .app import RoundBellApp


def _make_app_icon() -> QIcon:
    """Generated placeholder dock icon: a red bell-like circle."""
    icon = QPixmap(256, 256)
    icon.fill(QColor(0, 0, 0, 0))
    p = QPainter(icon)
    p.setRenderHint(QPainter.RenderHint.Antialiasing)
    p.setBrush(QColor("#E63946"))
    p.setPen(QColor("#E63946").darker(120))
    p.drawEllipse(16, 16, 224, 224)
    p.end()
    return QIcon(icon)


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_db()
    logging.getLogger("roundbell").info("RoundBell ready")

    app = QApplication(sys.argv)
    app.setApplicationName("RoundBell")
    app.setOrganizationName("RoundBell")
    app.setQuitOnLastWindowClosed(False)
    app.setWindowIcon(_make_app_icon())

    window = RoundBellApp()
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
