"""Database connection and session management."""

import logging
import uuid
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import sessionmaker, Session as OrmSession

from .models import Base, Preset

logger = logging.getLogger(__name__)

# ── paths ────────────────────────────────────────────────────────────────────

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "RoundBell"
DB_PATH = APP_SUPPORT_DIR / "roundbell.db"

DEFAULT_PRESET_NAME = "Classic 3 x 3:00"

# ── engine & session factory (created lazily) ─────────────────────────────

_engine = None
_SessionFactory = None


def _connect(url: str):
    return create_engine(url, connect_args={"check_same_thread": False}, echo=False)


def _get_engine():
    global _engine
    if _engine is None:
        APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
        _engine = _connect(f"sqlite:///{DB_PATH}")
    return _engine


def _get_session_factory():
    global _SessionFactory
    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=_get_engine(), expire_on_commit=False)
    return _SessionFactory


# ── public API ────────────────────────────────────────────────────────────


def configure_engine(url: str) -> None:
    """Override the database connection URL.  Used by tests to point at
    an in-memory SQLite database instead of the real one on disk."""
    global _engine, _SessionFactory
    _SessionFactory = None
    _engine = _connect(url)


# Columns added to ``presets`` after the first release, in the order they
# shipped: full plan storage for individually configured rounds, the
# per-preset sound scheme, then warning times moved off the settings file.
_ADDED_PRESET_COLUMNS: tuple[tuple[str, str], ...] = (
    ("plan_json", "TEXT"),
    ("sounds_json", "TEXT"),
    ("round_warning_time", "INTEGER NOT NULL DEFAULT 10"),
    ("rest_warning_time", "INTEGER NOT NULL DEFAULT 10"),
)


def _run_migrations(engine) -> None:
    """Bring an existing ``presets`` table up to the current schema.

    Runs after ``create_all`` and only adds what is missing, so it is a
    no-op on fresh installs and on repeat launches.
    """
    insp = inspect(engine)
    if "presets" not in set(insp.get_table_names()):
        return

    existing = {c["name"] for c in insp.get_columns("presets")}
    missing = [(n, ddl) for n, ddl in _ADDED_PRESET_COLUMNS if n not in existing]
    if not missing:
        return
    with engine.begin() as conn:
        for name, ddl in missing:
            logger.info("Migrating presets table: adding %s", name)
            conn.execute(text(f"ALTER TABLE presets ADD COLUMN {name} {ddl}"))


def init_db() -> None:
    """Create all tables, run migrations, and seed defaults."""
    engine = _get_engine()
    Base.metadata.create_all(engine)
    _run_migrations(engine)

    # Seed one preset so the list is never empty on first launch
    factory = _get_session_factory()
    with factory() as session:
        if session.query(Preset).count() == 0:
            session.add(Preset(
                id=str(uuid.uuid4()),
                name=DEFAULT_PRESET_NAME,
                round_duration=180,
                rest_duration=60,
                number_of_rounds=3,
                created_at=datetime.now(),
            ))
            session.commit()


@contextmanager
def get_session():
    """Yield a SQLAlchemy session; commit on success, rollback on error."""
    factory = _get_session_factory()
    session: OrmSession = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
