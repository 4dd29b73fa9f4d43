"""SQLAlchemy ORM models for RoundBell."""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class Preset(Base):
    """A saved workout configuration.

    ``round_duration``, ``rest_duration`` and ``number_of_rounds`` are
    summary columns kept for rows written before ``plan_json`` existed;
    the full plan lives in ``plan_json`` when present.
    """

    __tablename__ = "presets"

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    round_duration = Column(Integer, nullable=False, default=180)
    rest_duration = Column(Integer, nullable=False, default=60)
    number_of_rounds = Column(Integer, nullable=False, default=3)
    round_warning_time = Column(Integer, nullable=False, default=10)
    rest_warning_time = Column(Integer, nullable=False, default=10)
    plan_json = Column(Text, nullable=True)
    sounds_json = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    def __repr__(self) -> str:
        return (
            f"<Preset id={self.id} name={self.name!r} "
            f"rounds={self.number_of_rounds}>"
        )
