from sqlalchemy import Column, String, DateTime

from hackjudge.db import Base
from hackjudge.models.user import utcnow


class PhaseWindow(Base):
    """Submission window [starts_at, ends_at) of a phase; a null bound is open-ended"""
    __tablename__ = "phase_windows"

    phase = Column(String(20), primary_key=True)
    starts_at = Column(DateTime(timezone=True), nullable=True)
    ends_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
