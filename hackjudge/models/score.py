import uuid
from sqlalchemy import Column, ForeignKey, Integer, DateTime, String, Text, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship

from hackjudge.db import Base
from hackjudge.models.user import utcnow


class Score(Base):
    """One judge's evaluation of one team for one phase"""
    __tablename__ = 'scores'
    __table_args__ = (
        UniqueConstraint('judge_id', 'team_id', 'phase', name='uq_score_judge_team_phase'),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    judge_id = Column(Uuid, ForeignKey('judges.id'), nullable=False)
    team_id = Column(Uuid, ForeignKey('teams.id'), nullable=False)
    phase = Column(String(20), nullable=False)

    canvas_score = Column(Integer, nullable=True)  # canvas, 0..20
    mvp_score = Column(Integer, nullable=True)  # mvp, 0..30
    impact = Column(Integer, nullable=True)  # pitch criteria, 0..100 each
    business_model = Column(Integer, nullable=True)
    innovation = Column(Integer, nullable=True)
    viability = Column(Integer, nullable=True)
    extra_criterion = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    team = relationship("Team", back_populates="scores")
    judge = relationship("Judge")

    def get_pitch_total(self):
        values = [self.impact, self.business_model, self.innovation, self.viability, self.extra_criterion]
        if all(value is None for value in values):
            return None
        return sum(value or 0 for value in values)
