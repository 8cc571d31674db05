import uuid
from sqlalchemy import Column, String, ForeignKey, DateTime, Boolean, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship

from hackjudge.db import Base
from hackjudge.models.user import utcnow


class Deliverable(Base):
    """Latest deliverable of a team for a deliverable type"""
    __tablename__ = 'deliverables'
    __table_args__ = (
        UniqueConstraint('team_id', 'type', name='uq_deliverable_team_type'),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    team_id = Column(Uuid, ForeignKey('teams.id', ondelete='CASCADE'), nullable=False)
    type = Column(String(32), nullable=False)
    value = Column(String(1024), nullable=False)  # storage path or external URL
    original_filename = Column(String(255), nullable=True)
    submitted_by = Column(Uuid, ForeignKey('users.id'), nullable=True)
    submitted_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    is_late = Column(Boolean, default=False, nullable=False)

    # Relationships
    team = relationship("Team", back_populates="deliverables")
    submitter = relationship("User")
