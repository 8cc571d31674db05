import uuid

from sqlalchemy import Column, String, Integer, DateTime, Uuid
from sqlalchemy.orm import relationship

from hackjudge.db import Base
from hackjudge.models.user import utcnow


class Team(Base):
    """Team; numero is the public handle used by clients"""
    __tablename__ = 'teams'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    numero = Column(Integer, unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    # Relationships
    members = relationship("User", back_populates="team")
    scores = relationship("Score", back_populates="team")
    deliverables = relationship("Deliverable", back_populates="team")
