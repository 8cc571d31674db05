from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, ForeignKey, Boolean, Integer, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
import uuid

from hackjudge.db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """User account; email is stored lowercase"""
    __tablename__ = 'users'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(512), nullable=False)
    full_name = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False)
    team_id = Column(Uuid, ForeignKey('teams.id'), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    # Relationships
    team = relationship("Team", back_populates="members")
    judge = relationship("Judge", back_populates="user", uselist=False)


class Judge(Base):
    """Judge directory entry, derived from judge-role users"""
    __tablename__ = 'judges'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey('users.id'), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    # Relationships
    user = relationship("User", back_populates="judge")
    conflicts = relationship("JudgeConflict", back_populates="judge", cascade="all, delete-orphan")

    @property
    def conflict_team_numbers(self) -> set:
        return {conflict.team_numero for conflict in self.conflicts}


class JudgeConflict(Base):
    """Team number a judge must not score"""
    __tablename__ = 'judge_conflicts'
    __table_args__ = (
        UniqueConstraint('judge_id', 'team_numero', name='uq_judge_conflict'),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    judge_id = Column(Uuid, ForeignKey('judges.id', ondelete='CASCADE'), nullable=False)
    team_numero = Column(Integer, nullable=False)

    # Relationships
    judge = relationship("Judge", back_populates="conflicts")
