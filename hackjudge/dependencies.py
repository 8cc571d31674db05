from datetime import timedelta

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker

from hackjudge.db import get_session, get_session_factory
from hackjudge.services.deliverables import DeliverableIntake
from hackjudge.services.directory import Directory
from hackjudge.services.phase_gate import PhaseWindowGate
from hackjudge.services.scoring import ScoreService
from hackjudge.settings import settings
from hackjudge.utils.storage import LocalBlobStore


def get_blob_store() -> LocalBlobStore:
    return LocalBlobStore(settings.upload_dir)


def get_directory(session: AsyncSession = Depends(get_session)) -> Directory:
    return Directory(session)


def get_phase_gate(session_factory: sessionmaker = Depends(get_session_factory)) -> PhaseWindowGate:
    return PhaseWindowGate(session_factory, fail_open=settings.phase_window_fail_open)


def get_score_service(
        session: AsyncSession = Depends(get_session),
        directory: Directory = Depends(get_directory),
        gate: PhaseWindowGate = Depends(get_phase_gate)
) -> ScoreService:
    return ScoreService(
        session,
        directory,
        gate,
        policy=settings.score_resubmission_policy,
        enforce_window=settings.enforce_score_window
    )


def get_deliverable_intake(
        session: AsyncSession = Depends(get_session),
        directory: Directory = Depends(get_directory),
        gate: PhaseWindowGate = Depends(get_phase_gate),
        blob_store: LocalBlobStore = Depends(get_blob_store)
) -> DeliverableIntake:
    return DeliverableIntake(
        session,
        directory,
        gate,
        blob_store,
        grace=timedelta(minutes=settings.deliverable_grace_minutes)
    )
