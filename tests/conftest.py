import os

os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET", "test-secret")

import uuid
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from app import app
from hackjudge.auth.jwt import create_access_token
from hackjudge.db import Base, get_session, get_session_factory
from hackjudge.dependencies import get_blob_store
from hackjudge.models import User, UserRole
from hackjudge.services.directory import Directory
from hackjudge.services.phase_gate import PhaseWindowGate
from hackjudge.services.scoring import ScoreService
from hackjudge.settings import settings
from hackjudge.utils.storage import LocalBlobStore

PASSWORD = "s3cret-pass"


@pytest_asyncio.fixture
async def engine(tmp_path):
    """File-backed SQLite so that separate sessions see committed data"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'judging.db'}",
        poolclass=NullPool,
        echo=False
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def blob_store(tmp_path):
    return LocalBlobStore(tmp_path / "uploads")


@pytest.fixture
def directory(session):
    return Directory(session)


@pytest.fixture
def gate(session_factory):
    return PhaseWindowGate(session_factory, fail_open=True)


@pytest.fixture
def score_service(session, directory, gate):
    return ScoreService(session, directory, gate)


@pytest_asyncio.fixture
async def client(session_factory, blob_store) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_blob_store] = lambda: blob_store

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def restore_settings():
    """Snapshot of judging settings, restored after the test"""
    names = [
        "score_resubmission_policy", "enforce_score_window", "phase_window_fail_open",
        "deliverable_grace_minutes", "max_upload_size",
    ]
    saved = {name: getattr(settings, name) for name in names}
    yield settings
    for name, value in saved.items():
        setattr(settings, name, value)


@pytest_asyncio.fixture
async def teams(directory):
    """Teams 1, 3, 5 and 7 keyed by numero"""
    created = {}
    for numero in (1, 3, 5, 7):
        created[numero] = await directory.create_team(numero, f"Team {numero}")
    return created


@pytest_asyncio.fixture
async def judge(directory, teams) -> User:
    return await directory.create_user(
        email="Judge.One@Example.com",
        password=PASSWORD,
        role=UserRole.JUDGE,
        full_name="Judge One",
        conflict_team_numbers=[7]
    )


@pytest_asyncio.fixture
async def other_judge(directory, teams) -> User:
    return await directory.create_user(
        email="judge.two@example.com",
        password=PASSWORD,
        role=UserRole.JUDGE,
        full_name="Judge Two"
    )


@pytest_asyncio.fixture
async def admin(directory) -> User:
    return await directory.create_user(
        email="admin@example.com",
        password=PASSWORD,
        role=UserRole.ADMIN,
        full_name="Admin"
    )


@pytest_asyncio.fixture
async def participant(directory, teams) -> User:
    return await directory.create_user(
        email="participant@example.com",
        password=PASSWORD,
        role=UserRole.PARTICIPANT,
        full_name="Participant",
        team_numero=3
    )


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


def random_email() -> str:
    return f"user-{uuid.uuid4().hex[:8]}@example.com"
