import pytest
from sqlalchemy import select

from hackjudge.init_db import bootstrap_admin, init_database
from hackjudge.models import User
from hackjudge.settings import settings


@pytest.mark.asyncio
async def test_bootstrap_admin_is_created_once(engine, session_factory, monkeypatch):
    monkeypatch.setattr(settings, "bootstrap_admin_email", "Root@Example.com")
    monkeypatch.setattr(settings, "bootstrap_admin_password", "root-pass")

    await init_database(engine)
    async with session_factory() as session:
        await bootstrap_admin(session)

    async with session_factory() as session:
        users = (await session.execute(select(User))).scalars().all()
    assert [(user.email, user.role) for user in users] == [("root@example.com", "admin")]


@pytest.mark.asyncio
async def test_bootstrap_admin_skipped_without_credentials(session, monkeypatch):
    monkeypatch.setattr(settings, "bootstrap_admin_email", None)
    await bootstrap_admin(session)
    assert (await session.execute(select(User))).scalars().all() == []
