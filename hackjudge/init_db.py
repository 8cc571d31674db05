import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlalchemy.orm import sessionmaker

from hackjudge.db import Base
from hackjudge.errors import EmailTaken
from hackjudge.models import User, UserRole
from hackjudge.services.directory import Directory, normalize_email
from hackjudge.settings import settings

logger = logging.getLogger(__name__)


async def init_models(engine: AsyncEngine):
    """Create missing tables"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def bootstrap_admin(session: AsyncSession) -> None:
    """Create the initial admin from settings unless the account exists"""
    if not settings.bootstrap_admin_email or not settings.bootstrap_admin_password:
        return

    email = normalize_email(settings.bootstrap_admin_email)
    existing = await session.execute(select(User.id).where(User.email == email))
    if existing.scalar_one_or_none() is not None:
        return

    try:
        await Directory(session).create_user(
            email=email,
            password=settings.bootstrap_admin_password,
            role=UserRole.ADMIN,
            full_name="Administrator"
        )
    except EmailTaken:
        # created concurrently by another worker
        return
    logger.info("Bootstrap admin %s created", email)


async def init_database(engine: AsyncEngine):
    await init_models(engine)
    async_session = sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )
    async with async_session() as session:
        await bootstrap_admin(session)
