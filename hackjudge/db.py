from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from hackjudge.settings import settings

Base = declarative_base()

engine = create_async_engine(
    settings.database_url,
    echo=settings.sql_echo,
    future=True
)

async_session = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)


async def get_session() -> AsyncSession:
    async with async_session() as session:
        yield session


def get_session_factory() -> sessionmaker:
    """Factory for components that open their own short-lived sessions"""
    return async_session
