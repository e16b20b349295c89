from __future__ import annotations

from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from server.core.config import get_settings

from .utils import normalize_database_url

settings = get_settings()
DATABASE_URL = normalize_database_url(settings.database_dsn)

async_engine = create_async_engine(DATABASE_URL, pool_pre_ping=True)
AsyncSessionLocal = async_sessionmaker(bind=async_engine, expire_on_commit=False)


async def get_db_session() -> AsyncIterator[AsyncSession]:
    async with AsyncSessionLocal() as session:
        yield session


async def create_tables() -> None:
    from . import models  # noqa: F401
    from .base import Base

    async with async_engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)
