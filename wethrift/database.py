"""
database.py — async PostgreSQL engine, session factory and request dependency.

Routes take a session through get_db; the session sweeper opens its own via
AsyncSessionLocal.
"""
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from wethrift.config import settings


class Base(DeclarativeBase):
    """Declarative base for the models in wethrift/models/ (kept here for alembic/env.py)."""


async_engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_size=5,
    max_overflow=10,
    pool_pre_ping=True,
)

AsyncSessionLocal = async_sessionmaker(
    bind=async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    One AsyncSession per USSD or commission request.

    Commits when the route returns; the USSD engine rolls back a failed turn
    itself, so the commit here then finds nothing pending.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
