"""Database engine and async session factory."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from functools import lru_cache

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from physiopro.config import get_settings
from physiopro.core.models import Base, User

logger = logging.getLogger(__name__)


def get_database_url() -> str:
    return get_settings().database_url


def is_memory_url(url: str) -> bool:
    return url.startswith("sqlite") and (":memory:" in url or url.rstrip("/").endswith("://"))


def build_engine(url: str) -> AsyncEngine:
    """Create an engine; an in-memory SQLite store shares one connection."""
    if is_memory_url(url):
        return create_async_engine(
            url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
            echo=False,
        )
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=False)
    return create_async_engine(
        url,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        echo=False,
    )


@lru_cache
def _get_engine() -> AsyncEngine:
    return build_engine(get_database_url())


@lru_cache
def _get_session_factory():
    return async_sessionmaker(_get_engine(), class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields an async session."""
    async with _get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create all tables and load the demo fixtures when enabled."""
    engine = _get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    if get_settings().seed_demo_data:
        await seed_if_empty()


async def seed_if_empty() -> None:
    """Load the demo fixture set unless accounts already exist."""
    from physiopro.core.seed import seed_demo_data

    async with _get_session_factory()() as session:
        result = await session.execute(select(User.id).limit(1))
        if result.scalar_one_or_none():
            logger.info("Data store already populated; skipping demo seed")
            return

        await seed_demo_data(session)
        await session.commit()
        logger.info("Seeded demo data")


async def dispose_engine() -> None:
    await _get_engine().dispose()
