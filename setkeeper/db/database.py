"""
Async engine and request-scoped sessions.

One engine per process, built from settings.database_url. Each request
gets its own AsyncSession; whatever the request left pending is
committed when it returns, and a failed commit surfaces as a
PersistenceError so the API reports it like any other failed write.
"""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from setkeeper.config import settings
from setkeeper.models.db import Base
from setkeeper.models.failure import PersistenceError

logger = logging.getLogger(__name__)


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Engine for `database_url`; SQLite URLs skip the connection ping."""
    if database_url.startswith("sqlite"):
        return create_async_engine(database_url, echo=echo)
    return create_async_engine(database_url, echo=echo, pool_pre_ping=True)


engine = build_engine(settings.database_url, echo=settings.debug)

# Records are built from ORM rows after commit, so keep attributes loaded
async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request, committed on success."""
    async with async_session_factory() as session:
        try:
            yield session
        except SQLAlchemyError:
            await session.rollback()
            raise
        try:
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.warning("request_commit_failed", extra={"error": str(e)})
            raise PersistenceError("Failed to save changes", detail=str(e)) from e


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create the card_sets and checklist_items tables if missing."""
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db(bind: AsyncEngine | None = None) -> None:
    """Drop every SetKeeper table. Test and local use only."""
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
