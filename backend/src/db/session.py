"""Async SQLAlchemy engine and the request-scoped session."""
import logging
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

engine = create_async_engine(
    settings.database_url,
    echo=False,
    pool_pre_ping=True,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """
    Yield the session for one request.

    Unit of work: stores only flush, and the commit happens once here at request
    end. A note mutation, its snapshot and its prune therefore commit together.
    Snapshot and prune writes run in SAVEPOINTs inside this transaction, so
    their failure does not poison it. Any exception escaping the request rolls
    everything back, including a restore's backup snapshot.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            logger.debug("Rolling back request transaction", exc_info=True)
            await session.rollback()
            raise
