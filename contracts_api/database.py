"""
Database Configuration

- SQLAlchemy echo disabled in production
- Connection string never logged
- Pool sizing only applies to server databases (SQLite uses its own pool)
"""

import logging
import time

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from contracts_api.config import settings

logger = logging.getLogger(__name__)

SLOW_QUERY_THRESHOLD_MS = 500


def _engine_options(url: str) -> dict:
    options = {"echo": settings.sqlalchemy_echo, "future": True}
    if not url.startswith("sqlite"):
        options.update(
            pool_size=10,
            max_overflow=10,
            pool_recycle=3600,
            pool_pre_ping=True,
        )
    return options


engine = create_async_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))


def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    conn.info["query_start_time"] = time.monotonic()


def _after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    start = conn.info.get("query_start_time")
    if start is None:
        return
    duration_ms = (time.monotonic() - start) * 1000
    if duration_ms >= SLOW_QUERY_THRESHOLD_MS:
        truncated = statement[:200] + ("..." if len(statement) > 200 else "")
        logger.warning("Slow query (%.0fms): %s", duration_ms, truncated)


event.listen(engine.sync_engine, "before_cursor_execute", _before_cursor_execute)
event.listen(engine.sync_engine, "after_cursor_execute", _after_cursor_execute)

# Session factory
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


async def get_db() -> AsyncSession:
    """Dependency to get database session.

    Services own the commit boundary; this dependency only provides the
    session and handles cleanup.
    """
    session = async_session_maker()
    try:
        yield session
    finally:
        await session.close()


async def init_db():
    """Initialize database tables."""
    # Models must be imported so their tables are registered on Base.metadata
    import contracts_api.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
