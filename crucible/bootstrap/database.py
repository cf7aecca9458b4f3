"""Database session factory bootstrap (SQLAlchemy async).

Environment Variables:
- DATABASE_URL: Connection string. PostgreSQL URLs are rewritten to the
  asyncpg driver; other async URLs (e.g. sqlite+aiosqlite://) are used as is.
- SQLALCHEMY_ECHO: Echo SQL statements when truthy.

Usage:
    from crucible.bootstrap.database import get_session_factory

    session_factory = get_session_factory()
    async with session_factory() as session:
        ...
"""

from __future__ import annotations

import os

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from structlog import get_logger

logger = get_logger()

_session_factory: async_sessionmaker[AsyncSession] | None = None
_engine: AsyncEngine | None = None


def get_database_url(url: str | None = None) -> str:
    """Resolve the async connection URL.

    Args:
        url: Explicit URL; DATABASE_URL is used when omitted.

    Raises:
        ValueError: If no URL is configured.
    """
    url = url or os.environ.get("DATABASE_URL")
    if not url:
        raise ValueError(
            "DATABASE_URL environment variable not set. Required for SqlPoolStore."
        )

    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    elif url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+asyncpg://", 1)

    return url


def _mask_password(url: str) -> str:
    if "@" not in url:
        return url
    before_at, after_at = url.split("@", 1)
    if ":" in before_at.split("//", 1)[-1]:
        return f"{before_at.rsplit(':', 1)[0]}:***@{after_at}"
    return url


def get_session_factory(url: str | None = None) -> async_sessionmaker[AsyncSession]:
    """Get the SQLAlchemy async session factory.

    Creates a singleton factory on first call.

    Raises:
        ValueError: If no database URL is configured.
    """
    global _session_factory, _engine

    if _session_factory is None:
        log = logger.bind(component="database_bootstrap")
        resolved = get_database_url(url)
        log.info("creating_database_engine", url=_mask_password(resolved))

        _engine = create_async_engine(
            resolved,
            echo=os.environ.get("SQLALCHEMY_ECHO", "").lower() in ("1", "true", "yes"),
            pool_pre_ping=True,
        )
        _session_factory = async_sessionmaker(
            bind=_engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        log.info("database_session_factory_created")

    return _session_factory


def reset_database_bootstrap() -> None:
    """Reset database singleton for testing."""
    global _session_factory, _engine
    _session_factory = None
    _engine = None


async def close_database_engine() -> None:
    """Close the database engine (for graceful shutdown)."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
