"""
Database session management.
"""

from typing import AsyncGenerator, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
)

from shop_bff.core.config import settings
from shop_bff.db.models import Base


def create_engine_from_url(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for the cache store.

    SQLite connections get foreign key enforcement switched on so cascades
    behave the same as on Postgres.
    """
    if database_url.startswith("sqlite"):
        engine = create_async_engine(database_url, echo=echo)

        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_async_engine(
        database_url,
        pool_pre_ping=True,
        pool_recycle=300,
        pool_size=10,
        max_overflow=20,
        echo=echo,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to the given engine."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


engine: Optional[AsyncEngine] = None
SessionLocal: Optional[async_sessionmaker[AsyncSession]] = None

if settings.CACHE_ENABLED:
    engine = create_engine_from_url(settings.DATABASE_URL, echo=settings.DB_ECHO)
    SessionLocal = create_session_factory(engine)


async def init_models(target: AsyncEngine) -> None:
    """Create all cache tables. Migrations are the production path; this serves dev and tests."""
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db() -> AsyncGenerator[Optional[AsyncSession], None]:
    """
    Dependency to get database session.

    Yields None when the local cache is disabled.

    Yields:
        AsyncSession: Database session
    """
    if SessionLocal is None:
        yield None
        return

    async with SessionLocal() as session:
        yield session
