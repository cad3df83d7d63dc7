"""
Salon Booking Backend — Database Session Management
======================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI session dependency.
How:   `Database` owns one engine and one session factory. `create_app()` builds
       it from Settings and stores it on `app.state.database`; the
       `get_db_session` dependency opens one session per request from there.
When:  Engine is created with the app; connectivity is verified in the lifespan.

Connection Pooling:
    pool_size / max_overflow / pool_pre_ping come from Settings.
    SQLite URLs (tests, local runs) use SQLAlchemy's default pool and skip them.
"""

import logging
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from tenacity import (
    before_sleep_log,
    retry,
    stop_after_attempt,
    wait_fixed,
)

from salon.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object between the models, `create_all` and Alembic.
    """
    pass


class Database:
    """
    Engine + session factory for one application instance.

    expire_on_commit=False keeps ORM attributes readable after commit; lazy
    loads would fail outside the greenlet-bridged async session.
    """

    def __init__(self, settings: Settings):
        self.url = settings.database_url
        self._settings = settings

        engine_kwargs = {"echo": settings.log_level == "DEBUG"}
        if not settings.is_sqlite:
            engine_kwargs.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_pre_ping=settings.db_pool_pre_ping,
                pool_recycle=3600,
            )

        self.engine: AsyncEngine = create_async_engine(self.url, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def ping(self) -> None:
        """Runs SELECT 1; raises whatever the driver raises."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def verify_connection(self) -> None:
        """
        Checks connectivity at startup, retrying a bounded number of times.

        Raises the last driver error once the attempts are exhausted so the
        lifespan aborts instead of serving traffic against a broken store.
        """
        retrying = retry(
            stop=stop_after_attempt(self._settings.db_connect_attempts),
            wait=wait_fixed(self._settings.db_connect_wait),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        await retrying(self.ping)()
        logger.info("Database reachable")

    async def create_all(self) -> None:
        """Creates all tables known to Base.metadata (development / tests)."""
        # Models must be imported so their tables are registered on the metadata
        import salon.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Closes all pooled connections (shutdown)."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    Commits when the handler returns normally, rolls back when it raises, and
    always closes the session. Stores flush (and commit) their own writes, so
    integrity errors surface inside the handler where they can be translated.
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
