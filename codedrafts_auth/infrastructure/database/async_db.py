from __future__ import annotations

"""
Asynchronous Database Utilities Module

This module provides the SQLAlchemy asyncio engine and session factory the
repositories run on. PostgreSQL is reached through asyncpg in deployed
environments; SQLite through aiosqlite is accepted for local runs and tests.

The engine is created lazily from `settings.DATABASE_URL` on first use, so
importing this module never opens a connection.

**Security Note**: The connection URL carries credentials and is never logged.

Key Components:
    - get_engine: The process-wide asynchronous engine.
    - get_session_factory: A factory for creating asynchronous database sessions.
    - get_async_db: A context manager yielding one session per flow.
    - create_async_db_and_tables: Utility to create tables (tests and local runs).
    - check_database_health: Connectivity check with retry logic.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import structlog
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from codedrafts_auth.core.config.settings import settings

# Registers every table on SQLModel.metadata
from codedrafts_auth.domain import entities  # noqa: F401

logger = structlog.get_logger(__name__)

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for ``database_url``.

    Pool sizing settings only apply to server databases; SQLite keeps the
    dialect's default pool.
    """
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        return create_async_engine(url, echo=echo)
    return create_async_engine(
        url,
        echo=echo,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_timeout=settings.DATABASE_POOL_TIMEOUT,
        pool_pre_ping=True,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Entities stay readable after commit; services keep using them.
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        _engine = build_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
        logger.info("Async database engine created", backend=_engine.url.get_backend_name())
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = build_session_factory(get_engine())
    return _session_factory


@asynccontextmanager
async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Yield an AsyncSession for one flow.

    The transaction is rolled back if an exception escapes, and the session is
    always closed.

    Yields:
        AsyncSession: An asynchronous database session.
    """
    async with get_session_factory()() as session:
        logger.debug("Async database session created")
        try:
            yield session
        except Exception:
            await session.rollback()
            logger.error("Async database session rollback due to error")
            raise
        finally:
            await session.close()
            logger.debug("Async database session closed")


async def create_async_db_and_tables(engine: Optional[AsyncEngine] = None) -> None:
    """
    Create tables using the async engine (mainly for test suites and local runs).

    Deployed schemas are managed outside this package.
    """
    logger.info("Creating async database tables")
    async with (engine or get_engine()).begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Async database tables created")


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=4, max=10),
    retry=retry_if_exception_type(OperationalError),
    reraise=True,
)
async def _ping(engine: AsyncEngine) -> None:
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def check_database_health(engine: Optional[AsyncEngine] = None) -> bool:
    """
    Performs a health check on the database connection.

    Transient `OperationalError`s are retried with exponential backoff before
    the database is reported unhealthy.

    Returns:
        bool: True if database is healthy and responsive, False otherwise.
    """
    start_time = time.time()
    try:
        await _ping(engine or get_engine())
    except SQLAlchemyError as e:
        logger.error(
            "database_health_check_failed",
            error=str(e),
            execution_time=time.time() - start_time,
        )
        return False

    logger.info("database_health_check_success", execution_time=time.time() - start_time)
    return True


async def dispose_engine() -> None:
    """Close every pooled connection; used on shutdown."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        logger.info("Async database engine disposed")
    _engine = None
    _session_factory = None
