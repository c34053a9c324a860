"""Tests for the async database helpers."""

import pytest
from sqlalchemy import inspect

from codedrafts_auth.infrastructure.database.async_db import build_engine, check_database_health

pytestmark = pytest.mark.integration


@pytest.mark.asyncio
async def test_health_check_on_live_engine(async_engine):
    assert await check_database_health(async_engine) is True


@pytest.mark.asyncio
async def test_tables_are_created(async_engine):
    async with async_engine.connect() as conn:
        tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())

    assert {"users", "user_settings", "instructor_balances", "tokens"} <= set(tables)


@pytest.mark.asyncio
async def test_sqlite_engine_skips_pool_sizing():
    engine = build_engine("sqlite+aiosqlite://")
    try:
        assert engine.url.get_backend_name() == "sqlite"
    finally:
        await engine.dispose()
