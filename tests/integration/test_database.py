"""
Integration Tests for Database Connection Management
Tests engine creation, health checks and pool shutdown on SQLite
"""

import pytest
from sqlalchemy import inspect, text
from sqlalchemy.pool import NullPool

from claimguard.core import config
from claimguard.core.config import EngineSettings
from claimguard.db import connection
from claimguard.db.connection import (
    check_db_connection,
    close_db_connection,
    create_engine_from_url,
    create_tables,
    get_engine,
    get_session_maker,
)


@pytest.fixture
def sqlite_settings(monkeypatch):
    """Point the global engine at in-memory SQLite for one test."""
    settings = EngineSettings(DATABASE_URL="sqlite+aiosqlite://", ENVIRONMENT="testing")
    monkeypatch.setattr(config, "_engine_settings", settings)
    monkeypatch.setattr(connection, "_engine", None)
    monkeypatch.setattr(connection, "_async_session_maker", None)
    return settings


@pytest.mark.integration
@pytest.mark.asyncio
async def test_database_connection(sqlite_settings):
    """Test that the health check succeeds against the global engine"""
    try:
        assert await check_db_connection() is True
        assert isinstance(get_engine().pool, NullPool)
    finally:
        await close_db_connection()


@pytest.mark.integration
@pytest.mark.asyncio
async def test_database_query(sqlite_settings):
    """Test basic query through the global session maker"""
    session_maker = get_session_maker()
    try:
        async with session_maker() as session:
            result = await session.execute(text("SELECT 1 as num"))
            assert result.first()[0] == 1
    finally:
        await close_db_connection()


@pytest.mark.integration
@pytest.mark.asyncio
async def test_close_resets_globals(sqlite_settings):
    """Test that closing disposes the engine and forgets the session maker"""
    first = get_engine()
    get_session_maker()

    await close_db_connection()

    assert connection._engine is None
    assert connection._async_session_maker is None
    second = get_engine()
    assert second is not first
    await close_db_connection()


@pytest.mark.integration
@pytest.mark.asyncio
async def test_create_tables(tmp_path):
    """Test that every claim engine table is created"""
    engine = create_engine_from_url(f"sqlite+aiosqlite:///{tmp_path / 'claims.db'}")
    try:
        await create_tables(engine)
        async with engine.connect() as conn:
            tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
    finally:
        await engine.dispose()

    assert set(tables) == {
        "claims",
        "claim_items",
        "claim_adjustments",
        "members",
        "fraud_rules",
        "claim_fraud_alerts",
    }


@pytest.mark.integration
@pytest.mark.asyncio
async def test_unreachable_database_reports_unhealthy(tmp_path):
    """Test that a failing connection is reported, not raised"""
    missing = tmp_path / "missing" / "claims.db"
    engine = create_engine_from_url(f"sqlite+aiosqlite:///{missing}")
    try:
        assert await check_db_connection(engine) is False
    finally:
        await engine.dispose()
