"""
Tests for DatabaseConnection's driver error translation and timeouts
(pool is mocked; no server needed)
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import asyncpg
import pytest

from config import DatabaseConfig
from database import DatabaseConnection
from utils.errors import DuplicateConstraintError, TransientStoreError


@pytest.fixture
def conn():
    return AsyncMock()


@pytest.fixture
def db(conn):
    database = DatabaseConnection(DatabaseConfig.for_testing())
    database.pool = MagicMock()
    database.pool.acquire.return_value.__aenter__.return_value = conn
    return database


class TestTimeouts:
    async def test_default_round_trip_timeout(self, db, conn):
        conn.fetchval.return_value = 1

        assert await db.fetchval("SELECT 1") == 1

        conn.fetchval.assert_awaited_once_with("SELECT 1", column=0, timeout=3.0)
        db.pool.acquire.assert_called_once_with(timeout=3.0)

    async def test_explicit_timeout_wins(self, db, conn):
        await db.fetch("SELECT 1", timeout=5.0)
        conn.fetch.assert_awaited_once_with("SELECT 1", timeout=5.0)

    async def test_timeout_is_transient(self, db, conn):
        conn.fetchrow.side_effect = asyncio.TimeoutError()
        with pytest.raises(TransientStoreError, match="timed out"):
            await db.fetchrow("SELECT pg_sleep(10)")

    async def test_query_canceled_is_transient(self, db, conn):
        conn.fetch.side_effect = asyncpg.QueryCanceledError("canceling statement due to statement timeout")
        with pytest.raises(TransientStoreError):
            await db.fetch("SELECT 1")


class TestErrorTranslation:
    async def test_unique_violation_is_duplicate(self, db, conn):
        conn.fetchrow.side_effect = asyncpg.UniqueViolationError(
            'duplicate key value violates unique constraint "users_email_key"'
        )

        with pytest.raises(DuplicateConstraintError) as exc_info:
            await db.fetchrow("INSERT INTO users ...")

        assert exc_info.value.constraint == "users_email_key"
        assert "email address already exists" in str(exc_info.value)

    async def test_foreign_key_violation_is_transient(self, db, conn):
        conn.fetchrow.side_effect = asyncpg.ForeignKeyViolationError(
            'insert or update on table "moods" violates foreign key constraint "moods_user_id_fk"'
        )
        with pytest.raises(TransientStoreError, match="moods_user_id_fk"):
            await db.fetchrow("INSERT INTO moods ...")

    async def test_connection_loss_is_transient(self, db, conn):
        conn.execute.side_effect = asyncpg.InterfaceError("connection was closed")
        with pytest.raises(TransientStoreError, match="unavailable"):
            await db.execute("SELECT 1")

    async def test_os_error_is_transient(self, db, conn):
        conn.fetch.side_effect = ConnectionResetError("reset by peer")
        with pytest.raises(TransientStoreError):
            await db.fetch("SELECT 1")

    async def test_cancellation_is_not_caught(self, db, conn):
        conn.fetch.side_effect = asyncio.CancelledError()
        with pytest.raises(asyncio.CancelledError):
            await db.fetch("SELECT 1")


class TestLifecycle:
    async def test_pool_sessions_use_utc(self, monkeypatch):
        create_pool = AsyncMock(return_value=MagicMock())
        monkeypatch.setattr(asyncpg, "create_pool", create_pool)
        database = DatabaseConnection(DatabaseConfig.for_testing())

        await database.connect()

        assert create_pool.call_args.kwargs["server_settings"] == {"timezone": "UTC"}
        assert create_pool.call_args.kwargs["ssl"] == "prefer"

    async def test_acquire_requires_connect(self):
        database = DatabaseConnection(DatabaseConfig.for_testing())
        with pytest.raises(RuntimeError):
            await database.fetch("SELECT 1")

    async def test_pool_stats_when_disconnected(self):
        database = DatabaseConnection(DatabaseConfig.for_testing())
        stats = await database.get_pool_stats()
        assert stats['status'] == 'disconnected'

    async def test_check_connection_false_on_transient_error(self, db, conn):
        conn.fetchval.side_effect = asyncio.TimeoutError()
        assert await db.check_connection() is False
