"""
Pytest configuration and shared fixtures for mood journal tests

APPROACH: Use DatabaseConnection directly (no wrapper layer)
- Each integration test gets a fresh database and connection pool
- Integration tests are skipped when PostgreSQL is unreachable
- Unit tests mock DatabaseConnection and need no server
"""

import asyncio
import sys
from pathlib import Path

import asyncpg
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config import DatabaseConfig
from container import RepositoryContainer
from database import DatabaseConnection
from tests.test_config import TEST_DB_CONFIG, SCHEMA_FILE
from tests.test_fixtures import SampleDataFactory


async def _system_connection():
    return await asyncpg.connect(
        host=TEST_DB_CONFIG['host'],
        port=TEST_DB_CONFIG['port'],
        user=TEST_DB_CONFIG['user'],
        password=TEST_DB_CONFIG['password'],
        database='postgres',
        ssl='prefer',
        timeout=5,
    )


async def _create_test_database():
    """Create a fresh test database, or skip when no server is reachable"""
    try:
        sys_conn = await _system_connection()
    except (OSError, asyncio.TimeoutError, asyncpg.PostgresError) as e:
        pytest.skip(f"PostgreSQL not reachable: {e}")

    try:
        await sys_conn.execute(f'DROP DATABASE IF EXISTS {TEST_DB_CONFIG["database"]}')
        await sys_conn.execute(f'CREATE DATABASE {TEST_DB_CONFIG["database"]}')
    finally:
        await sys_conn.close()


async def _setup_schema():
    """Load schema into test database"""
    conn = await asyncpg.connect(
        host=TEST_DB_CONFIG['host'],
        port=TEST_DB_CONFIG['port'],
        user=TEST_DB_CONFIG['user'],
        password=TEST_DB_CONFIG['password'],
        database=TEST_DB_CONFIG['database'],
        ssl='prefer',
    )

    try:
        with open(SCHEMA_FILE, 'r', encoding='utf-8') as f:
            await conn.execute(f.read())
    finally:
        await conn.close()


async def _drop_test_database():
    """Drop the test database"""
    sys_conn = await _system_connection()

    try:
        await sys_conn.execute("""
            SELECT pg_terminate_backend(pg_stat_activity.pid)
            FROM pg_stat_activity
            WHERE pg_stat_activity.datname = $1
              AND pid <> pg_backend_pid()
        """, TEST_DB_CONFIG["database"])
        await sys_conn.execute(f'DROP DATABASE IF EXISTS {TEST_DB_CONFIG["database"]}')
    finally:
        await sys_conn.close()


def _database_config() -> DatabaseConfig:
    """DatabaseConfig pointing at the per-test database"""
    return DatabaseConfig(
        host=TEST_DB_CONFIG['host'],
        port=TEST_DB_CONFIG['port'],
        database=TEST_DB_CONFIG['database'],
        user=TEST_DB_CONFIG['user'],
        password=TEST_DB_CONFIG['password'],
        ssl_mode='prefer',
        min_pool_size=1,
        max_pool_size=5,
    )


@pytest.fixture(scope="function")
async def db_connection():
    """
    DatabaseConnection on a fresh test database.

    Same object production code uses; schema.sql is applied before each test
    and the database is dropped afterwards.
    """
    await _create_test_database()
    await _setup_schema()

    db = DatabaseConnection(_database_config())
    await db.connect()

    yield db

    await db.disconnect()
    await _drop_test_database()


@pytest.fixture(scope="function")
async def sample_data(db_connection):
    """SampleDataFactory sharing the db_connection pool"""
    yield SampleDataFactory(db_connection.pool)


@pytest.fixture(scope="function")
async def repos(db_connection):
    """RepositoryContainer initialized with the test database"""
    return RepositoryContainer(db_connection)


@pytest.fixture(scope="function")
def db_config(db_connection):
    """Config for code that opens its own pool on the test database"""
    return db_connection.config
