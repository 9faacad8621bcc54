"""
Database connection management and utilities
Async PostgreSQL operations using asyncpg
"""

import asyncio
import asyncpg
import logging
from typing import Optional, List, Dict, Any
from contextlib import asynccontextmanager

from config import DatabaseConfig
from utils.error_messages import constraint_name, enhance_error_message
from utils.errors import DuplicateConstraintError, TransientStoreError

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """
    Manages PostgreSQL connection pool and provides database operations

    Every call is an independent round trip bounded by a timeout
    (config.query_timeout unless the caller passes one). Driver failures
    are translated in acquire():
    - unique violations -> DuplicateConstraintError
    - other integrity violations, timeouts, connectivity -> TransientStoreError
    """

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self.pool: Optional[asyncpg.Pool] = None

    async def connect(self):
        """Initialize connection pool"""
        if self.pool is not None:
            logger.warning("Connection pool already initialized")
            return

        # asyncpg expects: True (require SSL), False (disable SSL), or 'prefer'
        if self.config.ssl_mode == 'require':
            ssl_setting = True
        elif self.config.ssl_mode == 'disable':
            ssl_setting = False
        else:
            ssl_setting = 'prefer'

        try:
            self.pool = await asyncpg.create_pool(
                host=self.config.host,
                port=self.config.port,
                database=self.config.database,
                user=self.config.user,
                password=self.config.password,
                min_size=self.config.min_pool_size,
                max_size=self.config.max_pool_size,
                command_timeout=self.config.command_timeout,
                ssl=ssl_setting,
                server_settings={"timezone": "UTC"},
            )
            logger.info(f"Connected to PostgreSQL at {self.config.host}:{self.config.port}")
        except (OSError, asyncio.TimeoutError, asyncpg.PostgresError) as e:
            logger.error(f"Failed to connect to database: {e}")
            raise TransientStoreError(f"could not connect to database: {e}") from e

    async def disconnect(self):
        """Close connection pool"""
        if self.pool is not None:
            await self.pool.close()
            self.pool = None
            logger.info("Database connection pool closed")

    def _timeout(self, timeout: Optional[float]) -> float:
        return self.config.query_timeout if timeout is None else timeout

    @asynccontextmanager
    async def acquire(self):
        """
        Acquire a connection from the pool with error translation.

        Usage:
            async with db.acquire() as conn:
                rows = await conn.fetch("SELECT * FROM moods WHERE user_id = $1", owner_id)

        The connection is returned to the pool even if an exception occurs.
        """
        if self.pool is None:
            raise RuntimeError("Database not connected. Call connect() first.")

        try:
            async with self.pool.acquire(timeout=self.config.query_timeout) as connection:
                yield connection
        except asyncpg.UniqueViolationError as e:
            raise DuplicateConstraintError(enhance_error_message(e), constraint_name(e)) from e
        except asyncpg.IntegrityConstraintViolationError as e:
            logger.error(f"Constraint violation: {e}")
            raise TransientStoreError(enhance_error_message(e)) from e
        except (asyncio.TimeoutError, asyncpg.QueryCanceledError) as e:
            logger.error("Database round trip timed out", exc_info=True)
            raise TransientStoreError("database round trip timed out") from e
        except (asyncpg.PostgresConnectionError, asyncpg.InterfaceError, OSError) as e:
            logger.error(f"Database connectivity error: {e}", exc_info=True)
            raise TransientStoreError(f"database unavailable: {e}") from e

    async def execute(
        self,
        query: str,
        *args,
        timeout: Optional[float] = None
    ) -> str:
        """
        Execute a query without returning results

        Returns:
            Status string (e.g., "DELETE 1")
        """
        async with self.acquire() as conn:
            return await conn.execute(query, *args, timeout=self._timeout(timeout))

    async def fetch(
        self,
        query: str,
        *args,
        timeout: Optional[float] = None
    ) -> List[asyncpg.Record]:
        """
        Fetch multiple rows

        Args:
            query: SQL query
            *args: Query parameters
            timeout: Query timeout in seconds

        Returns:
            List of records
        """
        async with self.acquire() as conn:
            return await conn.fetch(query, *args, timeout=self._timeout(timeout))

    async def fetchrow(
        self,
        query: str,
        *args,
        timeout: Optional[float] = None
    ) -> Optional[asyncpg.Record]:
        """
        Fetch a single row

        Returns:
            Single record or None
        """
        async with self.acquire() as conn:
            return await conn.fetchrow(query, *args, timeout=self._timeout(timeout))

    async def fetchval(
        self,
        query: str,
        *args,
        column: int = 0,
        timeout: Optional[float] = None
    ) -> Any:
        """
        Fetch a single value

        Args:
            query: SQL query
            *args: Query parameters
            column: Column index to return
            timeout: Query timeout in seconds

        Returns:
            Single value
        """
        async with self.acquire() as conn:
            return await conn.fetchval(query, *args, column=column, timeout=self._timeout(timeout))

    @asynccontextmanager
    async def transaction(self, readonly: bool = False, isolation: Optional[str] = None):
        """
        Run several statements on one connection inside a transaction.

        Usage:
            async with db.transaction(readonly=True, isolation='repeatable_read') as conn:
                total = await conn.fetchval(count_sql, *params, timeout=3)
                rows = await conn.fetch(page_sql, *page_params, timeout=5)
        """
        async with self.acquire() as conn:
            async with conn.transaction(readonly=readonly, isolation=isolation):
                yield conn

    async def check_connection(self) -> bool:
        """
        Check if database connection is healthy

        Returns:
            True if connection is healthy
        """
        try:
            result = await self.fetchval("SELECT 1")
            return result == 1
        except TransientStoreError as e:
            logger.error(f"Connection check failed: {e}")
            return False

    async def get_pool_stats(self) -> Dict[str, Any]:
        """
        Get connection pool statistics for monitoring.

        Returns:
            Dictionary with pool stats (size, free connections, etc.)
        """
        if self.pool is None:
            return {
                'status': 'disconnected',
                'size': 0,
                'freesize': 0
            }

        return {
            'status': 'connected',
            'size': self.pool.get_size(),
            'freesize': self.pool.get_idle_size(),
            'min_size': self.config.min_pool_size,
            'max_size': self.config.max_pool_size
        }

    async def get_all_tables(self) -> List[str]:
        """
        Get list of all tables in the public schema

        Returns:
            List of table names
        """
        query = """
            SELECT table_name
            FROM information_schema.tables
            WHERE table_schema = 'public'
            AND table_type = 'BASE TABLE'
            ORDER BY table_name
        """
        result = await self.fetch(query)
        return [row['table_name'] for row in result]


class DatabaseMigration:
    """
    Handle database schema setup
    """

    def __init__(self, db: DatabaseConnection):
        self.db = db

    async def apply_schema(self, schema_file: str):
        """
        Apply database schema from SQL file
        Executes the entire schema file in a single transaction

        Args:
            schema_file: Path to schema.sql file
        """
        logger.info(f"Applying schema from {schema_file}...")

        with open(schema_file, 'r', encoding='utf-8') as f:
            schema_sql = f.read()

        try:
            async with self.db.transaction() as conn:
                await conn.execute(schema_sql)
            logger.info("Schema applied successfully")
        except Exception as e:
            logger.error(f"Failed to apply schema: {e}")
            raise

    async def check_schema_exists(self) -> bool:
        """Check if the moods table exists"""
        tables = await self.db.get_all_tables()
        return 'moods' in tables

    async def drop_schema(self):
        """Drop all mood journal tables (moods first, it references users)"""
        logger.warning("Dropping moods and users tables")
        async with self.db.transaction() as conn:
            await conn.execute("DROP TABLE IF EXISTS moods CASCADE")
            await conn.execute("DROP TABLE IF EXISTS users CASCADE")
            await conn.execute("DROP FUNCTION IF EXISTS update_updated_at_column() CASCADE")

    async def initialize_database(self, schema_file: str):
        """
        Initialize database with schema

        Args:
            schema_file: Path to schema.sql file
        """
        if await self.check_schema_exists():
            logger.warning("Database schema already exists. Skipping initialization.")
            return

        logger.info("Initializing database...")
        await self.apply_schema(schema_file)
        logger.info("Database initialized successfully")
