"""
Asyncio PostgreSQL connection pool shared by the loader and the admin CLI

This module provides an asyncio connection pool for the loader and the data
access layer, with connect retries and connection lifecycle management.
"""
import asyncio
from contextlib import asynccontextmanager
from typing import Any

from psycopg import OperationalError
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from winequality.config import DatabaseConfig
from winequality.observability.logger import get_logger

logger = get_logger(__name__)


class DatabaseConnectionPool:
    """
    Asyncio PostgreSQL connection pool manager using psycopg3

    Connections are handed out with dict rows. A connection checked out with
    get_connection() is committed when the block exits normally and rolled
    back when it raises.
    """

    def __init__(self, config: DatabaseConfig) -> None:
        """
        Create a closed pool; nothing connects until open()

        Args:
            config: Validated database configuration
        """
        self.config = config
        self._pool: AsyncConnectionPool | None = None

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    async def open(self, max_retries: int = 3, retry_delay: float = 2.0) -> None:
        """
        Open the pool, retrying while the database is unreachable.

        Does nothing if the pool is already open.

        Args:
            max_retries: Connection attempts before giving up
            retry_delay: Seconds to sleep between attempts

        Raises:
            OperationalError: If every attempt failed
        """
        if self._pool is not None:
            return

        for attempt in range(1, max_retries + 1):
            # A pool that times out while waiting is closed, so each attempt gets a new one
            pool = AsyncConnectionPool(
                conninfo=self.config.conninfo(),
                min_size=self.config.min_size,
                max_size=self.config.max_size,
                timeout=self.config.timeout,
                kwargs={"row_factory": dict_row},
                open=False,
            )
            try:
                await pool.open(wait=True, timeout=self.config.timeout)
                break
            except OperationalError as e:
                await pool.close()
                if attempt < max_retries:
                    logger.warning(
                        f"Database not reachable (attempt {attempt}/{max_retries}), retrying",
                        extra={"target": self.config.describe(), "error": str(e)},
                    )
                    await asyncio.sleep(retry_delay)
                else:
                    raise OperationalError(
                        f"Failed to connect to database after {max_retries} attempts: {e}"
                    ) from e

        self._pool = pool
        logger.info(
            "Database connection pool opened",
            extra={"target": self.config.describe(), "max_size": self.config.max_size},
        )

    async def close(self) -> None:
        """Close the pool; a closed pool can be opened again"""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info("Connection pool closed.")

    @asynccontextmanager
    async def get_connection(self):
        """
        Borrow a connection for the duration of the block

        Yields:
            psycopg.AsyncConnection: Database connection

        Raises:
            RuntimeError: If open() has not been called
        """
        if self._pool is None:
            raise RuntimeError("Connection pool is not open. Call open() first.")

        async with self._pool.connection() as conn:
            yield conn
        logger.debug("Database connection released.")

    async def _execute(self, query: Any, params: Any, handle):
        async with self.get_connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(query, params)
                return await handle(cur)

    async def fetch_all(self, query: Any, params: Any = None) -> list[dict]:
        """Run a query (string or psycopg.sql.Composed) and return every row as a dict"""
        return await self._execute(query, params, lambda cur: cur.fetchall())

    async def fetch_one(self, query: Any, params: Any = None) -> dict | None:
        """Run a query and return its first row, or None"""
        return await self._execute(query, params, lambda cur: cur.fetchone())

    async def execute_command(self, command: Any, params: Any = None) -> int:
        """
        Run an INSERT/UPDATE/DELETE in its own transaction

        Returns:
            Number of rows affected
        """

        async def rowcount(cur) -> int:
            return cur.rowcount

        return await self._execute(command, params, rowcount)

    async def __aenter__(self):
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False
