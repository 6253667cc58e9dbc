"""
Async PostgreSQL store handle for Supabase database connectivity.

This module provides the Database class: an explicitly constructed handle that
owns an asyncpg connection pool. One instance is created in the FastAPI
lifespan, stored on `app.state.database`, and injected into route handlers via
dependencies. Nothing in this module holds a module-level pool.

Key Components:
- Database.connect(): Create the connection pool at application startup
- Database.close(): Gracefully close the pool at application shutdown
- Database.fetch() / fetchrow() / fetchval() / execute(): Query helpers that
  acquire and release a pooled connection per call
- Database.check_connection(): Health probe used by /health

Connection Pool Configuration (from Settings):
- min_size: db_pool_min_size (default 1)
- max_size: db_pool_max_size (default 10)
- command_timeout: db_command_timeout seconds (default 60)

Usage:
    database = Database.from_settings(get_settings())
    await database.connect()

    rows = await database.fetch("SELECT * FROM categories ORDER BY name")

    await database.close()
"""

import logging
from typing import Any, List, Optional

import asyncpg
from asyncpg import Pool

from dq_tracker.core.config import Settings


logger = logging.getLogger(__name__)


# Touches the issues table so a missing schema also reads as unhealthy
HEALTH_PROBE_QUERY = "SELECT 1 FROM data_issues LIMIT 1"


class Database:
    """
    Store handle wrapping an asyncpg connection pool.

    The pool is created lazily on first use if connect() was never called, so
    services can be written without worrying about initialization order. For
    predictable latency, call connect() explicitly at startup.

    Attributes:
        dsn: PostgreSQL connection string.
        min_size: Minimum idle connections kept in the pool.
        max_size: Maximum connections in the pool.
        command_timeout: Per-query timeout in seconds.
    """

    def __init__(
        self,
        dsn: str,
        min_size: int = 1,
        max_size: int = 10,
        command_timeout: float = 60.0,
    ) -> None:
        self.dsn = dsn
        self.min_size = min_size
        self.max_size = max_size
        self.command_timeout = command_timeout
        self._pool: Optional[Pool] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            dsn=settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=settings.db_command_timeout,
        )

    # =========================================================================
    # Pool Lifecycle
    # =========================================================================

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    async def connect(self) -> Pool:
        """
        Create the connection pool (idempotent).

        Returns:
            Pool: The asyncpg connection pool instance.

        Raises:
            asyncpg.PostgresError: If connection to the database fails.
            OSError: If the database host is unreachable.
        """
        if self._pool is None:
            self._pool = await asyncpg.create_pool(
                dsn=self.dsn,
                min_size=self.min_size,
                max_size=self.max_size,
                command_timeout=self.command_timeout,
            )
        return self._pool

    async def close(self) -> None:
        """Close the pool gracefully. Calling it on a closed handle is a no-op."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    async def _get_pool(self) -> Pool:
        if self._pool is None:
            await self.connect()
        assert self._pool is not None, "Pool should be initialized after connect()"
        return self._pool

    # =========================================================================
    # Query Helpers
    # =========================================================================

    async def fetch(self, query: str, *args: Any) -> List[asyncpg.Record]:
        """Execute a query and return all rows."""
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            return await conn.fetch(query, *args)

    async def fetchrow(self, query: str, *args: Any) -> Optional[asyncpg.Record]:
        """Execute a query and return the first row, or None if no rows match."""
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            return await conn.fetchrow(query, *args)

    async def fetchval(self, query: str, *args: Any) -> Any:
        """Execute a query and return the first column of the first row."""
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            return await conn.fetchval(query, *args)

    async def execute(self, query: str, *args: Any) -> str:
        """
        Execute a command (INSERT/UPDATE/DELETE) and return the status string,
        e.g. 'DELETE 1'.
        """
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            return await conn.execute(query, *args)

    # =========================================================================
    # Health
    # =========================================================================

    async def check_connection(self) -> bool:
        """
        Probe the issues table.

        Returns:
            True when the probe query succeeds, False otherwise. The failure is
            logged; health reporting is the only caller and it maps False to 503.
        """
        try:
            await self.fetchval(HEALTH_PROBE_QUERY)
        except Exception as e:
            logger.error(f"Database connection check failed: {e}")
            return False
        logger.debug("Database connection check succeeded")
        return True


__all__ = ["Database", "HEALTH_PROBE_QUERY"]
