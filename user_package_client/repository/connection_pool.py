"""Pooled connection provider.

The pool is owned by the provider instance and created lazily on the first
acquire, so nothing is shared through module-level state.
"""

import asyncio
import logging
from typing import Dict, Optional

import oracledb

from ..config import DatabaseConfig
from ..constants import API_NAME
from ..exceptions import DatabaseConnectionError, ReleaseError, driver_diagnostic
from .connection import ConnectionProvider

logger = logging.getLogger(__name__)


class PooledConnectionProvider(ConnectionProvider):
    """Borrows connections from an ``oracledb`` async pool."""

    def __init__(self, config: DatabaseConfig):
        super().__init__(config)
        self._pool: Optional[oracledb.AsyncConnectionPool] = None
        self._lock = asyncio.Lock()
        self._closed = False
        self._borrowed: Dict[int, oracledb.AsyncConnectionPool] = {}

    async def _get_pool(self) -> oracledb.AsyncConnectionPool:
        async with self._lock:
            if self._closed:
                raise DatabaseConnectionError("Connection pool is closed", endpoint=self.config.endpoint)
            if self._pool is None:
                logger.info(
                    f"{API_NAME} Creating connection pool: min={self.config.pool_min_size}, "
                    f"max={self.config.pool_max_size}, endpoint={self.config.endpoint}"
                )
                try:
                    self._pool = oracledb.create_pool_async(
                        **self.config.connect_params(),
                        min=self.config.pool_min_size,
                        max=self.config.pool_max_size,
                        increment=self.config.pool_increment,
                    )
                except oracledb.Error as e:
                    code, message = driver_diagnostic(e)
                    logger.error(f"{API_NAME} Failed to create connection pool: {message}", exc_info=True)
                    raise DatabaseConnectionError(
                        f"Failed to create connection pool for {self.config.endpoint}: {message}",
                        endpoint=self.config.endpoint,
                    ) from e
            return self._pool

    async def acquire(self) -> oracledb.AsyncConnection:
        pool = await self._get_pool()
        conn = await self._open(pool.acquire)
        self._borrowed[id(conn)] = pool
        logger.debug(f"{API_NAME} Connection acquired from pool: {id(conn)}")
        return conn

    async def release(self, conn: oracledb.AsyncConnection) -> None:
        pool = self._borrowed.pop(id(conn), None)
        if pool is None:
            raise ReleaseError(f"Connection {id(conn)} was not acquired from this pool")
        try:
            await pool.release(conn)
        except Exception as e:
            raise ReleaseError(f"Failed to return connection {id(conn)} to pool: {e}") from e
        finally:
            # close() deferred to the last borrowed connection
            if self._closed and not self._borrowed:
                await self._close_pool(pool)
        logger.debug(f"{API_NAME} Connection released to pool: {id(conn)}")

    async def close(self) -> None:
        """Close the pool; later acquires fail with DatabaseConnectionError.

        When calls still hold connections, the pool stays open until the
        last of them is released.
        """
        async with self._lock:
            self._closed = True
            pool, self._pool = self._pool, None
            in_use = len(self._borrowed)
        if pool is None:
            return
        if in_use:
            logger.info(f"{API_NAME} Deferring pool close until {in_use} borrowed connection(s) are released")
            return
        await self._close_pool(pool)

    async def _close_pool(self, pool: oracledb.AsyncConnectionPool) -> None:
        logger.info(f"{API_NAME} Closing connection pool")
        try:
            await pool.close(force=True)
        except Exception as e:
            logger.warning(f"{API_NAME} Error closing connection pool: {e}")
