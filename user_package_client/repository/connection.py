"""Connection management for routine calls.

Every call borrows its own connection and returns it before the call
completes. ``DirectConnectionProvider`` opens a fresh connection per call;
``PooledConnectionProvider`` (see ``connection_pool``) borrows from an
``oracledb`` pool owned by the provider.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

import oracledb

from ..config import DatabaseConfig
from ..constants import API_NAME
from ..exceptions import DatabaseConnectionError, ReleaseError, driver_diagnostic

logger = logging.getLogger(__name__)


class ConnectionProvider(ABC):
    """Acquires and releases connections using a fixed configuration."""

    def __init__(self, config: DatabaseConfig):
        self.config = config

    @abstractmethod
    async def acquire(self) -> oracledb.AsyncConnection:
        """Borrow a connection with autocommit enabled.

        Raises:
            DatabaseConnectionError: If the endpoint is unreachable, the
                credentials are rejected, the wallet cannot be loaded or the
                configured timeout expires.
        """

    @abstractmethod
    async def release(self, conn: oracledb.AsyncConnection) -> None:
        """Return a connection. Call at most once per acquired connection.

        Raises:
            ReleaseError: If the connection could not be closed or returned.
        """

    async def close(self) -> None:
        """Release resources held by the provider itself."""

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[oracledb.AsyncConnection]:
        """Borrow a connection for the duration of the block.

        The connection is released exactly once on every exit path. A
        release failure is logged and never replaces an error raised inside
        the block.
        """
        conn = await self.acquire()
        try:
            yield conn
        finally:
            try:
                await self.release(conn)
            except ReleaseError as e:
                logger.error(f"{API_NAME} Error releasing connection: {e}", exc_info=True)

    async def _open(self, opener: Callable[[], Awaitable[oracledb.AsyncConnection]]) -> oracledb.AsyncConnection:
        """Run ``opener`` under the connect timeout and map driver errors."""
        endpoint = self.config.endpoint
        timeout = self.config.connect_timeout
        try:
            conn = await asyncio.wait_for(opener(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.error(f"{API_NAME} Connection timeout after {timeout}s to {endpoint}")
            raise DatabaseConnectionError(
                f"Connection timeout: Unable to connect to database within {timeout} seconds",
                endpoint=endpoint,
            ) from None
        except oracledb.Error as e:
            code, message = driver_diagnostic(e)
            logger.error(f"{API_NAME} Failed to connect to {endpoint}: {message}", exc_info=True)
            raise DatabaseConnectionError(
                f"Failed to connect to {endpoint}: {message}", endpoint=endpoint
            ) from e
        conn.autocommit = True
        return conn


class DirectConnectionProvider(ConnectionProvider):
    """Opens a new connection for every call and closes it on release."""

    async def acquire(self) -> oracledb.AsyncConnection:
        params = self.config.connect_params()
        logger.debug(f"{API_NAME} Opening connection to {self.config.endpoint} (wallet={self.config.uses_wallet})")

        async def _connect() -> oracledb.AsyncConnection:
            return await oracledb.connect_async(**params)

        conn = await self._open(_connect)
        logger.debug(f"{API_NAME} Direct connection established: {id(conn)}")
        return conn

    async def release(self, conn: oracledb.AsyncConnection) -> None:
        try:
            await conn.close()
        except Exception as e:
            raise ReleaseError(f"Failed to close connection {id(conn)}: {e}") from e
        logger.debug(f"{API_NAME} Connection closed: {id(conn)}")


def create_connection_provider(config: DatabaseConfig) -> ConnectionProvider:
    """Create the provider selected by ``config.pool_enabled``."""
    if config.pool_enabled:
        from .connection_pool import PooledConnectionProvider

        return PooledConnectionProvider(config)
    return DirectConnectionProvider(config)
