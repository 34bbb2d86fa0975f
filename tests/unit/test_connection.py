"""Unit tests for connection providers."""

import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock, patch

import oracledb
import pytest

from user_package_client.config import DatabaseConfig
from user_package_client.exceptions import DatabaseConnectionError, ReleaseError
from user_package_client.repository.connection import (
    DirectConnectionProvider,
    create_connection_provider,
)
from user_package_client.repository.connection_pool import PooledConnectionProvider

from tests.fakes import FakeConnection


class TestDirectConnectionProvider:
    """Tests for DirectConnectionProvider."""

    @pytest.fixture
    def provider(self, db_config):
        return DirectConnectionProvider(db_config)

    @pytest.mark.asyncio
    async def test_acquire_opens_connection_with_autocommit(self, provider):
        """Test acquire connects with configured parameters and enables autocommit."""
        conn = FakeConnection()
        with patch.object(oracledb, "connect_async", AsyncMock(return_value=conn)) as connect:
            result = await provider.acquire()

        assert result is conn
        assert conn.autocommit is True
        connect.assert_called_once_with(
            user="app_user", password="secret", dsn="localhost:1521/FREEPDB1"
        )

    @pytest.mark.asyncio
    async def test_acquire_passes_wallet(self):
        """Test wallet materials reach the driver when configured."""
        config = DatabaseConfig(
            user="admin", password="pw", connect_string="mydb_high",
            wallet_location="/opt/wallet", wallet_password="wallet-pw",
        )
        provider = DirectConnectionProvider(config)
        with patch.object(oracledb, "connect_async", AsyncMock(return_value=FakeConnection())) as connect:
            await provider.acquire()

        kwargs = connect.call_args.kwargs
        assert kwargs["config_dir"] == "/opt/wallet"
        assert kwargs["wallet_location"] == "/opt/wallet"
        assert kwargs["wallet_password"] == "wallet-pw"

    @pytest.mark.asyncio
    async def test_acquire_driver_error(self, provider):
        """Test rejected credentials raise DatabaseConnectionError."""
        error = oracledb.DatabaseError("ORA-01017: invalid username/password; logon denied")
        with patch.object(oracledb, "connect_async", AsyncMock(side_effect=error)):
            with pytest.raises(DatabaseConnectionError) as exc_info:
                await provider.acquire()

        assert isinstance(exc_info.value, ConnectionError)
        assert exc_info.value.__cause__ is error
        assert exc_info.value.endpoint == "localhost:1521/FREEPDB1"
        assert "ORA-01017" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_acquire_timeout(self):
        """Test acquire fails when the connect timeout expires."""
        config = DatabaseConfig(user="u", password="p", connect_string="db", connect_timeout=0.01)
        provider = DirectConnectionProvider(config)

        async def slow_connect(**kwargs):
            await asyncio.sleep(1)

        with patch.object(oracledb, "connect_async", AsyncMock(side_effect=slow_connect)):
            with pytest.raises(DatabaseConnectionError, match="timeout"):
                await provider.acquire()

    @pytest.mark.asyncio
    async def test_release_closes_connection(self, provider):
        """Test release closes the connection."""
        conn = FakeConnection()

        await provider.release(conn)

        assert conn.close_count == 1

    @pytest.mark.asyncio
    async def test_release_error_wrapped(self, provider):
        """Test close failures raise ReleaseError."""
        conn = FakeConnection(close_error=oracledb.InterfaceError("DPY-1001: not connected"))

        with pytest.raises(ReleaseError):
            await provider.release(conn)

    @pytest.mark.asyncio
    async def test_connection_scope_releases_once(self, provider):
        """Test the scoped helper releases the connection exactly once."""
        conn = FakeConnection()
        with patch.object(oracledb, "connect_async", AsyncMock(return_value=conn)):
            async with provider.connection() as borrowed:
                assert borrowed is conn
                assert conn.close_count == 0

        assert conn.close_count == 1

    @pytest.mark.asyncio
    async def test_connection_scope_releases_on_error(self, provider):
        """Test the connection is released when the block raises."""
        conn = FakeConnection()
        with patch.object(oracledb, "connect_async", AsyncMock(return_value=conn)):
            with pytest.raises(RuntimeError, match="boom"):
                async with provider.connection():
                    raise RuntimeError("boom")

        assert conn.close_count == 1

    @pytest.mark.asyncio
    async def test_release_error_does_not_mask_failure(self, provider, caplog):
        """Test a release failure is logged and the original error propagates."""
        conn = FakeConnection(close_error=RuntimeError("socket gone"))
        with patch.object(oracledb, "connect_async", AsyncMock(return_value=conn)):
            with caplog.at_level(logging.ERROR):
                with pytest.raises(ValueError, match="original"):
                    async with provider.connection():
                        raise ValueError("original")

        assert conn.close_count == 1
        assert "Error releasing connection" in caplog.text

    @pytest.mark.asyncio
    async def test_release_error_without_failure_is_logged(self, provider, caplog):
        """Test a release failure after a successful block is only logged."""
        conn = FakeConnection(close_error=RuntimeError("socket gone"))
        with patch.object(oracledb, "connect_async", AsyncMock(return_value=conn)):
            with caplog.at_level(logging.ERROR):
                async with provider.connection():
                    pass

        assert "socket gone" in caplog.text

    @pytest.mark.asyncio
    async def test_fresh_connection_per_acquire(self, provider):
        """Test each acquire opens its own connection."""
        connect = AsyncMock(side_effect=lambda **kwargs: FakeConnection())
        with patch.object(oracledb, "connect_async", connect):
            first = await provider.acquire()
            second = await provider.acquire()

        assert first is not second
        assert connect.call_count == 2


class TestPooledConnectionProvider:
    """Tests for PooledConnectionProvider."""

    @pytest.fixture
    def pool(self):
        pool = MagicMock()
        pool.acquire = AsyncMock(side_effect=lambda: FakeConnection())
        pool.release = AsyncMock()
        pool.close = AsyncMock()
        return pool

    @pytest.fixture
    def pooled_config(self, db_config):
        return db_config.model_copy(update={"pool_enabled": True, "pool_min_size": 1, "pool_max_size": 3})

    @pytest.mark.asyncio
    async def test_pool_created_once(self, pooled_config, pool):
        """Test concurrent acquires share one lazily created pool."""
        provider = PooledConnectionProvider(pooled_config)
        with patch.object(oracledb, "create_pool_async", MagicMock(return_value=pool)) as create:
            conns = await asyncio.gather(provider.acquire(), provider.acquire(), provider.acquire())

        create.assert_called_once()
        kwargs = create.call_args.kwargs
        assert kwargs["min"] == 1
        assert kwargs["max"] == 3
        assert kwargs["increment"] == 1
        assert kwargs["dsn"] == "localhost:1521/FREEPDB1"
        assert len({id(c) for c in conns}) == 3
        assert all(c.autocommit for c in conns)

    @pytest.mark.asyncio
    async def test_release_returns_to_pool(self, pooled_config, pool):
        """Test release hands the connection back to the pool."""
        provider = PooledConnectionProvider(pooled_config)
        with patch.object(oracledb, "create_pool_async", MagicMock(return_value=pool)):
            async with provider.connection() as conn:
                pass

        pool.release.assert_awaited_once_with(conn)

    @pytest.mark.asyncio
    async def test_release_error_wrapped(self, pooled_config, pool):
        """Test pool release failures raise ReleaseError."""
        pool.release.side_effect = oracledb.InterfaceError("DPY-1001: not connected")
        provider = PooledConnectionProvider(pooled_config)
        with patch.object(oracledb, "create_pool_async", MagicMock(return_value=pool)):
            conn = await provider.acquire()

        with pytest.raises(ReleaseError):
            await provider.release(conn)

    @pytest.mark.asyncio
    async def test_pool_creation_error(self, pooled_config):
        """Test pool creation failures raise DatabaseConnectionError."""
        error = oracledb.DatabaseError("DPY-4011: the database or network closed the connection")
        provider = PooledConnectionProvider(pooled_config)
        with patch.object(oracledb, "create_pool_async", MagicMock(side_effect=error)):
            with pytest.raises(DatabaseConnectionError, match="DPY-4011"):
                await provider.acquire()

    @pytest.mark.asyncio
    async def test_close_prevents_acquire(self, pooled_config, pool):
        """Test the pool is closed and later acquires fail."""
        provider = PooledConnectionProvider(pooled_config)
        with patch.object(oracledb, "create_pool_async", MagicMock(return_value=pool)):
            await provider.acquire()
            await provider.close()

            with pytest.raises(DatabaseConnectionError, match="closed"):
                await provider.acquire()

        pool.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_while_borrowed_releases_then_closes(self, pooled_config, pool):
        """Test a connection held across close() is still returned before the pool closes."""
        busy = set()

        async def acquire():
            conn = FakeConnection()
            busy.add(id(conn))
            return conn

        async def release(conn):
            busy.discard(id(conn))

        async def close(force=False):
            if busy and not force:
                raise oracledb.InterfaceError("DPY-1005: unable to close the pool since it is busy")

        pool.acquire.side_effect = acquire
        pool.release.side_effect = release
        pool.close.side_effect = close
        provider = PooledConnectionProvider(pooled_config)
        with patch.object(oracledb, "create_pool_async", MagicMock(return_value=pool)):
            async with provider.connection() as conn:
                await provider.close()
                pool.close.assert_not_awaited()

        pool.release.assert_awaited_once_with(conn)
        pool.close.assert_awaited_once()
        assert busy == set()

    @pytest.mark.asyncio
    async def test_release_unknown_connection(self, pooled_config, pool):
        """Test releasing a connection the provider never handed out fails."""
        provider = PooledConnectionProvider(pooled_config)

        with pytest.raises(ReleaseError, match="not acquired"):
            await provider.release(FakeConnection())

        pool.release.assert_not_awaited()


class TestCreateConnectionProvider:
    """Tests for create_connection_provider."""

    def test_direct_by_default(self, db_config):
        assert isinstance(create_connection_provider(db_config), DirectConnectionProvider)

    def test_pooled_when_enabled(self, db_config):
        config = db_config.model_copy(update={"pool_enabled": True})

        assert isinstance(create_connection_provider(config), PooledConnectionProvider)
