"""Pytest configuration and shared fixtures."""

import pytest

from user_package_client.config import DatabaseConfig

from tests.fakes import FakeProvider, FakeUserStore


@pytest.fixture
def db_config() -> DatabaseConfig:
    """Configuration without wallet materials."""
    return DatabaseConfig(
        user="app_user",
        password="secret",
        connect_string="localhost:1521/FREEPDB1",
        mle_module="user_module",
        connect_timeout=1.0,
    )


@pytest.fixture
def user_store() -> FakeUserStore:
    return FakeUserStore()


@pytest.fixture
def fake_provider(db_config, user_store) -> FakeProvider:
    return FakeProvider(db_config, responder=user_store)
