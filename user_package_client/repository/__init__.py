"""Repository layer for database operations."""

from .connection import ConnectionProvider, DirectConnectionProvider, create_connection_provider
from .connection_pool import PooledConnectionProvider
from .executor import BoundCallExecutor, ScriptExecutor
from .user_repo import UserRepository

__all__ = [
    "BoundCallExecutor",
    "ConnectionProvider",
    "DirectConnectionProvider",
    "PooledConnectionProvider",
    "ScriptExecutor",
    "UserRepository",
    "create_connection_provider",
]
