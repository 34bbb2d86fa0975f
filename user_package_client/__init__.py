"""Data-access client for the user_package stored routines."""

from .config import DatabaseConfig, configure_logging, load_database_config
from .exceptions import (
    ConfigurationError,
    DataAccessError,
    DatabaseConnectionError,
    ExecutionError,
    ReleaseError,
)
from .lifecycle import UserPackageLifecycle
from .models import CallResult, ScalarIn, ScalarOutNumeric, ScalarOutText, StructuredOutJSON, User
from .repository import (
    BoundCallExecutor,
    ConnectionProvider,
    DirectConnectionProvider,
    PooledConnectionProvider,
    ScriptExecutor,
    UserRepository,
    create_connection_provider,
)
from .scenario import ScenarioContext, ScenarioReport, run_user_crud_scenario

__all__ = [
    "BoundCallExecutor",
    "CallResult",
    "ConfigurationError",
    "ConnectionProvider",
    "DataAccessError",
    "DatabaseConfig",
    "DatabaseConnectionError",
    "DirectConnectionProvider",
    "ExecutionError",
    "PooledConnectionProvider",
    "ReleaseError",
    "ScalarIn",
    "ScalarOutNumeric",
    "ScalarOutText",
    "ScenarioContext",
    "ScenarioReport",
    "ScriptExecutor",
    "StructuredOutJSON",
    "User",
    "UserPackageLifecycle",
    "UserRepository",
    "configure_logging",
    "create_connection_provider",
    "load_database_config",
    "run_user_crud_scenario",
]
