"""Statement execution over borrowed connections."""

import json
import logging
from decimal import Decimal
from typing import Any

import oracledb

from ..constants import API_NAME
from ..exceptions import ExecutionError
from ..models.binds import (
    Bind,
    BindSpec,
    ScalarIn,
    ScalarOutNumeric,
    ScalarOutText,
    normalize_binds,
)
from ..models.user import CallResult
from .connection import ConnectionProvider

logger = logging.getLogger(__name__)


class ScriptExecutor:
    """Runs administrative scripts (DDL) without bind parameters."""

    def __init__(self, provider: ConnectionProvider):
        self.provider = provider

    async def run(self, script: str) -> None:
        """Execute ``script`` as a single unit on its own connection.

        Raises:
            ExecutionError: If the database rejects the script. Raised after
                the connection has been released.
            DatabaseConnectionError: If no connection could be acquired.
        """
        async with self.provider.connection() as conn:
            try:
                with conn.cursor() as cursor:
                    await cursor.execute(script)
            except oracledb.Error as e:
                logger.error(f"{API_NAME} Error executing script: {e}", exc_info=True)
                raise ExecutionError.from_driver_error(e, statement=script) from e
        logger.info(f"{API_NAME} Script executed successfully")


class BoundCallExecutor:
    """Runs routine calls with typed IN/OUT bind parameters."""

    def __init__(self, provider: ConnectionProvider):
        self.provider = provider

    async def call(self, statement: str, binds: BindSpec) -> CallResult:
        """Execute ``statement`` and marshal every OUT parameter.

        Args:
            statement: PL/SQL block with named placeholders
            binds: Parameter name to literal value or OUT bind descriptor

        Returns:
            CallResult holding the marshalled OUT values by parameter name

        Raises:
            ExecutionError: If the statement or routine call is rejected
            DatabaseConnectionError: If no connection could be acquired
        """
        normalized = normalize_binds(binds)
        async with self.provider.connection() as conn:
            try:
                with conn.cursor() as cursor:
                    params, out_vars = self._prepare(cursor, normalized)
                    await cursor.execute(statement, params)
                    out_binds = {}
                    for name, var in out_vars.items():
                        out_binds[name] = await self._marshal(name, normalized[name], var.getvalue())
            except oracledb.Error as e:
                logger.error(f"{API_NAME} Error executing PL/SQL: {e}", exc_info=True)
                raise ExecutionError.from_driver_error(e, statement=statement) from e
        return CallResult(out_binds=out_binds)

    def _prepare(self, cursor: Any, binds: dict[str, Bind]) -> tuple[dict[str, Any], dict[str, Any]]:
        """Build driver parameters, creating one variable per OUT bind."""
        params: dict[str, Any] = {}
        out_vars: dict[str, Any] = {}
        for name, bind in binds.items():
            if isinstance(bind, ScalarIn):
                params[name] = bind.value
                continue
            if isinstance(bind, ScalarOutNumeric):
                var = cursor.var(oracledb.DB_TYPE_NUMBER)
            elif isinstance(bind, ScalarOutText):
                var = cursor.var(oracledb.DB_TYPE_VARCHAR, bind.size)
            else:
                # StructuredOutJSON; normalize_binds admits no other variant
                var = cursor.var(oracledb.DB_TYPE_JSON)
            params[name] = var
            out_vars[name] = var
        return params, out_vars

    async def _marshal(self, name: str, bind: Bind, value: Any) -> Any:
        if isinstance(bind, ScalarOutNumeric):
            return _to_number(name, value)
        if isinstance(bind, ScalarOutText):
            return None if value is None else str(value)
        return await _to_records(name, value)


def _to_number(name: str, value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise ExecutionError(f"OUT parameter '{name}' returned a non-numeric value: {value!r}")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, Decimal) and value.is_finite() and value == value.to_integral_value():
        return int(value)
    return value


async def _to_records(name: str, value: Any) -> list:
    """Parse a JSON OUT value into an ordered list of records."""
    if value is None:
        return []
    read = getattr(value, "read", None)
    if callable(read):
        # LOB locator
        value = await read()
    try:
        if isinstance(value, (bytes, bytearray)):
            value = value.decode("utf-8")
        if isinstance(value, str):
            value = json.loads(value) if value.strip() else None
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ExecutionError(f"OUT parameter '{name}' is not valid JSON: {e}") from e
    if value is None:
        return []
    if not isinstance(value, list):
        raise ExecutionError(
            f"OUT parameter '{name}' expected a JSON array, got {type(value).__name__}"
        )
    return value
