"""Install and remove the user_package routines.

The package functions are call specifications for an MLE JavaScript module;
the module itself is deployed separately and referenced by name.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional, Sequence

from .config import DatabaseConfig
from .constants import API_NAME, PACKAGE_NAME
from .exceptions import ConfigurationError, DataAccessError
from .repository.executor import ScriptExecutor

logger = logging.getLogger(__name__)

_IDENTIFIER_PART = r'(?:[A-Za-z][A-Za-z0-9_$#]*|"[^"]+")'
_IDENTIFIER = re.compile(rf"^{_IDENTIFIER_PART}(?:\.{_IDENTIFIER_PART})?$")

# PL/SQL parameter type -> MLE signature type token
_SIGNATURE_TYPES = {
    "VARCHAR2": "string",
    "NUMBER": "number",
}


@dataclass(frozen=True)
class RoutineDefinition:
    """One package function and the JavaScript export implementing it."""

    name: str
    js_name: str
    return_type: str
    parameters: tuple[tuple[str, str], ...] = ()

    @property
    def signature(self) -> str:
        types = ", ".join(_SIGNATURE_TYPES[sql_type] for _, sql_type in self.parameters)
        return f"{self.js_name}({types})"

    @property
    def header(self) -> str:
        if not self.parameters:
            return f"FUNCTION {self.name} RETURN {self.return_type}"
        params = ", ".join(f"{name} IN {sql_type}" for name, sql_type in self.parameters)
        return f"FUNCTION {self.name}({params}) RETURN {self.return_type}"


USER_ROUTINES = (
    RoutineDefinition("newUserFunc", "newUser", "NUMBER", (("name", "VARCHAR2"),)),
    RoutineDefinition("getUser", "getUser", "VARCHAR2", (("id", "NUMBER"),)),
    RoutineDefinition("getAllUsers", "getAllUsers", "JSON"),
    RoutineDefinition("updateUser", "updateUser", "NUMBER", (("id", "NUMBER"), ("name", "VARCHAR2"))),
    RoutineDefinition("deleteUser", "deleteUser", "NUMBER", (("id", "NUMBER"),)),
)


def validate_identifier(value: Optional[str], what: str) -> str:
    """Return ``value`` if it is a plain or schema-qualified SQL identifier."""
    if not value or not _IDENTIFIER.match(value):
        raise ConfigurationError(f"Invalid {what}: {value!r}")
    return value


def build_package_spec(
    package_name: str = PACKAGE_NAME, routines: Sequence[RoutineDefinition] = USER_ROUTINES
) -> str:
    validate_identifier(package_name, "package name")
    lines = [f"CREATE OR REPLACE PACKAGE {package_name} AS"]
    lines.extend(f"    {routine.header};" for routine in routines)
    lines.append(f"END {package_name};")
    return "\n".join(lines) + "\n"


def build_package_body(
    mle_module: str,
    package_name: str = PACKAGE_NAME,
    routines: Sequence[RoutineDefinition] = USER_ROUTINES,
) -> str:
    validate_identifier(package_name, "package name")
    validate_identifier(mle_module, "MLE module name")
    lines = [f"CREATE OR REPLACE PACKAGE BODY {package_name} AS"]
    for routine in routines:
        lines.append(f"    {routine.header}")
        lines.append(f"    AS MLE MODULE {mle_module}")
        lines.append(f"    SIGNATURE '{routine.signature}';")
        lines.append("")
    lines[-1] = f"END {package_name};"
    return "\n".join(lines) + "\n"


def build_drop_package(package_name: str = PACKAGE_NAME) -> str:
    validate_identifier(package_name, "package name")
    return f"DROP PACKAGE {package_name}"


class UserPackageLifecycle:
    """Creates the routine package before a run and drops it afterwards.

    ``setup`` raises on failure so callers never run against a missing
    package; ``teardown`` only logs, so it cannot hide the outcome of the
    work done in between.
    """

    def __init__(
        self,
        executor: ScriptExecutor,
        mle_module: Optional[str],
        package_name: str = PACKAGE_NAME,
        routines: Sequence[RoutineDefinition] = USER_ROUTINES,
    ):
        self.executor = executor
        self.mle_module = validate_identifier(mle_module, "MLE module name")
        self.package_name = validate_identifier(package_name, "package name")
        self.routines = tuple(routines)

    @classmethod
    def from_config(cls, executor: ScriptExecutor, config: DatabaseConfig) -> "UserPackageLifecycle":
        if not config.mle_module:
            raise ConfigurationError("MLE_MODULE is required to create the user package")
        return cls(executor, config.mle_module)

    async def setup(self) -> None:
        try:
            logger.info(f"{API_NAME} Creating package...")
            await self.executor.run(build_package_spec(self.package_name, self.routines))

            logger.info(f"{API_NAME} Creating package body...")
            await self.executor.run(build_package_body(self.mle_module, self.package_name, self.routines))
        except DataAccessError as e:
            logger.error(f"{API_NAME} Error during package creation: {e}")
            raise
        logger.info(f"{API_NAME} Successfully created package and package body")

    async def teardown(self) -> None:
        try:
            logger.info(f"{API_NAME} Dropping package...")
            await self.executor.run(build_drop_package(self.package_name))
        except DataAccessError as e:
            logger.error(f"{API_NAME} Error during package drop: {e}")
            return
        logger.info(f"{API_NAME} Successfully dropped package")

    async def __aenter__(self) -> "UserPackageLifecycle":
        await self.setup()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.teardown()
