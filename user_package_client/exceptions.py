"""Exceptions for the user package data-access layer."""

import re
from typing import Optional

_ERROR_CODE_PATTERN = re.compile(r"\b((?:ORA|DPY|DPI|PLS)-\d+)")


class DataAccessError(Exception):
    """Base exception for all data-access failures."""


class ConfigurationError(DataAccessError):
    """Exception raised when required configuration is missing or invalid."""


class DatabaseConnectionError(DataAccessError, ConnectionError):
    """Exception raised when a connection to the database cannot be acquired.

    Covers unreachable endpoints, rejected credentials, wallet files that
    fail to load or decrypt, and acquire timeouts.
    """

    def __init__(self, message: str, endpoint: Optional[str] = None):
        self.endpoint = endpoint
        self.message = message
        super().__init__(self.message)


class ExecutionError(DataAccessError):
    """Exception raised when the database rejects a statement or routine call.

    Carries the database diagnostic unchanged: ``code`` is the error code
    reported by the driver (e.g. ``ORA-06550``) when one is available.
    """

    def __init__(self, message: str, code: Optional[str] = None, statement: Optional[str] = None):
        self.code = code
        self.message = message
        self.statement = statement
        super().__init__(f"{code}: {message}" if code and code not in message else message)

    @classmethod
    def from_driver_error(cls, error: Exception, statement: Optional[str] = None) -> "ExecutionError":
        """Build an ExecutionError from an ``oracledb`` exception."""
        code, message = driver_diagnostic(error)
        return cls(message, code=code, statement=statement)


class ReleaseError(DataAccessError):
    """Exception raised when a connection cannot be returned.

    Always secondary: it is logged by the scoped connection helper and
    never replaces the failure of the call that owned the connection.
    """


def driver_diagnostic(error: Exception) -> tuple[Optional[str], str]:
    """Extract ``(code, message)`` from an ``oracledb`` exception.

    ``oracledb`` errors carry an ``_Error`` object as their first argument
    with ``full_code`` and ``message`` attributes. Plain exceptions fall back
    to parsing the code out of the message text.
    """
    detail = error.args[0] if error.args else None
    message = getattr(detail, "message", None) or str(error)
    code = getattr(detail, "full_code", None)
    if not code:
        match = _ERROR_CODE_PATTERN.search(message)
        code = match.group(1) if match else None
    return code, message.strip()
