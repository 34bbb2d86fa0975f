"""Models for the user package client."""

from .binds import (
    Bind,
    BindSpec,
    ScalarIn,
    ScalarOutNumeric,
    ScalarOutText,
    StructuredOutJSON,
    normalize_binds,
)
from .user import CallResult, User

__all__ = [
    "Bind",
    "BindSpec",
    "CallResult",
    "ScalarIn",
    "ScalarOutNumeric",
    "ScalarOutText",
    "StructuredOutJSON",
    "User",
    "normalize_binds",
]
