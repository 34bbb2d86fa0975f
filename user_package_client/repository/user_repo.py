"""User repository backed by the user_package stored routines."""

import logging
from typing import Any, List, Optional

from ..constants import (
    API_NAME,
    CREATE_USER_SQL,
    DELETE_USER_SQL,
    GET_ALL_USERS_SQL,
    GET_USER_SQL,
    UPDATE_USER_SQL,
)
from ..exceptions import ExecutionError
from ..models.binds import ScalarOutNumeric, ScalarOutText, StructuredOutJSON
from ..models.user import User
from .executor import BoundCallExecutor

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for user operations.

    Each method is a single routine call on its own connection. Nothing is
    retried, and empty lookups or zero affected rows are returned as values
    rather than raised.
    """

    def __init__(self, executor: BoundCallExecutor):
        """Initialize repository with a bound call executor."""
        self.executor = executor

    async def create(self, name: str) -> int:
        """Create a user and return the identifier assigned by the database.

        Raises:
            ExecutionError: If the routine fails or returns a non-numeric id
        """
        result = await self.executor.call(
            CREATE_USER_SQL,
            {"name": name, "id": ScalarOutNumeric()},
        )
        user_id = result.get("id")
        if not isinstance(user_id, int):
            raise ExecutionError(
                f"newUserFunc returned a non-integer id: {user_id!r}", statement=CREATE_USER_SQL
            )
        logger.info(f"{API_NAME} New user created with ID: {user_id}")
        return user_id

    async def get_by_id(self, user_id: int) -> Optional[str]:
        """Return the name of a user, or None when no user has this id."""
        result = await self.executor.call(
            GET_USER_SQL,
            {"id": user_id, "user": ScalarOutText()},
        )
        name = result.get("user")
        # The routine reports a missing user as an empty value
        if not name:
            logger.debug(f"{API_NAME} No user found with ID: {user_id}")
            return None
        return name

    async def list_all(self) -> List[dict[str, Any]]:
        """Return every user record, in routine order. Empty when none exist."""
        result = await self.executor.call(
            GET_ALL_USERS_SQL,
            {"json": StructuredOutJSON()},
        )
        return list(result.get("json"))

    async def list_users(self) -> List[User]:
        """Return every user as a User model."""
        return [User.model_validate(record) for record in await self.list_all()]

    async def update(self, user_id: int, name: str) -> int:
        """Rename a user and return the affected row count (0 when missing)."""
        result = await self.executor.call(
            UPDATE_USER_SQL,
            {"id": user_id, "name": name, "affected": ScalarOutNumeric()},
        )
        affected = _affected_count(result.get("affected"))
        logger.info(f"{API_NAME} User {user_id} updated (affected={affected})")
        return affected

    async def delete(self, user_id: int) -> int:
        """Delete a user and return the affected row count (0 when missing)."""
        result = await self.executor.call(
            DELETE_USER_SQL,
            {"id": user_id, "affected": ScalarOutNumeric()},
        )
        affected = _affected_count(result.get("affected"))
        logger.info(f"{API_NAME} User {user_id} deleted (affected={affected})")
        return affected


def _affected_count(value: Any) -> int:
    return 0 if value is None else int(value)
