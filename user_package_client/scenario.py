"""End-to-end CRUD scenario over the user repository."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .constants import API_NAME
from .repository.user_repo import UserRepository

logger = logging.getLogger(__name__)


@dataclass
class ScenarioContext:
    """Identifiers created during one scenario, passed explicitly between steps."""

    created_ids: List[int] = field(default_factory=list)

    @property
    def last_id(self) -> int:
        if not self.created_ids:
            raise LookupError("No user has been created in this scenario")
        return self.created_ids[-1]

    def remember(self, user_id: int) -> int:
        self.created_ids.append(user_id)
        return user_id


@dataclass
class ScenarioReport:
    """Values observed at each step of the CRUD scenario."""

    user_id: int
    created_name: Optional[str]
    updated: int
    updated_name: Optional[str]
    deleted: int
    name_after_delete: Optional[str]

    @property
    def passed(self) -> bool:
        return (
            self.created_name == "John Doe"
            and self.updated == 1
            and self.updated_name == "Jane Doe"
            and self.deleted == 1
            and self.name_after_delete is None
        )


async def run_user_crud_scenario(
    repository: UserRepository, context: Optional[ScenarioContext] = None
) -> ScenarioReport:
    """Create, read, rename, and delete one user, recording each result.

    Steps run strictly in sequence: every call after ``create`` needs the
    identifier it returned.
    """
    context = context or ScenarioContext()

    user_id = context.remember(await repository.create("John Doe"))
    created_name = await repository.get_by_id(user_id)
    updated = await repository.update(user_id, "Jane Doe")
    updated_name = await repository.get_by_id(user_id)
    deleted = await repository.delete(user_id)
    name_after_delete = await repository.get_by_id(user_id)

    report = ScenarioReport(
        user_id=user_id,
        created_name=created_name,
        updated=updated,
        updated_name=updated_name,
        deleted=deleted,
        name_after_delete=name_after_delete,
    )
    logger.info(f"{API_NAME} CRUD scenario for user {user_id}: passed={report.passed}")
    return report
