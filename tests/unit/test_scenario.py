"""Unit tests for the CRUD scenario runner."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from user_package_client.repository.executor import BoundCallExecutor
from user_package_client.repository.user_repo import UserRepository
from user_package_client.scenario import ScenarioContext, run_user_crud_scenario


class TestScenarioContext:
    """Tests for ScenarioContext."""

    def test_last_id(self):
        context = ScenarioContext()
        context.remember(4)
        context.remember(9)

        assert context.last_id == 9
        assert context.created_ids == [4, 9]

    def test_last_id_empty(self):
        with pytest.raises(LookupError):
            ScenarioContext().last_id

    def test_contexts_are_independent(self):
        first, second = ScenarioContext(), ScenarioContext()
        first.remember(1)

        assert second.created_ids == []


class TestRunUserCrudScenario:
    """Tests for run_user_crud_scenario."""

    @pytest.mark.asyncio
    async def test_scenario_against_routines(self, fake_provider, user_store):
        """Test the literal create/get/update/delete scenario."""
        repository = UserRepository(BoundCallExecutor(fake_provider))
        context = ScenarioContext()

        report = await run_user_crud_scenario(repository, context)

        assert report.passed is True
        assert report.user_id == context.last_id
        assert report.created_name == "John Doe"
        assert report.updated == 1
        assert report.updated_name == "Jane Doe"
        assert report.deleted == 1
        assert report.name_after_delete is None
        assert user_store.users == {}

    @pytest.mark.asyncio
    async def test_scenario_reports_failure(self):
        """Test a routine that ignores updates marks the report as failed."""
        repository = MagicMock(spec=UserRepository)
        repository.create = AsyncMock(return_value=5)
        repository.get_by_id = AsyncMock(side_effect=["John Doe", "John Doe", None])
        repository.update = AsyncMock(return_value=0)
        repository.delete = AsyncMock(return_value=1)

        report = await run_user_crud_scenario(repository)

        assert report.passed is False
        assert report.updated == 0
        repository.update.assert_awaited_once_with(5, "Jane Doe")
        repository.delete.assert_awaited_once_with(5)
