"""
Unit tests for the use case base classes.
"""

import pytest
from unittest.mock import AsyncMock

from lexbill.application.use_cases.base_use_case import (
    UseCaseResult, CommandUseCase, QueryUseCase, AuthorizedUseCase
)
from lexbill.domain.models.base import (
    ValidationError, NotFoundError, StorageError, DuplicateEntityError
)

from conftest import FakeUnitOfWork


class TestUseCaseResult:
    """Test cases for UseCaseResult."""

    def test_success_result(self):
        result = UseCaseResult.success_result({"id": 1})

        assert result.success is True
        assert result.data == {"id": 1}
        assert result.error is None
        assert result.error_code is None

    def test_error_result(self):
        result = UseCaseResult.error_result("Something went wrong", "TEST_ERROR")

        assert result.success is False
        assert result.data is None
        assert result.error == "Something went wrong"
        assert result.error_code == "TEST_ERROR"

    def test_from_validation_error_keeps_field(self):
        result = UseCaseResult.from_exception(ValidationError("Tax rate must be between 0 and 100", "tax_rate"))

        assert result.error_code == "VALIDATION_ERROR"
        assert result.metadata == {"field": "tax_rate"}

    def test_from_storage_error_keeps_retryable(self):
        result = UseCaseResult.from_exception(StorageError("database is locked"))

        assert result.error_code == "STORAGE_ERROR"
        assert result.metadata == {"retryable": True}

    def test_from_duplicate_error(self):
        result = UseCaseResult.from_exception(DuplicateEntityError("Invoice", "invoice_number", "INV-2024-00001"))

        assert result.error_code == "DUPLICATE_ENTITY"
        assert result.error == "Invoice with invoice_number='INV-2024-00001' already exists"


class SaveThing(AuthorizedUseCase, CommandUseCase[dict, str]):
    """Command that writes a counter and optionally fails afterwards."""

    def __init__(self, uow, error=None):
        super().__init__(uow)
        self.error = error

    async def _execute_command_logic(self, request: dict) -> str:
        await self.uow.sequences.increment("things")
        if self.error:
            raise self.error
        return request["name"]


class FindThing(QueryUseCase[int, str]):
    async def _execute_query_logic(self, request: int) -> str:
        raise NotFoundError("Thing", request)


class TestCommandUseCase:
    """Test cases for command execution inside a unit of work."""

    def setup_method(self):
        self.uow = FakeUnitOfWork()

    @pytest.mark.asyncio
    async def test_commits_on_success(self):
        use_case = SaveThing(self.uow)
        use_case.set_current_user("lawyer-1")

        result = await use_case.execute({"name": "ok"})

        assert result.success is True
        assert result.data == "ok"
        assert "execution_time_seconds" in result.metadata
        assert self.uow.commits == 1
        assert self.uow.counters == {"things": 1}

    @pytest.mark.asyncio
    async def test_rolls_back_on_domain_error(self):
        use_case = SaveThing(self.uow, error=ValidationError("bad input", "name"))
        use_case.set_current_user("lawyer-1")

        result = await use_case.execute({"name": "ok"})

        assert result.success is False
        assert result.error_code == "VALIDATION_ERROR"
        assert result.metadata["field"] == "name"
        assert result.metadata["exception_type"] == "ValidationError"
        assert self.uow.commits == 0
        assert self.uow.counters == {}

    @pytest.mark.asyncio
    async def test_unexpected_error_propagates_after_rollback(self):
        use_case = SaveThing(self.uow, error=RuntimeError("boom"))
        use_case.set_current_user("lawyer-1")

        with pytest.raises(RuntimeError):
            await use_case.execute({"name": "ok"})

        assert self.uow.counters == {}

    @pytest.mark.asyncio
    async def test_requires_user(self):
        result = await SaveThing(self.uow).execute({"name": "ok"})

        assert result.success is False
        assert result.error == "User authentication required"

    @pytest.mark.asyncio
    async def test_requires_request(self):
        use_case = SaveThing(self.uow)
        use_case.set_current_user("lawyer-1")

        result = await use_case.execute(None)

        assert result.error == "Request is required"

    @pytest.mark.asyncio
    async def test_commit_failure_becomes_storage_error(self):
        self.uow.commit = AsyncMock(side_effect=StorageError("connection lost"))
        use_case = SaveThing(self.uow)
        use_case.set_current_user("lawyer-1")

        result = await use_case.execute({"name": "ok"})

        assert result.success is False
        assert result.error_code == "STORAGE_ERROR"
        assert result.metadata["retryable"] is True
        assert self.uow.counters == {}


class TestQueryUseCase:
    """Test cases for query execution."""

    @pytest.mark.asyncio
    async def test_not_found(self):
        uow = FakeUnitOfWork()

        result = await FindThing(uow).execute(42)

        assert result.error_code == "NOT_FOUND"
        assert result.error == "Thing with id 42 not found"
        assert uow.commits == 0
