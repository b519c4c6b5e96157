"""
Base use case classes for the application layer.
Provides common patterns and structure for use case implementations.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, TypeVar, Generic, List
from dataclasses import dataclass
from datetime import datetime

from lexbill.domain.models.base import DomainException, DomainEvent, ValidationError, StorageError
from lexbill.domain.repositories.unit_of_work import UnitOfWork


logger = logging.getLogger(__name__)

T = TypeVar('T')
R = TypeVar('R')


@dataclass
class UseCaseResult(Generic[T]):
    """Result wrapper for use case operations."""

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    @classmethod
    def success_result(cls, data: T, metadata: Optional[Dict[str, Any]] = None) -> "UseCaseResult[T]":
        """Create a successful result."""
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def error_result(
        cls,
        error: str,
        error_code: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> "UseCaseResult[T]":
        """Create an error result."""
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            metadata=metadata
        )

    @classmethod
    def from_exception(cls, exc: DomainException) -> "UseCaseResult[T]":
        """Create error result from a domain exception."""
        metadata: Dict[str, Any] = {}
        if isinstance(exc, StorageError):
            metadata["retryable"] = exc.retryable
        if getattr(exc, "field", None):
            metadata["field"] = exc.field
        return cls.error_result(exc.message, exc.code, metadata)


class BaseUseCase(ABC, Generic[T, R]):
    """
    Base class for all use cases.

    Domain exceptions become error results. Anything else is a bug or an
    infrastructure fault and propagates to the caller.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow
        self.execution_start: Optional[datetime] = None
        self.execution_end: Optional[datetime] = None
        self.result_metadata: Dict[str, Any] = {}

    async def execute(self, request: T) -> UseCaseResult[R]:
        """
        Execute the use case with error conversion and timing.
        """
        self.execution_start = datetime.utcnow()
        self.result_metadata = {}

        try:
            await self._validate_request(request)
            result = await self._execute_business_logic(request)

        except DomainException as exc:
            self.execution_end = datetime.utcnow()
            if isinstance(exc, StorageError):
                logger.error(f"{type(self).__name__} failed: {exc.message}", exc_info=True)
            else:
                logger.info(f"{type(self).__name__} rejected: {exc.message}")

            error_result = UseCaseResult.from_exception(exc)
            error_result.metadata.update({
                "execution_time_seconds": self._elapsed(),
                "failed_at": self.execution_end.isoformat(),
                "exception_type": type(exc).__name__
            })
            return error_result

        self.execution_end = datetime.utcnow()
        metadata = {
            "execution_time_seconds": self._elapsed(),
            "executed_at": self.execution_end.isoformat()
        }
        metadata.update(self.result_metadata)
        return UseCaseResult.success_result(result, metadata=metadata)

    def _elapsed(self) -> float:
        return (self.execution_end - self.execution_start).total_seconds()

    async def _validate_request(self, request: T) -> None:
        """
        Validate the request. Override in subclasses if needed.
        """
        if request is None:
            raise ValidationError("Request is required")

    @abstractmethod
    async def _execute_business_logic(self, request: T) -> R:
        """
        Execute the core business logic. Must be implemented by subclasses.
        """
        pass


class QueryUseCase(BaseUseCase[T, R]):
    """
    Base class for query use cases (read operations).
    Runs inside the unit of work but never commits.
    """

    async def _execute_business_logic(self, request: T) -> R:
        async with self.uow:
            return await self._execute_query_logic(request)

    @abstractmethod
    async def _execute_query_logic(self, request: T) -> R:
        """Execute the query logic. Must be implemented by subclasses."""
        pass


class CommandUseCase(BaseUseCase[T, R]):
    """
    Base class for command use cases (write operations).

    The command logic runs inside one unit of work. It is committed only when
    the logic returns; any exception leaves the block and rolls every write back.
    Domain events are published after the commit.
    """

    def __init__(self, uow: UnitOfWork):
        super().__init__(uow)
        self.events: List[DomainEvent] = []

    async def _execute_business_logic(self, request: T) -> R:
        self.events = []
        async with self.uow:
            result = await self._execute_command_logic(request)
            await self.uow.commit()

        await self._publish_events()
        return await self._after_commit(result)

    @abstractmethod
    async def _execute_command_logic(self, request: T) -> R:
        """Execute the command logic. Must be implemented by subclasses."""
        pass

    async def _after_commit(self, result: R) -> R:
        """Side effects that must only happen once the writes are durable."""
        return result

    def collect_events(self, aggregate) -> None:
        """Take the pending domain events off an aggregate."""
        self.events.extend(aggregate.pull_events())

    async def _publish_events(self) -> None:
        """Publish collected domain events."""
        for event in self.events:
            logger.info(f"Domain event {event.event_name}: {event.to_dict()['data']}")

        self.events.clear()


class AuthorizedUseCase(BaseUseCase[T, R]):
    """
    Mixin for use cases that act on behalf of a user.
    Authentication happens upstream; this only carries the caller id.
    """

    def __init__(self, uow: UnitOfWork):
        super().__init__(uow)
        self.current_user_id: Optional[str] = None

    def set_current_user(self, user_id: str) -> None:
        """Set the current user context."""
        self.current_user_id = user_id

    async def _validate_request(self, request: T) -> None:
        """Validate request with authentication check."""
        await super()._validate_request(request)

        if not self.current_user_id:
            raise ValidationError("User authentication required")
