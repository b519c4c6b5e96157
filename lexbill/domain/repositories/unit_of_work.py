"""Unit of work interface.
Groups the repositories a command touches so their writes commit together.
"""

from abc import ABC, abstractmethod

from .invoice_repository import InvoiceRepository
from .time_entry_repository import TimeEntryRepository
from .expense_repository import ExpenseRepository
from .client_repository import ClientRepository, CaseRepository
from .sequence_repository import SequenceRepository


class UnitOfWork(ABC):
    """
    Transaction boundary for one command.

    Usage::

        async with uow:
            ...
            await uow.commit()

    Leaving the block without commit rolls back every write made inside it.
    """

    invoices: InvoiceRepository
    time_entries: TimeEntryRepository
    expenses: ExpenseRepository
    clients: ClientRepository
    cases: CaseRepository
    sequences: SequenceRepository

    async def __aenter__(self) -> "UnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.rollback()

    @abstractmethod
    async def commit(self) -> None:
        """Persist every write made in this unit of work."""
        pass

    @abstractmethod
    async def rollback(self) -> None:
        """Discard uncommitted writes. A no-op after commit."""
        pass
