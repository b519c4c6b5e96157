"""Expense repository interface."""

from abc import ABC, abstractmethod
from typing import List, Optional, Dict
from datetime import date

from lexbill.domain.models.expense import Expense


class ExpenseRepository(ABC):
    """Repository interface for Expense entities."""

    @abstractmethod
    async def save(self, expense: Expense) -> Expense:
        """Save an expense."""
        pass

    @abstractmethod
    async def find_by_ids(self, expense_ids: List[int]) -> List[Expense]:
        """
        Find live expenses by id. Missing ids are simply absent from the result.
        """
        pass

    @abstractmethod
    async def find_unbilled(
        self,
        client_id: int,
        case_id: Optional[int] = None,
        expense_ids: Optional[List[int]] = None
    ) -> List[Expense]:
        """
        Billable, uninvoiced, live expenses for a client, oldest expense date first.
        Narrowed to a case and to an explicit id list when given.
        """
        pass

    @abstractmethod
    async def find_by_invoice(self, invoice_id: int) -> List[Expense]:
        """Expenses currently billed on the given invoice."""
        pass

    @abstractmethod
    async def summarize(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> Dict[str, float]:
        """
        Expense amounts in the period: {"total", "billable", "billed"}.
        """
        pass
