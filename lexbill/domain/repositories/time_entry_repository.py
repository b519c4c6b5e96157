"""Time entry repository interface."""

from abc import ABC, abstractmethod
from typing import List, Optional, Dict
from datetime import date

from lexbill.domain.models.time_entry import TimeEntry


class TimeEntryRepository(ABC):
    """
    Repository interface for TimeEntry entities.
    Billing only reads entries and flips their invoiced state.
    """

    @abstractmethod
    async def save(self, time_entry: TimeEntry) -> TimeEntry:
        """Save a time entry."""
        pass

    @abstractmethod
    async def find_by_ids(self, entry_ids: List[int]) -> List[TimeEntry]:
        """
        Find live time entries by id. Missing ids are simply absent from the result.
        """
        pass

    @abstractmethod
    async def find_unbilled(
        self,
        client_id: int,
        case_id: Optional[int] = None,
        entry_ids: Optional[List[int]] = None
    ) -> List[TimeEntry]:
        """
        Billable, uninvoiced, live entries for a client, oldest entry date first.
        Narrowed to a case and to an explicit id list when given.
        """
        pass

    @abstractmethod
    async def find_by_invoice(self, invoice_id: int) -> List[TimeEntry]:
        """Entries currently billed on the given invoice."""
        pass

    @abstractmethod
    async def summarize_minutes(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> Dict[str, int]:
        """
        Minutes recorded in the period: {"total_minutes", "billable_minutes"}.
        """
        pass
