"""Invoice repository interface.
Defines the contract for invoice data persistence operations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Dict, Any
from datetime import date

from lexbill.domain.models.invoice import Invoice, InvoiceStatus


@dataclass
class InvoiceFilter:
    """Criteria for listing invoices. Unset fields do not filter."""

    client_id: Optional[int] = None
    case_id: Optional[int] = None
    status: Optional[InvoiceStatus] = None
    issued_after: Optional[date] = None
    issued_before: Optional[date] = None
    due_after: Optional[date] = None
    due_before: Optional[date] = None
    include_deleted: bool = False


class InvoiceRepository(ABC):
    """
    Repository interface for Invoice aggregate.
    Items and payments are loaded and saved together with their invoice.
    """

    @abstractmethod
    async def save(self, invoice: Invoice) -> Invoice:
        """
        Save an invoice entity with its items and payments.
        Returns the saved invoice with its assigned id.
        Raises DuplicateEntityError when the invoice number is taken.
        """
        pass

    @abstractmethod
    async def find_by_id(self, invoice_id: int, include_deleted: bool = False) -> Optional[Invoice]:
        """
        Find an invoice by its ID.
        Soft-deleted invoices are skipped unless include_deleted is set.
        """
        pass

    @abstractmethod
    async def find_by_invoice_number(self, invoice_number: str) -> Optional[Invoice]:
        """
        Find an invoice by its number, deleted or not.
        """
        pass

    @abstractmethod
    async def list(self, filters: InvoiceFilter) -> List[Invoice]:
        """
        List invoices matching the filter, newest issue date first.
        """
        pass

    @abstractmethod
    async def find_overdue(self, today: date) -> List[Invoice]:
        """
        Find live invoices past their due date that still have a balance
        and have left draft, earliest due date first.
        """
        pass

    @abstractmethod
    async def find_latest_number(self, prefix: str) -> Optional[str]:
        """
        Greatest invoice number starting with prefix, soft-deleted invoices included.
        """
        pass

    @abstractmethod
    async def summarize_by_status(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> Dict[str, Dict[str, Any]]:
        """
        Live invoice totals grouped by status:
        {status: {"count", "total", "amount_paid", "balance"}}.
        """
        pass

    @abstractmethod
    async def count_issued_since(self, since: date) -> int:
        """
        Number of live invoices issued on or after the given date.
        """
        pass

    @abstractmethod
    async def monthly_invoiced(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> List[Dict[str, Any]]:
        """
        Invoiced totals per issue month: [{"month": "YYYY-MM", "count", "total"}].
        """
        pass

    @abstractmethod
    async def monthly_payments(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> List[Dict[str, Any]]:
        """
        Payments received per payment month: [{"month": "YYYY-MM", "count", "total"}].
        """
        pass
