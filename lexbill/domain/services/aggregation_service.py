"""Billable item aggregation.
Turns unbilled time entries and expenses into invoice line items.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Iterable

from lexbill.domain.models.base import round_currency
from lexbill.domain.models.invoice import InvoiceItem
from lexbill.domain.models.time_entry import TimeEntry
from lexbill.domain.models.expense import Expense


@dataclass
class BillableItems:
    """Line items gathered for one client, with the records they came from."""

    items: List[InvoiceItem] = field(default_factory=list)
    time_entries: List[TimeEntry] = field(default_factory=list)
    expenses: List[Expense] = field(default_factory=list)

    @property
    def time_entries_total(self) -> float:
        return round_currency(sum(item.amount for item in self.items if item.time_entry_id is not None))

    @property
    def expenses_total(self) -> float:
        return round_currency(sum(item.amount for item in self.items if item.expense_id is not None))

    @property
    def subtotal(self) -> float:
        return round_currency(sum(item.amount for item in self.items))

    @property
    def total_minutes(self) -> int:
        return sum(entry.duration_minutes for entry in self.time_entries)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def to_dict(self) -> dict:
        return {
            "items": [item.to_dict() for item in self.items],
            "time_entry_count": len(self.time_entries),
            "expense_count": len(self.expenses),
            "total_hours": round(self.total_minutes / 60, 2),
            "time_entries_total": self.time_entries_total,
            "expenses_total": self.expenses_total,
            "subtotal": self.subtotal
        }


class BillableItemAggregator:
    """
    Domain service selecting what can still be billed to a client.

    A record qualifies when it is billable, not yet invoiced and not deleted,
    belongs to the client (and case, when given) and, when explicit id lists
    are passed, is listed there. Time entries come first, then expenses,
    each in the order received.
    """

    def collect(
        self,
        time_entries: Iterable[TimeEntry],
        expenses: Iterable[Expense],
        client_id: int,
        case_id: Optional[int] = None,
        time_entry_ids: Optional[List[int]] = None,
        expense_ids: Optional[List[int]] = None
    ) -> BillableItems:
        result = BillableItems()

        for entry in time_entries:
            if not self._selected(entry, client_id, case_id, time_entry_ids):
                continue
            result.time_entries.append(entry)
            result.items.append(self.time_entry_item(entry))

        for expense in expenses:
            if not self._selected(expense, client_id, case_id, expense_ids):
                continue
            result.expenses.append(expense)
            result.items.append(self.expense_item(expense))

        return result

    def time_entry_item(self, entry: TimeEntry) -> InvoiceItem:
        """Line item for a time entry: hours at the entry's billing rate."""
        description = entry.description
        if entry.user_name:
            description = f"{description} ({entry.user_name})"

        return InvoiceItem(
            description=description,
            quantity=entry.duration_hours,
            rate=entry.billing_rate,
            amount=entry.billable_amount,
            time_entry_id=entry.id,
            case_id=entry.case_id,
            taxable=True
        )

    def expense_item(self, expense: Expense) -> InvoiceItem:
        """Line item for an expense: one unit at the billable amount."""
        amount = expense.amount_to_bill
        return InvoiceItem(
            description=f"Expense: {expense.description}",
            quantity=1,
            rate=amount,
            amount=amount,
            expense_id=expense.id,
            case_id=expense.case_id,
            taxable=True
        )

    @staticmethod
    def _selected(record, client_id: int, case_id: Optional[int], ids: Optional[List[int]]) -> bool:
        if not record.is_billable:
            return False
        if record.client_id != client_id:
            return False
        if case_id is not None and record.case_id != case_id:
            return False
        if ids is not None and record.id not in ids:
            return False
        return True
