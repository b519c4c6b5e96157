"""
Shared fixtures and in-memory fakes for the billing tests.

The fakes behave like a store: saved entities are copied in, lookups hand
copies out, and a unit of work restores its snapshot unless committed.
"""

import copy
from datetime import date
from typing import Any, Dict, List, Optional

import pytest

from lexbill.domain.models.client import Client, Case
from lexbill.domain.models.expense import Expense, ExpenseStatus
from lexbill.domain.models.invoice import InvoiceStatus
from lexbill.domain.models.time_entry import TimeEntry
from lexbill.domain.models.base import DuplicateEntityError
from lexbill.domain.repositories import (
    InvoiceRepository,
    InvoiceFilter,
    TimeEntryRepository,
    ExpenseRepository,
    ClientRepository,
    CaseRepository,
    SequenceRepository,
    UnitOfWork,
)
from lexbill.domain.services.email_service import EmailNotifier


def _in_period(day: date, start: Optional[date], end: Optional[date]) -> bool:
    if start and day < start:
        return False
    if end and day > end:
        return False
    return True


def _by_month(rows) -> List[Dict[str, Any]]:
    months: Dict[str, Dict[str, Any]] = {}
    for day, amount in rows:
        key = day.strftime("%Y-%m")
        bucket = months.setdefault(key, {"month": key, "count": 0, "total": 0.0})
        bucket["count"] += 1
        bucket["total"] += amount
    return [months[key] for key in sorted(months)]


class InMemoryStore:
    """Rows keyed by id with copy-in/copy-out semantics."""

    def __init__(self):
        self.rows: Dict[int, Any] = {}
        self.next_id = 1

    def put(self, entity):
        if entity.id is None:
            entity.id = self.next_id
            self.next_id += 1
        self.rows[entity.id] = copy.deepcopy(entity)
        return entity

    def get(self, entity_id):
        row = self.rows.get(entity_id)
        return copy.deepcopy(row) if row is not None else None

    def all(self):
        return [copy.deepcopy(row) for row in self.rows.values()]


class InMemoryInvoiceRepository(InvoiceRepository):
    def __init__(self, store: InMemoryStore):
        self.store = store

    async def save(self, invoice):
        if invoice.is_new:
            if any(row.invoice_number == invoice.invoice_number for row in self.store.rows.values()):
                raise DuplicateEntityError("Invoice", "invoice_number", invoice.invoice_number)
        return self.store.put(invoice)

    async def find_by_id(self, invoice_id, include_deleted=False):
        invoice = self.store.get(invoice_id)
        if invoice is None or (invoice.is_deleted and not include_deleted):
            return None
        return invoice

    async def find_by_invoice_number(self, invoice_number):
        for invoice in self.store.all():
            if invoice.invoice_number == invoice_number:
                return invoice
        return None

    async def list(self, filters: InvoiceFilter):
        result = []
        for invoice in self.store.all():
            if invoice.is_deleted and not filters.include_deleted:
                continue
            if filters.client_id is not None and invoice.client_id != filters.client_id:
                continue
            if filters.case_id is not None and invoice.case_id != filters.case_id:
                continue
            if filters.status is not None and invoice.status != filters.status:
                continue
            if not _in_period(invoice.issue_date, filters.issued_after, filters.issued_before):
                continue
            if not _in_period(invoice.due_date, filters.due_after, filters.due_before):
                continue
            result.append(invoice)
        return sorted(result, key=lambda invoice: (invoice.issue_date, invoice.id), reverse=True)

    async def find_overdue(self, today):
        result = [
            invoice for invoice in self.store.all()
            if not invoice.is_deleted
            and invoice.status != InvoiceStatus.DRAFT
            and invoice.due_date < today
            and invoice.balance > 0
        ]
        return sorted(result, key=lambda invoice: (invoice.due_date, invoice.id))

    async def find_latest_number(self, prefix):
        numbers = [row.invoice_number for row in self.store.rows.values() if row.invoice_number.startswith(prefix)]
        if not numbers:
            return None
        return max(numbers, key=lambda number: (len(number), number))

    def _live(self, start_date=None, end_date=None):
        return [
            invoice for invoice in self.store.all()
            if not invoice.is_deleted and _in_period(invoice.issue_date, start_date, end_date)
        ]

    async def summarize_by_status(self, start_date=None, end_date=None):
        summary: Dict[str, Dict[str, Any]] = {}
        for invoice in self._live(start_date, end_date):
            bucket = summary.setdefault(
                invoice.status.value,
                {"count": 0, "total": 0.0, "amount_paid": 0.0, "balance": 0.0}
            )
            bucket["count"] += 1
            bucket["total"] += invoice.total
            bucket["amount_paid"] += invoice.amount_paid
            bucket["balance"] += invoice.balance
        return summary

    async def count_issued_since(self, since):
        return len([invoice for invoice in self._live() if invoice.issue_date >= since])

    async def monthly_invoiced(self, start_date=None, end_date=None):
        return _by_month((invoice.issue_date, invoice.total) for invoice in self._live(start_date, end_date))

    async def monthly_payments(self, start_date=None, end_date=None):
        rows = [
            (payment.payment_date, payment.amount)
            for invoice in self._live()
            for payment in invoice.payments
            if _in_period(payment.payment_date, start_date, end_date)
        ]
        return _by_month(rows)


class InMemoryTimeEntryRepository(TimeEntryRepository):
    def __init__(self, store: InMemoryStore):
        self.store = store

    async def save(self, time_entry):
        return self.store.put(time_entry)

    async def find_by_ids(self, entry_ids):
        return [entry for entry in self.store.all() if entry.id in entry_ids and not entry.is_deleted]

    async def find_unbilled(self, client_id, case_id=None, entry_ids=None):
        return [
            entry for entry in self.store.all()
            if entry.is_billable
            and entry.client_id == client_id
            and (case_id is None or entry.case_id == case_id)
            and (entry_ids is None or entry.id in entry_ids)
        ]

    async def find_by_invoice(self, invoice_id):
        return [entry for entry in self.store.all() if entry.invoice_id == invoice_id and not entry.is_deleted]

    async def summarize_minutes(self, start_date=None, end_date=None):
        entries = [
            entry for entry in self.store.all()
            if not entry.is_deleted and _in_period(entry.entry_date, start_date, end_date)
        ]
        return {
            "total_minutes": sum(entry.duration_minutes for entry in entries),
            "billable_minutes": sum(entry.duration_minutes for entry in entries if entry.billable)
        }


class InMemoryExpenseRepository(ExpenseRepository):
    def __init__(self, store: InMemoryStore):
        self.store = store

    async def save(self, expense):
        return self.store.put(expense)

    async def find_by_ids(self, expense_ids):
        return [expense for expense in self.store.all() if expense.id in expense_ids and not expense.is_deleted]

    async def find_unbilled(self, client_id, case_id=None, expense_ids=None):
        return [
            expense for expense in self.store.all()
            if expense.is_billable
            and expense.client_id == client_id
            and (case_id is None or expense.case_id == case_id)
            and (expense_ids is None or expense.id in expense_ids)
        ]

    async def find_by_invoice(self, invoice_id):
        return [expense for expense in self.store.all() if expense.invoice_id == invoice_id and not expense.is_deleted]

    async def summarize(self, start_date=None, end_date=None):
        expenses = [
            expense for expense in self.store.all()
            if not expense.is_deleted and _in_period(expense.expense_date, start_date, end_date)
        ]
        return {
            "total": sum(expense.amount for expense in expenses),
            "billable": sum(expense.billable_amount for expense in expenses if expense.billable),
            "billed": sum(expense.billable_amount for expense in expenses if expense.invoiced)
        }


class InMemoryClientRepository(ClientRepository):
    def __init__(self, store: InMemoryStore):
        self.store = store

    async def find_by_id(self, client_id):
        return self.store.get(client_id)


class InMemoryCaseRepository(CaseRepository):
    def __init__(self, store: InMemoryStore):
        self.store = store

    async def find_by_id(self, case_id):
        return self.store.get(case_id)

    async def find_latest_case_number(self, prefix):
        numbers = [case.case_number for case in self.store.rows.values() if case.case_number.startswith(prefix)]
        return max(numbers) if numbers else None


class InMemorySequenceRepository(SequenceRepository):
    def __init__(self, counters: Dict[str, int]):
        self.counters = counters

    async def increment(self, key, floor=0):
        value = max(self.counters.get(key, 0), floor) + 1
        self.counters[key] = value
        return value


class FakeUnitOfWork(UnitOfWork):
    """Transactional in-memory unit of work."""

    def __init__(self):
        self.invoice_store = InMemoryStore()
        self.time_entry_store = InMemoryStore()
        self.expense_store = InMemoryStore()
        self.client_store = InMemoryStore()
        self.case_store = InMemoryStore()
        self.counters: Dict[str, int] = {}

        self.invoices = InMemoryInvoiceRepository(self.invoice_store)
        self.time_entries = InMemoryTimeEntryRepository(self.time_entry_store)
        self.expenses = InMemoryExpenseRepository(self.expense_store)
        self.clients = InMemoryClientRepository(self.client_store)
        self.cases = InMemoryCaseRepository(self.case_store)
        self.sequences = InMemorySequenceRepository(self.counters)

        self.commits = 0
        self.rollbacks = 0
        self._committed = False
        self._snapshot = None

    def _stores(self):
        return [self.invoice_store, self.time_entry_store, self.expense_store, self.client_store, self.case_store]

    async def __aenter__(self):
        self._committed = False
        self._snapshot = (
            [(copy.deepcopy(store.rows), store.next_id) for store in self._stores()],
            dict(self.counters)
        )
        return self

    async def commit(self):
        self.commits += 1
        self._committed = True

    async def rollback(self):
        if self._committed or self._snapshot is None:
            return

        self.rollbacks += 1
        rows, counters = self._snapshot
        for store, (saved_rows, next_id) in zip(self._stores(), rows):
            store.rows = saved_rows
            store.next_id = next_id
        self.counters.clear()
        self.counters.update(counters)

    # Seeding helpers write straight to the stores, outside any transaction.

    def add_client(self, client: Client) -> Client:
        return self.client_store.put(client)

    def add_case(self, case: Case) -> Case:
        return self.case_store.put(case)

    def add_time_entry(self, entry: TimeEntry) -> TimeEntry:
        return self.time_entry_store.put(entry)

    def add_expense(self, expense: Expense) -> Expense:
        return self.expense_store.put(expense)

    def stored_invoice(self, invoice_id: int):
        return self.invoice_store.get(invoice_id)

    def stored_time_entry(self, entry_id: int):
        return self.time_entry_store.get(entry_id)

    def stored_expense(self, expense_id: int):
        return self.expense_store.get(expense_id)


class RecordingNotifier(EmailNotifier):
    """Notifier that records every message it is asked to send."""

    def __init__(self, result: bool = True, error: Optional[Exception] = None):
        self.result = result
        self.error = error
        self.sent: List[Dict[str, Any]] = []

    async def send_template_email(self, template_name, recipient, variables):
        if self.error:
            raise self.error
        self.sent.append({"template": template_name, "recipient": recipient, "variables": variables})
        return self.result


def make_time_entry(
    client_id: int = 1,
    case_id: Optional[int] = None,
    minutes: int = 60,
    rate: float = 100.0,
    description: str = "Drafting motion",
    user_name: str = ""
) -> TimeEntry:
    entry = TimeEntry(
        user_id="lawyer-1",
        description=description,
        duration_minutes=minutes,
        billing_rate=rate,
        case_id=case_id,
        client_id=client_id
    )
    entry.user_name = user_name
    return entry


def make_expense(
    client_id: int = 1,
    case_id: Optional[int] = None,
    amount: float = 50.0,
    markup: float = 0.0,
    description: str = "Court filing fee"
) -> Expense:
    return Expense(
        description=description,
        amount=amount,
        submitted_by="lawyer-1",
        client_id=client_id,
        case_id=case_id,
        status=ExpenseStatus.APPROVED,
        markup_percentage=markup
    )


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Unit of work seeded with two clients and one case for client 1."""
    unit = FakeUnitOfWork()
    unit.add_client(Client(name="Acme Corp", email="billing@acme.test", company="Acme Corporation"))
    unit.add_client(Client(name="Globex", email=None))
    unit.add_case(Case(client_id=1, case_number="2405-0001", title="Acme v. Initech"))
    return unit


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()
