"""
Unit tests for the records billing consumes: time entries, expenses, clients and cases.
"""

import pytest

from lexbill.domain.models.base import InvalidStateError, ValidationError
from lexbill.domain.models.client import Client, Case
from lexbill.domain.models.expense import Expense, ExpenseStatus
from lexbill.domain.models.time_entry import TimeEntry


class TestTimeEntry:
    """Test cases for TimeEntry."""

    def setup_method(self):
        self.entry = TimeEntry(
            user_id="lawyer-1",
            description="Deposition prep",
            duration_minutes=90,
            billing_rate=200.0,
            client_id=1,
            id=5
        )

    def test_billable_amount(self):
        assert self.entry.duration_hours == 1.5
        assert self.entry.billable_amount == 300.0
        assert self.entry.is_billable is True

    def test_mark_invoiced_is_idempotent_for_same_invoice(self):
        self.entry.mark_invoiced(3)
        self.entry.mark_invoiced(3)

        assert self.entry.invoiced is True
        assert self.entry.invoice_id == 3
        assert self.entry.is_billable is False

    def test_mark_invoiced_rejects_second_invoice(self):
        self.entry.mark_invoiced(3)

        with pytest.raises(InvalidStateError, match="already invoiced"):
            self.entry.mark_invoiced(4)

    def test_release(self):
        self.entry.mark_invoiced(3)
        self.entry.release()

        assert self.entry.invoiced is False
        assert self.entry.invoice_id is None
        assert self.entry.is_billable is True

    def test_validate_negative_duration(self):
        self.entry.duration_minutes = -5

        with pytest.raises(ValidationError):
            self.entry.validate()


class TestExpense:
    """Test cases for Expense."""

    def setup_method(self):
        self.expense = Expense(
            description="Expert witness",
            amount=1000.0,
            submitted_by="lawyer-1",
            client_id=1,
            status=ExpenseStatus.APPROVED,
            markup_percentage=10.0,
            id=9
        )

    def test_markup_applied(self):
        assert self.expense.billable_amount == 1100.0
        assert self.expense.amount_to_bill == 1100.0

    def test_mark_billed(self):
        self.expense.mark_billed(2)

        assert self.expense.invoiced is True
        assert self.expense.invoice_id == 2
        assert self.expense.status == ExpenseStatus.BILLED

    def test_release_after_unpaid_invoice(self):
        self.expense.mark_billed(2)
        self.expense.release(invoice_was_paid=False)

        assert self.expense.invoiced is False
        assert self.expense.status == ExpenseStatus.APPROVED

    def test_release_after_paid_invoice(self):
        self.expense.mark_billed(2)
        self.expense.release(invoice_was_paid=True)

        assert self.expense.status == ExpenseStatus.REIMBURSED

    def test_mark_billed_rejects_second_invoice(self):
        self.expense.mark_billed(2)

        with pytest.raises(InvalidStateError):
            self.expense.mark_billed(3)


class TestClientReferences:
    """Test cases for Client and Case references."""

    def test_display_name_prefers_company(self):
        assert Client(name="Jane Roe", company="Roe LLC").display_name == "Roe LLC"
        assert Client(name="Jane Roe").display_name == "Jane Roe"

    def test_case_belongs_to(self):
        case = Case(client_id=1, case_number="2405-0001", title="Roe v. Wade")

        assert case.belongs_to(1) is True
        assert case.belongs_to(2) is False

    def test_client_name_required(self):
        with pytest.raises(ValidationError):
            Client(name="").validate()
