"""
Unit tests for the Invoice aggregate.
"""

import pytest
from datetime import date, timedelta

from lexbill.domain.models.base import ValidationError, InvalidStateError
from lexbill.domain.models.invoice import (
    Invoice, InvoiceItem, InvoiceStatus, Payment, PaymentMethod,
    PaymentRecordedEvent, InvoiceSentEvent, InvoiceCancelledEvent
)


def build_invoice(total: float = 160.0, status: InvoiceStatus = InvoiceStatus.SENT, due_in_days: int = 30) -> Invoice:
    today = date.today()
    invoice = Invoice(
        client_id=1,
        invoice_number="INV-2024-00001",
        created_by="lawyer-1",
        issue_date=today,
        due_date=today + timedelta(days=due_in_days),
        status=status,
        id=7
    )
    item = InvoiceItem(description="Consultation", quantity=1, rate=total, amount=total)
    invoice.apply_totals([item], subtotal=total, tax_amount=0.0, total=total)
    return invoice


def payment(amount: float) -> Payment:
    return Payment(amount=amount, payment_date=date.today(), method=PaymentMethod.BANK_TRANSFER, recorded_by="lawyer-1")


class TestInvoiceItem:
    """Test cases for invoice line items."""

    def test_valid_item(self):
        """Amount within a cent of quantity times rate is accepted."""
        InvoiceItem(description="Research", quantity=1.5, rate=200.0, amount=300.0).validate()
        InvoiceItem(description="Research", quantity=0.333, rate=100.0, amount=33.3).validate()

    def test_amount_must_match_quantity_times_rate(self):
        """Test amount mismatch is rejected."""
        item = InvoiceItem(description="Research", quantity=2, rate=100.0, amount=150.0)

        with pytest.raises(ValidationError, match="quantity \\* rate"):
            item.validate()

    def test_negative_values_rejected(self):
        """Test negative quantity, rate or amount."""
        with pytest.raises(ValidationError):
            InvoiceItem(description="X", quantity=-1, rate=10.0, amount=-10.0).validate()
        with pytest.raises(ValidationError):
            InvoiceItem(description="X", quantity=1, rate=-10.0, amount=-10.0).validate()

    def test_description_required(self):
        with pytest.raises(ValidationError, match="description is required"):
            InvoiceItem(description="  ", quantity=1, rate=10.0, amount=10.0).validate()

    def test_cannot_reference_both_sources(self):
        """An item bills either a time entry or an expense, not both."""
        item = InvoiceItem(description="X", quantity=1, rate=10.0, amount=10.0, time_entry_id=1, expense_id=2)

        with pytest.raises(ValidationError, match="both"):
            item.validate()


class TestInvoiceBalance:
    """Test cases for totals and balance."""

    def test_apply_totals_sets_balance(self):
        invoice = build_invoice(total=160.0)

        assert invoice.subtotal == 160.0
        assert invoice.total == 160.0
        assert invoice.amount_paid == 0.0
        assert invoice.balance == 160.0

    def test_balance_is_total_minus_payments(self):
        """Balance always equals total minus the sum of the ledger."""
        invoice = build_invoice(total=500.0)

        for amount in (100.0, 150.25, 49.75):
            invoice.record_payment(payment(amount))
            assert invoice.amount_paid == round(sum(p.amount for p in invoice.payments), 2)
            assert invoice.balance == round(invoice.total - invoice.amount_paid, 2)

        assert invoice.balance == 200.0

    def test_validate_rejects_negative_total(self):
        invoice = build_invoice()
        invoice.total = -1.0

        with pytest.raises(ValidationError, match="Total cannot be negative"):
            invoice.validate()

    def test_validate_accepts_consistent_totals(self):
        invoice = build_invoice(total=100.0)
        invoice.discount = 5.0
        invoice.apply_totals(invoice.items, subtotal=100.0, tax_amount=10.0, total=105.0)
        invoice.record_payment(payment(40.0))

        invoice.validate()

    def test_validate_rejects_inconsistent_total(self):
        invoice = build_invoice(total=100.0)
        invoice.apply_totals(invoice.items, subtotal=100.0, tax_amount=0.0, total=999.0)

        with pytest.raises(ValidationError, match="Total must equal"):
            invoice.validate()

    def test_validate_rejects_inconsistent_balance(self):
        invoice = build_invoice(total=100.0)
        invoice.balance = 5.0

        with pytest.raises(ValidationError, match="Balance must equal"):
            invoice.validate()

    def test_validate_rejects_amount_paid_out_of_step_with_ledger(self):
        invoice = build_invoice(total=100.0)
        invoice.record_payment(payment(40.0))
        invoice.amount_paid = 60.0
        invoice.balance = 40.0

        with pytest.raises(ValidationError, match="Amount paid must equal"):
            invoice.validate()

    def test_sub_cent_payment_is_rejected(self):
        invoice = build_invoice(total=100.0)

        with pytest.raises(ValidationError, match="at least 0.01"):
            invoice.record_payment(payment(0.004))

        assert invoice.payments == []
        assert invoice.status == InvoiceStatus.SENT

    def test_validate_rejects_due_before_issue(self):
        invoice = build_invoice()
        invoice.due_date = invoice.issue_date - timedelta(days=1)

        with pytest.raises(ValidationError, match="Due date"):
            invoice.validate()


class TestInvoiceStatus:
    """Test cases for status derivation."""

    def test_full_payment_marks_paid(self):
        invoice = build_invoice(total=160.0)

        invoice.record_payment(payment(160.0))

        assert invoice.status == InvoiceStatus.PAID
        assert invoice.balance == 0.0

    def test_partial_payment_marks_partially_paid(self):
        invoice = build_invoice(total=160.0)

        invoice.record_payment(payment(60.0))

        assert invoice.status == InvoiceStatus.PARTIALLY_PAID
        assert invoice.balance == 100.0

    def test_payment_on_draft_moves_it_out_of_draft(self):
        invoice = build_invoice(total=100.0, status=InvoiceStatus.DRAFT)

        invoice.record_payment(payment(40.0))

        assert invoice.status == InvoiceStatus.PARTIALLY_PAID

    def test_overpayment_rejected(self):
        invoice = build_invoice(total=100.0)

        with pytest.raises(ValidationError, match="exceeds outstanding balance"):
            invoice.record_payment(payment(100.01))

        assert invoice.payments == []
        assert invoice.balance == 100.0

    def test_total_increase_reopens_paid_invoice(self):
        """A paid invoice whose total grows falls back to partially paid."""
        invoice = build_invoice(total=100.0)
        invoice.record_payment(payment(100.0))
        assert invoice.status == InvoiceStatus.PAID

        item = InvoiceItem(description="Extra work", quantity=1, rate=150.0, amount=150.0)
        invoice.apply_totals([item], subtotal=150.0, tax_amount=0.0, total=150.0)
        invoice.derive_status()

        assert invoice.balance == 50.0
        assert invoice.status == InvoiceStatus.PARTIALLY_PAID

    def test_past_due_sent_invoice_derives_overdue(self):
        invoice = build_invoice(total=100.0)
        invoice.due_date = date.today() - timedelta(days=3)

        assert invoice.derive_status() == InvoiceStatus.OVERDUE
        assert invoice.is_overdue is True
        assert invoice.days_overdue == 3

    def test_overdue_falls_back_to_sent_when_due_date_moves(self):
        invoice = build_invoice(total=100.0)
        invoice.status = InvoiceStatus.OVERDUE

        invoice.due_date = date.today() + timedelta(days=10)

        assert invoice.derive_status() == InvoiceStatus.SENT

    def test_draft_never_derives_overdue(self):
        invoice = build_invoice(total=100.0, status=InvoiceStatus.DRAFT, due_in_days=0)
        invoice.due_date = invoice.issue_date

        assert invoice.derive_status(today=invoice.due_date + timedelta(days=5)) == InvoiceStatus.DRAFT
        assert invoice.is_overdue is False

    def test_zero_total_draft_stays_draft(self):
        invoice = build_invoice(total=0.0, status=InvoiceStatus.DRAFT)

        assert invoice.derive_status() == InvoiceStatus.DRAFT

    def test_deleted_derives_cancelled(self):
        invoice = build_invoice()
        invoice.is_deleted = True

        assert invoice.derive_status() == InvoiceStatus.CANCELLED


class TestInvoiceLifecycle:
    """Test cases for send, update guards and soft delete."""

    def test_mark_sent(self):
        invoice = build_invoice(status=InvoiceStatus.DRAFT)
        sent_on = date(2024, 5, 2)

        invoice.mark_sent(today=sent_on)

        assert invoice.status == InvoiceStatus.SENT
        assert invoice.sent_date == sent_on
        assert invoice.version == 2
        events = invoice.pull_events()
        assert len(events) == 1
        assert isinstance(events[0], InvoiceSentEvent)

    def test_mark_sent_requires_draft(self):
        invoice = build_invoice(status=InvoiceStatus.SENT)

        with pytest.raises(InvalidStateError, match="Only draft invoices can be sent"):
            invoice.mark_sent()

    def test_paid_invoice_is_not_updatable(self):
        invoice = build_invoice(total=50.0)
        invoice.record_payment(payment(50.0))

        with pytest.raises(InvalidStateError, match="Cannot update a paid invoice"):
            invoice.ensure_updatable()

    def test_ensure_draft(self):
        invoice = build_invoice(status=InvoiceStatus.SENT)

        with pytest.raises(InvalidStateError, match="Cannot change items"):
            invoice.ensure_draft("change items")

    def test_soft_delete(self):
        invoice = build_invoice(status=InvoiceStatus.DRAFT)

        invoice.soft_delete()

        assert invoice.is_deleted is True
        assert invoice.status == InvoiceStatus.CANCELLED
        assert isinstance(invoice.pull_events()[0], InvoiceCancelledEvent)

    @pytest.mark.parametrize("amount", [50.0, 100.0])
    def test_paid_or_partially_paid_cannot_be_deleted(self, amount):
        invoice = build_invoice(total=100.0)
        invoice.record_payment(payment(amount))

        with pytest.raises(InvalidStateError, match="Cannot delete a paid invoice"):
            invoice.soft_delete()

        assert invoice.is_deleted is False

    def test_cancelled_invoice_rejects_payment(self):
        invoice = build_invoice()
        invoice.soft_delete()

        with pytest.raises(InvalidStateError):
            invoice.record_payment(payment(10.0))

    def test_record_payment_emits_event(self):
        invoice = build_invoice(total=100.0)

        invoice.record_payment(payment(25.0))

        event = invoice.pull_events()[0]
        assert isinstance(event, PaymentRecordedEvent)
        assert event.to_dict()["data"]["balance"] == 75.0
        assert event.event_name == "invoice.payment_recorded"
