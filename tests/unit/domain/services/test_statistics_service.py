"""
Unit tests for BillingStatisticsReporter domain service.
"""

import pytest
from datetime import date, timedelta

from lexbill.domain.services.statistics_service import BillingStatisticsReporter
from lexbill.domain.models.base import ValidationError
from lexbill.domain.models.invoice import Invoice, InvoiceItem, InvoiceStatus, Payment, PaymentMethod

from conftest import FakeUnitOfWork, make_time_entry, make_expense


def seed(uow: FakeUnitOfWork, number: str, issued: date, total: float, paid: float = 0.0, status=InvoiceStatus.SENT):
    invoice = Invoice(client_id=1, invoice_number=number, created_by="lawyer-1", issue_date=issued,
                      due_date=issued + timedelta(days=30), status=status)
    invoice.apply_totals([InvoiceItem(description="Work", quantity=1, rate=total, amount=total)], total, 0.0, total)
    if paid:
        invoice.record_payment(Payment(amount=paid, payment_date=issued, method=PaymentMethod.CASH, recorded_by="x"))
    uow.invoice_store.put(invoice)
    return invoice


class TestBillingStatisticsReporter:
    """Test cases for billing statistics."""

    def setup_method(self):
        self.uow = FakeUnitOfWork()
        self.reporter = BillingStatisticsReporter(self.uow.invoices, self.uow.time_entries, self.uow.expenses)

    @pytest.mark.asyncio
    async def test_generate(self):
        today = date(2024, 6, 30)
        seed(self.uow, "INV-2024-00001", date(2024, 5, 10), 100.0, paid=100.0)
        seed(self.uow, "INV-2024-00002", date(2024, 6, 10), 300.0, paid=50.0)
        seed(self.uow, "INV-2024-00003", date(2024, 6, 20), 200.0, status=InvoiceStatus.DRAFT)
        deleted = seed(self.uow, "INV-2024-00004", date(2024, 6, 21), 999.0)
        deleted.soft_delete()
        self.uow.invoice_store.put(deleted)

        billable = make_time_entry(minutes=90)
        non_billable = make_time_entry(minutes=30)
        non_billable.billable = False
        self.uow.add_time_entry(billable)
        self.uow.add_time_entry(non_billable)
        self.uow.add_expense(make_expense(amount=100.0, markup=10.0))

        report = await self.reporter.generate(today=today)

        assert report["period"] == {"start_date": None, "end_date": None}
        assert report["totals"] == {
            "invoice_count": 3,
            "total_invoiced": 600.0,
            "total_paid": 150.0,
            "total_outstanding": 450.0,
            "average_invoice": 200.0,
            "recent_invoices": 2
        }
        assert report["by_status"] == {
            "paid": {"count": 1, "total": 100.0},
            "partially_paid": {"count": 1, "total": 300.0},
            "draft": {"count": 1, "total": 200.0},
        }
        assert report["monthly"]["invoiced"] == [
            {"month": "2024-05", "count": 1, "total": 100.0},
            {"month": "2024-06", "count": 2, "total": 500.0},
        ]
        assert report["monthly"]["paid"] == [
            {"month": "2024-05", "count": 1, "total": 100.0},
            {"month": "2024-06", "count": 1, "total": 50.0},
        ]
        assert report["time"] == {
            "total_hours": 2.0,
            "billable_hours": 1.5,
            "non_billable_hours": 0.5,
            "utilization_rate": 75.0
        }
        assert report["expenses"] == {"total": 100.0, "billable": 110.0, "billed": 0.0}

    @pytest.mark.asyncio
    async def test_period_filter(self):
        seed(self.uow, "INV-2024-00001", date(2024, 5, 10), 100.0)
        seed(self.uow, "INV-2024-00002", date(2024, 6, 10), 300.0)

        report = await self.reporter.generate(date(2024, 6, 1), date(2024, 6, 30), today=date(2024, 6, 30))

        assert report["period"] == {"start_date": "2024-06-01", "end_date": "2024-06-30"}
        assert report["totals"]["invoice_count"] == 1
        assert report["totals"]["total_invoiced"] == 300.0

    @pytest.mark.asyncio
    async def test_empty_store(self):
        report = await self.reporter.generate(today=date(2024, 6, 30))

        assert report["totals"]["invoice_count"] == 0
        assert report["totals"]["average_invoice"] == 0.0
        assert report["time"]["utilization_rate"] == 0.0

    @pytest.mark.asyncio
    async def test_start_after_end_rejected(self):
        with pytest.raises(ValidationError):
            await self.reporter.generate(date(2024, 7, 1), date(2024, 6, 1))

    def test_time_utilization_rounding(self):
        assert BillingStatisticsReporter.time_utilization(180, 100)["utilization_rate"] == 55.6
