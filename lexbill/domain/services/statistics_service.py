"""Billing statistics.
Read-only reporting over invoices, payments, time and expenses.
"""

from datetime import date, timedelta
from typing import Optional, Dict, Any

from lexbill.domain.models.base import ValidationError, round_currency
from lexbill.domain.repositories.invoice_repository import InvoiceRepository
from lexbill.domain.repositories.time_entry_repository import TimeEntryRepository
from lexbill.domain.repositories.expense_repository import ExpenseRepository


class BillingStatisticsReporter:
    """
    Domain service assembling the billing dashboard figures.
    Grouping happens in the store; this class only combines and rounds.
    """

    RECENT_DAYS = 30

    def __init__(
        self,
        invoices: InvoiceRepository,
        time_entries: TimeEntryRepository,
        expenses: ExpenseRepository
    ):
        self.invoices = invoices
        self.time_entries = time_entries
        self.expenses = expenses

    async def generate(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        today: Optional[date] = None
    ) -> Dict[str, Any]:
        if start_date and end_date and start_date > end_date:
            raise ValidationError("Start date must be before end date", "start_date")

        today = today or date.today()

        by_status = await self.invoices.summarize_by_status(start_date, end_date)
        recent = await self.invoices.count_issued_since(today - timedelta(days=self.RECENT_DAYS))
        monthly_invoiced = await self.invoices.monthly_invoiced(start_date, end_date)
        monthly_paid = await self.invoices.monthly_payments(start_date, end_date)
        minutes = await self.time_entries.summarize_minutes(start_date, end_date)
        expense_totals = await self.expenses.summarize(start_date, end_date)

        return {
            "period": {
                "start_date": start_date.isoformat() if start_date else None,
                "end_date": end_date.isoformat() if end_date else None
            },
            "totals": self.summarize_totals(by_status, recent),
            "by_status": {
                status: {"count": values["count"], "total": round_currency(values["total"])}
                for status, values in by_status.items()
            },
            "monthly": {
                "invoiced": [self._round_month(row) for row in monthly_invoiced],
                "paid": [self._round_month(row) for row in monthly_paid]
            },
            "time": self.time_utilization(minutes.get("total_minutes", 0), minutes.get("billable_minutes", 0)),
            "expenses": {key: round_currency(value) for key, value in expense_totals.items()}
        }

    @staticmethod
    def summarize_totals(by_status: Dict[str, Dict[str, Any]], recent_invoices: int = 0) -> Dict[str, Any]:
        count = sum(values["count"] for values in by_status.values())
        invoiced = sum(values["total"] for values in by_status.values())
        paid = sum(values.get("amount_paid", 0) for values in by_status.values())
        outstanding = sum(values.get("balance", 0) for values in by_status.values())

        return {
            "invoice_count": count,
            "total_invoiced": round_currency(invoiced),
            "total_paid": round_currency(paid),
            "total_outstanding": round_currency(outstanding),
            "average_invoice": round_currency(invoiced / count) if count else 0.0,
            "recent_invoices": recent_invoices
        }

    @staticmethod
    def time_utilization(total_minutes: int, billable_minutes: int) -> Dict[str, Any]:
        """Billable share of recorded time, as a percentage with one decimal."""
        rate = (billable_minutes / total_minutes * 100) if total_minutes else 0.0
        return {
            "total_hours": round(total_minutes / 60, 2),
            "billable_hours": round(billable_minutes / 60, 2),
            "non_billable_hours": round((total_minutes - billable_minutes) / 60, 2),
            "utilization_rate": round(rate, 1)
        }

    @staticmethod
    def _round_month(row: Dict[str, Any]) -> Dict[str, Any]:
        return {"month": row["month"], "count": row["count"], "total": round_currency(row["total"])}
