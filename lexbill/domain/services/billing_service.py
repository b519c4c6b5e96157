"""Billing service for invoice arithmetic.
Pure calculations: no I/O, amounts rounded to cents as they are computed.
"""

from dataclasses import dataclass
from typing import List, Dict, Any

from lexbill.domain.models.base import ValidationError, round_currency
from lexbill.domain.models.invoice import InvoiceItem


@dataclass(frozen=True)
class InvoiceTotals:
    """Result of an invoice calculation."""

    subtotal: float
    tax_amount: float
    total: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subtotal": self.subtotal,
            "tax_amount": self.tax_amount,
            "total": self.total
        }


class BillingService:
    """
    Domain service for billing calculations.
    Derives subtotal, tax and total from line items.
    """

    def calculate_totals(
        self,
        items: List[InvoiceItem],
        tax_rate: float = 0.0,
        discount: float = 0.0
    ) -> InvoiceTotals:
        """
        subtotal = sum of item amounts
        tax_amount = subtotal * tax_rate / 100
        total = subtotal + tax_amount - discount

        Tax applies to the whole subtotal, taxable flag or not.
        """
        tax_rate = tax_rate or 0.0
        discount = discount or 0.0

        if tax_rate < 0 or tax_rate > 100:
            raise ValidationError("Tax rate must be between 0 and 100", "tax_rate")

        if discount < 0:
            raise ValidationError("Discount cannot be negative", "discount")

        for item in items:
            item.validate()

        subtotal = self._round_currency(sum(item.amount for item in items))
        tax_amount = self.calculate_tax(subtotal, tax_rate)
        total = self._round_currency(subtotal + tax_amount - discount)

        if total < 0:
            raise ValidationError("Discount cannot exceed subtotal plus tax", "discount")

        return InvoiceTotals(subtotal=subtotal, tax_amount=tax_amount, total=total)

    def calculate_tax(self, amount: float, tax_rate: float) -> float:
        """Tax on an amount at a percentage rate."""
        return self._round_currency(amount * (tax_rate / 100))

    def _round_currency(self, amount: float) -> float:
        """Round amount to 2 decimal places for currency."""
        return round_currency(amount)
