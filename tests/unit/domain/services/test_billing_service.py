"""
Unit tests for BillingService domain service.
"""

import pytest

from lexbill.domain.services.billing_service import BillingService, InvoiceTotals
from lexbill.domain.models.base import ValidationError
from lexbill.domain.models.invoice import InvoiceItem


def item(amount: float, quantity: float = 1, taxable: bool = True) -> InvoiceItem:
    return InvoiceItem(description="Legal services", quantity=quantity, rate=amount / quantity, amount=amount, taxable=taxable)


class TestBillingService:
    """Test cases for BillingService domain service."""

    def setup_method(self):
        """Set up test fixtures."""
        self.billing_service = BillingService()

    def test_calculate_totals(self):
        """150 at 10% tax with a 5 discount totals 160."""
        totals = self.billing_service.calculate_totals([item(100.0), item(50.0)], tax_rate=10.0, discount=5.0)

        assert totals == InvoiceTotals(subtotal=150.0, tax_amount=15.0, total=160.0)
        assert totals.to_dict() == {"subtotal": 150.0, "tax_amount": 15.0, "total": 160.0}

    def test_total_invariant(self):
        """total == subtotal + tax - discount for each combination."""
        cases = [
            ([item(33.33), item(66.67)], 7.5, 0.0),
            ([item(1234.56)], 19.0, 34.56),
            ([item(0.1), item(0.2)], 0.0, 0.3),
        ]
        for items, tax_rate, discount in cases:
            totals = self.billing_service.calculate_totals(items, tax_rate, discount)
            assert totals.total == round(totals.subtotal + totals.tax_amount - discount, 2)

    def test_tax_applies_to_whole_subtotal(self):
        """Non-taxable items are still taxed."""
        totals = self.billing_service.calculate_totals([item(100.0, taxable=False)], tax_rate=10.0)

        assert totals.tax_amount == 10.0

    def test_rounding(self):
        """Amounts are rounded half up to cents."""
        totals = self.billing_service.calculate_totals([item(10.05)], tax_rate=5.0)

        assert totals.tax_amount == 0.5
        assert totals.total == 10.55

    def test_empty_items(self):
        totals = self.billing_service.calculate_totals([])

        assert totals.subtotal == 0.0
        assert totals.total == 0.0

    @pytest.mark.parametrize("tax_rate", [-1.0, 100.5])
    def test_tax_rate_out_of_range(self, tax_rate):
        with pytest.raises(ValidationError, match="Tax rate must be between 0 and 100"):
            self.billing_service.calculate_totals([item(100.0)], tax_rate=tax_rate)

    def test_negative_discount(self):
        with pytest.raises(ValidationError, match="Discount cannot be negative"):
            self.billing_service.calculate_totals([item(100.0)], discount=-1.0)

    def test_negative_total_rejected(self):
        """A discount larger than subtotal plus tax is rejected."""
        with pytest.raises(ValidationError, match="Discount cannot exceed"):
            self.billing_service.calculate_totals([item(100.0)], tax_rate=10.0, discount=110.01)

    def test_invalid_item_rejected(self):
        bad = InvoiceItem(description="Research", quantity=2, rate=10.0, amount=25.0)

        with pytest.raises(ValidationError):
            self.billing_service.calculate_totals([bad])

    def test_calculate_tax(self):
        assert self.billing_service.calculate_tax(200.0, 19.0) == 38.0
