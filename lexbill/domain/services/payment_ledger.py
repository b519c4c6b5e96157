"""Payment ledger.
Appends payments to an invoice and keeps amount paid, balance and status in step.
"""

from datetime import date
from typing import Optional, Union

from lexbill.domain.models.base import ValidationError, round_currency
from lexbill.domain.models.invoice import Invoice, Payment, PaymentMethod


class PaymentLedger:
    """
    Domain service for recording payments.

    The ledger is append-only: payments are kept in the order they were
    recorded and never edited. Amount paid is always the sum of the ledger.
    """

    def append_payment(
        self,
        invoice: Invoice,
        amount: Optional[float],
        method: Union[PaymentMethod, str, None],
        recorded_by: str,
        payment_date: Optional[date] = None,
        reference: Optional[str] = None,
        notes: Optional[str] = None
    ) -> Payment:
        """
        Validate and append a payment. Returns the recorded payment.

        Raises ValidationError for a missing or non-positive amount, an amount
        below one cent, a missing or unknown method, or an amount above the
        outstanding balance. The amount is stored rounded to cents.
        """
        if amount is None:
            raise ValidationError("Payment amount is required", "amount")

        if amount <= 0:
            raise ValidationError("Payment amount must be positive", "amount")

        amount = round_currency(amount)
        if amount == 0:
            raise ValidationError("Payment amount must be at least 0.01", "amount")

        payment = Payment(
            amount=amount,
            payment_date=payment_date or date.today(),
            method=self.parse_method(method),
            recorded_by=recorded_by,
            reference=reference,
            notes=notes
        )

        invoice.record_payment(payment)
        return payment

    @staticmethod
    def parse_method(method: Union[PaymentMethod, str, None]) -> PaymentMethod:
        if method is None or method == "":
            raise ValidationError("Payment method is required", "method")

        if isinstance(method, PaymentMethod):
            return method

        try:
            return PaymentMethod(method)
        except ValueError:
            raise ValidationError(f"Invalid payment method: {method}", "method")
