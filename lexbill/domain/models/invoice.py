"""
Invoice domain model.
Represents invoices generated from billable time entries and expenses.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from typing import Optional, List
from enum import Enum

from lexbill.domain.models.base import (
    AggregateRoot,
    ValidationError,
    InvalidStateError,
    DomainEvent,
    round_currency
)


class InvoiceStatus(str, Enum):
    """Invoice status."""
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"
    PARTIALLY_PAID = "partially_paid"


class PaymentMethod(str, Enum):
    """Payment method."""
    CREDIT_CARD = "credit_card"
    BANK_TRANSFER = "bank_transfer"
    CHECK = "check"
    CASH = "cash"
    OTHER = "other"


# Domain Events

class InvoiceCreatedEvent(DomainEvent):
    """Event raised when an invoice is created."""

    def __init__(self, invoice_id: int, invoice_number: str, client_id: int, total: float):
        super().__init__()
        self.invoice_id = invoice_id
        self.invoice_number = invoice_number
        self.client_id = client_id
        self.total = total

    @property
    def event_name(self) -> str:
        return "invoice.created"


class InvoiceSentEvent(DomainEvent):
    """Event raised when an invoice leaves draft."""

    def __init__(self, invoice_id: int, invoice_number: str, sent_date: date):
        super().__init__()
        self.invoice_id = invoice_id
        self.invoice_number = invoice_number
        self.sent_date = sent_date

    @property
    def event_name(self) -> str:
        return "invoice.sent"


class PaymentRecordedEvent(DomainEvent):
    """Event raised when a payment is appended to the ledger."""

    def __init__(self, invoice_id: int, amount: float, method: str, balance: float, status: str):
        super().__init__()
        self.invoice_id = invoice_id
        self.amount = amount
        self.method = method
        self.balance = balance
        self.status = status

    @property
    def event_name(self) -> str:
        return "invoice.payment_recorded"


class InvoiceCancelledEvent(DomainEvent):
    """Event raised when an invoice is soft-deleted."""

    def __init__(self, invoice_id: int, invoice_number: str):
        super().__init__()
        self.invoice_id = invoice_id
        self.invoice_number = invoice_number

    @property
    def event_name(self) -> str:
        return "invoice.cancelled"


@dataclass
class InvoiceItem:
    """Individual line item in an invoice."""

    description: str
    quantity: float
    rate: float
    amount: float

    # Source references
    time_entry_id: Optional[int] = None
    expense_id: Optional[int] = None
    case_id: Optional[int] = None

    taxable: bool = True
    notes: Optional[str] = None

    def validate(self) -> None:
        """Validate line item."""
        if not self.description or not self.description.strip():
            raise ValidationError("Item description is required", "description")

        if self.quantity is None or self.quantity < 0:
            raise ValidationError("Quantity cannot be negative", "quantity")

        if self.rate is None or self.rate < 0:
            raise ValidationError("Rate cannot be negative", "rate")

        if self.amount is None or self.amount < 0:
            raise ValidationError("Amount cannot be negative", "amount")

        if abs(self.amount - (self.quantity * self.rate)) > 0.01:
            raise ValidationError("Amount must equal quantity * rate", "amount")

        if self.time_entry_id is not None and self.expense_id is not None:
            raise ValidationError("An item cannot reference both a time entry and an expense", "expense_id")

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "description": self.description,
            "quantity": self.quantity,
            "rate": self.rate,
            "amount": self.amount,
            "time_entry_id": self.time_entry_id,
            "expense_id": self.expense_id,
            "case_id": self.case_id,
            "taxable": self.taxable,
            "notes": self.notes
        }


@dataclass(frozen=True)
class Payment:
    """Payment recorded against an invoice. Entries are never edited once appended."""

    amount: float
    payment_date: date
    method: PaymentMethod
    recorded_by: str
    reference: Optional[str] = None
    notes: Optional[str] = None
    recorded_at: datetime = field(default_factory=datetime.utcnow)

    def validate(self) -> None:
        """Validate payment record."""
        if self.amount is None or self.amount <= 0:
            raise ValidationError("Payment amount must be positive", "amount")

        if round_currency(self.amount) == 0:
            raise ValidationError("Payment amount must be at least 0.01", "amount")

        if not isinstance(self.method, PaymentMethod):
            raise ValidationError("Invalid payment method", "method")

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "amount": self.amount,
            "payment_date": self.payment_date.isoformat(),
            "method": self.method.value,
            "reference": self.reference,
            "notes": self.notes,
            "recorded_by": self.recorded_by,
            "recorded_at": self.recorded_at.isoformat()
        }


class Invoice(AggregateRoot):
    """
    Invoice aggregate root.

    Owns its line items and payment ledger. Totals, balance and status are
    kept consistent by the methods below; callers never assign them directly.
    """

    def __init__(
        self,
        client_id: int,
        invoice_number: str,
        created_by: str,
        issue_date: Optional[date] = None,
        due_date: Optional[date] = None,
        case_id: Optional[int] = None,
        status: InvoiceStatus = InvoiceStatus.DRAFT,
        **kwargs
    ):
        super().__init__(**kwargs)

        # Required fields
        self.client_id = client_id
        self.case_id = case_id
        self.created_by = created_by

        # Identification
        self.invoice_number = invoice_number
        self.status = status

        # Dates
        self.issue_date = issue_date or date.today()
        self.due_date = due_date or self.issue_date
        self.sent_date: Optional[date] = None

        # Financial information
        self.items: List[InvoiceItem] = []
        self.tax_rate = 0.0
        self.discount = 0.0
        self.subtotal = 0.0
        self.tax_amount = 0.0
        self.total = 0.0

        # Payment information
        self.payments: List[Payment] = []
        self.amount_paid = 0.0
        self.balance = 0.0

        # Content
        self.notes: Optional[str] = None
        self.terms: Optional[str] = None

        self.is_deleted = False

    def validate(self) -> None:
        """Validate invoice state."""
        if not self.client_id:
            raise ValidationError("Client is required", "client_id")

        if not self.invoice_number:
            raise ValidationError("Invoice number is required", "invoice_number")

        if self.due_date < self.issue_date:
            raise ValidationError("Due date cannot be before issue date", "due_date")

        if self.tax_rate < 0 or self.tax_rate > 100:
            raise ValidationError("Tax rate must be between 0 and 100", "tax_rate")

        for item in self.items:
            item.validate()

        for payment in self.payments:
            payment.validate()

        for name in ("subtotal", "tax_amount", "discount", "total", "amount_paid", "balance"):
            if getattr(self, name) < 0:
                raise ValidationError(f"{name.replace('_', ' ').capitalize()} cannot be negative", name)

        if round_currency(self.total) != round_currency(self.subtotal + self.tax_amount - self.discount):
            raise ValidationError("Total must equal subtotal plus tax minus discount", "total")

        if round_currency(self.amount_paid) != round_currency(sum(payment.amount for payment in self.payments)):
            raise ValidationError("Amount paid must equal the sum of payments", "amount_paid")

        if round_currency(self.balance) != round_currency(self.total - self.amount_paid):
            raise ValidationError("Balance must equal total minus amount paid", "balance")

    @property
    def is_draft(self) -> bool:
        return self.status == InvoiceStatus.DRAFT

    @property
    def is_paid(self) -> bool:
        return self.status == InvoiceStatus.PAID

    @property
    def has_payments(self) -> bool:
        """Check whether the invoice has received any payment."""
        return self.amount_paid > 0

    @property
    def is_overdue(self) -> bool:
        """
        Query-time overdue projection.

        Stored status is only re-derived on mutation, so an invoice can sit in
        ``sent`` after its due date. This property reports the effective state
        without writing anything.
        """
        if self.is_deleted or self.balance <= 0:
            return False
        if self.status in (InvoiceStatus.DRAFT, InvoiceStatus.PAID, InvoiceStatus.CANCELLED):
            return False
        return date.today() > self.due_date

    @property
    def days_overdue(self) -> int:
        """Get days overdue (0 if not overdue)."""
        if not self.is_overdue:
            return 0
        return (date.today() - self.due_date).days

    @property
    def time_entry_ids(self) -> List[int]:
        """Time entries referenced by the line items, in item order."""
        return [item.time_entry_id for item in self.items if item.time_entry_id is not None]

    @property
    def expense_ids(self) -> List[int]:
        """Expenses referenced by the line items, in item order."""
        return [item.expense_id for item in self.items if item.expense_id is not None]

    def apply_totals(self, items: List[InvoiceItem], subtotal: float, tax_amount: float, total: float) -> None:
        """Replace the line items and the computed totals, then refresh the balance."""
        self.items = list(items)
        self.subtotal = subtotal
        self.tax_amount = tax_amount
        self.total = total
        self.recalculate_balance()
        self.mark_as_updated()

    def recalculate_balance(self) -> None:
        """Recompute amount paid from the ledger and the balance from the total."""
        self.amount_paid = round_currency(sum(payment.amount for payment in self.payments))
        self.balance = round_currency(self.total - self.amount_paid)

    def derive_status(self, today: Optional[date] = None) -> InvoiceStatus:
        """
        Re-derive the status after a balance, payment, due date or deletion change.

        Rules are checked in order:
        deleted -> cancelled, unpaid draft -> draft, nothing left to pay -> paid,
        some payment -> partially_paid, past due (outside draft) -> overdue.
        An invoice whose payment-driven or overdue status no longer applies
        falls back to sent; anything else is kept.
        """
        today = today or date.today()
        previous = self.status

        if self.is_deleted:
            status = InvoiceStatus.CANCELLED
        elif previous == InvoiceStatus.DRAFT and not self.payments:
            status = previous
        elif self.balance <= 0:
            status = InvoiceStatus.PAID
        elif self.amount_paid > 0:
            status = InvoiceStatus.PARTIALLY_PAID
        elif previous != InvoiceStatus.DRAFT and today > self.due_date:
            status = InvoiceStatus.OVERDUE
        elif previous in (InvoiceStatus.PAID, InvoiceStatus.PARTIALLY_PAID, InvoiceStatus.OVERDUE):
            status = InvoiceStatus.SENT
        else:
            status = previous

        self.status = status
        return status

    def ensure_updatable(self) -> None:
        """Reject any change to a fully paid invoice."""
        if self.status == InvoiceStatus.PAID:
            raise InvalidStateError("Cannot update a paid invoice")
        if self.is_deleted:
            raise InvalidStateError("Cannot update a cancelled invoice")

    def ensure_draft(self, action: str) -> None:
        """Reject a draft-only change on an invoice that has left draft."""
        if self.status != InvoiceStatus.DRAFT:
            raise InvalidStateError(f"Cannot {action} once the invoice has been sent")

    def record_payment(self, payment: Payment) -> None:
        """Append a payment to the ledger and refresh balance and status."""
        if self.is_deleted:
            raise InvalidStateError("Cannot record a payment on a cancelled invoice")

        payment.validate()

        if round_currency(payment.amount) > self.balance:
            raise ValidationError("Payment amount exceeds outstanding balance", "amount")

        self.payments.append(payment)
        self.recalculate_balance()
        self.derive_status()
        self.mark_as_updated()
        self.increment_version()

        self.add_event(PaymentRecordedEvent(
            invoice_id=self.id or 0,
            amount=payment.amount,
            method=payment.method.value,
            balance=self.balance,
            status=self.status.value
        ))

    def mark_sent(self, today: Optional[date] = None) -> None:
        """Move a draft invoice to sent."""
        if self.status != InvoiceStatus.DRAFT:
            raise InvalidStateError(f"Only draft invoices can be sent (current status: {self.status.value})")

        self.status = InvoiceStatus.SENT
        self.sent_date = today or date.today()
        self.mark_as_updated()
        self.increment_version()

        self.add_event(InvoiceSentEvent(
            invoice_id=self.id or 0,
            invoice_number=self.invoice_number,
            sent_date=self.sent_date
        ))

    def soft_delete(self) -> None:
        """Flag the invoice deleted; its status derives to cancelled."""
        if self.status in (InvoiceStatus.PAID, InvoiceStatus.PARTIALLY_PAID):
            raise InvalidStateError("Cannot delete a paid invoice")
        if self.is_deleted:
            raise InvalidStateError("Invoice is already cancelled")

        self.is_deleted = True
        self.derive_status()
        self.mark_as_updated()
        self.increment_version()

        self.add_event(InvoiceCancelledEvent(
            invoice_id=self.id or 0,
            invoice_number=self.invoice_number
        ))

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "invoice_number": self.invoice_number,
            "client_id": self.client_id,
            "case_id": self.case_id,
            "issue_date": self.issue_date.isoformat(),
            "due_date": self.due_date.isoformat(),
            "sent_date": self.sent_date.isoformat() if self.sent_date else None,
            "items": [item.to_dict() for item in self.items],
            "subtotal": self.subtotal,
            "tax_rate": self.tax_rate,
            "tax_amount": self.tax_amount,
            "discount": self.discount,
            "total": self.total,
            "amount_paid": self.amount_paid,
            "balance": self.balance,
            "status": self.status.value,
            "payments": [payment.to_dict() for payment in self.payments],
            "notes": self.notes,
            "terms": self.terms,
            "is_deleted": self.is_deleted,
            "is_overdue": self.is_overdue,
            "days_overdue": self.days_overdue,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat()
        }
