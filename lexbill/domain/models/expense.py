"""
Expense domain model.
Represents out-of-pocket costs that can be re-billed to a client.
"""

from datetime import date
from enum import Enum
from typing import Optional

from lexbill.domain.models.base import (
    BaseEntity,
    ValidationError,
    InvalidStateError,
    round_currency
)


class ExpenseStatus(str, Enum):
    """Expense status."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    REIMBURSED = "reimbursed"
    BILLED = "billed"


class Expense(BaseEntity):
    """
    Expense entity.
    Billing marks it billed when an invoice picks it up and releases it when the invoice goes away.
    """

    def __init__(
        self,
        description: str,
        amount: float,
        submitted_by: str,
        client_id: Optional[int] = None,
        case_id: Optional[int] = None,
        status: ExpenseStatus = ExpenseStatus.PENDING,
        markup_percentage: float = 0.0,
        **kwargs
    ):
        super().__init__(**kwargs)

        self.description = description
        self.amount = amount
        self.submitted_by = submitted_by
        self.expense_date = date.today()

        # Associations
        self.client_id = client_id
        self.case_id = case_id

        self.status = status

        # Billing information
        self.billable = True
        self.markup_percentage = markup_percentage
        self.billable_amount = self.calculate_billable_amount()

        # Invoice association
        self.invoiced = False
        self.invoice_id: Optional[int] = None

        self.is_deleted = False

    def validate(self) -> None:
        """Validate expense state."""
        if not self.description:
            raise ValidationError("Description is required", "description")

        if self.amount < 0:
            raise ValidationError("Amount cannot be negative", "amount")

        if self.markup_percentage < 0:
            raise ValidationError("Markup cannot be negative", "markup_percentage")

    @property
    def is_billable(self) -> bool:
        """Billable, not yet invoiced and still live."""
        return self.billable and not self.invoiced and not self.is_deleted

    @property
    def amount_to_bill(self) -> float:
        """Amount an invoice line should carry for this expense."""
        return self.billable_amount if self.billable_amount else self.amount

    def calculate_billable_amount(self) -> float:
        """Amount with markup applied."""
        return round_currency(self.amount * (1 + (self.markup_percentage or 0) / 100))

    def mark_billed(self, invoice_id: int) -> None:
        """Mark expense as billed on an invoice."""
        if self.invoiced and self.invoice_id != invoice_id:
            raise InvalidStateError(f"Expense {self.id} is already invoiced")

        self.invoiced = True
        self.invoice_id = invoice_id
        self.status = ExpenseStatus.BILLED
        self.mark_as_updated()

    def release(self, invoice_was_paid: bool = False) -> None:
        """Return the expense to the unbilled pool."""
        self.invoiced = False
        self.invoice_id = None
        self.status = ExpenseStatus.REIMBURSED if invoice_was_paid else ExpenseStatus.APPROVED
        self.mark_as_updated()

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "description": self.description,
            "amount": self.amount,
            "billable": self.billable,
            "markup_percentage": self.markup_percentage,
            "billable_amount": self.billable_amount,
            "status": self.status.value,
            "client_id": self.client_id,
            "case_id": self.case_id,
            "submitted_by": self.submitted_by,
            "expense_date": self.expense_date.isoformat(),
            "invoiced": self.invoiced,
            "invoice_id": self.invoice_id
        }
