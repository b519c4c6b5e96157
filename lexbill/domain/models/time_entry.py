"""
TimeEntry domain model.
Represents recorded work that may be billed to a client.
"""

from datetime import date
from typing import Optional

from lexbill.domain.models.base import (
    BaseEntity,
    ValidationError,
    InvalidStateError,
    round_currency
)


class TimeEntry(BaseEntity):
    """
    TimeEntry entity.
    Owned by time tracking; the billing engine only flips its invoiced flag.
    """

    def __init__(
        self,
        user_id: str,
        description: str,
        duration_minutes: int,
        billing_rate: float = 0.0,
        case_id: Optional[int] = None,
        client_id: Optional[int] = None,
        task_id: Optional[int] = None,
        **kwargs
    ):
        super().__init__(**kwargs)

        # Required fields
        self.user_id = user_id
        self.user_name = ""
        self.description = description

        # Associations
        self.case_id = case_id
        self.client_id = client_id
        self.task_id = task_id

        # Time tracking
        self.entry_date = date.today()
        self.duration_minutes = duration_minutes

        # Billing information
        self.billable = True
        self.billing_rate = billing_rate
        self.billable_amount = self.calculate_billable_amount()

        # Invoice association
        self.invoiced = False
        self.invoice_id: Optional[int] = None

        self.is_deleted = False

    def validate(self) -> None:
        """Validate time entry state."""
        if not self.user_id:
            raise ValidationError("User is required", "user_id")

        if not self.description:
            raise ValidationError("Description is required", "description")

        if self.duration_minutes < 0:
            raise ValidationError("Duration cannot be negative", "duration_minutes")

        if self.billing_rate < 0:
            raise ValidationError("Billing rate cannot be negative", "billing_rate")

    @property
    def duration_hours(self) -> float:
        """Get duration in hours."""
        return self.duration_minutes / 60

    @property
    def is_billable(self) -> bool:
        """Billable, not yet invoiced and still live."""
        return self.billable and not self.invoiced and not self.is_deleted

    def calculate_billable_amount(self) -> float:
        """Calculate billable amount based on duration and rate."""
        if not self.billable or not self.billing_rate:
            return 0.0
        return round_currency(self.duration_hours * self.billing_rate)

    def mark_invoiced(self, invoice_id: int) -> None:
        """Mark entry as billed on an invoice."""
        if self.invoiced and self.invoice_id != invoice_id:
            raise InvalidStateError(f"Time entry {self.id} is already invoiced")

        self.invoiced = True
        self.invoice_id = invoice_id
        self.mark_as_updated()

    def release(self) -> None:
        """Return the entry to the unbilled pool."""
        self.invoiced = False
        self.invoice_id = None
        self.mark_as_updated()

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "description": self.description,
            "case_id": self.case_id,
            "client_id": self.client_id,
            "task_id": self.task_id,
            "entry_date": self.entry_date.isoformat(),
            "duration_minutes": self.duration_minutes,
            "billable": self.billable,
            "billing_rate": self.billing_rate,
            "billable_amount": self.billable_amount,
            "invoiced": self.invoiced,
            "invoice_id": self.invoice_id
        }
