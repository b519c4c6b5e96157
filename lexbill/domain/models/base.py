"""
Base entity and value objects for the domain layer.
This module contains the foundational classes for all domain entities.
"""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Any, Dict
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import uuid


def round_currency(amount: float) -> float:
    """Round an amount to 2 decimal places for currency."""
    return float(Decimal(str(amount)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP))


class DomainEvent(ABC):
    """Base class for domain events."""

    def __init__(self):
        self.occurred_at = datetime.utcnow()
        self.event_id = str(uuid.uuid4())

    @property
    @abstractmethod
    def event_name(self) -> str:
        """Return the name of the event."""
        pass

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary."""
        return {
            "event_id": self.event_id,
            "event_name": self.event_name,
            "occurred_at": self.occurred_at.isoformat(),
            "data": {
                key: value for key, value in self.__dict__.items()
                if key not in ("event_id", "occurred_at")
            }
        }


@dataclass
class BaseEntity(ABC):
    """
    Base class for all domain entities.
    Provides common attributes and behavior for all entities.
    """

    id: Optional[int] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    # Domain events
    _events: list = field(default_factory=list, init=False, repr=False, compare=False)

    def __eq__(self, other: Any) -> bool:
        """Entities are equal if they have the same ID and are of the same type."""
        if not isinstance(other, self.__class__):
            return False
        if self.id is None or other.id is None:
            return self is other
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on entity ID."""
        if self.id is None:
            return hash(id(self))
        return hash((self.__class__.__name__, self.id))

    def mark_as_updated(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = datetime.utcnow()

    def add_event(self, event: DomainEvent) -> None:
        """Add a domain event."""
        self._events.append(event)

    def pull_events(self) -> list:
        """Get and clear all domain events."""
        events = self._events.copy()
        self._events.clear()
        return events

    @property
    def is_new(self) -> bool:
        """Check if entity is new (not persisted)."""
        return self.id is None

    def validate(self) -> None:
        """
        Validate the entity's state.
        Should be overridden by subclasses to implement specific validation rules.
        Raises ValidationError if the entity is in an invalid state.
        """
        pass


@dataclass(eq=False)
class AggregateRoot(BaseEntity):
    """
    Base class for aggregate roots.
    Aggregate roots are the entry points to aggregates and handle domain events.
    """

    version: int = field(default=1)

    def increment_version(self) -> None:
        """Increment the aggregate version for optimistic locking."""
        self.version += 1
        self.mark_as_updated()


class DomainException(Exception):
    """Base exception for domain errors."""

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


class ValidationError(DomainException):
    """Exception raised when input or entity validation fails."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, "VALIDATION_ERROR")
        self.field = field


class InvalidStateError(DomainException):
    """Exception raised when an operation is not allowed in the current status."""

    def __init__(self, message: str):
        super().__init__(message, "INVALID_STATE")


class NotFoundError(DomainException):
    """Exception raised when an id does not resolve to a live record."""

    def __init__(self, entity_type: str, entity_id: Any):
        message = f"{entity_type} with id {entity_id} not found"
        super().__init__(message, "NOT_FOUND")
        self.entity_type = entity_type
        self.entity_id = entity_id


class StorageError(DomainException):
    """Exception raised when the persistent store fails."""

    def __init__(self, message: str, retryable: bool = True):
        super().__init__(message, "STORAGE_ERROR")
        self.retryable = retryable


class DuplicateEntityError(DomainException):
    """Exception raised when trying to create a duplicate entity."""

    def __init__(self, entity_type: str, field: str, value: Any):
        message = f"{entity_type} with {field}='{value}' already exists"
        super().__init__(message, "DUPLICATE_ENTITY")
        self.entity_type = entity_type
        self.field = field
        self.value = value


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects.
    Value objects are immutable and are compared by their values.
    """

    def __post_init__(self):
        """Validate value object after creation."""
        self.validate()

    @abstractmethod
    def validate(self) -> None:
        """Validate the value object's state."""
        pass


@dataclass(frozen=True)
class InvoiceNumber(ValueObject):
    """Invoice number value object, formatted as PREFIX-YEAR-NNNNN."""

    prefix: str
    year: int
    sequence: int
    width: int = 5

    def validate(self) -> None:
        """Validate invoice number parts."""
        if not self.prefix:
            raise ValidationError("Invoice prefix is required", "prefix")

        if len(self.prefix) > 10:
            raise ValidationError("Invoice prefix too long (max 10 characters)", "prefix")

        if self.year < 1000 or self.year > 9999:
            raise ValidationError("Invoice year must have 4 digits", "year")

        if self.sequence <= 0:
            raise ValidationError("Invoice sequence must be positive", "sequence")

    def __str__(self) -> str:
        return f"{self.prefix}-{self.year}-{str(self.sequence).zfill(self.width)}"

    @classmethod
    def from_string(cls, value: str) -> 'InvoiceNumber':
        """Parse invoice number from string."""
        parts = value.split("-")
        if len(parts) != 3 or not parts[1].isdigit() or not parts[2].isdigit():
            raise ValidationError(f"Invalid invoice number format: {value}", "invoice_number")
        return cls(parts[0], int(parts[1]), int(parts[2]), len(parts[2]))

    def next(self) -> 'InvoiceNumber':
        """Get the next invoice number in sequence."""
        return InvoiceNumber(self.prefix, self.year, self.sequence + 1, self.width)


@dataclass(frozen=True)
class CaseNumber(ValueObject):
    """Case number value object, formatted as YYMM-NNNN."""

    year: int
    month: int
    sequence: int
    width: int = 4

    def validate(self) -> None:
        """Validate case number parts."""
        if self.month < 1 or self.month > 12:
            raise ValidationError("Case month must be between 1 and 12", "month")

        if self.sequence <= 0:
            raise ValidationError("Case sequence must be positive", "sequence")

    def __str__(self) -> str:
        return f"{self.year % 100:02d}{self.month:02d}-{str(self.sequence).zfill(self.width)}"

    @classmethod
    def from_string(cls, value: str) -> 'CaseNumber':
        """Parse case number from string (the century is assumed to be 2000)."""
        period, _, sequence = value.partition("-")
        if len(period) != 4 or not period.isdigit() or not sequence.isdigit():
            raise ValidationError(f"Invalid case number format: {value}", "case_number")
        return cls(2000 + int(period[:2]), int(period[2:]), int(sequence), len(sequence))
