"""
Domain models for the billing engine.
This module exports all domain entities and value objects.
"""

# Base classes
from .base import (
    BaseEntity,
    AggregateRoot,
    DomainEvent,
    DomainException,
    ValidationError,
    InvalidStateError,
    NotFoundError,
    StorageError,
    DuplicateEntityError,
    ValueObject,
    InvoiceNumber,
    CaseNumber,
    round_currency
)

# Domain entities
from .invoice import (
    Invoice,
    InvoiceItem,
    Payment,
    InvoiceStatus,
    PaymentMethod,
    InvoiceCreatedEvent,
    InvoiceSentEvent,
    PaymentRecordedEvent,
    InvoiceCancelledEvent
)
from .time_entry import TimeEntry
from .expense import Expense, ExpenseStatus
from .client import Client, Case

__all__ = [
    "BaseEntity",
    "AggregateRoot",
    "DomainEvent",
    "DomainException",
    "ValidationError",
    "InvalidStateError",
    "NotFoundError",
    "StorageError",
    "DuplicateEntityError",
    "ValueObject",
    "InvoiceNumber",
    "CaseNumber",
    "round_currency",
    "Invoice",
    "InvoiceItem",
    "Payment",
    "InvoiceStatus",
    "PaymentMethod",
    "InvoiceCreatedEvent",
    "InvoiceSentEvent",
    "PaymentRecordedEvent",
    "InvoiceCancelledEvent",
    "TimeEntry",
    "Expense",
    "ExpenseStatus",
    "Client",
    "Case",
]
