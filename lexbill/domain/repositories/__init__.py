"""
Repository interfaces for the domain layer.
This module exports all repository interfaces (ports) for dependency injection.
"""

from .invoice_repository import InvoiceRepository, InvoiceFilter
from .time_entry_repository import TimeEntryRepository
from .expense_repository import ExpenseRepository
from .client_repository import ClientRepository, CaseRepository
from .sequence_repository import SequenceRepository
from .unit_of_work import UnitOfWork

__all__ = [
    "InvoiceRepository",
    "InvoiceFilter",
    "TimeEntryRepository",
    "ExpenseRepository",
    "ClientRepository",
    "CaseRepository",
    "SequenceRepository",
    "UnitOfWork",
]
