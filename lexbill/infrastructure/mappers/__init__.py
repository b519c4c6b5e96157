"""
Infrastructure mappers module.
Contains mappers for converting between domain entities and database models.
"""

from .invoice_mapper import InvoiceMapper
from .time_entry_mapper import TimeEntryMapper
from .expense_mapper import ExpenseMapper
from .client_mapper import ClientMapper, CaseMapper

__all__ = [
    "InvoiceMapper",
    "TimeEntryMapper",
    "ExpenseMapper",
    "ClientMapper",
    "CaseMapper",
]
