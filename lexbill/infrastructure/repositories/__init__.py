"""
Infrastructure repositories module.
SQLAlchemy implementations of the domain repository interfaces.
"""

from .invoice_repository import SQLAlchemyInvoiceRepository
from .time_entry_repository import SQLAlchemyTimeEntryRepository
from .expense_repository import SQLAlchemyExpenseRepository
from .client_repository import SQLAlchemyClientRepository, SQLAlchemyCaseRepository
from .sequence_repository import SQLAlchemySequenceRepository
from .unit_of_work import SQLAlchemyUnitOfWork

__all__ = [
    "SQLAlchemyInvoiceRepository",
    "SQLAlchemyTimeEntryRepository",
    "SQLAlchemyExpenseRepository",
    "SQLAlchemyClientRepository",
    "SQLAlchemyCaseRepository",
    "SQLAlchemySequenceRepository",
    "SQLAlchemyUnitOfWork",
]
