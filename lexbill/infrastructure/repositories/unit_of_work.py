"""
SQLAlchemy unit of work.
One session per unit; every repository shares it.
"""

import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from lexbill.domain.repositories.unit_of_work import UnitOfWork

from .base import storage_errors
from .invoice_repository import SQLAlchemyInvoiceRepository
from .time_entry_repository import SQLAlchemyTimeEntryRepository
from .expense_repository import SQLAlchemyExpenseRepository
from .client_repository import SQLAlchemyClientRepository, SQLAlchemyCaseRepository
from .sequence_repository import SQLAlchemySequenceRepository


logger = logging.getLogger(__name__)


class SQLAlchemyUnitOfWork(UnitOfWork):
    """Unit of work backed by a SQLAlchemy session factory."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory
        self.session: Optional[Session] = None
        self._committed = False

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        self.session = self.session_factory()
        self._committed = False

        self.invoices = SQLAlchemyInvoiceRepository(self.session)
        self.time_entries = SQLAlchemyTimeEntryRepository(self.session)
        self.expenses = SQLAlchemyExpenseRepository(self.session)
        self.clients = SQLAlchemyClientRepository(self.session)
        self.cases = SQLAlchemyCaseRepository(self.session)
        self.sequences = SQLAlchemySequenceRepository(self.session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            await self.rollback()
        finally:
            self.session.close()
            self.session = None

    async def commit(self) -> None:
        with storage_errors("commit transaction"):
            self.session.commit()
        self._committed = True

    async def rollback(self) -> None:
        if self._committed or self.session is None:
            return

        if self.session.in_transaction():
            logger.debug("Rolling back uncommitted unit of work")
        self.session.rollback()
