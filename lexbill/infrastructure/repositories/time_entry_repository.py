"""
Time entry repository implementation using SQLAlchemy.
"""

from typing import List, Optional, Dict
from datetime import date
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func, and_, or_, case

from lexbill.domain.models.time_entry import TimeEntry
from lexbill.domain.models.base import NotFoundError
from lexbill.domain.repositories.time_entry_repository import TimeEntryRepository as TimeEntryRepositoryInterface
from lexbill.infrastructure.db.models import TimeEntryModel, CaseModel
from lexbill.infrastructure.mappers.time_entry_mapper import TimeEntryMapper

from .base import storage_errors, within_period


class SQLAlchemyTimeEntryRepository(TimeEntryRepositoryInterface):
    """SQLAlchemy implementation of time entry repository."""

    def __init__(self, session: Session):
        self.session = session
        self.mapper = TimeEntryMapper()

    def _query(self):
        return self.session.query(TimeEntryModel).options(
            joinedload(TimeEntryModel.user),
            joinedload(TimeEntryModel.case)
        ).filter(TimeEntryModel.is_deleted.is_(False))

    async def save(self, time_entry: TimeEntry) -> TimeEntry:
        """Save a time entry."""
        with storage_errors("save time entry"):
            if time_entry.is_new:
                model = self.mapper.domain_to_model(time_entry)
                self.session.add(model)
            else:
                model = self.session.query(TimeEntryModel).filter_by(id=time_entry.id).first()
                if not model:
                    raise NotFoundError("Time entry", time_entry.id)
                self.mapper.update_model(model, time_entry)

            self.session.flush()

        if time_entry.is_new:
            time_entry.id = model.id
        return time_entry

    async def find_by_ids(self, entry_ids: List[int]) -> List[TimeEntry]:
        if not entry_ids:
            return []

        with storage_errors("load time entries"):
            models = self._query().filter(TimeEntryModel.id.in_(entry_ids)).all()

        return [self.mapper.model_to_domain(model) for model in models]

    async def find_unbilled(
        self,
        client_id: int,
        case_id: Optional[int] = None,
        entry_ids: Optional[List[int]] = None
    ) -> List[TimeEntry]:
        """Unbilled entries; entries without a client belong to their case's client."""
        query = self._query().filter(
            TimeEntryModel.billable.is_(True),
            TimeEntryModel.invoiced.is_(False),
            or_(
                TimeEntryModel.client_id == client_id,
                and_(
                    TimeEntryModel.client_id.is_(None),
                    TimeEntryModel.case.has(CaseModel.client_id == client_id)
                )
            )
        )

        if case_id is not None:
            query = query.filter(TimeEntryModel.case_id == case_id)
        if entry_ids is not None:
            if not entry_ids:
                return []
            query = query.filter(TimeEntryModel.id.in_(entry_ids))

        with storage_errors("load unbilled time entries"):
            models = query.order_by(TimeEntryModel.entry_date, TimeEntryModel.id).all()

        return [self.mapper.model_to_domain(model) for model in models]

    async def find_by_invoice(self, invoice_id: int) -> List[TimeEntry]:
        with storage_errors("load invoiced time entries"):
            models = self._query().filter(TimeEntryModel.invoice_id == invoice_id).all()

        return [self.mapper.model_to_domain(model) for model in models]

    async def summarize_minutes(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> Dict[str, int]:
        query = self.session.query(
            func.coalesce(func.sum(TimeEntryModel.duration_minutes), 0),
            func.coalesce(
                func.sum(case((TimeEntryModel.billable.is_(True), TimeEntryModel.duration_minutes), else_=0)),
                0
            )
        ).filter(TimeEntryModel.is_deleted.is_(False))
        query = within_period(query, TimeEntryModel.entry_date, start_date, end_date)

        with storage_errors("summarize time entries"):
            total_minutes, billable_minutes = query.one()

        return {"total_minutes": int(total_minutes), "billable_minutes": int(billable_minutes)}
