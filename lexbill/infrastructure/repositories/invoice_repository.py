"""
Invoice repository implementation using SQLAlchemy.
"""

from typing import Optional, List, Dict, Any
from datetime import date
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import func, desc
from sqlalchemy.exc import IntegrityError

from lexbill.domain.models.invoice import Invoice, InvoiceStatus
from lexbill.domain.models.base import NotFoundError, DuplicateEntityError
from lexbill.domain.repositories.invoice_repository import (
    InvoiceRepository as InvoiceRepositoryInterface,
    InvoiceFilter
)
from lexbill.infrastructure.db.models import InvoiceModel, PaymentModel
from lexbill.infrastructure.mappers.invoice_mapper import InvoiceMapper

from .base import storage_errors, within_period, group_by_month


class SQLAlchemyInvoiceRepository(InvoiceRepositoryInterface):
    """SQLAlchemy implementation of invoice repository."""

    def __init__(self, session: Session):
        self.session = session
        self.mapper = InvoiceMapper()

    def _query(self):
        return self.session.query(InvoiceModel).options(
            selectinload(InvoiceModel.items),
            selectinload(InvoiceModel.payments)
        )

    async def save(self, invoice: Invoice) -> Invoice:
        """Save an invoice entity."""
        with storage_errors("save invoice"):
            if invoice.is_new:
                # Check for duplicate invoice number
                existing = self.session.query(InvoiceModel.id).filter_by(
                    invoice_number=invoice.invoice_number
                ).first()
                if existing:
                    raise DuplicateEntityError("Invoice", "invoice_number", invoice.invoice_number)

                model = self.mapper.domain_to_model(invoice)
                self.session.add(model)
            else:
                model = self._query().filter_by(id=invoice.id).first()
                if not model:
                    raise NotFoundError("Invoice", invoice.id)

                self.mapper.update_model(model, invoice)

            try:
                self.session.flush()
            except IntegrityError as exc:
                if "invoice_number" in str(exc.orig):
                    raise DuplicateEntityError("Invoice", "invoice_number", invoice.invoice_number) from exc
                raise

        if invoice.is_new:
            invoice.id = model.id
        return invoice

    async def find_by_id(self, invoice_id: int, include_deleted: bool = False) -> Optional[Invoice]:
        """Get invoice by ID."""
        with storage_errors("load invoice"):
            query = self._query().filter(InvoiceModel.id == invoice_id)
            if not include_deleted:
                query = query.filter(InvoiceModel.is_deleted.is_(False))
            model = query.first()

        if not model:
            return None

        return self.mapper.model_to_domain(model)

    async def find_by_invoice_number(self, invoice_number: str) -> Optional[Invoice]:
        """Get invoice by number."""
        with storage_errors("load invoice"):
            model = self._query().filter_by(invoice_number=invoice_number).first()

        if not model:
            return None

        return self.mapper.model_to_domain(model)

    async def list(self, filters: InvoiceFilter) -> List[Invoice]:
        """List invoices matching the filter."""
        query = self._query()

        if not filters.include_deleted:
            query = query.filter(InvoiceModel.is_deleted.is_(False))
        if filters.client_id is not None:
            query = query.filter(InvoiceModel.client_id == filters.client_id)
        if filters.case_id is not None:
            query = query.filter(InvoiceModel.case_id == filters.case_id)
        if filters.status is not None:
            query = query.filter(InvoiceModel.status == filters.status)

        query = within_period(query, InvoiceModel.issue_date, filters.issued_after, filters.issued_before)
        query = within_period(query, InvoiceModel.due_date, filters.due_after, filters.due_before)

        with storage_errors("list invoices"):
            models = query.order_by(desc(InvoiceModel.issue_date), desc(InvoiceModel.id)).all()

        return [self.mapper.model_to_domain(model) for model in models]

    async def find_overdue(self, today: date) -> List[Invoice]:
        """Get overdue invoices."""
        with storage_errors("list overdue invoices"):
            models = self._query().filter(
                InvoiceModel.is_deleted.is_(False),
                InvoiceModel.status != InvoiceStatus.DRAFT,
                InvoiceModel.due_date < today,
                InvoiceModel.balance > 0
            ).order_by(InvoiceModel.due_date, InvoiceModel.id).all()

        return [self.mapper.model_to_domain(model) for model in models]

    async def find_latest_number(self, prefix: str) -> Optional[str]:
        """Greatest issued number with the prefix; longer numbers sort after shorter ones."""
        with storage_errors("read invoice numbers"):
            row = self.session.query(InvoiceModel.invoice_number).filter(
                InvoiceModel.invoice_number.like(f"{prefix}%")
            ).order_by(
                desc(func.length(InvoiceModel.invoice_number)),
                desc(InvoiceModel.invoice_number)
            ).first()

        return row[0] if row else None

    async def summarize_by_status(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> Dict[str, Dict[str, Any]]:
        query = self.session.query(
            InvoiceModel.status,
            func.count(InvoiceModel.id),
            func.coalesce(func.sum(InvoiceModel.total), 0),
            func.coalesce(func.sum(InvoiceModel.amount_paid), 0),
            func.coalesce(func.sum(InvoiceModel.balance), 0)
        ).filter(InvoiceModel.is_deleted.is_(False))
        query = within_period(query, InvoiceModel.issue_date, start_date, end_date)

        with storage_errors("summarize invoices"):
            rows = query.group_by(InvoiceModel.status).all()

        return {
            InvoiceStatus(status).value: {
                "count": count,
                "total": float(total),
                "amount_paid": float(amount_paid),
                "balance": float(balance)
            }
            for status, count, total, amount_paid, balance in rows
        }

    async def count_issued_since(self, since: date) -> int:
        with storage_errors("count invoices"):
            return self.session.query(func.count(InvoiceModel.id)).filter(
                InvoiceModel.is_deleted.is_(False),
                InvoiceModel.issue_date >= since
            ).scalar() or 0

    async def monthly_invoiced(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> List[Dict[str, Any]]:
        query = self.session.query(InvoiceModel.issue_date, InvoiceModel.total).filter(
            InvoiceModel.is_deleted.is_(False)
        )
        query = within_period(query, InvoiceModel.issue_date, start_date, end_date)

        with storage_errors("summarize invoices"):
            rows = query.all()

        return group_by_month(rows)

    async def monthly_payments(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> List[Dict[str, Any]]:
        query = self.session.query(PaymentModel.payment_date, PaymentModel.amount).join(
            InvoiceModel, PaymentModel.invoice_id == InvoiceModel.id
        ).filter(InvoiceModel.is_deleted.is_(False))
        query = within_period(query, PaymentModel.payment_date, start_date, end_date)

        with storage_errors("summarize payments"):
            rows = query.all()

        return group_by_month(rows)
