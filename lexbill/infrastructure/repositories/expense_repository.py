"""
Expense repository implementation using SQLAlchemy.
"""

from typing import List, Optional, Dict
from datetime import date
from sqlalchemy.orm import Session
from sqlalchemy import func, case

from lexbill.domain.models.expense import Expense
from lexbill.domain.models.base import NotFoundError
from lexbill.domain.repositories.expense_repository import ExpenseRepository as ExpenseRepositoryInterface
from lexbill.infrastructure.db.models import ExpenseModel
from lexbill.infrastructure.mappers.expense_mapper import ExpenseMapper

from .base import storage_errors, within_period


class SQLAlchemyExpenseRepository(ExpenseRepositoryInterface):
    """SQLAlchemy implementation of expense repository."""

    def __init__(self, session: Session):
        self.session = session
        self.mapper = ExpenseMapper()

    def _query(self):
        return self.session.query(ExpenseModel).filter(ExpenseModel.is_deleted.is_(False))

    async def save(self, expense: Expense) -> Expense:
        """Save an expense."""
        with storage_errors("save expense"):
            if expense.is_new:
                model = self.mapper.domain_to_model(expense)
                self.session.add(model)
            else:
                model = self.session.query(ExpenseModel).filter_by(id=expense.id).first()
                if not model:
                    raise NotFoundError("Expense", expense.id)
                self.mapper.update_model(model, expense)

            self.session.flush()

        if expense.is_new:
            expense.id = model.id
        return expense

    async def find_by_ids(self, expense_ids: List[int]) -> List[Expense]:
        if not expense_ids:
            return []

        with storage_errors("load expenses"):
            models = self._query().filter(ExpenseModel.id.in_(expense_ids)).all()

        return [self.mapper.model_to_domain(model) for model in models]

    async def find_unbilled(
        self,
        client_id: int,
        case_id: Optional[int] = None,
        expense_ids: Optional[List[int]] = None
    ) -> List[Expense]:
        query = self._query().filter(
            ExpenseModel.client_id == client_id,
            ExpenseModel.billable.is_(True),
            ExpenseModel.invoiced.is_(False)
        )

        if case_id is not None:
            query = query.filter(ExpenseModel.case_id == case_id)
        if expense_ids is not None:
            if not expense_ids:
                return []
            query = query.filter(ExpenseModel.id.in_(expense_ids))

        with storage_errors("load unbilled expenses"):
            models = query.order_by(ExpenseModel.expense_date, ExpenseModel.id).all()

        return [self.mapper.model_to_domain(model) for model in models]

    async def find_by_invoice(self, invoice_id: int) -> List[Expense]:
        with storage_errors("load invoiced expenses"):
            models = self._query().filter(ExpenseModel.invoice_id == invoice_id).all()

        return [self.mapper.model_to_domain(model) for model in models]

    async def summarize(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> Dict[str, float]:
        query = self.session.query(
            func.coalesce(func.sum(ExpenseModel.amount), 0),
            func.coalesce(
                func.sum(case((ExpenseModel.billable.is_(True), ExpenseModel.billable_amount), else_=0)),
                0
            ),
            func.coalesce(
                func.sum(case((ExpenseModel.invoiced.is_(True), ExpenseModel.billable_amount), else_=0)),
                0
            )
        ).filter(ExpenseModel.is_deleted.is_(False))
        query = within_period(query, ExpenseModel.expense_date, start_date, end_date)

        with storage_errors("summarize expenses"):
            total, billable, billed = query.one()

        return {"total": float(total), "billable": float(billable), "billed": float(billed)}
