"""
Expense mapper for converting between domain entities and database models.
"""

from lexbill.domain.models.expense import Expense, ExpenseStatus
from lexbill.infrastructure.db.models import ExpenseModel


class ExpenseMapper:
    """Maps between Expense domain entity and ExpenseModel database model."""

    def domain_to_model(self, expense: Expense) -> ExpenseModel:
        model = ExpenseModel(created_at=expense.created_at)
        self.update_model(model, expense)
        return model

    def update_model(self, model: ExpenseModel, expense: Expense) -> None:
        model.description = expense.description
        model.amount = expense.amount
        model.expense_date = expense.expense_date
        model.submitted_by = expense.submitted_by
        model.client_id = expense.client_id
        model.case_id = expense.case_id
        model.status = expense.status
        model.billable = expense.billable
        model.markup_percentage = expense.markup_percentage
        model.billable_amount = expense.billable_amount
        model.invoiced = expense.invoiced
        model.invoice_id = expense.invoice_id
        model.is_deleted = expense.is_deleted
        model.updated_at = expense.updated_at

    def model_to_domain(self, model: ExpenseModel) -> Expense:
        expense = Expense(
            description=model.description,
            amount=model.amount or 0.0,
            submitted_by=model.submitted_by,
            client_id=model.client_id,
            case_id=model.case_id,
            status=ExpenseStatus(model.status),
            markup_percentage=model.markup_percentage or 0.0,
            id=model.id
        )
        if model.created_at:
            expense.created_at = model.created_at
        if model.updated_at:
            expense.updated_at = model.updated_at

        expense.expense_date = model.expense_date
        expense.billable = bool(model.billable)
        expense.billable_amount = model.billable_amount or 0.0
        expense.invoiced = bool(model.invoiced)
        expense.invoice_id = model.invoice_id
        expense.is_deleted = bool(model.is_deleted)
        return expense
