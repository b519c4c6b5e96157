"""
Time entry mapper for converting between domain entities and database models.
"""

from lexbill.domain.models.time_entry import TimeEntry
from lexbill.infrastructure.db.models import TimeEntryModel


class TimeEntryMapper:
    """Maps between TimeEntry domain entity and TimeEntryModel database model."""

    def domain_to_model(self, entry: TimeEntry) -> TimeEntryModel:
        model = TimeEntryModel(created_at=entry.created_at)
        self.update_model(model, entry)
        return model

    def update_model(self, model: TimeEntryModel, entry: TimeEntry) -> None:
        model.user_id = entry.user_id
        model.case_id = entry.case_id
        model.client_id = entry.client_id
        model.task_id = entry.task_id
        model.description = entry.description
        model.entry_date = entry.entry_date
        model.duration_minutes = entry.duration_minutes
        model.billable = entry.billable
        model.billing_rate = entry.billing_rate
        model.billable_amount = entry.billable_amount
        model.invoiced = entry.invoiced
        model.invoice_id = entry.invoice_id
        model.is_deleted = entry.is_deleted
        model.updated_at = entry.updated_at

    def model_to_domain(self, model: TimeEntryModel) -> TimeEntry:
        """
        Convert TimeEntryModel to TimeEntry.
        The client is taken from the case when the row does not carry one.
        """
        client_id = model.client_id
        if client_id is None and model.case is not None:
            client_id = model.case.client_id

        entry = TimeEntry(
            user_id=model.user_id,
            description=model.description,
            duration_minutes=model.duration_minutes or 0,
            billing_rate=model.billing_rate or 0.0,
            case_id=model.case_id,
            client_id=client_id,
            task_id=model.task_id,
            id=model.id
        )
        if model.created_at:
            entry.created_at = model.created_at
        if model.updated_at:
            entry.updated_at = model.updated_at

        entry.user_name = model.user.full_name if model.user else ""
        entry.entry_date = model.entry_date
        entry.billable = bool(model.billable)
        entry.billable_amount = model.billable_amount or 0.0
        entry.invoiced = bool(model.invoiced)
        entry.invoice_id = model.invoice_id
        entry.is_deleted = bool(model.is_deleted)
        return entry
