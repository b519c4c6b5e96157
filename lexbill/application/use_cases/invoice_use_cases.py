"""
Invoice use cases for the application layer.
Implements the invoice lifecycle: issue, update, send, delete and queries.
"""

import logging
from typing import List, Optional, Dict, Tuple, Any
from datetime import date, timedelta

from lexbill.application.use_cases.base_use_case import (
    CommandUseCase, QueryUseCase, AuthorizedUseCase
)
from lexbill.application.dto.invoice_dto import (
    CreateInvoiceRequestDTO, GenerateInvoiceRequestDTO, UpdateInvoiceRequestDTO,
    InvoiceIdRequestDTO, ListInvoicesRequestDTO, PreviewUnbilledRequestDTO,
    InvoiceResponseDTO, InvoiceDetailResponseDTO, SendInvoiceResponseDTO, UnbilledItemsResponseDTO
)
from lexbill.domain.models.base import ValidationError, InvalidStateError, NotFoundError
from lexbill.domain.models.client import Client, Case
from lexbill.domain.models.expense import Expense
from lexbill.domain.models.invoice import Invoice, InvoiceItem, InvoiceStatus, InvoiceCreatedEvent
from lexbill.domain.models.time_entry import TimeEntry
from lexbill.domain.repositories.invoice_repository import InvoiceFilter
from lexbill.domain.repositories.unit_of_work import UnitOfWork
from lexbill.domain.services.aggregation_service import BillableItemAggregator
from lexbill.domain.services.billing_service import BillingService
from lexbill.domain.services.email_service import EmailNotifier
from lexbill.domain.services.numbering_service import NumberingService


logger = logging.getLogger(__name__)

DEFAULT_INVOICE_TERMS = "Payment due within 30 days of invoice date."


async def load_invoice(uow: UnitOfWork, invoice_id: int) -> Invoice:
    """Fetch an invoice by id, soft-deleted ones included."""
    invoice = await uow.invoices.find_by_id(invoice_id, include_deleted=True)
    if not invoice:
        raise NotFoundError("Invoice", invoice_id)
    return invoice


async def load_billed_sources(
    uow: UnitOfWork,
    items: List[InvoiceItem],
    client_id: int,
    invoice_id: Optional[int] = None
) -> Tuple[List[TimeEntry], List[Expense]]:
    """
    Resolve the time entries and expenses referenced by line items.

    Every reference must exist, belong to the client and not be billed on
    another invoice. Records already billed on ``invoice_id`` are accepted.
    """
    entry_ids = [item.time_entry_id for item in items if item.time_entry_id is not None]
    expense_ids = [item.expense_id for item in items if item.expense_id is not None]

    if len(set(entry_ids)) != len(entry_ids):
        raise ValidationError("A time entry can only be billed once per invoice", "items")
    if len(set(expense_ids)) != len(expense_ids):
        raise ValidationError("An expense can only be billed once per invoice", "items")

    entries = await uow.time_entries.find_by_ids(entry_ids) if entry_ids else []
    expenses = await uow.expenses.find_by_ids(expense_ids) if expense_ids else []

    found_entries = {entry.id: entry for entry in entries}
    for entry_id in entry_ids:
        entry = found_entries.get(entry_id)
        if entry is None:
            raise NotFoundError("TimeEntry", entry_id)
        _check_source(entry, "Time entry", client_id, invoice_id)

    found_expenses = {expense.id: expense for expense in expenses}
    for expense_id in expense_ids:
        expense = found_expenses.get(expense_id)
        if expense is None:
            raise NotFoundError("Expense", expense_id)
        _check_source(expense, "Expense", client_id, invoice_id)

    return [found_entries[i] for i in entry_ids], [found_expenses[i] for i in expense_ids]


def _check_source(record, label: str, client_id: int, invoice_id: Optional[int]) -> None:
    if record.invoiced and (invoice_id is None or record.invoice_id != invoice_id):
        raise InvalidStateError(f"{label} {record.id} is already invoiced")
    if not record.billable:
        raise InvalidStateError(f"{label} {record.id} is not billable")
    if record.client_id is not None and record.client_id != client_id:
        raise ValidationError(f"{label} {record.id} belongs to another client", "items")


class IssueInvoiceUseCase(AuthorizedUseCase, CommandUseCase):
    """
    Shared logic for use cases that create an invoice.
    The invoice and the billed-state of its sources are written in one unit of work.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        billing_service: BillingService,
        numbering_service: NumberingService,
        payment_terms_days: int = 30,
        default_terms: str = DEFAULT_INVOICE_TERMS
    ):
        super().__init__(uow)
        self.billing_service = billing_service
        self.numbering_service = numbering_service
        self.payment_terms_days = payment_terms_days
        self.default_terms = default_terms

    async def _resolve_client(self, client_id: Optional[int], case_id: Optional[int]) -> Tuple[Client, Optional[Case]]:
        if not client_id:
            raise ValidationError("Client is required", "client_id")

        client = await self.uow.clients.find_by_id(client_id)
        if not client:
            raise NotFoundError("Client", client_id)

        case = None
        if case_id is not None:
            case = await self.uow.cases.find_by_id(case_id)
            if not case:
                raise NotFoundError("Case", case_id)
            if not case.belongs_to(client_id):
                raise ValidationError("Case does not belong to client", "case_id")

        return client, case

    async def _issue(
        self,
        client: Client,
        case: Optional[Case],
        items: List[InvoiceItem],
        time_entries: List[TimeEntry],
        expenses: List[Expense],
        tax_rate: float,
        discount: float,
        issue_date: Optional[date],
        due_date: Optional[date],
        notes: Optional[str],
        terms: Optional[str]
    ) -> InvoiceResponseDTO:
        totals = self.billing_service.calculate_totals(items, tax_rate, discount)

        issue_date = issue_date or date.today()
        due_date = due_date or issue_date + timedelta(days=self.payment_terms_days)

        invoice_number = await self.numbering_service.generate_invoice_number(
            self.uow.invoices, self.uow.sequences, issue_date
        )

        invoice = Invoice(
            client_id=client.id,
            invoice_number=str(invoice_number),
            created_by=self.current_user_id,
            issue_date=issue_date,
            due_date=due_date,
            case_id=case.id if case else None
        )
        invoice.tax_rate = tax_rate or 0.0
        invoice.discount = discount or 0.0
        invoice.notes = notes
        invoice.terms = terms
        invoice.apply_totals(items, totals.subtotal, totals.tax_amount, totals.total)
        invoice.validate()

        saved = await self.uow.invoices.save(invoice)

        for entry in time_entries:
            entry.mark_invoiced(saved.id)
            await self.uow.time_entries.save(entry)

        for expense in expenses:
            expense.mark_billed(saved.id)
            await self.uow.expenses.save(expense)

        saved.add_event(InvoiceCreatedEvent(
            invoice_id=saved.id,
            invoice_number=saved.invoice_number,
            client_id=saved.client_id,
            total=saved.total
        ))
        self.collect_events(saved)

        logger.info(
            f"Invoice {saved.invoice_number} created for client {client.id} "
            f"({len(time_entries)} time entries, {len(expenses)} expenses, total {saved.total})"
        )
        return InvoiceResponseDTO.from_domain(saved)


class CreateInvoiceUseCase(IssueInvoiceUseCase):
    """Use case for creating an invoice from explicit line items."""

    async def _execute_command_logic(self, request: CreateInvoiceRequestDTO) -> InvoiceResponseDTO:
        client, case = await self._resolve_client(request.client_id, request.case_id)

        items = [item.to_domain() for item in request.items]
        for item in items:
            item.validate()

        time_entries, expenses = await load_billed_sources(self.uow, items, client.id)

        return await self._issue(
            client, case, items, time_entries, expenses,
            tax_rate=request.tax_rate,
            discount=request.discount,
            issue_date=request.issue_date,
            due_date=request.due_date,
            notes=request.notes,
            terms=request.terms
        )


class GenerateInvoiceFromUnbilledUseCase(IssueInvoiceUseCase):
    """Use case for invoicing a client's unbilled time entries and expenses."""

    def __init__(
        self,
        uow: UnitOfWork,
        billing_service: BillingService,
        numbering_service: NumberingService,
        aggregator: BillableItemAggregator,
        payment_terms_days: int = 30,
        default_terms: str = DEFAULT_INVOICE_TERMS
    ):
        super().__init__(uow, billing_service, numbering_service, payment_terms_days, default_terms)
        self.aggregator = aggregator

    async def _execute_command_logic(self, request: GenerateInvoiceRequestDTO) -> InvoiceResponseDTO:
        client, case = await self._resolve_client(request.client_id, request.case_id)
        case_id = case.id if case else None

        time_entries = await self.uow.time_entries.find_unbilled(client.id, case_id, request.time_entry_ids)
        expenses = await self.uow.expenses.find_unbilled(client.id, case_id, request.expense_ids)

        billable = self.aggregator.collect(
            time_entries,
            expenses,
            client_id=client.id,
            case_id=case_id,
            time_entry_ids=request.time_entry_ids,
            expense_ids=request.expense_ids
        )

        if billable.is_empty:
            raise ValidationError("No unbilled items found for this client")

        return await self._issue(
            client, case, billable.items, billable.time_entries, billable.expenses,
            tax_rate=request.tax_rate,
            discount=request.discount,
            issue_date=request.issue_date,
            due_date=request.due_date,
            notes=request.notes,
            terms=request.terms or self.default_terms
        )


class UpdateInvoiceUseCase(AuthorizedUseCase, CommandUseCase[UpdateInvoiceRequestDTO, InvoiceResponseDTO]):
    """
    Use case for updating an invoice.

    Items, tax rate and discount can only change while the invoice is a draft.
    Due date, notes and terms can change on any invoice that is not paid.
    """

    def __init__(self, uow: UnitOfWork, billing_service: BillingService):
        super().__init__(uow)
        self.billing_service = billing_service

    async def _execute_command_logic(self, request: UpdateInvoiceRequestDTO) -> InvoiceResponseDTO:
        invoice = await load_invoice(self.uow, request.invoice_id)
        invoice.ensure_updatable()

        if request.changes_totals:
            invoice.ensure_draft("change items, tax rate or discount")
            await self._apply_financial_changes(invoice, request)

        if request.due_date is not None:
            invoice.due_date = request.due_date
        if request.notes is not None:
            invoice.notes = request.notes
        if request.terms is not None:
            invoice.terms = request.terms

        invoice.derive_status()
        invoice.validate()
        invoice.increment_version()

        saved = await self.uow.invoices.save(invoice)
        logger.info(f"Invoice {saved.invoice_number} updated (status {saved.status.value})")
        return InvoiceResponseDTO.from_domain(saved)

    async def _apply_financial_changes(self, invoice: Invoice, request: UpdateInvoiceRequestDTO) -> None:
        tax_rate = request.tax_rate if request.tax_rate is not None else invoice.tax_rate
        discount = request.discount if request.discount is not None else invoice.discount

        if request.items is None:
            items = invoice.items
        else:
            items = [item.to_domain() for item in request.items]
            for item in items:
                item.validate()

        totals = self.billing_service.calculate_totals(items, tax_rate, discount)

        if request.items is not None:
            await self._rebind_sources(invoice, items)

        invoice.tax_rate = tax_rate
        invoice.discount = discount
        invoice.apply_totals(items, totals.subtotal, totals.tax_amount, totals.total)

    async def _rebind_sources(self, invoice: Invoice, items: List[InvoiceItem]) -> None:
        """Mark newly referenced records billed and release the ones no longer referenced."""
        entries, expenses = await load_billed_sources(self.uow, items, invoice.client_id, invoice.id)

        kept_entry_ids = {entry.id for entry in entries}
        kept_expense_ids = {expense.id for expense in expenses}

        for entry in await self.uow.time_entries.find_by_invoice(invoice.id):
            if entry.id not in kept_entry_ids:
                entry.release()
                await self.uow.time_entries.save(entry)

        for expense in await self.uow.expenses.find_by_invoice(invoice.id):
            if expense.id not in kept_expense_ids:
                expense.release(invoice_was_paid=invoice.has_payments)
                await self.uow.expenses.save(expense)

        for entry in entries:
            if not entry.invoiced:
                entry.mark_invoiced(invoice.id)
                await self.uow.time_entries.save(entry)

        for expense in expenses:
            if not expense.invoiced:
                expense.mark_billed(invoice.id)
                await self.uow.expenses.save(expense)


class SendInvoiceUseCase(AuthorizedUseCase, CommandUseCase[InvoiceIdRequestDTO, SendInvoiceResponseDTO]):
    """
    Use case for sending a draft invoice to its client.

    The status change is committed first. The email is a side effect: its
    failure is logged and reported in the result, never raised.
    """

    TEMPLATE_NAME = "invoiceNotification"

    def __init__(
        self,
        uow: UnitOfWork,
        notifier: EmailNotifier,
        company_name: str,
        notifications_enabled: bool = True
    ):
        super().__init__(uow)
        self.notifier = notifier
        self.company_name = company_name
        self.notifications_enabled = notifications_enabled
        self._recipient: Optional[str] = None
        self._variables: Dict[str, Any] = {}

    async def _execute_command_logic(self, request: InvoiceIdRequestDTO) -> SendInvoiceResponseDTO:
        invoice = await load_invoice(self.uow, request.invoice_id)
        invoice.mark_sent()

        saved = await self.uow.invoices.save(invoice)
        self.collect_events(saved)

        client = await self.uow.clients.find_by_id(saved.client_id)
        self._recipient = client.email if client else None
        self._variables = self.build_notification_variables(saved, client)

        logger.info(f"Invoice {saved.invoice_number} marked as sent")
        return SendInvoiceResponseDTO(invoice=InvoiceResponseDTO.from_domain(saved), notification_sent=False)

    async def _after_commit(self, result: SendInvoiceResponseDTO) -> SendInvoiceResponseDTO:
        sent = await self._notify(result.invoice.invoice_number)
        self.result_metadata["notification_sent"] = sent
        result.notification_sent = sent
        return result

    async def _notify(self, invoice_number: str) -> bool:
        if not self.notifications_enabled:
            logger.info(f"Invoice notifications disabled; not emailing invoice {invoice_number}")
            return False

        if not self._recipient:
            logger.warning(f"Client has no email address; invoice {invoice_number} not emailed")
            return False

        try:
            sent = await self.notifier.send_template_email(self.TEMPLATE_NAME, self._recipient, self._variables)
        except Exception:
            logger.error(f"Failed to email invoice {invoice_number} to {self._recipient}", exc_info=True)
            return False

        if not sent:
            logger.warning(f"Email notifier did not send invoice {invoice_number} to {self._recipient}")
        return bool(sent)

    def build_notification_variables(self, invoice: Invoice, client: Optional[Client]) -> Dict[str, Any]:
        return {
            "clientName": client.display_name if client else "",
            "invoiceNumber": invoice.invoice_number,
            "amount": f"{invoice.balance:.2f}",
            "dueDate": invoice.due_date.isoformat(),
            "subtotal": f"{invoice.subtotal:.2f}",
            "taxAmount": f"{invoice.tax_amount:.2f}",
            "taxRate": invoice.tax_rate,
            "total": f"{invoice.total:.2f}",
            "companyName": self.company_name
        }


class DeleteInvoiceUseCase(AuthorizedUseCase, CommandUseCase[InvoiceIdRequestDTO, InvoiceResponseDTO]):
    """
    Use case for soft-deleting an invoice.
    Releases every time entry and expense billed on it in the same unit of work.
    """

    async def _execute_command_logic(self, request: InvoiceIdRequestDTO) -> InvoiceResponseDTO:
        invoice = await load_invoice(self.uow, request.invoice_id)
        was_paid = invoice.has_payments

        invoice.soft_delete()
        saved = await self.uow.invoices.save(invoice)

        entries = await self.uow.time_entries.find_by_invoice(saved.id)
        for entry in entries:
            entry.release()
            await self.uow.time_entries.save(entry)

        expenses = await self.uow.expenses.find_by_invoice(saved.id)
        for expense in expenses:
            expense.release(invoice_was_paid=was_paid)
            await self.uow.expenses.save(expense)

        self.collect_events(saved)
        logger.info(
            f"Invoice {saved.invoice_number} deleted; released {len(entries)} time entries "
            f"and {len(expenses)} expenses"
        )
        return InvoiceResponseDTO.from_domain(saved)


class GetInvoiceUseCase(QueryUseCase[InvoiceIdRequestDTO, InvoiceDetailResponseDTO]):
    """
    Use case for fetching one invoice with its client and case expanded.
    Soft-deleted invoices read as cancelled.
    """

    async def _execute_query_logic(self, request: InvoiceIdRequestDTO) -> InvoiceDetailResponseDTO:
        invoice = await load_invoice(self.uow, request.invoice_id)
        client = await self.uow.clients.find_by_id(invoice.client_id)
        case = await self.uow.cases.find_by_id(invoice.case_id) if invoice.case_id else None
        return InvoiceDetailResponseDTO.from_domain_expanded(invoice, client, case)


class ListInvoicesUseCase(QueryUseCase[ListInvoicesRequestDTO, List[InvoiceResponseDTO]]):
    """Use case for listing live invoices, newest issue date first."""

    async def _execute_query_logic(self, request: ListInvoicesRequestDTO) -> List[InvoiceResponseDTO]:
        filters = InvoiceFilter(
            client_id=request.client_id,
            case_id=request.case_id,
            status=InvoiceStatus(request.status) if request.status else None,
            issued_after=request.issued_after,
            issued_before=request.issued_before,
            due_after=request.due_after,
            due_before=request.due_before
        )
        invoices = await self.uow.invoices.list(filters)
        return [InvoiceResponseDTO.from_domain(invoice) for invoice in invoices]


class ListOverdueInvoicesUseCase(QueryUseCase[Optional[date], List[InvoiceResponseDTO]]):
    """
    Use case for listing invoices past due.
    Computed from due dates at query time; stored statuses are not touched.
    """

    async def _validate_request(self, request: Optional[date]) -> None:
        pass

    async def _execute_query_logic(self, request: Optional[date]) -> List[InvoiceResponseDTO]:
        today = request or date.today()
        invoices = await self.uow.invoices.find_overdue(today)
        return [InvoiceResponseDTO.from_domain(invoice) for invoice in invoices]


class PreviewUnbilledItemsUseCase(QueryUseCase[PreviewUnbilledRequestDTO, UnbilledItemsResponseDTO]):
    """Use case showing what an invoice generated now would contain."""

    def __init__(self, uow: UnitOfWork, aggregator: BillableItemAggregator):
        super().__init__(uow)
        self.aggregator = aggregator

    async def _execute_query_logic(self, request: PreviewUnbilledRequestDTO) -> UnbilledItemsResponseDTO:
        client = await self.uow.clients.find_by_id(request.client_id)
        if not client:
            raise NotFoundError("Client", request.client_id)

        time_entries = await self.uow.time_entries.find_unbilled(client.id, request.case_id)
        expenses = await self.uow.expenses.find_unbilled(client.id, request.case_id)

        billable = self.aggregator.collect(time_entries, expenses, client.id, request.case_id)
        return UnbilledItemsResponseDTO.from_domain(client.id, request.case_id, billable)
