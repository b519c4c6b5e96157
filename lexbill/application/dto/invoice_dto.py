"""
Invoice DTOs for the application layer.
Request and response shapes for invoicing, payments and billing reports.
"""

from typing import List, Optional, Dict, Any
from datetime import date, datetime
from pydantic import Field, ConfigDict

from lexbill.application.dto.base_dto import RequestDTO, ResponseDTO, DateRangeRequestDTO, BaseDTO
from lexbill.domain.models.client import Client, Case
from lexbill.domain.models.invoice import Invoice, InvoiceItem, Payment, InvoiceStatus, PaymentMethod
from lexbill.domain.services.aggregation_service import BillableItems


class InvoiceItemRequestDTO(RequestDTO):
    """Invoice line item as submitted by a client."""

    description: str = Field(default="", max_length=500, description="Item description")
    quantity: Optional[float] = Field(default=None, description="Quantity (defaults to 1)")
    rate: Optional[float] = Field(default=None, description="Unit rate (defaults to amount / quantity)")
    amount: float = Field(description="Line amount")
    time_entry_id: Optional[int] = Field(default=None, description="Billed time entry")
    expense_id: Optional[int] = Field(default=None, description="Billed expense")
    case_id: Optional[int] = Field(default=None, description="Case the item relates to")
    taxable: bool = Field(default=True, description="Whether the item is taxable")
    notes: Optional[str] = Field(default=None, max_length=1000, description="Item notes")

    def to_domain(self) -> InvoiceItem:
        """Build the domain item, filling in quantity and rate when omitted."""
        quantity = 1.0 if self.quantity is None else self.quantity
        rate = self.rate
        if rate is None:
            rate = self.amount / quantity if quantity else 0.0

        return InvoiceItem(
            description=self.description,
            quantity=quantity,
            rate=rate,
            amount=self.amount,
            time_entry_id=self.time_entry_id,
            expense_id=self.expense_id,
            case_id=self.case_id,
            taxable=self.taxable,
            notes=self.notes
        )


class InvoiceItemResponseDTO(BaseDTO):
    """Invoice line item response."""

    description: str
    quantity: float
    rate: float
    amount: float
    time_entry_id: Optional[int] = None
    expense_id: Optional[int] = None
    case_id: Optional[int] = None
    taxable: bool = True
    notes: Optional[str] = None

    @classmethod
    def from_domain(cls, item: InvoiceItem) -> "InvoiceItemResponseDTO":
        return cls(**item.to_dict())


class CreateInvoiceRequestDTO(RequestDTO):
    """DTO for creating an invoice from explicit line items."""

    client_id: Optional[int] = Field(default=None, description="Client ID")
    case_id: Optional[int] = Field(default=None, description="Case ID")
    issue_date: Optional[date] = Field(default=None, description="Issue date (defaults to today)")
    due_date: Optional[date] = Field(default=None, description="Due date (defaults to payment terms)")
    items: List[InvoiceItemRequestDTO] = Field(default_factory=list, description="Invoice items")
    tax_rate: float = Field(default=0.0, description="Tax rate percentage (0-100)")
    discount: float = Field(default=0.0, description="Fixed discount amount")
    notes: Optional[str] = Field(default=None, max_length=2000, description="Invoice notes")
    terms: Optional[str] = Field(default=None, max_length=2000, description="Payment terms text")


class GenerateInvoiceRequestDTO(RequestDTO):
    """DTO for generating an invoice from a client's unbilled time and expenses."""

    client_id: Optional[int] = Field(default=None, description="Client ID")
    case_id: Optional[int] = Field(default=None, description="Restrict to one case")
    time_entry_ids: Optional[List[int]] = Field(default=None, description="Restrict to these time entries")
    expense_ids: Optional[List[int]] = Field(default=None, description="Restrict to these expenses")
    issue_date: Optional[date] = Field(default=None, description="Issue date (defaults to today)")
    due_date: Optional[date] = Field(default=None, description="Due date (defaults to payment terms)")
    tax_rate: float = Field(default=0.0, description="Tax rate percentage (0-100)")
    discount: float = Field(default=0.0, description="Fixed discount amount")
    notes: Optional[str] = Field(default=None, max_length=2000, description="Invoice notes")
    terms: Optional[str] = Field(default=None, max_length=2000, description="Payment terms text")


class UpdateInvoiceRequestDTO(RequestDTO):
    """
    DTO for updating an invoice.
    Unknown fields, including invoice_number, are dropped rather than rejected.
    """

    model_config = ConfigDict(extra="ignore")

    invoice_id: Optional[int] = Field(default=None, exclude=True, description="Set from the URL")
    items: Optional[List[InvoiceItemRequestDTO]] = Field(default=None, description="Replacement items")
    tax_rate: Optional[float] = Field(default=None, description="Tax rate percentage (0-100)")
    discount: Optional[float] = Field(default=None, description="Fixed discount amount")
    due_date: Optional[date] = Field(default=None, description="Due date")
    notes: Optional[str] = Field(default=None, max_length=2000, description="Invoice notes")
    terms: Optional[str] = Field(default=None, max_length=2000, description="Payment terms text")

    @property
    def changes_totals(self) -> bool:
        return self.items is not None or self.tax_rate is not None or self.discount is not None


class PaymentRequestDTO(RequestDTO):
    """DTO for recording a payment."""

    invoice_id: Optional[int] = Field(default=None, exclude=True, description="Set from the URL")
    amount: Optional[float] = Field(default=None, description="Payment amount")
    method: Optional[str] = Field(default=None, description="Payment method")
    payment_date: Optional[date] = Field(default=None, description="Payment date (defaults to today)")
    reference: Optional[str] = Field(default=None, max_length=100, description="Payment reference")
    notes: Optional[str] = Field(default=None, max_length=500, description="Payment notes")


class InvoiceIdRequestDTO(RequestDTO):
    """DTO addressing a single invoice."""

    invoice_id: int = Field(gt=0, description="Invoice ID")


class ListInvoicesRequestDTO(RequestDTO):
    """DTO for listing invoices."""

    client_id: Optional[int] = Field(default=None, description="Filter by client")
    case_id: Optional[int] = Field(default=None, description="Filter by case")
    status: Optional[InvoiceStatus] = Field(default=None, description="Filter by status")
    issued_after: Optional[date] = Field(default=None, description="Issued on or after")
    issued_before: Optional[date] = Field(default=None, description="Issued on or before")
    due_after: Optional[date] = Field(default=None, description="Due on or after")
    due_before: Optional[date] = Field(default=None, description="Due on or before")


class PreviewUnbilledRequestDTO(RequestDTO):
    """DTO for previewing a client's unbilled items."""

    client_id: int = Field(gt=0, description="Client ID")
    case_id: Optional[int] = Field(default=None, description="Restrict to one case")


class BillingStatisticsRequestDTO(DateRangeRequestDTO):
    """DTO for billing statistics over an optional issue-date range."""
    pass


class PaymentResponseDTO(BaseDTO):
    """Payment response DTO."""

    amount: float
    payment_date: date
    method: PaymentMethod
    reference: Optional[str] = None
    notes: Optional[str] = None
    recorded_by: str
    recorded_at: datetime

    @classmethod
    def from_domain(cls, payment: Payment) -> "PaymentResponseDTO":
        return cls(
            amount=payment.amount,
            payment_date=payment.payment_date,
            method=payment.method,
            reference=payment.reference,
            notes=payment.notes,
            recorded_by=payment.recorded_by,
            recorded_at=payment.recorded_at
        )


class InvoiceResponseDTO(ResponseDTO):
    """Invoice response DTO."""

    invoice_number: str
    client_id: int
    case_id: Optional[int] = None
    issue_date: date
    due_date: date
    sent_date: Optional[date] = None
    items: List[InvoiceItemResponseDTO] = Field(default_factory=list)
    subtotal: float
    tax_rate: float
    tax_amount: float
    discount: float
    total: float
    amount_paid: float
    balance: float
    status: InvoiceStatus
    payments: List[PaymentResponseDTO] = Field(default_factory=list)
    notes: Optional[str] = None
    terms: Optional[str] = None
    is_overdue: bool = False
    days_overdue: int = 0
    created_by: Optional[str] = None

    @classmethod
    def from_domain(cls, invoice: Invoice) -> "InvoiceResponseDTO":
        return cls(
            id=invoice.id,
            created_at=invoice.created_at,
            updated_at=invoice.updated_at,
            invoice_number=invoice.invoice_number,
            client_id=invoice.client_id,
            case_id=invoice.case_id,
            issue_date=invoice.issue_date,
            due_date=invoice.due_date,
            sent_date=invoice.sent_date,
            items=[InvoiceItemResponseDTO.from_domain(item) for item in invoice.items],
            subtotal=invoice.subtotal,
            tax_rate=invoice.tax_rate,
            tax_amount=invoice.tax_amount,
            discount=invoice.discount,
            total=invoice.total,
            amount_paid=invoice.amount_paid,
            balance=invoice.balance,
            status=invoice.status,
            payments=[PaymentResponseDTO.from_domain(payment) for payment in invoice.payments],
            notes=invoice.notes,
            terms=invoice.terms,
            is_overdue=invoice.is_overdue,
            days_overdue=invoice.days_overdue,
            created_by=invoice.created_by
        )


class ClientSummaryDTO(BaseDTO):
    """Client shown alongside a single invoice."""

    id: int
    name: str
    email: Optional[str] = None
    company: Optional[str] = None

    @classmethod
    def from_domain(cls, client: Client) -> "ClientSummaryDTO":
        return cls(id=client.id, name=client.name, email=client.email, company=client.company)


class CaseSummaryDTO(BaseDTO):
    """Case shown alongside a single invoice."""

    id: int
    case_number: str
    title: str

    @classmethod
    def from_domain(cls, case: Case) -> "CaseSummaryDTO":
        return cls(id=case.id, case_number=case.case_number, title=case.title)


class InvoiceDetailResponseDTO(InvoiceResponseDTO):
    """Single invoice with its client and case expanded."""

    client: Optional[ClientSummaryDTO] = None
    case: Optional[CaseSummaryDTO] = None

    @classmethod
    def from_domain_expanded(
        cls,
        invoice: Invoice,
        client: Optional[Client],
        case: Optional[Case]
    ) -> "InvoiceDetailResponseDTO":
        return cls(
            **InvoiceResponseDTO.from_domain(invoice).model_dump(),
            client=ClientSummaryDTO.from_domain(client) if client else None,
            case=CaseSummaryDTO.from_domain(case) if case else None
        )


class SendInvoiceResponseDTO(BaseDTO):
    """Result of sending an invoice."""

    invoice: InvoiceResponseDTO
    notification_sent: bool = Field(description="Whether the client email was handed to the mail transport")


class UnbilledItemsResponseDTO(BaseDTO):
    """Preview of what an invoice generated now would contain."""

    client_id: int
    case_id: Optional[int] = None
    items: List[InvoiceItemResponseDTO] = Field(default_factory=list)
    time_entry_count: int = 0
    expense_count: int = 0
    total_hours: float = 0.0
    time_entries_total: float = 0.0
    expenses_total: float = 0.0
    subtotal: float = 0.0

    @classmethod
    def from_domain(cls, client_id: int, case_id: Optional[int], billable: BillableItems) -> "UnbilledItemsResponseDTO":
        data = billable.to_dict()
        data["items"] = [InvoiceItemResponseDTO.from_domain(item) for item in billable.items]
        return cls(client_id=client_id, case_id=case_id, **data)


class BillingStatisticsResponseDTO(BaseDTO):
    """Billing dashboard figures."""

    period: Dict[str, Optional[str]]
    totals: Dict[str, Any]
    by_status: Dict[str, Dict[str, Any]]
    monthly: Dict[str, List[Dict[str, Any]]]
    time: Dict[str, Any]
    expenses: Dict[str, float]
