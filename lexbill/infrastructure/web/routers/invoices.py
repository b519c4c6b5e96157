"""
Invoice router.
Handles invoice issuing, lifecycle changes, payments and billing reports.
"""

from typing import Annotated, List, Optional
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query, Response
from pydantic import ValidationError as PydanticValidationError

from lexbill.application.use_cases import (
    CreateInvoiceUseCase,
    GenerateInvoiceFromUnbilledUseCase,
    UpdateInvoiceUseCase,
    SendInvoiceUseCase,
    DeleteInvoiceUseCase,
    GetInvoiceUseCase,
    ListInvoicesUseCase,
    ListOverdueInvoicesUseCase,
    PreviewUnbilledItemsUseCase,
    RecordPaymentUseCase,
    GetBillingStatisticsUseCase,
)
from lexbill.application.dto.invoice_dto import (
    CreateInvoiceRequestDTO,
    GenerateInvoiceRequestDTO,
    UpdateInvoiceRequestDTO,
    PaymentRequestDTO,
    InvoiceIdRequestDTO,
    ListInvoicesRequestDTO,
    PreviewUnbilledRequestDTO,
    BillingStatisticsRequestDTO,
    InvoiceResponseDTO,
    InvoiceDetailResponseDTO,
    SendInvoiceResponseDTO,
    UnbilledItemsResponseDTO,
    BillingStatisticsResponseDTO,
)
from lexbill.domain.models.invoice import InvoiceStatus
from lexbill.infrastructure.web import dependencies as deps
from lexbill.infrastructure.web.middleware.error_handler import unwrap


router = APIRouter()


@router.get("", response_model=List[InvoiceResponseDTO])
async def list_invoices(
    use_case: Annotated[ListInvoicesUseCase, Depends(deps.get_list_invoices_use_case)],
    client_id: Optional[int] = Query(None, description="Filter by client ID"),
    case_id: Optional[int] = Query(None, description="Filter by case ID"),
    invoice_status: Optional[InvoiceStatus] = Query(None, alias="status", description="Filter by invoice status"),
    issued_after: Optional[date] = Query(None, description="Issued on or after"),
    issued_before: Optional[date] = Query(None, description="Issued on or before"),
    due_after: Optional[date] = Query(None, description="Due on or after"),
    due_before: Optional[date] = Query(None, description="Due on or before")
):
    """
    List live invoices, newest issue date first.

    - **client_id**, **case_id**: Restrict to a client or case
    - **status**: draft, sent, paid, partially_paid, overdue or cancelled
    - **issued_after** / **issued_before**: Issue date range
    - **due_after** / **due_before**: Due date range
    """
    request = ListInvoicesRequestDTO(
        client_id=client_id,
        case_id=case_id,
        status=invoice_status,
        issued_after=issued_after,
        issued_before=issued_before,
        due_after=due_after,
        due_before=due_before
    )
    return unwrap(await use_case.execute(request))


@router.get("/statistics", response_model=BillingStatisticsResponseDTO)
async def get_billing_statistics(
    use_case: Annotated[GetBillingStatisticsUseCase, Depends(deps.get_statistics_use_case)],
    start_date: Optional[date] = Query(None, description="Period start"),
    end_date: Optional[date] = Query(None, description="Period end")
):
    """Billing dashboard figures for an optional issue-date period."""
    try:
        request = BillingStatisticsRequestDTO(start_date=start_date, end_date=end_date)
    except PydanticValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "VALIDATION_ERROR", "message": e.errors()[0]["msg"], "field": "end_date"}
        )
    return unwrap(await use_case.execute(request))


@router.get("/overdue", response_model=List[InvoiceResponseDTO])
async def list_overdue_invoices(
    use_case: Annotated[ListOverdueInvoicesUseCase, Depends(deps.get_list_overdue_use_case)]
):
    """Invoices past their due date with an outstanding balance."""
    return unwrap(await use_case.execute(None))


@router.get("/unbilled", response_model=UnbilledItemsResponseDTO)
async def preview_unbilled_items(
    use_case: Annotated[PreviewUnbilledItemsUseCase, Depends(deps.get_preview_unbilled_use_case)],
    client_id: int = Query(..., gt=0, description="Client ID"),
    case_id: Optional[int] = Query(None, description="Restrict to one case")
):
    """Preview the items an invoice generated now would contain."""
    request = PreviewUnbilledRequestDTO(client_id=client_id, case_id=case_id)
    return unwrap(await use_case.execute(request))


@router.get("/{invoice_id}", response_model=InvoiceDetailResponseDTO)
async def get_invoice(
    invoice_id: int,
    use_case: Annotated[GetInvoiceUseCase, Depends(deps.get_invoice_use_case)]
):
    """Get one invoice with items, client and case. Deleted invoices are returned as cancelled."""
    return unwrap(await use_case.execute(InvoiceIdRequestDTO(invoice_id=invoice_id)))


@router.post("", status_code=status.HTTP_201_CREATED, response_model=InvoiceResponseDTO)
async def create_invoice(
    request: CreateInvoiceRequestDTO,
    use_case: Annotated[CreateInvoiceUseCase, Depends(deps.get_create_invoice_use_case)]
):
    """
    Create a draft invoice from explicit line items.

    - **client_id**: Client to invoice (required)
    - **case_id**: Case the invoice belongs to
    - **items**: Line items; items may reference a time entry or an expense
    - **tax_rate**: Tax percentage (0-100)
    - **discount**: Fixed discount amount
    - **due_date**: Defaults to the configured payment terms
    """
    return unwrap(await use_case.execute(request))


@router.post("/generate", status_code=status.HTTP_201_CREATED, response_model=InvoiceResponseDTO)
async def generate_invoice(
    request: GenerateInvoiceRequestDTO,
    use_case: Annotated[GenerateInvoiceFromUnbilledUseCase, Depends(deps.get_generate_invoice_use_case)]
):
    """Create a draft invoice from the client's unbilled time entries and expenses."""
    return unwrap(await use_case.execute(request))


@router.put("/{invoice_id}", response_model=InvoiceResponseDTO)
async def update_invoice(
    invoice_id: int,
    request: UpdateInvoiceRequestDTO,
    use_case: Annotated[UpdateInvoiceUseCase, Depends(deps.get_update_invoice_use_case)]
):
    """
    Update an invoice.
    Items, tax rate and discount can only change while the invoice is a draft.
    """
    request.invoice_id = invoice_id
    return unwrap(await use_case.execute(request))


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_invoice(
    invoice_id: int,
    use_case: Annotated[DeleteInvoiceUseCase, Depends(deps.get_delete_invoice_use_case)]
):
    """Cancel an invoice and return its time entries and expenses to the unbilled pool."""
    unwrap(await use_case.execute(InvoiceIdRequestDTO(invoice_id=invoice_id)))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{invoice_id}/payment", response_model=InvoiceResponseDTO)
async def record_payment(
    invoice_id: int,
    request: PaymentRequestDTO,
    use_case: Annotated[RecordPaymentUseCase, Depends(deps.get_record_payment_use_case)]
):
    """
    Record a payment against an invoice.

    - **amount**: Payment amount (required, positive, at most the balance)
    - **method**: credit_card, bank_transfer, check, cash or other
    - **payment_date**: Defaults to today
    """
    request.invoice_id = invoice_id
    return unwrap(await use_case.execute(request))


@router.post("/{invoice_id}/send", response_model=SendInvoiceResponseDTO)
async def send_invoice(
    invoice_id: int,
    use_case: Annotated[SendInvoiceUseCase, Depends(deps.get_send_invoice_use_case)]
):
    """Mark a draft invoice as sent and email the client."""
    return unwrap(await use_case.execute(InvoiceIdRequestDTO(invoice_id=invoice_id)))
