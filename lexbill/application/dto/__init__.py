"""
Application layer DTOs.
Data Transfer Objects for API requests and responses.
"""

from .base_dto import *
from .invoice_dto import *

__all__ = [
    # Base DTOs
    "BaseDTO",
    "RequestDTO",
    "ResponseDTO",
    "DateRangeRequestDTO",
    "HealthCheckResponseDTO",
    "ErrorResponseDTO",

    # Invoice DTOs
    "InvoiceItemRequestDTO",
    "InvoiceItemResponseDTO",
    "CreateInvoiceRequestDTO",
    "GenerateInvoiceRequestDTO",
    "UpdateInvoiceRequestDTO",
    "PaymentRequestDTO",
    "InvoiceIdRequestDTO",
    "ListInvoicesRequestDTO",
    "PreviewUnbilledRequestDTO",
    "BillingStatisticsRequestDTO",
    "PaymentResponseDTO",
    "InvoiceResponseDTO",
    "ClientSummaryDTO",
    "CaseSummaryDTO",
    "InvoiceDetailResponseDTO",
    "SendInvoiceResponseDTO",
    "UnbilledItemsResponseDTO",
    "BillingStatisticsResponseDTO",
]
