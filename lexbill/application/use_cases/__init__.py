"""
Application layer use cases.
Business logic for the billing engine.
"""

from .base_use_case import *
from .invoice_use_cases import *
from .payment_use_cases import *
from .statistics_use_cases import *

__all__ = [
    # Base Use Cases
    "BaseUseCase",
    "QueryUseCase",
    "CommandUseCase",
    "AuthorizedUseCase",
    "UseCaseResult",

    # Invoice Use Cases
    "IssueInvoiceUseCase",
    "CreateInvoiceUseCase",
    "GenerateInvoiceFromUnbilledUseCase",
    "UpdateInvoiceUseCase",
    "SendInvoiceUseCase",
    "DeleteInvoiceUseCase",
    "GetInvoiceUseCase",
    "ListInvoicesUseCase",
    "ListOverdueInvoicesUseCase",
    "PreviewUnbilledItemsUseCase",

    # Payment Use Cases
    "RecordPaymentUseCase",

    # Statistics Use Cases
    "GetBillingStatisticsUseCase",
]
