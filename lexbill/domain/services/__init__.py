"""
Domain services for the billing engine.
This module exports all domain services for complex business logic.
"""

from .billing_service import BillingService, InvoiceTotals
from .numbering_service import NumberingService
from .aggregation_service import BillableItemAggregator, BillableItems
from .payment_ledger import PaymentLedger
from .statistics_service import BillingStatisticsReporter
from .email_service import EmailNotifier

__all__ = [
    "BillingService",
    "InvoiceTotals",
    "NumberingService",
    "BillableItemAggregator",
    "BillableItems",
    "PaymentLedger",
    "BillingStatisticsReporter",
    "EmailNotifier",
]
