"""Numbering service for generating sequential invoice and case numbers.
Handles prefix scoping, parsing of issued numbers and counter allocation.
"""

from typing import Optional
from datetime import date

from lexbill.domain.models.base import InvoiceNumber, CaseNumber, ValidationError
from lexbill.domain.repositories.invoice_repository import InvoiceRepository
from lexbill.domain.repositories.client_repository import CaseRepository
from lexbill.domain.repositories.sequence_repository import SequenceRepository


class NumberingService:
    """
    Domain service for sequential identifiers.

    Invoice numbers are scoped per calendar year (``INV-2024-00001``) and case
    numbers per year and month (``2405-0001``). The greatest number already
    issued under a prefix seeds a per-prefix counter in the store, and the
    counter is advanced atomically, so two concurrent callers never receive
    the same value.
    """

    def __init__(self, invoice_prefix: str = "INV", invoice_width: int = 5, case_width: int = 4):
        self.invoice_number_prefix = invoice_prefix
        self.invoice_width = invoice_width
        self.case_width = case_width

    def invoice_prefix(self, on: date) -> str:
        return f"{self.invoice_number_prefix}-{on.year}-"

    def case_prefix(self, on: date) -> str:
        return f"{on.year % 100:02d}{on.month:02d}-"

    async def generate_invoice_number(
        self,
        invoices: InvoiceRepository,
        sequences: SequenceRepository,
        on: Optional[date] = None
    ) -> InvoiceNumber:
        """
        Allocate the next invoice number for the year of ``on`` (default today).
        Soft-deleted invoices still count; numbers are never reused.
        """
        on = on or date.today()
        prefix = self.invoice_prefix(on)

        latest = await invoices.find_latest_number(prefix)
        floor = self.parse_sequence(latest, prefix) if latest else 0

        sequence = await sequences.increment(prefix, floor)
        return InvoiceNumber(self.invoice_number_prefix, on.year, sequence, self.invoice_width)

    async def generate_case_number(
        self,
        cases: CaseRepository,
        sequences: SequenceRepository,
        on: Optional[date] = None
    ) -> CaseNumber:
        """Allocate the next case number for the month of ``on`` (default today)."""
        on = on or date.today()
        prefix = self.case_prefix(on)

        latest = await cases.find_latest_case_number(prefix)
        floor = self.parse_sequence(latest, prefix) if latest else 0

        sequence = await sequences.increment(prefix, floor)
        return CaseNumber(on.year, on.month, sequence, self.case_width)

    @staticmethod
    def parse_sequence(number: str, prefix: str) -> int:
        """Numeric suffix of an issued number."""
        if not number.startswith(prefix):
            raise ValidationError(f"Number {number} does not start with {prefix}", "number")

        suffix = number[len(prefix):]
        if not suffix.isdigit():
            raise ValidationError(f"Invalid sequence in number: {number}", "number")

        return int(suffix)
