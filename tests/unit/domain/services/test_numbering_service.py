"""
Unit tests for NumberingService domain service.
"""

import pytest
from datetime import date

from lexbill.domain.services.numbering_service import NumberingService
from lexbill.domain.models.base import ValidationError
from lexbill.domain.models.invoice import Invoice
from lexbill.domain.models.client import Case

from conftest import FakeUnitOfWork


def seed_invoice(uow: FakeUnitOfWork, number: str, deleted: bool = False) -> None:
    invoice = Invoice(client_id=1, invoice_number=number, created_by="lawyer-1", issue_date=date(2024, 3, 1))
    invoice.is_deleted = deleted
    uow.invoice_store.put(invoice)


class TestNumberingService:
    """Test cases for invoice and case numbering."""

    def setup_method(self):
        self.service = NumberingService()
        self.uow = FakeUnitOfWork()

    @pytest.mark.asyncio
    async def test_first_invoice_of_year(self):
        number = await self.service.generate_invoice_number(self.uow.invoices, self.uow.sequences, date(2024, 1, 15))

        assert str(number) == "INV-2024-00001"

    @pytest.mark.asyncio
    async def test_continues_after_latest_issued(self):
        """INV-2024-00007 is followed by INV-2024-00008."""
        seed_invoice(self.uow, "INV-2024-00003")
        seed_invoice(self.uow, "INV-2024-00007")

        number = await self.service.generate_invoice_number(self.uow.invoices, self.uow.sequences, date(2024, 6, 1))

        assert str(number) == "INV-2024-00008"

    @pytest.mark.asyncio
    async def test_new_year_restarts_sequence(self):
        """The first invoice of 2025 is INV-2025-00001 whatever 2024 reached."""
        seed_invoice(self.uow, "INV-2024-00007")

        number = await self.service.generate_invoice_number(self.uow.invoices, self.uow.sequences, date(2025, 1, 2))

        assert str(number) == "INV-2025-00001"

    @pytest.mark.asyncio
    async def test_deleted_invoices_still_count(self):
        seed_invoice(self.uow, "INV-2024-00004", deleted=True)

        number = await self.service.generate_invoice_number(self.uow.invoices, self.uow.sequences, date(2024, 6, 1))

        assert str(number) == "INV-2024-00005"

    @pytest.mark.asyncio
    async def test_consecutive_allocations_are_distinct(self):
        on = date(2024, 6, 1)
        first = await self.service.generate_invoice_number(self.uow.invoices, self.uow.sequences, on)
        second = await self.service.generate_invoice_number(self.uow.invoices, self.uow.sequences, on)

        assert str(first) == "INV-2024-00001"
        assert str(second) == "INV-2024-00002"

    @pytest.mark.asyncio
    async def test_custom_prefix_and_width(self):
        service = NumberingService(invoice_prefix="LAW", invoice_width=3)

        number = await service.generate_invoice_number(self.uow.invoices, self.uow.sequences, date(2024, 6, 1))

        assert str(number) == "LAW-2024-001"

    @pytest.mark.asyncio
    async def test_case_number(self):
        self.uow.add_case(Case(client_id=1, case_number="2405-0002", title="Existing matter"))

        number = await self.service.generate_case_number(self.uow.cases, self.uow.sequences, date(2024, 5, 20))
        next_month = await self.service.generate_case_number(self.uow.cases, self.uow.sequences, date(2024, 6, 1))

        assert str(number) == "2405-0003"
        assert str(next_month) == "2406-0001"

    def test_parse_sequence(self):
        assert NumberingService.parse_sequence("INV-2024-00042", "INV-2024-") == 42

    def test_parse_sequence_rejects_other_prefix(self):
        with pytest.raises(ValidationError):
            NumberingService.parse_sequence("INV-2023-00042", "INV-2024-")
