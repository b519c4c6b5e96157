"""
Payment use cases for the application layer.
"""

import logging

from lexbill.application.use_cases.base_use_case import CommandUseCase, AuthorizedUseCase
from lexbill.application.use_cases.invoice_use_cases import load_invoice
from lexbill.application.dto.invoice_dto import PaymentRequestDTO, InvoiceResponseDTO
from lexbill.domain.repositories.unit_of_work import UnitOfWork
from lexbill.domain.services.payment_ledger import PaymentLedger


logger = logging.getLogger(__name__)


class RecordPaymentUseCase(AuthorizedUseCase, CommandUseCase[PaymentRequestDTO, InvoiceResponseDTO]):
    """Use case for appending a payment to an invoice's ledger."""

    def __init__(self, uow: UnitOfWork, ledger: PaymentLedger):
        super().__init__(uow)
        self.ledger = ledger

    async def _execute_command_logic(self, request: PaymentRequestDTO) -> InvoiceResponseDTO:
        invoice = await load_invoice(self.uow, request.invoice_id)

        payment = self.ledger.append_payment(
            invoice,
            amount=request.amount,
            method=request.method,
            recorded_by=self.current_user_id,
            payment_date=request.payment_date,
            reference=request.reference,
            notes=request.notes
        )

        saved = await self.uow.invoices.save(invoice)
        self.collect_events(saved)

        logger.info(
            f"Payment of {payment.amount} ({payment.method.value}) recorded on invoice "
            f"{saved.invoice_number}; balance {saved.balance}, status {saved.status.value}"
        )
        return InvoiceResponseDTO.from_domain(saved)
