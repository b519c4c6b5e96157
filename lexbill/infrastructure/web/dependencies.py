"""
FastAPI dependency providers.
Wires the unit of work, domain services and use cases for each request.
"""

from typing import Annotated

from fastapi import Depends

from lexbill.config import Settings, get_settings
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
from lexbill.domain.repositories.unit_of_work import UnitOfWork
from lexbill.domain.services import (
    BillingService,
    NumberingService,
    BillableItemAggregator,
    PaymentLedger,
    EmailNotifier,
)
from lexbill.infrastructure.auth import get_current_user_id
from lexbill.infrastructure.db.database import SessionLocal
from lexbill.infrastructure.email import get_email_notifier
from lexbill.infrastructure.repositories import SQLAlchemyUnitOfWork


SettingsDep = Annotated[Settings, Depends(get_settings)]
UserIdDep = Annotated[str, Depends(get_current_user_id)]


def get_unit_of_work() -> UnitOfWork:
    """Dependency to get a fresh unit of work."""
    return SQLAlchemyUnitOfWork(SessionLocal)


def get_notifier() -> EmailNotifier:
    """Dependency to get the email notifier."""
    return get_email_notifier()


def get_numbering_service(settings: SettingsDep) -> NumberingService:
    return NumberingService(
        invoice_prefix=settings.invoice_number_prefix,
        invoice_width=settings.invoice_sequence_width,
        case_width=settings.case_sequence_width
    )


UnitOfWorkDep = Annotated[UnitOfWork, Depends(get_unit_of_work)]
NumberingDep = Annotated[NumberingService, Depends(get_numbering_service)]


def get_create_invoice_use_case(
    uow: UnitOfWorkDep,
    numbering: NumberingDep,
    settings: SettingsDep,
    user_id: UserIdDep
) -> CreateInvoiceUseCase:
    use_case = CreateInvoiceUseCase(
        uow,
        BillingService(),
        numbering,
        payment_terms_days=settings.payment_terms_days,
        default_terms=settings.default_invoice_terms
    )
    use_case.set_current_user(user_id)
    return use_case


def get_generate_invoice_use_case(
    uow: UnitOfWorkDep,
    numbering: NumberingDep,
    settings: SettingsDep,
    user_id: UserIdDep
) -> GenerateInvoiceFromUnbilledUseCase:
    use_case = GenerateInvoiceFromUnbilledUseCase(
        uow,
        BillingService(),
        numbering,
        BillableItemAggregator(),
        payment_terms_days=settings.payment_terms_days,
        default_terms=settings.default_invoice_terms
    )
    use_case.set_current_user(user_id)
    return use_case


def get_update_invoice_use_case(uow: UnitOfWorkDep, user_id: UserIdDep) -> UpdateInvoiceUseCase:
    use_case = UpdateInvoiceUseCase(uow, BillingService())
    use_case.set_current_user(user_id)
    return use_case


def get_send_invoice_use_case(
    uow: UnitOfWorkDep,
    settings: SettingsDep,
    user_id: UserIdDep,
    notifier: Annotated[EmailNotifier, Depends(get_notifier)]
) -> SendInvoiceUseCase:
    use_case = SendInvoiceUseCase(
        uow,
        notifier,
        company_name=settings.company_name,
        notifications_enabled=settings.send_invoice_notifications
    )
    use_case.set_current_user(user_id)
    return use_case


def get_delete_invoice_use_case(uow: UnitOfWorkDep, user_id: UserIdDep) -> DeleteInvoiceUseCase:
    use_case = DeleteInvoiceUseCase(uow)
    use_case.set_current_user(user_id)
    return use_case


def get_record_payment_use_case(uow: UnitOfWorkDep, user_id: UserIdDep) -> RecordPaymentUseCase:
    use_case = RecordPaymentUseCase(uow, PaymentLedger())
    use_case.set_current_user(user_id)
    return use_case


def get_invoice_use_case(uow: UnitOfWorkDep) -> GetInvoiceUseCase:
    return GetInvoiceUseCase(uow)


def get_list_invoices_use_case(uow: UnitOfWorkDep) -> ListInvoicesUseCase:
    return ListInvoicesUseCase(uow)


def get_list_overdue_use_case(uow: UnitOfWorkDep) -> ListOverdueInvoicesUseCase:
    return ListOverdueInvoicesUseCase(uow)


def get_preview_unbilled_use_case(uow: UnitOfWorkDep) -> PreviewUnbilledItemsUseCase:
    return PreviewUnbilledItemsUseCase(uow, BillableItemAggregator())


def get_statistics_use_case(uow: UnitOfWorkDep) -> GetBillingStatisticsUseCase:
    return GetBillingStatisticsUseCase(uow)
