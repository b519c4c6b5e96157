"""
Billing statistics use cases for the application layer.
"""

from lexbill.application.use_cases.base_use_case import QueryUseCase
from lexbill.application.dto.invoice_dto import BillingStatisticsRequestDTO, BillingStatisticsResponseDTO
from lexbill.domain.services.statistics_service import BillingStatisticsReporter


class GetBillingStatisticsUseCase(QueryUseCase[BillingStatisticsRequestDTO, BillingStatisticsResponseDTO]):
    """Use case for the billing dashboard figures."""

    async def _execute_query_logic(self, request: BillingStatisticsRequestDTO) -> BillingStatisticsResponseDTO:
        reporter = BillingStatisticsReporter(self.uow.invoices, self.uow.time_entries, self.uow.expenses)
        report = await reporter.generate(request.start_date, request.end_date)
        return BillingStatisticsResponseDTO(**report)
