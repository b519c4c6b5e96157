"""
Client and case mappers.
"""

from lexbill.domain.models.client import Client, Case
from lexbill.infrastructure.db.models import ClientModel, CaseModel


class ClientMapper:
    """Maps ClientModel rows to Client references."""

    def model_to_domain(self, model: ClientModel) -> Client:
        client = Client(name=model.name, email=model.email, company=model.company, id=model.id)
        if model.created_at:
            client.created_at = model.created_at
        return client


class CaseMapper:
    """Maps CaseModel rows to Case references."""

    def model_to_domain(self, model: CaseModel) -> Case:
        case = Case(client_id=model.client_id, case_number=model.case_number, title=model.title, id=model.id)
        if model.created_at:
            case.created_at = model.created_at
        return case
