"""
Client and case repository implementations using SQLAlchemy.
"""

from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy import desc

from lexbill.domain.models.client import Client, Case
from lexbill.domain.repositories.client_repository import (
    ClientRepository as ClientRepositoryInterface,
    CaseRepository as CaseRepositoryInterface
)
from lexbill.infrastructure.db.models import ClientModel, CaseModel
from lexbill.infrastructure.mappers.client_mapper import ClientMapper, CaseMapper

from .base import storage_errors


class SQLAlchemyClientRepository(ClientRepositoryInterface):
    """SQLAlchemy implementation of client repository."""

    def __init__(self, session: Session):
        self.session = session
        self.mapper = ClientMapper()

    async def find_by_id(self, client_id: int) -> Optional[Client]:
        with storage_errors("load client"):
            model = self.session.query(ClientModel).filter(
                ClientModel.id == client_id,
                ClientModel.is_deleted.is_(False)
            ).first()

        if not model:
            return None

        return self.mapper.model_to_domain(model)


class SQLAlchemyCaseRepository(CaseRepositoryInterface):
    """SQLAlchemy implementation of case repository."""

    def __init__(self, session: Session):
        self.session = session
        self.mapper = CaseMapper()

    async def find_by_id(self, case_id: int) -> Optional[Case]:
        with storage_errors("load case"):
            model = self.session.query(CaseModel).filter(
                CaseModel.id == case_id,
                CaseModel.is_deleted.is_(False)
            ).first()

        if not model:
            return None

        return self.mapper.model_to_domain(model)

    async def find_latest_case_number(self, prefix: str) -> Optional[str]:
        with storage_errors("read case numbers"):
            row = self.session.query(CaseModel.case_number).filter(
                CaseModel.case_number.like(f"{prefix}%")
            ).order_by(desc(CaseModel.case_number)).first()

        return row[0] if row else None
