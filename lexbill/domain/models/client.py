"""
Client and Case references.
Billing reads these; their CRUD lives elsewhere.
"""

from typing import Optional

from lexbill.domain.models.base import BaseEntity, ValidationError


class Client(BaseEntity):
    """Client billed by the practice."""

    def __init__(self, name: str, email: Optional[str] = None, company: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self.name = name
        self.email = email
        self.company = company

    def validate(self) -> None:
        if not self.name:
            raise ValidationError("Client name is required", "name")

    @property
    def display_name(self) -> str:
        return self.company or self.name


class Case(BaseEntity):
    """Legal matter belonging to a client."""

    def __init__(self, client_id: int, case_number: str, title: str, **kwargs):
        super().__init__(**kwargs)
        self.client_id = client_id
        self.case_number = case_number
        self.title = title

    def validate(self) -> None:
        if not self.client_id:
            raise ValidationError("Client is required", "client_id")
        if not self.case_number:
            raise ValidationError("Case number is required", "case_number")

    def belongs_to(self, client_id: int) -> bool:
        return self.client_id == client_id
