"""Client and case repository interfaces.
Billing only reads clients and cases.
"""

from abc import ABC, abstractmethod
from typing import Optional

from lexbill.domain.models.client import Client, Case


class ClientRepository(ABC):
    """Read access to clients."""

    @abstractmethod
    async def find_by_id(self, client_id: int) -> Optional[Client]:
        """Find a live client by id."""
        pass


class CaseRepository(ABC):
    """Read access to cases."""

    @abstractmethod
    async def find_by_id(self, case_id: int) -> Optional[Case]:
        """Find a live case by id."""
        pass

    @abstractmethod
    async def find_latest_case_number(self, prefix: str) -> Optional[str]:
        """Greatest case number starting with prefix."""
        pass
