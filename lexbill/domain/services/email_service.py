"""
Email notifier interface.
Billing asks for templated notifications; transport lives in infrastructure.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any


class EmailNotifier(ABC):
    """
    Email notifier interface.
    Delivery failures are reported through the return value, not by raising.
    """

    @abstractmethod
    async def send_template_email(
        self,
        template_name: str,
        recipient: str,
        variables: Dict[str, Any]
    ) -> bool:
        """
        Render the named template with variables and send it to recipient.
        Returns True when the message was handed to the transport.
        """
        pass
