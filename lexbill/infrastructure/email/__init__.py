"""
Email notification infrastructure.
Handles email templates and SMTP delivery.
"""

from .email_service import SMTPEmailNotifier, get_email_notifier
from .template_loader import EmailTemplateLoader

__all__ = [
    "SMTPEmailNotifier",
    "get_email_notifier",
    "EmailTemplateLoader"
]
