"""
SMTP email notifier.
Renders Jinja2 templates and hands the message to an SMTP server.
"""

import asyncio
import re
import smtplib
import logging
from collections import deque
from typing import List, Dict, Any, Optional
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from datetime import datetime

from jinja2 import TemplateError

from lexbill.config import Settings, settings as default_settings
from lexbill.domain.services.email_service import EmailNotifier
from .template_loader import EmailTemplateLoader


logger = logging.getLogger(__name__)

LOGGED_EMAILS_LIMIT = 50


class SMTPEmailNotifier(EmailNotifier):
    """
    Email notifier backed by SMTP.
    Without SMTP credentials messages are rendered and logged instead of sent.
    """

    def __init__(self, settings: Optional[Settings] = None, template_loader: Optional[EmailTemplateLoader] = None):
        settings = settings or default_settings
        self.smtp_host = settings.smtp_host
        self.smtp_port = settings.smtp_port
        self.smtp_user = settings.smtp_user
        self.smtp_password = settings.smtp_password
        self.from_name = settings.email_from_name
        self.from_address = settings.email_from_address
        self.template_loader = template_loader or EmailTemplateLoader()
        self.sent_emails: deque = deque(maxlen=LOGGED_EMAILS_LIMIT)

    async def send_template_email(
        self,
        template_name: str,
        recipient: str,
        variables: Dict[str, Any]
    ) -> bool:
        try:
            subject = self.template_loader.render_subject(template_name, variables)
            html_content = self.template_loader.render_template(template_name, variables)
        except TemplateError as exc:
            logger.error(f"Failed to render email template {template_name}: {exc}")
            return False

        if not self._is_smtp_configured():
            logger.warning("SMTP not configured, email will be logged instead")
            self._log_email(recipient, subject, template_name, html_content)
            return True

        mime_message = self._create_mime_message(recipient, subject, html_content)

        try:
            await asyncio.to_thread(self._send_via_smtp, mime_message, recipient)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error(f"Failed to send email to {recipient}: {exc}")
            return False

        logger.info(f"Email sent successfully to {recipient}: {subject}")
        return True

    def _create_mime_message(self, recipient: str, subject: str, html_content: str) -> MIMEMultipart:
        """Create a plain-text plus HTML message."""
        mime_msg = MIMEMultipart("alternative")

        mime_msg["Subject"] = subject
        mime_msg["From"] = f"{self.from_name} <{self.from_address}>"
        mime_msg["To"] = recipient

        text_content = re.sub(r"<[^>]+>", "", html_content)
        mime_msg.attach(MIMEText(text_content, "plain", "utf-8"))
        mime_msg.attach(MIMEText(html_content, "html", "utf-8"))

        return mime_msg

    def _send_via_smtp(self, mime_message: MIMEMultipart, recipient: str) -> None:
        with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
            server.starttls()
            server.login(self.smtp_user, self.smtp_password)
            server.send_message(mime_message, to_addrs=[recipient])

    def _log_email(self, recipient: str, subject: str, template_name: str, html_content: str) -> None:
        """Log email instead of sending. Only the most recent messages are kept."""
        self.sent_emails.append({
            "timestamp": datetime.now().isoformat(),
            "to": recipient,
            "subject": subject,
            "template": template_name,
            "html_preview": html_content[:200] + "..." if len(html_content) > 200 else html_content
        })

        logger.info(f"Email logged (SMTP not configured): {subject} to {recipient}")

    def _is_smtp_configured(self) -> bool:
        """Check if SMTP is properly configured."""
        return all([
            self.smtp_host,
            self.smtp_user,
            self.smtp_password
        ])

    def get_sent_emails(self) -> List[Dict[str, Any]]:
        """Get list of logged emails (for development/testing)."""
        return list(self.sent_emails)


# Singleton instance
_email_notifier = None


def get_email_notifier() -> SMTPEmailNotifier:
    """Get singleton email notifier instance."""
    global _email_notifier
    if _email_notifier is None:
        _email_notifier = SMTPEmailNotifier()
    return _email_notifier
