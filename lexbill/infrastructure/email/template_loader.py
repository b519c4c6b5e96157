"""
Email template loader and renderer.
Handles Jinja2 templates for billing notifications.
"""

import logging
from typing import Dict, Any
from pathlib import Path
from datetime import date, datetime

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

logger = logging.getLogger(__name__)


TEMPLATES_DIR = Path(__file__).parent / "templates"


def format_currency(value, symbol="$"):
    """Format a money amount; pre-formatted strings are parsed first."""
    return f"{symbol}{float(value):,.2f}"


def format_date(value, format="%B %d, %Y"):
    """Format an ISO date string or date object."""
    if isinstance(value, str):
        value = date.fromisoformat(value[:10])
    return value.strftime(format)


# Subject lines per template; rendered with the same variables as the body.
SUBJECTS = {
    "invoiceNotification": "New Invoice #{{ invoiceNumber }} from {{ companyName }}",
}


class EmailTemplateLoader:
    """Loads and renders email templates using Jinja2."""

    def __init__(self, templates_dir: Path = TEMPLATES_DIR):
        self.templates_dir = templates_dir

        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html"]),
            undefined=StrictUndefined
        )
        self._subject_env = Environment(autoescape=False, undefined=StrictUndefined)

        self._register_filters()

    def _register_filters(self):
        """Register custom Jinja2 filters for email templates."""
        self.env.filters["currency"] = format_currency
        self.env.filters["date"] = format_date

    def render_template(self, template_name: str, variables: Dict[str, Any]) -> str:
        """
        Render the HTML body for template_name.

        Raises jinja2.TemplateError when the template is missing or a
        variable it uses was not supplied.
        """
        context = {
            **variables,
            "current_year": datetime.now().year
        }
        rendered = self.env.get_template(f"{template_name}.html").render(**context)

        logger.debug(f"Successfully rendered template: {template_name}")
        return rendered

    def render_subject(self, template_name: str, variables: Dict[str, Any]) -> str:
        """Render the subject line registered for template_name."""
        subject = SUBJECTS.get(template_name, template_name)
        return self._subject_env.from_string(subject).render(**variables)

    def template_exists(self, template_name: str) -> bool:
        """Check if template file exists."""
        return (self.templates_dir / f"{template_name}.html").exists()
