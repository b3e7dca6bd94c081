"""
Jinja2 rendering of notification emails.

Each email is three files in ``ats/templates/notifications``:
``<name>_subject.txt``, ``<name>.html`` and ``<name>.txt``.
"""

from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    Template,
    TemplateError,
    TemplateNotFound,
    select_autoescape,
)

from ats.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parents[2] / "templates" / "notifications"


class TemplateEngineError(Exception):
    """Base exception for template engine errors."""

    def __init__(self, message: str, template_name: Optional[str] = None):
        super().__init__(message)
        self.template_name = template_name


class TemplateNotFoundError(TemplateEngineError):
    """Raised when a template cannot be found."""


class TemplateRenderError(TemplateEngineError):
    """Raised when template rendering fails."""


class TemplateEngine:
    """Renders the subject, HTML body and text body of an email."""

    def __init__(self, template_dir: Optional[Path] = None):
        self.template_dir = Path(template_dir or DEFAULT_TEMPLATE_DIR)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        logger.debug("Template engine initialized", template_dir=str(self.template_dir))

    def _load_template(self, filename: str) -> Template:
        try:
            return self.env.get_template(filename)
        except TemplateNotFound as e:
            raise TemplateNotFoundError(
                f"Template not found: {filename}", template_name=filename
            ) from e

    def render_email(self, template_name: str, context: Dict[str, Any]) -> Dict[str, str]:
        """
        Render an email template.

        Args:
            template_name: Template base name, e.g. "note_added"
            context: Variables substituted into the templates

        Returns:
            Dictionary with 'subject', 'html_body' and 'text_body'

        Raises:
            TemplateNotFoundError: If one of the files is missing
            TemplateRenderError: If rendering fails
        """
        try:
            subject = self._load_template(f"{template_name}_subject.txt").render(**context)
            html_body = self._load_template(f"{template_name}.html").render(**context)
            text_body = self._load_template(f"{template_name}.txt").render(**context)
        except TemplateEngineError:
            raise
        except TemplateError as e:
            logger.error(
                "Template rendering failed",
                template_name=template_name,
                error=str(e),
            )
            raise TemplateRenderError(
                f"Failed to render template {template_name}: {e}",
                template_name=template_name,
            ) from e

        return {
            "subject": " ".join(subject.split()),
            "html_body": html_body,
            "text_body": text_body,
        }
