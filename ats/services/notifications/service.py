"""
Notification service for note and task reminder emails.

Rendering is done with the Jinja2 ``TemplateEngine``; delivery goes through
the blocking ``SESClient`` in a worker thread so the event loop is never
blocked. Callers decide whether a failure matters: the record store logs
and drops note email failures, the reminder sweep retries on its next run.
"""

import asyncio
from datetime import date, time
from typing import Any, Optional

from ats.core.config import Settings
from ats.core.logging import get_logger
from ats.services.notifications.email import SESClient, SESClientError
from ats.services.notifications.templates import TemplateEngine, TemplateEngineError

logger = get_logger(__name__)


class NotificationDeliveryError(Exception):
    """Raised when a notification could not be rendered or delivered."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.context = context


class NotificationService:
    """
    Sends the application's notification emails.

    Example:
        notifier = NotificationService.from_settings(settings)
        await notifier.send_note_added(recipients=["a@example.com"], ...)
    """

    def __init__(
        self,
        ses_client: SESClient,
        template_engine: Optional[TemplateEngine] = None,
        frontend_url: str = "",
    ):
        self.ses_client = ses_client
        self.template_engine = template_engine or TemplateEngine()
        self.frontend_url = frontend_url.rstrip("/")

    @classmethod
    def from_settings(cls, settings: Settings) -> "NotificationService":
        return cls(
            SESClient(region_name=settings.aws_region, from_address=settings.ses_from_email),
            frontend_url=settings.frontend_url,
        )

    def record_url(self, entity_type: str, record_id: int) -> str:
        return f"{self.frontend_url}/{entity_type}/{record_id}"

    async def _deliver(
        self, template_name: str, recipients: list[str], context: dict[str, Any]
    ) -> dict[str, Any]:
        try:
            rendered = self.template_engine.render_email(template_name, context)
            return await asyncio.to_thread(
                self.ses_client.send_email,
                recipients,
                rendered["subject"],
                rendered["text_body"],
                rendered["html_body"],
            )
        except (TemplateEngineError, SESClientError) as e:
            logger.error(
                "Notification delivery failed",
                template_name=template_name,
                recipients=recipients,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise NotificationDeliveryError(
                f"Failed to send {template_name} email: {e}",
                template_name=template_name,
            ) from e

    async def send_note_added(
        self,
        recipients: list[str],
        entity_type: str,
        entity_label: str,
        record_id: int,
        record_name: str,
        note_text: str,
        note_action: Optional[str] = None,
        author_name: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Email recipients that a note was added to a record.

        Raises:
            NotificationDeliveryError: If rendering or delivery fails
        """
        context = {
            "entity_label": entity_label,
            "record_name": record_name,
            "record_url": self.record_url(entity_type, record_id),
            "note_text": note_text,
            "note_action": note_action,
            "author_name": author_name or "A teammate",
        }
        result = await self._deliver("note_added", recipients, context)
        logger.info(
            "Note notification sent",
            entity_type=entity_type,
            record_id=record_id,
            recipients=len(recipients),
        )
        return result

    async def send_task_reminder(
        self,
        recipients: list[str],
        task_id: int,
        title: str,
        due_date: date,
        due_time: Optional[time] = None,
        description: Optional[str] = None,
        priority: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Email a reminder for an upcoming task.

        Raises:
            NotificationDeliveryError: If rendering or delivery fails
        """
        context = {
            "title": title,
            "description": description,
            "priority": priority,
            "due_date": due_date.isoformat(),
            "due_time": due_time.strftime("%H:%M") if due_time else None,
            "task_url": self.record_url("tasks", task_id),
        }
        result = await self._deliver("task_reminder", recipients, context)
        logger.info("Task reminder sent", task_id=task_id, recipients=len(recipients))
        return result
