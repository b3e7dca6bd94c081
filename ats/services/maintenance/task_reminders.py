"""
Task reminder sweep.

A task is due for a reminder when it is open, has a due date and a reminder
offset, has not been reminded yet, and ``due - offset`` has passed. Due dates
without a time are treated as midnight UTC. A task is stamped with
``reminder_sent_at`` once its email went out, or when it has nobody to
remind; a failed send leaves it unstamped for the next run.
"""

from datetime import datetime, time, timedelta, timezone
from typing import Any, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import aliased

from ats.core.logging import get_logger, log_performance
from ats.database.base import utcnow
from ats.database.connection import Database
from ats.database.models.task import Task
from ats.database.models.user import User
from ats.services.notifications.service import NotificationService

logger = get_logger(__name__)


def reminder_time(task: Task) -> Optional[datetime]:
    """When the reminder for ``task`` becomes due, or None without a due date."""
    if task.due_date is None or task.reminder_minutes_before_due is None:
        return None
    due = datetime.combine(task.due_date, task.due_time or time(0, 0), tzinfo=timezone.utc)
    return due - timedelta(minutes=task.reminder_minutes_before_due)


async def _mark_sent(database: Database, task_id: int, sent_at: datetime) -> None:
    async with database.session() as session:
        async with session.begin():
            await session.execute(
                update(Task)
                .where(Task.id == task_id, Task.reminder_sent_at.is_(None))
                .values(reminder_sent_at=sent_at)
            )


async def run_task_reminders(
    database: Database,
    notifier: Optional[NotificationService],
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    """
    Send every reminder that is due at ``now``.

    Args:
        database: Database holding the tasks
        notifier: Email sender; without one nothing is sent or stamped
        now: Reference time, defaults to the current UTC time

    Returns:
        ``{"processed", "sent": [ids], "no_recipients": [ids],
        "failed": [{"id", "error"}]}``
    """
    now = now or utcnow()
    summary: dict[str, Any] = {
        "processed": 0,
        "sent": [],
        "no_recipients": [],
        "failed": [],
    }
    if notifier is None:
        logger.info("Task reminders skipped, email disabled")
        return summary

    creator = aliased(User)
    assignee = aliased(User)
    stmt = (
        select(Task, creator.email, assignee.email)
        .outerjoin(creator, creator.id == Task.created_by)
        .outerjoin(assignee, assignee.id == Task.assigned_to)
        .where(
            Task.reminder_sent_at.is_(None),
            Task.is_completed.is_(False),
            Task.due_date.is_not(None),
            Task.reminder_minutes_before_due.is_not(None),
        )
        .order_by(Task.due_date, Task.id)
    )

    with log_performance(logger, "task_reminders"):
        async with database.session() as session:
            rows = (await session.execute(stmt)).all()

        due_rows = [row for row in rows if reminder_time(row[0]) <= now]
        summary["processed"] = len(due_rows)

        for task, creator_email, assignee_email in due_rows:
            recipients = list(dict.fromkeys(e for e in (creator_email, assignee_email) if e))
            if not recipients:
                logger.warning("Task reminder has no recipients", task_id=task.id)
                await _mark_sent(database, task.id, now)
                summary["no_recipients"].append(task.id)
                continue

            try:
                await notifier.send_task_reminder(
                    recipients=recipients,
                    task_id=task.id,
                    title=task.title,
                    due_date=task.due_date,
                    due_time=task.due_time,
                    description=task.description,
                    priority=task.priority,
                )
            except Exception as e:
                logger.error(
                    "Task reminder failed",
                    task_id=task.id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                summary["failed"].append({"id": task.id, "error": str(e)})
                continue

            await _mark_sent(database, task.id, now)
            summary["sent"].append(task.id)

    logger.info(
        "Task reminder sweep finished",
        processed=summary["processed"],
        sent=len(summary["sent"]),
        no_recipients=len(summary["no_recipients"]),
        failed=len(summary["failed"]),
    )
    return summary
