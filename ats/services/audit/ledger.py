"""
Audit history ledger.

One ledger wraps one ``<entity>_history`` table. Entries are written with
the caller's session so they commit or roll back together with the change
they describe. Nothing in this module updates or deletes an entry.
"""

import enum
from typing import Any, Dict, Optional, Type

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ats.core.logging import get_logger
from ats.database.base import Base
from ats.database.models.user import User

logger = get_logger(__name__)


class HistoryAction(str, enum.Enum):
    """Mutation kinds recorded in the ledger."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    ADD_NOTE = "ADD_NOTE"


class AuditLedger:
    """
    Writer and reader for one history table.

    Example:
        ledger = AuditLedger(OrganizationHistory)
        async with session.begin():
            session.add(org)
            await session.flush()
            await ledger.record(session, org.id, HistoryAction.CREATE, payload, actor.id)
    """

    def __init__(self, history_model: Type[Base]):
        self.history_model = history_model

    async def record(
        self,
        session: AsyncSession,
        entity_id: int,
        action: HistoryAction,
        details: Optional[Dict[str, Any]],
        actor_id: Optional[int],
    ) -> Base:
        """
        Append one entry inside the caller's transaction.

        Args:
            session: Session with an open transaction
            entity_id: ID of the entity the entry describes
            action: Mutation kind
            details: JSON-serializable payload or ``{before, after}`` snapshots
            actor_id: User who performed the mutation, None for system jobs

        Returns:
            The flushed history row
        """
        entry = self.history_model(
            entity_id=entity_id,
            action=action.value,
            details=details,
            performed_by=actor_id,
        )
        session.add(entry)
        await session.flush()

        logger.debug(
            "History entry recorded",
            table=self.history_model.__tablename__,
            entity_id=entity_id,
            action=action.value,
            performed_by=actor_id,
        )
        return entry

    async def list_for(
        self, session: AsyncSession, entity_id: int
    ) -> list[Dict[str, Any]]:
        """
        Entries for one entity, newest first, with the actor's display name.
        """
        model = self.history_model
        stmt = (
            select(model, User.name)
            .outerjoin(User, User.id == model.performed_by)
            .where(model.entity_id == entity_id)
            .order_by(model.performed_at.desc(), model.id.desc())
        )
        result = await session.execute(stmt)

        entries = []
        for entry, performed_by_name in result.all():
            data = entry.to_dict()
            data["performed_by_name"] = performed_by_name
            entries.append(data)
        return entries
