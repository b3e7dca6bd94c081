"""
Archive cleanup.

Records whose status was set to "Archived" more than ``retention_days`` ago
are hard-deleted through their store, so every deletion leaves a DELETE
history entry. Children are purged before their parents.
"""

from datetime import datetime, timedelta
from typing import Any, Mapping, Optional

from ats.core.logging import get_logger, log_performance
from ats.database.base import utcnow
from ats.database.models.custom_field import EntityType
from ats.services.records.store import RecordStore

logger = get_logger(__name__)

CLEANUP_ORDER: tuple[EntityType, ...] = (
    EntityType.PLACEMENTS,
    EntityType.TASKS,
    EntityType.JOBS,
    EntityType.HIRING_MANAGERS,
    EntityType.ORGANIZATIONS,
)


async def run_archive_cleanup(
    stores: Mapping[EntityType, RecordStore],
    retention_days: int,
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    """
    Purge archived records older than the retention window.

    Args:
        stores: Record stores keyed by entity type
        retention_days: Days an archived record is kept
        now: Reference time, defaults to the current UTC time

    Returns:
        ``{"cutoff", "deleted": {type: [ids]}, "skipped": {type: [{id, error}]}}``
    """
    cutoff = (now or utcnow()) - timedelta(days=retention_days)
    summary: dict[str, Any] = {"cutoff": cutoff.isoformat(), "deleted": {}, "skipped": {}}

    with log_performance(logger, "archive_cleanup", retention_days=retention_days):
        for entity_type in CLEANUP_ORDER:
            store = stores.get(entity_type)
            if store is None:
                continue
            result = await store.purge_archived(cutoff)
            summary["deleted"][entity_type.value] = result["deleted"]
            summary["skipped"][entity_type.value] = result["skipped"]

    logger.info(
        "Archive cleanup finished",
        cutoff=summary["cutoff"],
        deleted=sum(len(ids) for ids in summary["deleted"].values()),
        skipped=sum(len(items) for items in summary["skipped"].values()),
    )
    return summary
