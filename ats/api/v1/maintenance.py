"""
Admin routes that run the maintenance jobs once, for schedulers that
call over HTTP.
"""

from typing import Any

from fastapi import APIRouter

from ats.api.deps import AdminActor, DatabaseDep, NotifierDep, SettingsDep, StoresDep
from ats.core.logging import get_logger
from ats.services.maintenance import run_archive_cleanup, run_task_reminders

logger = get_logger(__name__)

router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@router.post("/archive-cleanup", summary="Delete records archived past the retention window")
async def archive_cleanup(
    actor: AdminActor, stores: StoresDep, settings: SettingsDep
) -> dict[str, Any]:
    results = await run_archive_cleanup(stores, settings.archive_retention_days)
    logger.info("Archive cleanup triggered", actor_id=actor.id)
    return {"success": True, "message": "Archive cleanup completed", "results": results}


@router.post("/task-reminders", summary="Send task reminders that are due")
async def task_reminders(
    actor: AdminActor, database: DatabaseDep, notifier: NotifierDep
) -> dict[str, Any]:
    results = await run_task_reminders(database, notifier)
    logger.info("Task reminder sweep triggered", actor_id=actor.id)
    return {
        "success": True,
        "message": f"Processed {results['processed']} task(s), sent {len(results['sent'])} reminder(s)",
        "results": results,
    }
