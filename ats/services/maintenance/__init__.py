"""
Idempotent maintenance jobs.

Each function processes whatever is due at ``now`` and returns a summary;
running it again immediately finds nothing left to do.
"""

from ats.services.maintenance.archive_cleanup import CLEANUP_ORDER, run_archive_cleanup
from ats.services.maintenance.task_reminders import run_task_reminders

__all__ = ["CLEANUP_ORDER", "run_archive_cleanup", "run_task_reminders"]
