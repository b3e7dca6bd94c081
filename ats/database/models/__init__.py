"""
Database models package initialization.

Every model is imported here so it registers with ``Base.metadata`` for
table creation and Alembic.
"""

from ats.database.base import Base
from ats.database.models.custom_field import (
    CustomFieldDefinition,
    CustomFieldDefinitionHistory,
    EntityType,
    FieldType,
)
from ats.database.models.hiring_manager import (
    HiringManager,
    HiringManagerHistory,
    HiringManagerNote,
)
from ats.database.models.job import Job, JobHistory, JobNote
from ats.database.models.job_seeker import JobSeeker, JobSeekerHistory, JobSeekerNote
from ats.database.models.lead import Lead, LeadHistory, LeadNote
from ats.database.models.organization import (
    Organization,
    OrganizationHistory,
    OrganizationNote,
)
from ats.database.models.placement import Placement, PlacementHistory, PlacementNote
from ats.database.models.task import Task, TaskHistory, TaskNote
from ats.database.models.user import User, UserRole

__all__ = [
    "Base",
    "User",
    "UserRole",
    "CustomFieldDefinition",
    "CustomFieldDefinitionHistory",
    "EntityType",
    "FieldType",
    "Organization",
    "OrganizationNote",
    "OrganizationHistory",
    "HiringManager",
    "HiringManagerNote",
    "HiringManagerHistory",
    "Job",
    "JobNote",
    "JobHistory",
    "JobSeeker",
    "JobSeekerNote",
    "JobSeekerHistory",
    "Lead",
    "LeadNote",
    "LeadHistory",
    "Task",
    "TaskNote",
    "TaskHistory",
    "Placement",
    "PlacementNote",
    "PlacementHistory",
]
