"""
Catalog of the business entity types.

One ``CatalogEntry`` per entity type tells the generic ``RecordStore`` which
tables, schemas and search columns to use and how responses name the record.
"""

from dataclasses import dataclass
from typing import Type

from ats.database.base import Base
from ats.database.models import (
    HiringManager,
    HiringManagerHistory,
    HiringManagerNote,
    Job,
    JobHistory,
    JobNote,
    JobSeeker,
    JobSeekerHistory,
    JobSeekerNote,
    Lead,
    LeadHistory,
    LeadNote,
    Organization,
    OrganizationHistory,
    OrganizationNote,
    Placement,
    PlacementHistory,
    PlacementNote,
    Task,
    TaskHistory,
    TaskNote,
)
from ats.database.models.custom_field import EntityType
from ats.schemas import records as schemas
from ats.schemas.common import RecordPayload


@dataclass(frozen=True)
class CatalogEntry:
    """
    Everything the record store needs to know about one entity type.

    Attributes:
        entity_type: Slug used in URLs and custom field definitions
        label: Human readable singular name used in messages
        searchable: Columns matched by ``search``
        singular_key: Response key for one record
        plural_key: Response key for a list of records
    """

    entity_type: EntityType
    label: str
    model: Type[Base]
    note_model: Type[Base]
    history_model: Type[Base]
    create_schema: Type[RecordPayload]
    update_schema: Type[RecordPayload]
    searchable: tuple[str, ...]
    singular_key: str
    plural_key: str

    @property
    def archivable(self) -> bool:
        return hasattr(self.model, "archived_at")


CATALOG: dict[EntityType, CatalogEntry] = {
    EntityType.ORGANIZATIONS: CatalogEntry(
        entity_type=EntityType.ORGANIZATIONS,
        label="organization",
        model=Organization,
        note_model=OrganizationNote,
        history_model=OrganizationHistory,
        create_schema=schemas.OrganizationCreate,
        update_schema=schemas.OrganizationUpdate,
        searchable=("name", "nicknames", "website"),
        singular_key="organization",
        plural_key="organizations",
    ),
    EntityType.HIRING_MANAGERS: CatalogEntry(
        entity_type=EntityType.HIRING_MANAGERS,
        label="hiring manager",
        model=HiringManager,
        note_model=HiringManagerNote,
        history_model=HiringManagerHistory,
        create_schema=schemas.HiringManagerCreate,
        update_schema=schemas.HiringManagerUpdate,
        searchable=("first_name", "last_name", "email", "title", "organization_name"),
        singular_key="hiringManager",
        plural_key="hiringManagers",
    ),
    EntityType.JOBS: CatalogEntry(
        entity_type=EntityType.JOBS,
        label="job",
        model=Job,
        note_model=JobNote,
        history_model=JobHistory,
        create_schema=schemas.JobCreate,
        update_schema=schemas.JobUpdate,
        searchable=("job_title", "category", "worksite_location"),
        singular_key="job",
        plural_key="jobs",
    ),
    EntityType.JOB_SEEKERS: CatalogEntry(
        entity_type=EntityType.JOB_SEEKERS,
        label="job seeker",
        model=JobSeeker,
        note_model=JobSeekerNote,
        history_model=JobSeekerHistory,
        create_schema=schemas.JobSeekerCreate,
        update_schema=schemas.JobSeekerUpdate,
        searchable=("first_name", "last_name", "email", "title", "skills"),
        singular_key="jobSeeker",
        plural_key="jobSeekers",
    ),
    EntityType.LEADS: CatalogEntry(
        entity_type=EntityType.LEADS,
        label="lead",
        model=Lead,
        note_model=LeadNote,
        history_model=LeadHistory,
        create_schema=schemas.LeadCreate,
        update_schema=schemas.LeadUpdate,
        searchable=("first_name", "last_name", "email", "organization_name"),
        singular_key="lead",
        plural_key="leads",
    ),
    EntityType.TASKS: CatalogEntry(
        entity_type=EntityType.TASKS,
        label="task",
        model=Task,
        note_model=TaskNote,
        history_model=TaskHistory,
        create_schema=schemas.TaskCreate,
        update_schema=schemas.TaskUpdate,
        searchable=("title", "description"),
        singular_key="task",
        plural_key="tasks",
    ),
    EntityType.PLACEMENTS: CatalogEntry(
        entity_type=EntityType.PLACEMENTS,
        label="placement",
        model=Placement,
        note_model=PlacementNote,
        history_model=PlacementHistory,
        create_schema=schemas.PlacementCreate,
        update_schema=schemas.PlacementUpdate,
        searchable=("placement_type", "status"),
        singular_key="placement",
        plural_key="placements",
    ),
}
