"""Generic audited record stores for the business entities."""

from typing import TYPE_CHECKING, Optional

from ats.database.connection import Database
from ats.database.models.custom_field import EntityType
from ats.services.custom_fields.registry import CustomFieldRegistry
from ats.services.records.catalog import CATALOG, CatalogEntry
from ats.services.records.store import RecordStore

if TYPE_CHECKING:
    from ats.services.notifications.service import NotificationService

__all__ = ["CATALOG", "CatalogEntry", "RecordStore", "build_record_stores"]


def build_record_stores(
    database: Database,
    registry: CustomFieldRegistry,
    notifier: Optional["NotificationService"] = None,
) -> dict[EntityType, RecordStore]:
    """One store per entity type, sharing the database and registry."""
    return {
        entity_type: RecordStore(database, entry, registry, notifier)
        for entity_type, entry in CATALOG.items()
    }
