"""
Entity routers.

``build_records_router`` produces the same set of routes for every entity
type in the catalog; the routes only translate HTTP to ``RecordStore`` calls
and wrap the result in the response envelope.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, status

from ats.api.deps import CurrentActor, StoresDep
from ats.core.logging import get_logger
from ats.schemas.common import BulkUpdateRequest, NoteCreate
from ats.services.records import CATALOG, CatalogEntry, RecordStore

logger = get_logger(__name__)


def build_records_router(entry: CatalogEntry) -> APIRouter:
    """Create the CRUD, search, bulk, notes and history routes for one entity type."""
    router = APIRouter(prefix=f"/{entry.entity_type.value}", tags=[entry.entity_type.value])
    label = entry.label.capitalize()

    def get_store(stores: StoresDep) -> RecordStore:
        return stores[entry.entity_type]

    Store = Annotated[RecordStore, Depends(get_store)]

    @router.post("", status_code=status.HTTP_201_CREATED, summary=f"Create a {entry.label}")
    async def create_record(
        payload: Annotated[dict[str, Any], Body()],
        actor: CurrentActor,
        store: Store,
    ) -> dict[str, Any]:
        record = await store.create(payload, actor)
        return {
            "success": True,
            "message": f"{label} created successfully",
            entry.singular_key: record.to_dict(),
        }

    @router.get("", summary=f"List {entry.label} records visible to the caller")
    async def list_records(actor: CurrentActor, store: Store) -> dict[str, Any]:
        records = await store.get_all(actor.scope)
        return {
            "success": True,
            "count": len(records),
            entry.plural_key: [record.to_dict() for record in records],
        }

    @router.get("/search", summary=f"Search {entry.label} records")
    async def search_records(
        actor: CurrentActor,
        store: Store,
        q: Annotated[str, Query(description="Search term, at least 2 characters")] = "",
    ) -> dict[str, Any]:
        records = await store.search(q, actor.scope)
        return {
            "success": True,
            "count": len(records),
            entry.plural_key: [record.to_dict() for record in records],
        }

    @router.post("/bulk-update", summary=f"Apply one change set to many {entry.label} records")
    async def bulk_update_records(
        request: BulkUpdateRequest,
        actor: CurrentActor,
        store: Store,
    ) -> dict[str, Any]:
        results = await store.bulk_update(request.ids, request.updates, actor)
        return {
            "success": True,
            "message": (
                f"Updated {len(results['successful'])} of {len(request.ids)} records"
            ),
            "results": results,
        }

    @router.get("/{record_id}", summary=f"Get a {entry.label}")
    async def get_record(record_id: int, actor: CurrentActor, store: Store) -> dict[str, Any]:
        record = await store.get_by_id(record_id, actor.scope)
        return {"success": True, entry.singular_key: record.to_dict()}

    @router.put("/{record_id}", summary=f"Update a {entry.label}")
    async def update_record(
        record_id: int,
        changes: Annotated[dict[str, Any], Body()],
        actor: CurrentActor,
        store: Store,
    ) -> dict[str, Any]:
        record = await store.update(record_id, changes, actor)
        return {
            "success": True,
            "message": f"{label} updated successfully",
            entry.singular_key: record.to_dict(),
        }

    @router.delete("/{record_id}", summary=f"Delete a {entry.label}")
    async def delete_record(record_id: int, actor: CurrentActor, store: Store) -> dict[str, Any]:
        record = await store.delete(record_id, actor)
        return {
            "success": True,
            "message": f"{label} deleted successfully",
            entry.singular_key: record.to_dict(),
        }

    @router.post(
        "/{record_id}/notes",
        status_code=status.HTTP_201_CREATED,
        summary=f"Add a note to a {entry.label}",
    )
    async def add_note(
        record_id: int,
        note: NoteCreate,
        actor: CurrentActor,
        store: Store,
    ) -> dict[str, Any]:
        created = await store.add_note(
            record_id,
            note.text,
            actor,
            action=note.action,
            about_references=note.about_references,
            notify=list(note.notify),
        )
        return {
            "success": True,
            "message": "Note added successfully",
            "note": created.to_dict(),
        }

    @router.get("/{record_id}/notes", summary=f"List notes of a {entry.label}")
    async def list_notes(record_id: int, actor: CurrentActor, store: Store) -> dict[str, Any]:
        notes = await store.get_notes(record_id, actor.scope)
        return {"success": True, "count": len(notes), "notes": notes}

    @router.get("/{record_id}/history", summary=f"List history of a {entry.label}")
    async def list_history(record_id: int, actor: CurrentActor, store: Store) -> dict[str, Any]:
        history = await store.get_history(record_id, actor.scope)
        return {"success": True, "count": len(history), "history": history}

    return router


routers = [build_records_router(entry) for entry in CATALOG.values()]
