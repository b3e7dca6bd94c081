"""
Custom field definition routes.

Reads are open to every authenticated user; the registry itself rejects
changes from actors that are not admins or owners.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, status

from ats.api.deps import CurrentActor, RegistryDep
from ats.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/custom-fields", tags=["custom-fields"])


@router.post("", status_code=status.HTTP_201_CREATED, summary="Define a custom field")
async def create_custom_field(
    payload: Annotated[dict[str, Any], Body()],
    actor: CurrentActor,
    registry: RegistryDep,
) -> dict[str, Any]:
    definition = await registry.define_field(payload, actor)
    return {
        "success": True,
        "message": "Custom field created successfully",
        "customField": definition.to_dict(),
    }


@router.get("/entity/{entity_type}", summary="List custom fields of an entity type")
async def list_custom_fields(
    entity_type: str,
    actor: CurrentActor,
    registry: RegistryDep,
) -> dict[str, Any]:
    definitions = await registry.list_by_entity_type(entity_type)
    return {
        "success": True,
        "count": len(definitions),
        "customFields": [definition.to_dict() for definition in definitions],
    }


@router.get("/{field_id}", summary="Get a custom field")
async def get_custom_field(
    field_id: int, actor: CurrentActor, registry: RegistryDep
) -> dict[str, Any]:
    definition = await registry.get_field(field_id)
    return {"success": True, "customField": definition.to_dict()}


@router.put("/{field_id}", summary="Update a custom field")
async def update_custom_field(
    field_id: int,
    changes: Annotated[dict[str, Any], Body()],
    actor: CurrentActor,
    registry: RegistryDep,
) -> dict[str, Any]:
    definition = await registry.update_field(field_id, changes, actor)
    return {
        "success": True,
        "message": "Custom field updated successfully",
        "customField": definition.to_dict(),
    }


@router.delete("/{field_id}", summary="Delete a custom field")
async def delete_custom_field(
    field_id: int, actor: CurrentActor, registry: RegistryDep
) -> dict[str, Any]:
    definition = await registry.delete_field(field_id, actor)
    return {
        "success": True,
        "message": "Custom field deleted successfully",
        "customField": definition.to_dict(),
    }


@router.get("/{field_id}/history", summary="List history of a custom field")
async def custom_field_history(
    field_id: int, actor: CurrentActor, registry: RegistryDep
) -> dict[str, Any]:
    history = await registry.get_history(field_id)
    return {"success": True, "count": len(history), "history": history}
