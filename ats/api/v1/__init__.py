"""
API version 1 router.

Mounts the per-entity routers, the custom field routes and the maintenance
routes under one ``APIRouter``.
"""

from fastapi import APIRouter

from ats.api.v1.custom_fields import router as custom_fields_router
from ats.api.v1.maintenance import router as maintenance_router
from ats.api.v1.records import routers as record_routers

api_router = APIRouter()

for record_router in record_routers:
    api_router.include_router(record_router)
api_router.include_router(custom_fields_router)
api_router.include_router(maintenance_router)

__all__ = ["api_router"]
