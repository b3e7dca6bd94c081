"""
FastAPI dependencies for authentication and the shared services.

The ``Database``, the custom field registry and the record stores are built
once in the application lifespan and stored on ``app.state``; the
dependencies below only hand them to the routes.
"""

from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ats.core.config import Settings
from ats.core.errors import PermissionDeniedError, UnauthenticatedError
from ats.core.logging import get_logger, set_user_id
from ats.core.security import get_token_user_id
from ats.database.connection import Database
from ats.database.models.custom_field import EntityType
from ats.database.models.user import User
from ats.services.access import Actor
from ats.services.custom_fields.registry import CustomFieldRegistry
from ats.services.notifications.service import NotificationService
from ats.services.records import RecordStore

logger = get_logger(__name__)

security = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_registry(request: Request) -> CustomFieldRegistry:
    return request.app.state.registry


def get_stores(request: Request) -> dict[EntityType, RecordStore]:
    return request.app.state.stores


def get_notifier(request: Request) -> Optional[NotificationService]:
    return request.app.state.notifier


SettingsDep = Annotated[Settings, Depends(get_app_settings)]
DatabaseDep = Annotated[Database, Depends(get_database)]
RegistryDep = Annotated[CustomFieldRegistry, Depends(get_registry)]
StoresDep = Annotated[dict[EntityType, RecordStore], Depends(get_stores)]
NotifierDep = Annotated[Optional[NotificationService], Depends(get_notifier)]


async def get_current_actor(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    database: DatabaseDep,
    settings: SettingsDep,
) -> Actor:
    """
    Resolve the bearer token to the acting user.

    Raises:
        UnauthenticatedError: If the token is missing, invalid or names an
            unknown user
    """
    if credentials is None:
        logger.warning("Authentication failed: No credentials provided")
        raise UnauthenticatedError("Authentication token is required")

    user_id = get_token_user_id(credentials.credentials, settings)

    async with database.session() as session:
        user = await session.get(User, user_id)

    if user is None:
        logger.warning("Authentication failed: User not found", user_id=user_id)
        raise UnauthenticatedError("Invalid authentication token")

    set_user_id(user.id)
    return Actor(id=user.id, role=user.role)


CurrentActor = Annotated[Actor, Depends(get_current_actor)]


async def require_admin(actor: CurrentActor) -> Actor:
    """
    Raises:
        PermissionDeniedError: If the actor is not an admin or owner
    """
    if not actor.is_elevated:
        logger.warning("Admin access denied", actor_id=actor.id, role=actor.role.value)
        raise PermissionDeniedError("Admin access required", actor_id=actor.id)
    return actor


AdminActor = Annotated[Actor, Depends(require_admin)]
