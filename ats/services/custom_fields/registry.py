"""
Custom field registry.

Admins define typed attributes per entity type; the record stores consult the
registry to validate and normalise ``custom_fields`` documents before they
are written. Every definition change appends an entry to
``custom_field_definition_history`` naming the columns whose value changed.
"""

from typing import Any, Dict, Mapping, Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ats.core.errors import (
    DuplicateKeyError,
    InvalidArgumentError,
    NotFoundError,
    PermissionDeniedError,
    UnexpectedError,
    translate_integrity_error,
)
from ats.core.logging import get_logger
from ats.database.base import utcnow
from ats.database.connection import Database
from ats.database.models.custom_field import (
    CustomFieldDefinition,
    CustomFieldDefinitionHistory,
    EntityType,
    FieldType,
)
from ats.database.models.user import User
from ats.schemas.common import parse_payload
from ats.schemas.custom_fields import CustomFieldCreate, CustomFieldUpdate
from ats.services.access import Actor
from ats.services.audit import HistoryAction
from ats.services.custom_fields.values import is_blank, parse_field_value

logger = get_logger(__name__)


def _entity_type(value: Union[EntityType, str]) -> EntityType:
    try:
        return value if isinstance(value, EntityType) else EntityType.from_string(value)
    except ValueError as e:
        raise InvalidArgumentError(str(e), entity_type=value) from e


class CustomFieldRegistry:
    """
    Definitions of admin-defined fields and validation of their values.

    Example:
        registry = CustomFieldRegistry(database)
        await registry.define_field(
            {"entityType": "jobs", "fieldName": "priority",
             "fieldLabel": "Priority", "fieldType": "select",
             "options": ["Low", "High"]},
            actor,
        )
    """

    def __init__(self, database: Database):
        self.database = database

    @staticmethod
    def _require_admin(actor: Actor, operation: str) -> None:
        if not actor.is_elevated:
            logger.warning(
                "Custom field change denied",
                operation=operation,
                actor_id=actor.id,
                role=actor.role.value,
            )
            raise PermissionDeniedError(
                "Only admins and owners can manage custom fields",
                actor_id=actor.id,
            )

    @staticmethod
    async def _load(session: AsyncSession, field_id: int) -> CustomFieldDefinition:
        definition = await session.get(CustomFieldDefinition, field_id)
        if definition is None:
            raise NotFoundError("Custom field not found", field_id=field_id)
        return definition

    @staticmethod
    def _record(
        session: AsyncSession,
        field_id: int,
        action: HistoryAction,
        actor_id: Optional[int],
        old_values: Optional[Dict[str, Any]] = None,
        new_values: Optional[Dict[str, Any]] = None,
        changed_fields: Optional[list[str]] = None,
    ) -> None:
        session.add(
            CustomFieldDefinitionHistory(
                field_definition_id=field_id,
                action=action.value,
                old_values=old_values,
                new_values=new_values,
                changed_fields=changed_fields,
                performed_by=actor_id,
            )
        )

    async def define_field(
        self, payload: Mapping[str, Any], actor: Actor
    ) -> CustomFieldDefinition:
        """
        Create a custom field definition.

        Args:
            payload: Definition in camelCase or snake_case keys
            actor: Acting user, must be admin or owner

        Returns:
            The stored definition

        Raises:
            PermissionDeniedError: If the actor is not elevated
            InvalidArgumentError: If the payload is malformed
            DuplicateKeyError: If the entity type already has this field name
        """
        self._require_admin(actor, "create")
        data = parse_payload(CustomFieldCreate, payload)

        values = data.model_dump(mode="json")
        definition = CustomFieldDefinition(
            **values,
            created_by=actor.id,
            updated_by=actor.id,
        )

        async with self.database.session() as session:
            try:
                async with session.begin():
                    session.add(definition)
                    await session.flush()
                    await session.refresh(definition)
                    self._record(
                        session,
                        definition.id,
                        HistoryAction.CREATE,
                        actor.id,
                        new_values=definition.to_dict(),
                    )
            except IntegrityError as e:
                error = translate_integrity_error(e, "custom field")
                if isinstance(error, DuplicateKeyError):
                    error = DuplicateKeyError(
                        f"A field named '{data.field_name}' already exists for "
                        f"{data.entity_type.value}",
                        entity_type=data.entity_type.value,
                        field_name=data.field_name,
                    )
                logger.warning(
                    "Custom field create rejected",
                    entity_type=data.entity_type.value,
                    field_name=data.field_name,
                    error_kind=error.kind.value,
                )
                raise error from e
            except SQLAlchemyError as e:
                logger.error(
                    "Database error creating custom field",
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise UnexpectedError("Database error while creating custom field") from e

        logger.info(
            "Custom field created",
            field_id=definition.id,
            entity_type=definition.entity_type,
            field_name=definition.field_name,
            actor_id=actor.id,
        )
        return definition

    async def update_field(
        self, field_id: int, partial: Mapping[str, Any], actor: Actor
    ) -> CustomFieldDefinition:
        """
        Apply a partial update to a definition.

        Setting ``isRequired`` to true clears ``isHidden`` and setting
        ``isHidden`` to true clears ``isRequired``. Only columns whose value
        actually changes are written and listed in the history entry; an
        update that changes nothing writes nothing.

        Raises:
            PermissionDeniedError: If the actor is not elevated
            NotFoundError: If the definition does not exist
            InvalidArgumentError: If the merged definition is invalid
        """
        self._require_admin(actor, "update")
        data = parse_payload(CustomFieldUpdate, partial)

        changes = data.model_dump(mode="json", exclude_unset=True)
        if changes.get("is_required") is True:
            changes["is_hidden"] = False
        if changes.get("is_hidden") is True:
            changes["is_required"] = False

        async with self.database.session() as session:
            try:
                async with session.begin():
                    definition = await self._load(session, field_id)
                    self._check_merged(definition, changes)

                    changed = [
                        name
                        for name, value in changes.items()
                        if getattr(definition, name) != value
                    ]
                    if not changed:
                        logger.debug("Custom field update is a no-op", field_id=field_id)
                        return definition

                    old_values = {name: getattr(definition, name) for name in changed}
                    for name in changed:
                        setattr(definition, name, changes[name])
                    definition.updated_by = actor.id
                    definition.updated_at = utcnow()
                    await session.flush()

                    self._record(
                        session,
                        definition.id,
                        HistoryAction.UPDATE,
                        actor.id,
                        old_values=old_values,
                        new_values={name: changes[name] for name in changed},
                        changed_fields=changed,
                    )
            except IntegrityError as e:
                raise translate_integrity_error(e, "custom field") from e
            except SQLAlchemyError as e:
                logger.error(
                    "Database error updating custom field",
                    field_id=field_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise UnexpectedError("Database error while updating custom field") from e

        logger.info(
            "Custom field updated",
            field_id=field_id,
            changed_fields=changed,
            actor_id=actor.id,
        )
        return definition

    @staticmethod
    def _check_merged(
        definition: CustomFieldDefinition, changes: Dict[str, Any]
    ) -> None:
        """Validate the definition as it will look after the update."""
        field_type = FieldType(changes.get("field_type", definition.field_type))
        options = changes.get("options", definition.options)
        default_value = changes.get("default_value", definition.default_value)
        is_required = changes.get("is_required", definition.is_required)
        is_hidden = changes.get("is_hidden", definition.is_hidden)

        if is_required and is_hidden:
            raise InvalidArgumentError(
                "A field cannot be both required and hidden", field_id=definition.id
            )
        if field_type.has_options and not options:
            raise InvalidArgumentError(
                f"Fields of type {field_type.value} need at least one option",
                field_id=definition.id,
            )
        if default_value is not None:
            try:
                changes_default = parse_field_value(field_type, default_value, options)
            except ValueError as e:
                raise InvalidArgumentError(
                    f"Invalid default value: {e}", field_id=definition.id
                ) from e
            if "default_value" in changes:
                changes["default_value"] = changes_default.value

    async def get_field(self, field_id: int) -> CustomFieldDefinition:
        """
        Raises:
            NotFoundError: If the definition does not exist
        """
        async with self.database.session() as session:
            return await self._load(session, field_id)

    async def list_by_entity_type(
        self, entity_type: Union[EntityType, str]
    ) -> list[CustomFieldDefinition]:
        """Definitions for one entity type in display order."""
        entity_type = _entity_type(entity_type)
        async with self.database.session() as session:
            return await self._definitions(session, entity_type)

    @staticmethod
    async def _definitions(
        session: AsyncSession, entity_type: EntityType
    ) -> list[CustomFieldDefinition]:
        stmt = (
            select(CustomFieldDefinition)
            .where(CustomFieldDefinition.entity_type == entity_type.value)
            .order_by(
                CustomFieldDefinition.sort_order,
                CustomFieldDefinition.created_at,
                CustomFieldDefinition.id,
            )
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def delete_field(self, field_id: int, actor: Actor) -> CustomFieldDefinition:
        """
        Delete a definition, keeping its history.

        Values already stored in records are left untouched.
        """
        self._require_admin(actor, "delete")

        async with self.database.session() as session:
            try:
                async with session.begin():
                    definition = await self._load(session, field_id)
                    self._record(
                        session,
                        definition.id,
                        HistoryAction.DELETE,
                        actor.id,
                        old_values=definition.to_dict(),
                    )
                    await session.delete(definition)
            except IntegrityError as e:
                raise translate_integrity_error(e, "custom field", deleting=True) from e
            except SQLAlchemyError as e:
                logger.error(
                    "Database error deleting custom field",
                    field_id=field_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise UnexpectedError("Database error while deleting custom field") from e

        logger.info(
            "Custom field deleted",
            field_id=field_id,
            entity_type=definition.entity_type,
            field_name=definition.field_name,
            actor_id=actor.id,
        )
        return definition

    async def get_history(self, field_id: int) -> list[Dict[str, Any]]:
        """History of a definition, newest first, including after deletion."""
        stmt = (
            select(CustomFieldDefinitionHistory, User.name)
            .outerjoin(User, User.id == CustomFieldDefinitionHistory.performed_by)
            .where(CustomFieldDefinitionHistory.field_definition_id == field_id)
            .order_by(
                CustomFieldDefinitionHistory.performed_at.desc(),
                CustomFieldDefinitionHistory.id.desc(),
            )
        )
        async with self.database.session() as session:
            result = await session.execute(stmt)
            entries = []
            for entry, performed_by_name in result.all():
                data = entry.to_dict()
                data["performed_by_name"] = performed_by_name
                entries.append(data)
            return entries

    async def validate_values(
        self,
        entity_type: Union[EntityType, str],
        values: Optional[Mapping[str, Any]],
        enforce_required: bool,
    ) -> Dict[str, Any]:
        """
        Validate and normalise a ``custom_fields`` document.

        Keys with a definition are checked against its type; keys without
        one pass through untouched. When ``enforce_required`` is set (on
        create), a required visible field that is missing takes its default
        value or fails.

        Args:
            entity_type: Entity type the document belongs to
            values: Custom field values keyed by field name
            enforce_required: Whether missing required fields are an error

        Returns:
            The normalised document

        Raises:
            InvalidArgumentError: Naming every invalid or missing field
        """
        entity_type = _entity_type(entity_type)
        values = dict(values or {})

        async with self.database.session() as session:
            definitions = await self._definitions(session, entity_type)

        by_name = {definition.field_name: definition for definition in definitions}
        normalized: Dict[str, Any] = {}
        problems: list[str] = []

        for key, value in values.items():
            definition = by_name.get(key)
            if definition is None:
                normalized[key] = value
                continue
            if definition.is_required and is_blank(value):
                problems.append(f"{definition.field_label} is required")
                continue
            try:
                normalized[key] = parse_field_value(
                    definition.field_type, value, definition.options
                ).value
            except ValueError as e:
                problems.append(f"{definition.field_label}: {e}")

        if enforce_required:
            for definition in definitions:
                if not definition.is_required or definition.is_hidden:
                    continue
                if definition.field_name in values:
                    continue
                if definition.default_value is not None:
                    normalized[definition.field_name] = definition.default_value
                else:
                    problems.append(f"{definition.field_label} is required")

        if problems:
            logger.info(
                "Custom field validation failed",
                entity_type=entity_type.value,
                problems=problems,
            )
            raise InvalidArgumentError(
                "Invalid custom fields: " + "; ".join(problems),
                entity_type=entity_type.value,
            )
        return normalized
