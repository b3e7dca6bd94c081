"""
Generic audited record store.

``RecordStore`` implements create, read, update, delete, bulk update, search
and notes once for every entity type; a ``CatalogEntry`` supplies the tables
and schemas. Each operation checks out one session from the injected
``Database``, runs its writes in a single transaction together with the
matching history entry and closes the session on every exit path.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Iterable, Mapping, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ats.core.errors import (
    ATSError,
    ForeignKeyViolationError,
    InvalidArgumentError,
    NotFoundError,
    PermissionDeniedError,
    UnexpectedError,
    translate_integrity_error,
)
from ats.core.logging import get_logger, log_performance
from ats.database.base import Base, utcnow
from ats.database.connection import Database
from ats.database.models.user import User
from ats.schemas.common import NoteCreate, parse_payload
from ats.services.access import Actor
from ats.services.audit import AuditLedger, HistoryAction
from ats.services.custom_fields.registry import CustomFieldRegistry
from ats.services.records.catalog import CatalogEntry

if TYPE_CHECKING:
    from ats.services.notifications.service import NotificationService

logger = get_logger(__name__)

ARCHIVED_STATUS = "Archived"
MIN_SEARCH_LENGTH = 2


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def display_name(record: Base) -> str:
    """Short human readable name for a record, used in emails and logs."""
    for attribute in ("name", "job_title", "title"):
        value = getattr(record, attribute, None)
        if value:
            return value
    first = getattr(record, "first_name", None)
    last = getattr(record, "last_name", None)
    if first or last:
        return " ".join(part for part in (first, last) if part)
    return f"#{record.id}"


class RecordStore:
    """
    Audited CRUD for one entity type.

    Example:
        store = RecordStore(database, CATALOG[EntityType.ORGANIZATIONS], registry)
        org = await store.create({"name": "Acme"}, actor)
        await store.update(org.id, {"website": "https://acme.example"}, actor)
    """

    def __init__(
        self,
        database: Database,
        entry: CatalogEntry,
        registry: CustomFieldRegistry,
        notifier: Optional["NotificationService"] = None,
    ):
        self.database = database
        self.entry = entry
        self.registry = registry
        self.notifier = notifier
        self.model = entry.model
        self.ledger = AuditLedger(entry.history_model)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _load(self, session: AsyncSession, record_id: int) -> Base:
        record = await session.get(self.model, record_id)
        if record is None:
            raise NotFoundError(
                f"{self.entry.label.capitalize()} not found",
                entity_type=self.entry.entity_type.value,
                record_id=record_id,
            )
        return record

    async def _load_visible(
        self, session: AsyncSession, record_id: int, scope: Optional[int]
    ) -> Base:
        # out-of-scope records are reported exactly like missing ones
        record = await self._load(session, record_id)
        if scope is not None and record.created_by != scope:
            raise NotFoundError(
                f"{self.entry.label.capitalize()} not found",
                entity_type=self.entry.entity_type.value,
                record_id=record_id,
            )
        return record

    def _check_owner(self, record: Base, actor: Actor) -> None:
        scope = actor.scope
        if scope is not None and record.created_by != scope:
            logger.warning(
                "Record change denied",
                entity_type=self.entry.entity_type.value,
                record_id=record.id,
                actor_id=actor.id,
                owner_id=record.created_by,
            )
            raise PermissionDeniedError(
                f"You do not have permission to modify this {self.entry.label}",
                record_id=record.id,
                actor_id=actor.id,
            )

    def _translate(self, exc: IntegrityError, deleting: bool = False) -> ATSError:
        error = translate_integrity_error(exc, self.entry.label, deleting=deleting)
        logger.warning(
            "Constraint violation",
            entity_type=self.entry.entity_type.value,
            error_kind=error.kind.value,
            detail=str(exc.orig),
        )
        return error

    def _database_error(self, exc: SQLAlchemyError, operation: str) -> UnexpectedError:
        logger.error(
            "Database error",
            entity_type=self.entry.entity_type.value,
            operation=operation,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return UnexpectedError(
            f"Database error while trying to {operation} {self.entry.label}",
            detail=str(exc),
        )

    def _lifecycle_stamps(
        self, record: Base, changed: Dict[str, Any], actor_id: Optional[int]
    ) -> Dict[str, Any]:
        """Columns derived from a status or completion change."""
        stamps: Dict[str, Any] = {}
        if self.entry.archivable and "status" in changed:
            if changed["status"] == ARCHIVED_STATUS:
                stamps["archived_at"] = utcnow()
            elif record.status == ARCHIVED_STATUS:
                stamps["archived_at"] = None
                stamps["archive_reason"] = None
        if "is_completed" in changed and hasattr(record, "completed_at"):
            if changed["is_completed"]:
                stamps["completed_at"] = utcnow()
                stamps["completed_by"] = actor_id
            else:
                stamps["completed_at"] = None
                stamps["completed_by"] = None
        return stamps

    # ------------------------------------------------------------------
    # Create / read
    # ------------------------------------------------------------------

    async def create(self, data: Mapping[str, Any], actor: Actor) -> Base:
        """
        Create a record owned by the actor.

        Args:
            data: Column values and ``customFields`` in camelCase or snake_case
            actor: Acting user, becomes ``created_by``

        Returns:
            The stored record

        Raises:
            InvalidArgumentError: If the payload or a custom field is invalid
            DuplicateKeyError: If a unique column is already taken
            ForeignKeyViolationError: If a referenced record does not exist
        """
        payload = parse_payload(self.entry.create_schema, data)
        details = payload.model_dump(mode="json", exclude_unset=True)
        values = payload.model_dump(exclude_unset=True)

        custom_fields = await self.registry.validate_values(
            self.entry.entity_type,
            values.pop("custom_fields", None),
            enforce_required=True,
        )
        details["custom_fields"] = custom_fields

        record = self.model(**values, custom_fields=custom_fields, created_by=actor.id)
        if self.entry.archivable and values.get("status") == ARCHIVED_STATUS:
            record.archived_at = utcnow()

        async with self.database.session() as session:
            try:
                async with session.begin():
                    session.add(record)
                    await session.flush()
                    await session.refresh(record)
                    await self.ledger.record(
                        session, record.id, HistoryAction.CREATE, details, actor.id
                    )
            except IntegrityError as e:
                raise self._translate(e) from e
            except SQLAlchemyError as e:
                raise self._database_error(e, "create") from e

        logger.info(
            "Record created",
            entity_type=self.entry.entity_type.value,
            record_id=record.id,
            actor_id=actor.id,
        )
        return record

    async def get_all(self, scope: Optional[int]) -> list[Base]:
        """Records visible in ``scope``, newest first."""
        stmt = select(self.model).order_by(
            self.model.created_at.desc(), self.model.id.desc()
        )
        if scope is not None:
            stmt = stmt.where(self.model.created_by == scope)

        with log_performance(
            logger, "get_all", entity_type=self.entry.entity_type.value, scope=scope
        ):
            async with self.database.session() as session:
                result = await session.execute(stmt)
                return list(result.scalars().all())

    async def get_by_id(self, record_id: int, scope: Optional[int]) -> Base:
        """
        Raises:
            NotFoundError: If the record does not exist or is outside scope
        """
        async with self.database.session() as session:
            return await self._load_visible(session, record_id, scope)

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    async def _prepare_changes(
        self, changes: Mapping[str, Any]
    ) -> tuple[Dict[str, Any], Optional[Dict[str, Any]]]:
        payload = parse_payload(self.entry.update_schema, changes)
        values = payload.model_dump(exclude_unset=True)
        custom_delta = values.pop("custom_fields", None)
        if custom_delta:
            custom_delta = await self.registry.validate_values(
                self.entry.entity_type, custom_delta, enforce_required=False
            )
        return values, custom_delta or None

    async def _apply_update(
        self,
        record_id: int,
        values: Dict[str, Any],
        custom_delta: Optional[Dict[str, Any]],
        actor: Actor,
    ) -> Base:
        async with self.database.session() as session:
            try:
                async with session.begin():
                    record = await self._load(session, record_id)
                    self._check_owner(record, actor)

                    proposed = dict(values)
                    if custom_delta:
                        proposed["custom_fields"] = {
                            **(record.custom_fields or {}),
                            **custom_delta,
                        }

                    changed = {
                        name: value
                        for name, value in proposed.items()
                        if getattr(record, name) != value
                    }
                    if not changed:
                        logger.debug(
                            "Update is a no-op",
                            entity_type=self.entry.entity_type.value,
                            record_id=record_id,
                        )
                        return record

                    changed.update(self._lifecycle_stamps(record, changed, actor.id))

                    before = record.to_dict()
                    for name, value in changed.items():
                        setattr(record, name, value)
                    record.updated_at = utcnow()
                    await session.flush()

                    await self.ledger.record(
                        session,
                        record.id,
                        HistoryAction.UPDATE,
                        {"before": before, "after": record.to_dict()},
                        actor.id,
                    )
            except IntegrityError as e:
                raise self._translate(e) from e
            except SQLAlchemyError as e:
                raise self._database_error(e, "update") from e

        logger.info(
            "Record updated",
            entity_type=self.entry.entity_type.value,
            record_id=record_id,
            changed_fields=sorted(changed),
            actor_id=actor.id,
        )
        return record

    async def update(
        self, record_id: int, changes: Mapping[str, Any], actor: Actor
    ) -> Base:
        """
        Apply a partial update.

        ``custom_fields`` is merged key by key into the stored document; every
        other supplied column replaces the stored value. When nothing would
        change, the stored record is returned and no history is written.

        Raises:
            InvalidArgumentError: If the changes are invalid
            NotFoundError: If the record does not exist
            PermissionDeniedError: If a scoped actor does not own the record
        """
        values, custom_delta = await self._prepare_changes(changes)
        return await self._apply_update(record_id, values, custom_delta, actor)

    async def bulk_update(
        self, ids: Iterable[int], changes: Mapping[str, Any], actor: Actor
    ) -> Dict[str, list]:
        """
        Apply one change set to many records, each in its own transaction.

        A failing id never aborts the others.

        Returns:
            ``{"successful": [...], "failed": [...], "errors": [{"id", "error"}]}``

        Raises:
            InvalidArgumentError: If ``ids`` is empty or the changes are invalid
        """
        ids = list(ids)
        if not ids:
            raise InvalidArgumentError("At least one id is required")
        values, custom_delta = await self._prepare_changes(changes)

        results: Dict[str, list] = {"successful": [], "failed": [], "errors": []}
        for record_id in ids:
            try:
                await self._apply_update(record_id, values, custom_delta, actor)
            except Exception as e:
                message = e.message if isinstance(e, ATSError) else str(e)
                logger.warning(
                    "Bulk update failed for record",
                    entity_type=self.entry.entity_type.value,
                    record_id=record_id,
                    error=message,
                    error_type=type(e).__name__,
                )
                results["failed"].append(record_id)
                results["errors"].append({"id": record_id, "error": message})
            else:
                results["successful"].append(record_id)

        logger.info(
            "Bulk update completed",
            entity_type=self.entry.entity_type.value,
            successful=len(results["successful"]),
            failed=len(results["failed"]),
            actor_id=actor.id,
        )
        return results

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    async def _delete_loaded(
        self, session: AsyncSession, record: Base, actor_id: Optional[int]
    ) -> None:
        await self.ledger.record(
            session, record.id, HistoryAction.DELETE, record.to_dict(), actor_id
        )
        await session.delete(record)
        await session.flush()

    async def delete(self, record_id: int, actor: Actor) -> Base:
        """
        Hard-delete a record, keeping its history.

        The DELETE history entry holds the full row and is written in the
        same transaction as the delete; notes are removed with the record.

        Raises:
            NotFoundError: If the record does not exist
            PermissionDeniedError: If a scoped actor does not own the record
            ForeignKeyViolationError: If other records still reference it
        """
        async with self.database.session() as session:
            try:
                async with session.begin():
                    record = await self._load(session, record_id)
                    self._check_owner(record, actor)
                    await self._delete_loaded(session, record, actor.id)
            except IntegrityError as e:
                raise self._translate(e, deleting=True) from e
            except SQLAlchemyError as e:
                raise self._database_error(e, "delete") from e

        logger.info(
            "Record deleted",
            entity_type=self.entry.entity_type.value,
            record_id=record_id,
            actor_id=actor.id,
        )
        return record

    async def purge_archived(self, cutoff: datetime) -> Dict[str, list]:
        """
        Delete records archived before ``cutoff``.

        Each record is deleted in its own transaction with a DELETE history
        entry performed by the system. Records still referenced elsewhere
        are skipped.

        Returns:
            ``{"deleted": [...], "skipped": [{"id", "error"}]}``
        """
        summary: Dict[str, list] = {"deleted": [], "skipped": []}
        if not self.entry.archivable:
            return summary

        stmt = (
            select(self.model.id)
            .where(
                self.model.archived_at.is_not(None),
                self.model.archived_at < cutoff,
            )
            .order_by(self.model.id)
        )
        async with self.database.session() as session:
            candidate_ids = list((await session.execute(stmt)).scalars().all())

        for record_id in candidate_ids:
            try:
                async with self.database.session() as session:
                    try:
                        async with session.begin():
                            record = await session.get(self.model, record_id)
                            if record is None:
                                continue
                            await self._delete_loaded(session, record, None)
                    except IntegrityError as e:
                        raise self._translate(e, deleting=True) from e
            except ForeignKeyViolationError as e:
                summary["skipped"].append({"id": record_id, "error": e.message})
                continue
            summary["deleted"].append(record_id)

        if candidate_ids:
            logger.info(
                "Archived records purged",
                entity_type=self.entry.entity_type.value,
                deleted=len(summary["deleted"]),
                skipped=len(summary["skipped"]),
            )
        return summary

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(self, query: Optional[str], scope: Optional[int]) -> list[Base]:
        """
        Case-insensitive substring search over the entity's name columns.

        Raises:
            InvalidArgumentError: If the query is shorter than two characters
        """
        term = (query or "").strip()
        if len(term) < MIN_SEARCH_LENGTH:
            raise InvalidArgumentError(
                f"Search query must be at least {MIN_SEARCH_LENGTH} characters"
            )

        pattern = _like_pattern(term)
        conditions = [
            getattr(self.model, column).ilike(pattern, escape="\\")
            for column in self.entry.searchable
        ]
        stmt = (
            select(self.model)
            .where(or_(*conditions))
            .order_by(self.model.created_at.desc(), self.model.id.desc())
        )
        if scope is not None:
            stmt = stmt.where(self.model.created_by == scope)

        async with self.database.session() as session:
            result = await session.execute(stmt)
            records = list(result.scalars().all())

        logger.debug(
            "Search completed",
            entity_type=self.entry.entity_type.value,
            query=term,
            results=len(records),
        )
        return records

    # ------------------------------------------------------------------
    # Notes and history
    # ------------------------------------------------------------------

    async def add_note(
        self,
        record_id: int,
        text: str,
        actor: Actor,
        action: Optional[str] = None,
        about_references: Optional[list[Any]] = None,
        notify: Optional[list[str]] = None,
    ) -> Base:
        """
        Attach a note and optionally email the listed recipients.

        The note and its ADD_NOTE history entry commit together. The email is
        sent afterwards; a failed send is logged and the note is kept.

        Raises:
            InvalidArgumentError: If the text is empty or a recipient is invalid
            NotFoundError: If the record does not exist or is outside scope
        """
        payload = parse_payload(
            NoteCreate,
            {
                "text": text,
                "action": action,
                "about_references": about_references,
                "notify": notify or [],
            },
        )

        async with self.database.session() as session:
            try:
                async with session.begin():
                    record = await self._load_visible(session, record_id, actor.scope)
                    note = self.entry.note_model(
                        entity_id=record_id,
                        text=payload.text,
                        action=payload.action,
                        about_references=payload.about_references,
                        created_by=actor.id,
                    )
                    session.add(note)
                    await session.flush()
                    await session.refresh(note)
                    await self.ledger.record(
                        session,
                        record_id,
                        HistoryAction.ADD_NOTE,
                        {
                            "note_id": note.id,
                            "text": payload.text,
                            "action": payload.action,
                            "about_references": payload.about_references,
                        },
                        actor.id,
                    )
                    author = await session.get(User, actor.id)
            except IntegrityError as e:
                raise self._translate(e) from e
            except SQLAlchemyError as e:
                raise self._database_error(e, "add a note to") from e

        logger.info(
            "Note added",
            entity_type=self.entry.entity_type.value,
            record_id=record_id,
            note_id=note.id,
            actor_id=actor.id,
        )

        if payload.notify:
            await self._notify_note(record, note, payload.notify, author)
        return note

    async def _notify_note(
        self, record: Base, note: Base, recipients: list[str], author: Optional[User]
    ) -> None:
        if self.notifier is None:
            logger.info(
                "Note notification skipped, email disabled",
                entity_type=self.entry.entity_type.value,
                record_id=record.id,
            )
            return
        try:
            await self.notifier.send_note_added(
                recipients=recipients,
                entity_type=self.entry.entity_type.value,
                entity_label=self.entry.label,
                record_id=record.id,
                record_name=display_name(record),
                note_text=note.text,
                note_action=note.action,
                author_name=author.name if author else None,
            )
        except Exception as e:
            logger.error(
                "Note notification failed",
                entity_type=self.entry.entity_type.value,
                record_id=record.id,
                note_id=note.id,
                error=str(e),
                error_type=type(e).__name__,
            )

    async def get_notes(self, record_id: int, scope: Optional[int]) -> list[Dict[str, Any]]:
        """Notes of a visible record, newest first, with author names."""
        note_model = self.entry.note_model
        stmt = (
            select(note_model, User.name)
            .outerjoin(User, User.id == note_model.created_by)
            .where(note_model.entity_id == record_id)
            .order_by(note_model.created_at.desc(), note_model.id.desc())
        )
        async with self.database.session() as session:
            await self._load_visible(session, record_id, scope)
            result = await session.execute(stmt)
            notes = []
            for note, created_by_name in result.all():
                data = note.to_dict()
                data["created_by_name"] = created_by_name
                notes.append(data)
            return notes

    async def get_history(
        self, record_id: int, scope: Optional[int]
    ) -> list[Dict[str, Any]]:
        """
        History of a record, newest first.

        Scoped callers need to see the live record; unscoped callers can
        also read the history of deleted records.

        Raises:
            NotFoundError: If nothing is visible for ``record_id``
        """
        async with self.database.session() as session:
            if scope is not None:
                await self._load_visible(session, record_id, scope)
            entries = await self.ledger.list_for(session, record_id)
            if not entries and scope is None:
                await self._load(session, record_id)
            return entries
