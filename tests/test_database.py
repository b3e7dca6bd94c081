"""
Tests for engine construction and the ``Database`` wrapper.

These build the database through ``Database.from_settings`` against a SQLite
file, the configuration used for local runs, so reference and cascade rules
are checked on the same engine setup the application uses.
"""

from typing import AsyncGenerator

import pytest
from sqlalchemy import func, select, text
from sqlalchemy.pool import StaticPool

from ats.core.config import Settings
from ats.core.errors import ForeignKeyViolationError, ReferenceDirection
from ats.database.connection import Database
from ats.database.models import Base, EntityType, User, UserRole
from ats.services.access import Actor
from ats.services.custom_fields.registry import CustomFieldRegistry
from ats.services.records import build_record_stores


@pytest.fixture
async def file_database(tmp_path) -> AsyncGenerator[Database, None]:
    settings = Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'ats.db'}",
        environment="test",
    )
    db = Database.from_settings(settings)
    async with db.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with db.session() as session:
        async with session.begin():
            session.add(
                User(id=5, name="Rita Recruiter", email="rita@example.com", role=UserRole.RECRUITER)
            )

    yield db

    await db.dispose()


@pytest.fixture
def file_stores(file_database: Database):
    return build_record_stores(file_database, CustomFieldRegistry(file_database))


@pytest.fixture
def actor() -> Actor:
    return Actor(id=5, role=UserRole.RECRUITER)


# ============================================================================
# SQLite Engine
# ============================================================================


class TestSQLiteEngine:
    async def test_foreign_keys_enabled_on_every_connection(self, file_database):
        async with file_database.engine.connect() as conn:
            enabled = (await conn.execute(text("PRAGMA foreign_keys"))).scalar()

        assert enabled == 1

    async def test_missing_parent_is_rejected(self, file_stores, actor):
        with pytest.raises(ForeignKeyViolationError) as exc_info:
            await file_stores[EntityType.JOBS].create(
                {"jobTitle": "Engineer", "organizationId": 999}, actor
            )

        assert exc_info.value.direction is ReferenceDirection.MISSING_REFERENCE

    async def test_notes_are_removed_with_their_record(self, file_database, file_stores, actor):
        organizations = file_stores[EntityType.ORGANIZATIONS]
        org = await organizations.create({"name": "Acme"}, actor)
        await organizations.add_note(org.id, "Called", actor)

        await organizations.delete(org.id, actor)

        note_model = organizations.entry.note_model
        async with file_database.session() as session:
            remaining = await session.scalar(
                select(func.count()).select_from(note_model).where(note_model.entity_id == org.id)
            )
        assert remaining == 0

    async def test_health_check(self, file_database):
        assert await file_database.check_health(max_retries=1) is True


def test_in_memory_database_shares_one_connection(test_settings):
    database = Database.from_settings(test_settings)

    assert isinstance(database.engine.pool, StaticPool)
