"""
Pytest configuration and shared test fixtures.

Every test gets a fresh in-memory SQLite database (through aiosqlite) with
the full schema and three seeded users: an admin (1) and two recruiters
(5 and 7). The services under test receive this database explicitly, the
same way the application lifespan hands them the PostgreSQL one.
"""

from typing import AsyncGenerator
from unittest.mock import AsyncMock

import pytest

from ats.core.config import Settings
from ats.database.connection import Database
from ats.database.models import Base, EntityType, User, UserRole
from ats.services.access import Actor
from ats.services.custom_fields.registry import CustomFieldRegistry
from ats.services.notifications.service import NotificationService
from ats.services.records import RecordStore, build_record_stores

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ADMIN_ID = 1
RECRUITER_ID = 5
OTHER_RECRUITER_ID = 7


@pytest.fixture
def test_settings() -> Settings:
    """Settings for the test environment with background work disabled."""
    return Settings(
        database_url=TEST_DATABASE_URL,
        environment="test",
        rate_limit_enabled=False,
        enable_background_jobs=False,
        email_enabled=False,
    )


@pytest.fixture
async def database(test_settings: Settings) -> AsyncGenerator[Database, None]:
    """
    Create an in-memory database with the schema and seeded users.

    Yields:
        Database: Database built the same way the application builds it
    """
    db = Database.from_settings(test_settings)
    async with db.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with db.session() as session:
        async with session.begin():
            session.add_all(
                [
                    User(id=ADMIN_ID, name="Ada Admin", email="ada@example.com", role=UserRole.ADMIN),
                    User(
                        id=RECRUITER_ID,
                        name="Rita Recruiter",
                        email="rita@example.com",
                        role=UserRole.RECRUITER,
                    ),
                    User(
                        id=OTHER_RECRUITER_ID,
                        name="Sam Recruiter",
                        email="sam@example.com",
                        role=UserRole.RECRUITER,
                    ),
                ]
            )

    yield db

    await db.dispose()


@pytest.fixture
def admin() -> Actor:
    return Actor(id=ADMIN_ID, role=UserRole.ADMIN)


@pytest.fixture
def recruiter() -> Actor:
    return Actor(id=RECRUITER_ID, role=UserRole.RECRUITER)


@pytest.fixture
def other_recruiter() -> Actor:
    return Actor(id=OTHER_RECRUITER_ID, role=UserRole.RECRUITER)


@pytest.fixture
def mock_notifier() -> AsyncMock:
    """
    Create mock notification service.

    Returns:
        AsyncMock whose send methods succeed
    """
    notifier = AsyncMock(spec=NotificationService)
    notifier.send_note_added.return_value = {"message_id": "note-message-id"}
    notifier.send_task_reminder.return_value = {"message_id": "reminder-message-id"}
    return notifier


@pytest.fixture
def registry(database: Database) -> CustomFieldRegistry:
    return CustomFieldRegistry(database)


@pytest.fixture
def stores(
    database: Database, registry: CustomFieldRegistry, mock_notifier: AsyncMock
) -> dict[EntityType, RecordStore]:
    """Record stores for every entity type, sharing the mock notifier."""
    return build_record_stores(database, registry, mock_notifier)


@pytest.fixture
def organizations(stores: dict[EntityType, RecordStore]) -> RecordStore:
    return stores[EntityType.ORGANIZATIONS]


@pytest.fixture
def jobs(stores: dict[EntityType, RecordStore]) -> RecordStore:
    return stores[EntityType.JOBS]


@pytest.fixture
def tasks(stores: dict[EntityType, RecordStore]) -> RecordStore:
    return stores[EntityType.TASKS]
