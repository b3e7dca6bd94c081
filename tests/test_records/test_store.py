"""
Tests for the generic audited record store.

Covers the create/read/update/delete round trip with its history entries,
role scoping, custom field merging, lifecycle stamps and the translation of
constraint violations.
"""

import pytest

from ats.core.errors import (
    DuplicateKeyError,
    ForeignKeyViolationError,
    InvalidArgumentError,
    NotFoundError,
    PermissionDeniedError,
    ReferenceDirection,
)
from ats.database.models.custom_field import EntityType
from ats.services.records import RecordStore


# ============================================================================
# Create and Read
# ============================================================================


class TestCreate:
    async def test_round_trip_writes_one_create_entry(self, organizations, recruiter):
        org = await organizations.create(
            {"name": "Acme", "website": "https://acme.example", "customFields": {"tier": "gold"}},
            recruiter,
        )

        assert org.id is not None
        assert org.created_by == recruiter.id
        assert org.status == "Active"
        assert org.custom_fields == {"tier": "gold"}

        fetched = await organizations.get_by_id(org.id, recruiter.scope)
        assert fetched.name == "Acme"
        assert fetched.website == "https://acme.example"

        history = await organizations.get_history(org.id, recruiter.scope)
        assert len(history) == 1
        assert history[0]["action"] == "CREATE"
        assert history[0]["details"]["name"] == "Acme"
        assert history[0]["details"]["custom_fields"] == {"tier": "gold"}
        assert history[0]["performed_by"] == recruiter.id
        assert history[0]["performed_by_name"] == "Rita Recruiter"

    async def test_snake_case_keys_are_accepted(self, stores, recruiter):
        seeker = await stores[EntityType.JOB_SEEKERS].create(
            {"first_name": "Jane", "last_name": "Doe", "desired_salary": 90000},
            recruiter,
        )

        assert seeker.first_name == "Jane"
        assert seeker.desired_salary == 90000

    async def test_server_managed_keys_are_ignored(self, organizations, recruiter):
        org = await organizations.create(
            {"name": "Acme", "id": 99, "createdBy": 7}, recruiter
        )

        assert org.id != 99
        assert org.created_by == recruiter.id

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"name": None},
            {"name": "   "},
            {"name": "Acme", "numEmployees": -1},
            {"name": "Acme", "customFields": ["not", "a", "dict"]},
        ],
    )
    async def test_invalid_payload(self, organizations, recruiter, payload):
        with pytest.raises(InvalidArgumentError):
            await organizations.create(payload, recruiter)

    async def test_required_custom_field_is_enforced(self, jobs, registry, admin, recruiter):
        await registry.define_field(
            {"entityType": "jobs", "fieldName": "headcount", "fieldLabel": "Headcount",
             "fieldType": "number", "isRequired": True},
            admin,
        )

        with pytest.raises(InvalidArgumentError, match="Headcount is required"):
            await jobs.create({"jobTitle": "Engineer"}, recruiter)

        job = await jobs.create(
            {"jobTitle": "Engineer", "customFields": {"headcount": 2}}, recruiter
        )
        assert job.custom_fields == {"headcount": 2}


class TestScoping:
    async def test_visibility_by_role(self, organizations, admin, recruiter, other_recruiter):
        org = await organizations.create({"name": "Acme"}, other_recruiter)

        assert [o.id for o in await organizations.get_all(admin.scope)] == [org.id]
        assert [o.id for o in await organizations.get_all(other_recruiter.scope)] == [org.id]
        assert await organizations.get_all(recruiter.scope) == []

        with pytest.raises(NotFoundError):
            await organizations.get_by_id(org.id, recruiter.scope)
        assert (await organizations.get_by_id(org.id, admin.scope)).id == org.id

    async def test_newest_first(self, organizations, recruiter):
        first = await organizations.create({"name": "First"}, recruiter)
        second = await organizations.create({"name": "Second"}, recruiter)

        records = await organizations.get_all(None)

        assert [r.id for r in records] == [second.id, first.id]

    async def test_non_owner_cannot_change(self, organizations, recruiter, other_recruiter):
        org = await organizations.create({"name": "Acme"}, recruiter)

        with pytest.raises(PermissionDeniedError):
            await organizations.update(org.id, {"name": "Other"}, other_recruiter)
        with pytest.raises(PermissionDeniedError):
            await organizations.delete(org.id, other_recruiter)

    async def test_admin_can_change_any_record(self, organizations, admin, recruiter):
        org = await organizations.create({"name": "Acme"}, recruiter)

        updated = await organizations.update(org.id, {"name": "Acme Corp"}, admin)

        assert updated.name == "Acme Corp"
        assert updated.created_by == recruiter.id


# ============================================================================
# Update
# ============================================================================


class TestUpdate:
    async def test_empty_update_is_a_no_op(self, organizations, recruiter):
        org = await organizations.create({"name": "Acme"}, recruiter)

        unchanged = await organizations.update(org.id, {}, recruiter)
        same_value = await organizations.update(org.id, {"name": "Acme"}, recruiter)

        assert unchanged.updated_at == org.updated_at
        assert same_value.updated_at == org.updated_at
        history = await organizations.get_history(org.id, None)
        assert len(history) == 1

    async def test_update_records_before_and_after(self, organizations, recruiter):
        org = await organizations.create({"name": "Acme", "city": "Austin"}, recruiter)

        updated = await organizations.update(org.id, {"city": "Boston"}, recruiter)

        assert updated.city == "Boston"
        assert updated.name == "Acme"
        history = await organizations.get_history(org.id, None)
        assert [entry["action"] for entry in history] == ["UPDATE", "CREATE"]
        assert history[0]["details"]["before"]["city"] == "Austin"
        assert history[0]["details"]["after"]["city"] == "Boston"

    async def test_custom_fields_are_merged(self, organizations, recruiter):
        org = await organizations.create(
            {"name": "Acme", "customFields": {"tier": "gold", "region": "west"}}, recruiter
        )

        updated = await organizations.update(
            org.id, {"customFields": {"region": "east", "segment": "smb"}}, recruiter
        )

        assert updated.custom_fields == {"tier": "gold", "region": "east", "segment": "smb"}

    async def test_required_column_cannot_be_nulled(self, organizations, recruiter):
        org = await organizations.create({"name": "Acme"}, recruiter)

        with pytest.raises(InvalidArgumentError, match="name cannot be null"):
            await organizations.update(org.id, {"name": None}, recruiter)

    async def test_missing_record(self, organizations, recruiter):
        with pytest.raises(NotFoundError):
            await organizations.update(999, {"name": "x"}, recruiter)

    async def test_archive_stamps(self, organizations, recruiter):
        org = await organizations.create({"name": "Acme"}, recruiter)

        archived = await organizations.update(org.id, {"status": "Archived"}, recruiter)
        assert archived.archived_at is not None

        restored = await organizations.update(org.id, {"status": "Active"}, recruiter)
        assert restored.archived_at is None
        assert restored.archive_reason is None

    async def test_task_completion_stamps(self, tasks, recruiter):
        task = await tasks.create({"title": "Call Acme"}, recruiter)
        assert task.is_completed is False

        done = await tasks.update(task.id, {"isCompleted": True}, recruiter)
        assert done.completed_at is not None
        assert done.completed_by == recruiter.id

        reopened = await tasks.update(task.id, {"isCompleted": False}, recruiter)
        assert reopened.completed_at is None
        assert reopened.completed_by is None

    async def test_completion_flag_is_strict(self, tasks, recruiter):
        task = await tasks.create({"title": "Call Acme"}, recruiter)

        with pytest.raises(InvalidArgumentError):
            await tasks.update(task.id, {"isCompleted": "yes"}, recruiter)


# ============================================================================
# Delete and Constraints
# ============================================================================


class TestDelete:
    async def test_delete_twice(self, organizations, recruiter):
        org = await organizations.create({"name": "Acme"}, recruiter)

        deleted = await organizations.delete(org.id, recruiter)
        assert deleted.id == org.id

        with pytest.raises(NotFoundError):
            await organizations.delete(org.id, recruiter)
        with pytest.raises(NotFoundError):
            await organizations.get_by_id(org.id, None)

    async def test_history_survives_delete(self, organizations, recruiter):
        org = await organizations.create({"name": "Acme"}, recruiter)
        await organizations.delete(org.id, recruiter)

        history = await organizations.get_history(org.id, None)

        assert [entry["action"] for entry in history] == ["DELETE", "CREATE"]
        assert history[0]["details"]["name"] == "Acme"

        # scoped callers need the live record
        with pytest.raises(NotFoundError):
            await organizations.get_history(org.id, recruiter.scope)

    async def test_history_of_unknown_record(self, organizations):
        with pytest.raises(NotFoundError):
            await organizations.get_history(12345, None)

    async def test_referenced_record_cannot_be_deleted(self, stores, organizations, recruiter):
        org = await organizations.create({"name": "Acme"}, recruiter)
        await stores[EntityType.HIRING_MANAGERS].create(
            {"firstName": "Hal", "lastName": "Manager", "organizationId": org.id}, recruiter
        )

        with pytest.raises(ForeignKeyViolationError) as exc_info:
            await organizations.delete(org.id, recruiter)

        assert exc_info.value.direction is ReferenceDirection.STILL_REFERENCED
        assert exc_info.value.status_code == 409
        assert (await organizations.get_by_id(org.id, None)).id == org.id
        history = await organizations.get_history(org.id, None)
        assert [entry["action"] for entry in history] == ["CREATE"]

    async def test_delete_cascades_to_jobs(self, organizations, jobs, recruiter):
        org = await organizations.create({"name": "Acme"}, recruiter)
        job = await jobs.create({"jobTitle": "Engineer", "organizationId": org.id}, recruiter)

        await organizations.delete(org.id, recruiter)

        with pytest.raises(NotFoundError):
            await jobs.get_by_id(job.id, None)

    async def test_missing_reference(self, jobs, recruiter):
        with pytest.raises(ForeignKeyViolationError) as exc_info:
            await jobs.create({"jobTitle": "Engineer", "organizationId": 999}, recruiter)

        assert exc_info.value.direction is ReferenceDirection.MISSING_REFERENCE
        assert exc_info.value.status_code == 400

    async def test_duplicate_email(self, stores, recruiter):
        managers: RecordStore = stores[EntityType.HIRING_MANAGERS]
        await managers.create(
            {"firstName": "Hal", "lastName": "One", "email": "hal@acme.example"}, recruiter
        )

        with pytest.raises(DuplicateKeyError):
            await managers.create(
                {"firstName": "Hal", "lastName": "Two", "email": "hal@acme.example"},
                recruiter,
            )

    async def test_placement_requires_job_and_seeker(self, stores, recruiter):
        with pytest.raises(InvalidArgumentError):
            await stores[EntityType.PLACEMENTS].create({"status": "Pending"}, recruiter)
