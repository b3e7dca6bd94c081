"""
Tests for bulk updates and search.
"""

import pytest

from ats.core.errors import InvalidArgumentError
from ats.database.models.custom_field import EntityType


class TestBulkUpdate:
    async def test_partial_success(self, organizations, recruiter, other_recruiter):
        mine = await organizations.create({"name": "Mine"}, recruiter)
        theirs = await organizations.create({"name": "Theirs"}, other_recruiter)

        results = await organizations.bulk_update(
            [mine.id, theirs.id, 999], {"status": "Inactive"}, recruiter
        )

        assert results["successful"] == [mine.id]
        assert results["failed"] == [theirs.id, 999]
        assert [error["id"] for error in results["errors"]] == [theirs.id, 999]
        assert "permission" in results["errors"][0]["error"]
        assert results["errors"][1]["error"] == "Organization not found"

        assert (await organizations.get_by_id(mine.id, None)).status == "Inactive"
        assert (await organizations.get_by_id(theirs.id, None)).status == "Active"

    async def test_each_success_has_history(self, organizations, admin):
        first = await organizations.create({"name": "First"}, admin)
        second = await organizations.create({"name": "Second"}, admin)

        await organizations.bulk_update([first.id, second.id], {"city": "Denver"}, admin)

        for org in (first, second):
            history = await organizations.get_history(org.id, None)
            assert history[0]["action"] == "UPDATE"

    async def test_empty_ids(self, organizations, admin):
        with pytest.raises(InvalidArgumentError):
            await organizations.bulk_update([], {"status": "Inactive"}, admin)

    async def test_invalid_changes_fail_before_any_write(self, organizations, admin):
        org = await organizations.create({"name": "Acme"}, admin)

        with pytest.raises(InvalidArgumentError):
            await organizations.bulk_update([org.id], {"numEmployees": "many"}, admin)

        assert len(await organizations.get_history(org.id, None)) == 1


class TestSearch:
    async def test_case_insensitive_substring(self, organizations, recruiter):
        acme = await organizations.create({"name": "Acme Staffing"}, recruiter)
        await organizations.create({"name": "Globex"}, recruiter)

        results = await organizations.search("staff", recruiter.scope)

        assert [r.id for r in results] == [acme.id]

    async def test_wildcards_are_literal(self, organizations, recruiter):
        percent = await organizations.create({"name": "100% Talent"}, recruiter)
        await organizations.create({"name": "1000 Talent"}, recruiter)

        results = await organizations.search("0%", None)

        assert [r.id for r in results] == [percent.id]

    async def test_scoped(self, organizations, recruiter, other_recruiter, admin):
        await organizations.create({"name": "Acme"}, recruiter)

        assert await organizations.search("acme", other_recruiter.scope) == []
        assert len(await organizations.search("acme", admin.scope)) == 1

    async def test_searches_person_names(self, stores, recruiter):
        seekers = stores[EntityType.JOB_SEEKERS]
        jane = await seekers.create({"firstName": "Jane", "lastName": "Doe"}, recruiter)

        assert [r.id for r in await seekers.search("doe", None)] == [jane.id]

    @pytest.mark.parametrize("query", [None, "", " a "])
    async def test_query_too_short(self, organizations, recruiter, query):
        with pytest.raises(InvalidArgumentError):
            await organizations.search(query, recruiter.scope)
