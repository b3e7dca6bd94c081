"""
End-to-end tests for the HTTP layer.

The application is created with the in-memory test database and the mock
notifier; its lifespan runs around each test so ``app.state`` carries the
registry and stores exactly as in production. Authentication is replaced by
a dependency override that returns the actor chosen by the test.
"""

from typing import AsyncGenerator

import pytest
from fastapi import FastAPI, status
from httpx import ASGITransport, AsyncClient
from jose import jwt

from ats.api.deps import get_current_actor
from ats.core.config import Settings
from ats.main import create_app, lifespan
from ats.services.access import Actor


# ============================================================================
# Test Fixtures
# ============================================================================


class ActorSwitch:
    """Holds the actor returned by the overridden authentication dependency."""

    def __init__(self, actor: Actor):
        self.actor = actor

    def __call__(self) -> Actor:
        return self.actor


@pytest.fixture
async def app(test_settings, database, mock_notifier) -> AsyncGenerator[FastAPI, None]:
    application = create_app(
        settings=test_settings, database=database, notifier=mock_notifier
    )
    async with lifespan(application):
        yield application


@pytest.fixture
def as_user(app: FastAPI, recruiter: Actor) -> ActorSwitch:
    switch = ActorSwitch(recruiter)
    app.dependency_overrides[get_current_actor] = switch
    return switch


@pytest.fixture
async def client(app: FastAPI, as_user: ActorSwitch) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


async def _create_org(client: AsyncClient, name: str = "Acme") -> dict:
    response = await client.post("/api/v1/organizations", json={"name": name})
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()["organization"]


# ============================================================================
# Health
# ============================================================================


class TestHealth:
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_ready(self, client):
        response = await client.get("/ready")

        assert response.status_code == 200
        assert response.json()["database"] == "connected"

    async def test_request_id_header(self, client):
        response = await client.get("/health", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"


# ============================================================================
# Authentication
# ============================================================================


class TestAuthentication:
    async def test_missing_token(self, app, client):
        app.dependency_overrides.clear()

        response = await client.get("/api/v1/organizations")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["success"] is False

    async def test_valid_token(self, app, client, test_settings):
        app.dependency_overrides.clear()
        token = jwt.encode({"sub": "5"}, test_settings.secret_key, algorithm="HS256")

        response = await client.get(
            "/api/v1/organizations", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 200

    async def test_token_for_unknown_user(self, app, client, test_settings):
        app.dependency_overrides.clear()
        token = jwt.encode({"sub": "404"}, test_settings.secret_key, algorithm="HS256")

        response = await client.get(
            "/api/v1/organizations", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_tampered_token(self, app, client):
        app.dependency_overrides.clear()
        token = jwt.encode({"sub": "5"}, "another-secret-key-that-is-long-enough", algorithm="HS256")

        response = await client.get(
            "/api/v1/organizations", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# ============================================================================
# Records
# ============================================================================


class TestRecordRoutes:
    async def test_create_and_get(self, client):
        created = await _create_org(client)

        response = await client.get(f"/api/v1/organizations/{created['id']}")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["organization"]["name"] == "Acme"
        assert body["organization"]["created_by"] == 5

    async def test_list_envelope(self, client):
        await _create_org(client, "Acme")
        await _create_org(client, "Globex")

        response = await client.get("/api/v1/organizations")

        body = response.json()
        assert body["count"] == 2
        assert [org["name"] for org in body["organizations"]] == ["Globex", "Acme"]

    async def test_camel_case_envelope_keys(self, client):
        response = await client.post(
            "/api/v1/hiring-managers", json={"firstName": "Hal", "lastName": "Manager"}
        )

        assert response.status_code == 201
        assert response.json()["hiringManager"]["first_name"] == "Hal"

    async def test_not_found(self, client):
        response = await client.get("/api/v1/jobs/999")

        assert response.status_code == 404
        body = response.json()
        assert body == {
            "success": False,
            "message": "Job not found",
            "error": {"kind": "not_found", "entity_type": "jobs", "record_id": 999},
        }

    async def test_other_users_record(self, client, as_user, other_recruiter, admin):
        created = await _create_org(client)

        as_user.actor = other_recruiter
        assert (await client.get(f"/api/v1/organizations/{created['id']}")).status_code == 404
        response = await client.put(
            f"/api/v1/organizations/{created['id']}", json={"name": "Mine now"}
        )
        assert response.status_code == 403

        as_user.actor = admin
        assert (await client.get(f"/api/v1/organizations/{created['id']}")).status_code == 200

    async def test_invalid_payload_is_400(self, client):
        response = await client.post("/api/v1/organizations", json={"website": "acme"})

        assert response.status_code == 400
        assert response.json()["success"] is False

    async def test_non_object_body_is_400(self, client):
        response = await client.post("/api/v1/organizations", json=["Acme"])

        assert response.status_code == 400

    async def test_duplicate_is_409(self, client):
        payload = {"firstName": "Hal", "lastName": "Manager", "email": "hal@acme.example"}
        assert (await client.post("/api/v1/hiring-managers", json=payload)).status_code == 201

        response = await client.post("/api/v1/hiring-managers", json=payload)

        assert response.status_code == 409
        assert response.json()["error"]["kind"] == "duplicate_key"

    async def test_missing_reference_is_400(self, client):
        response = await client.post(
            "/api/v1/jobs", json={"jobTitle": "Engineer", "organizationId": 999}
        )

        assert response.status_code == 400
        assert response.json()["error"]["kind"] == "foreign_key_violation"

    async def test_referenced_delete_is_409(self, client):
        org = await _create_org(client)
        await client.post(
            "/api/v1/leads",
            json={"firstName": "Lee", "lastName": "Lead", "organizationId": org["id"]},
        )

        response = await client.delete(f"/api/v1/organizations/{org['id']}")

        assert response.status_code == 409

    async def test_update_and_history(self, client):
        org = await _create_org(client)

        response = await client.put(
            f"/api/v1/organizations/{org['id']}", json={"city": "Austin"}
        )
        assert response.status_code == 200
        assert response.json()["organization"]["city"] == "Austin"

        history = (await client.get(f"/api/v1/organizations/{org['id']}/history")).json()
        assert history["count"] == 2
        assert [entry["action"] for entry in history["history"]] == ["UPDATE", "CREATE"]

    async def test_delete(self, client):
        org = await _create_org(client)

        response = await client.delete(f"/api/v1/organizations/{org['id']}")

        assert response.status_code == 200
        assert response.json()["message"] == "Organization deleted successfully"
        assert (await client.get(f"/api/v1/organizations/{org['id']}")).status_code == 404

    async def test_search(self, client):
        await _create_org(client, "Acme Staffing")

        found = await client.get("/api/v1/organizations/search", params={"q": "staff"})
        too_short = await client.get("/api/v1/organizations/search", params={"q": "a"})

        assert found.json()["count"] == 1
        assert too_short.status_code == 400

    async def test_bulk_update(self, client):
        org = await _create_org(client)

        response = await client.post(
            "/api/v1/organizations/bulk-update",
            json={"ids": [org["id"], 999], "updates": {"status": "Inactive"}},
        )

        assert response.status_code == 200
        results = response.json()["results"]
        assert results["successful"] == [org["id"]]
        assert results["failed"] == [999]

    async def test_bulk_update_requires_ids(self, client):
        response = await client.post(
            "/api/v1/organizations/bulk-update", json={"ids": [], "updates": {}}
        )

        assert response.status_code == 400


class TestNoteRoutes:
    async def test_add_and_list(self, client, mock_notifier):
        org = await _create_org(client)

        response = await client.post(
            f"/api/v1/organizations/{org['id']}/notes",
            json={"text": "Called", "action": "Call", "notify": ["ops@acme.example"]},
        )

        assert response.status_code == 201
        assert response.json()["note"]["text"] == "Called"
        mock_notifier.send_note_added.assert_awaited_once()

        notes = (await client.get(f"/api/v1/organizations/{org['id']}/notes")).json()
        assert notes["count"] == 1
        assert notes["notes"][0]["created_by_name"] == "Rita Recruiter"

    async def test_empty_note_is_400(self, client):
        org = await _create_org(client)

        response = await client.post(
            f"/api/v1/organizations/{org['id']}/notes", json={"text": "  "}
        )

        assert response.status_code == 400


# ============================================================================
# Custom Fields and Maintenance
# ============================================================================


class TestCustomFieldRoutes:
    FIELD = {
        "entityType": "jobs",
        "fieldName": "headcount",
        "fieldLabel": "Headcount",
        "fieldType": "number",
    }

    async def test_recruiter_cannot_define(self, client):
        response = await client.post("/api/v1/custom-fields", json=self.FIELD)

        assert response.status_code == 403

    async def test_admin_lifecycle(self, client, as_user, admin):
        as_user.actor = admin

        created = await client.post("/api/v1/custom-fields", json=self.FIELD)
        assert created.status_code == 201
        field_id = created.json()["customField"]["id"]

        listed = (await client.get("/api/v1/custom-fields/entity/jobs")).json()
        assert listed["count"] == 1

        updated = await client.put(
            f"/api/v1/custom-fields/{field_id}", json={"isRequired": True}
        )
        assert updated.json()["customField"]["is_required"] is True

        rejected = await client.post("/api/v1/jobs", json={"jobTitle": "Engineer"})
        assert rejected.status_code == 400
        assert "Headcount is required" in rejected.json()["message"]

        assert (await client.delete(f"/api/v1/custom-fields/{field_id}")).status_code == 200
        history = (await client.get(f"/api/v1/custom-fields/{field_id}/history")).json()
        assert [entry["action"] for entry in history["history"]] == [
            "DELETE",
            "UPDATE",
            "CREATE",
        ]

    async def test_unknown_entity_type(self, client):
        response = await client.get("/api/v1/custom-fields/entity/widgets")

        assert response.status_code == 400


class TestMaintenanceRoutes:
    async def test_requires_admin(self, client):
        response = await client.post("/api/v1/maintenance/archive-cleanup")

        assert response.status_code == 403

    async def test_archive_cleanup(self, client, as_user, admin):
        as_user.actor = admin

        response = await client.post("/api/v1/maintenance/archive-cleanup")

        assert response.status_code == 200
        assert response.json()["results"]["deleted"]["organizations"] == []

    async def test_task_reminders(self, client, as_user, admin):
        as_user.actor = admin

        response = await client.post("/api/v1/maintenance/task-reminders")

        assert response.status_code == 200
        assert response.json()["results"]["processed"] == 0


# ============================================================================
# Production Error Envelopes
# ============================================================================


class TestProductionErrorEnvelope:
    """Error detail stays out of responses when running in production."""

    @pytest.fixture
    async def production_client(
        self, database, mock_notifier, recruiter
    ) -> AsyncGenerator[AsyncClient, None]:
        settings = Settings(
            database_url="sqlite+aiosqlite:///:memory:",
            environment="production",
            secret_key="production-secret-key-that-is-long-enough",
            rate_limit_enabled=False,
            enable_background_jobs=False,
        )
        application = create_app(
            settings=settings, database=database, notifier=mock_notifier
        )
        application.dependency_overrides[get_current_actor] = ActorSwitch(recruiter)

        @application.get("/explode")
        async def explode() -> dict:
            raise RuntimeError("connection string leaked")

        transport = ASGITransport(app=application, raise_app_exceptions=False)
        async with lifespan(application):
            async with AsyncClient(transport=transport, base_url="http://test") as c:
                yield c

    async def test_core_error_hides_detail(self, production_client):
        response = await production_client.get("/api/v1/jobs/999")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Job not found"}

    async def test_validation_error_hides_detail(self, production_client):
        response = await production_client.get("/api/v1/jobs/not-a-number")

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["message"]
        assert "error" not in body

    async def test_unhandled_error_hides_detail(self, production_client):
        response = await production_client.get("/explode")

        assert response.status_code == 500
        body = response.json()
        assert body == {"success": False, "message": "An unexpected error occurred"}
        assert "connection string leaked" not in response.text
