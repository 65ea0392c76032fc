"""
Tests for the /api/bugs endpoints.

Tests verify:
1. CRUD status codes and JSON field names
2. Validation errors as 400 with every violated field listed
3. 404 for unknown ids, including a second delete
4. Filtered listing and statistics

Database setup is handled by the shared fixtures in conftest.py.
"""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from bug_tracker.api import app
from bug_tracker.bugs.errors import StorageError
from bug_tracker.bugs.services import BugService

client = TestClient(app)


def parse_ts(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@pytest.fixture
def created(make_payload):
    """Create the crash-on-save bug through the API."""
    response = client.post("/api/bugs", json=make_payload())
    assert response.status_code == 201
    return response.json()


class TestCreateEndpoint:
    """Tests for POST /api/bugs."""

    def test_create_bug(self, created):
        assert created["title"] == "Crash on save"
        assert created["status"] == "open"
        assert created["tags"] == []
        assert created["reproducible"] is False
        assert created["createdAt"] == created["updatedAt"]
        assert set(created) == {
            "id",
            "title",
            "description",
            "priority",
            "status",
            "assignee",
            "reporter",
            "environment",
            "reproducible",
            "stepsToReproduce",
            "tags",
            "createdAt",
            "updatedAt",
        }

    def test_create_with_title_only_is_rejected(self):
        response = client.post("/api/bugs", json={"title": "Test Bug"})

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["error"] == "VALIDATION_ERROR"
        fields = {e["field"] for e in detail["errors"]}
        assert fields == {"description", "priority", "assignee", "reporter", "environment"}

    def test_create_non_object_body(self):
        response = client.post("/api/bugs", json=["title"])
        assert response.status_code == 400

    def test_create_without_body(self):
        response = client.post("/api/bugs")

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["error"] == "VALIDATION_ERROR"
        assert [e["field"] for e in detail["errors"]] == ["body"]

    def test_create_malformed_json(self):
        response = client.post(
            "/api/bugs",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["error"] == "VALIDATION_ERROR"
        assert [e["field"] for e in detail["errors"]] == ["body"]

    def test_storage_fault_is_500(self, make_payload, monkeypatch):
        def broken_create(self, payload):
            raise StorageError("create", "connection refused")

        monkeypatch.setattr(BugService, "create", broken_create)

        response = client.post("/api/bugs", json=make_payload())

        assert response.status_code == 500
        assert response.json()["detail"]["error"] == "STORAGE_ERROR"


class TestListEndpoint:
    """Tests for GET /api/bugs."""

    def test_list_empty(self):
        response = client.get("/api/bugs")
        assert response.status_code == 200
        assert response.json() == []

    def test_list_in_insertion_order(self, make_payload):
        for title in ("One", "Two", "Three"):
            client.post("/api/bugs", json=make_payload(title=title))

        response = client.get("/api/bugs")
        assert [b["title"] for b in response.json()] == ["One", "Two", "Three"]

    def test_list_with_filters_and_search(self, make_payload):
        client.post("/api/bugs", json=make_payload())
        client.post(
            "/api/bugs",
            json=make_payload(
                title="Login button misaligned",
                description="The login button overlaps the footer on mobile",
                priority="low",
                assignee="Carol",
                tags=["ui"],
            ),
        )

        by_priority = client.get("/api/bugs", params={"priority": "low"}).json()
        assert [b["title"] for b in by_priority] == ["Login button misaligned"]

        by_search = client.get("/api/bugs", params={"q": "CRASH"}).json()
        assert [b["title"] for b in by_search] == ["Crash on save"]

        combined = client.get(
            "/api/bugs", params={"assignee": "Carol", "q": "crash"}
        ).json()
        assert combined == []

    def test_list_invalid_filter_value(self):
        response = client.get("/api/bugs", params={"status": "done"})
        assert response.status_code == 422

    def test_storage_fault_is_500(self, monkeypatch):
        def broken_get_all(self):
            raise StorageError("list", "database is locked")

        monkeypatch.setattr(BugService, "get_all", broken_get_all)

        response = client.get("/api/bugs")

        assert response.status_code == 500
        detail = response.json()["detail"]
        assert detail["error"] == "STORAGE_ERROR"
        assert detail["operation"] == "list"


class TestItemEndpoints:
    """Tests for GET/PATCH/PUT/DELETE /api/bugs/{id}."""

    def test_get_bug(self, created):
        response = client.get(f"/api/bugs/{created['id']}")
        assert response.status_code == 200
        assert response.json() == created

    def test_get_bug_not_found(self):
        response = client.get("/api/bugs/nonexistent-id")
        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "NOT_FOUND"

    def test_patch_status(self, created):
        response = client.patch(
            f"/api/bugs/{created['id']}", json={"status": "resolved"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "resolved"
        assert parse_ts(data["updatedAt"]) > parse_ts(created["updatedAt"])
        assert data["createdAt"] == created["createdAt"]
        assert data["title"] == created["title"]

    def test_put_is_partial_update(self, created):
        response = client.put(
            f"/api/bugs/{created['id']}",
            json={"stepsToReproduce": "Open a 12MB file and save", "reproducible": True},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["stepsToReproduce"] == "Open a 12MB file and save"
        assert data["reproducible"] is True
        assert data["priority"] == "critical"

    def test_patch_validation_error(self, created):
        response = client.patch(
            f"/api/bugs/{created['id']}",
            json={"description": "too short", "priority": "urgent"},
        )

        assert response.status_code == 400
        fields = {e["field"] for e in response.json()["detail"]["errors"]}
        assert fields == {"description", "priority"}

    def test_patch_not_found(self):
        response = client.patch("/api/bugs/nonexistent-id", json={"status": "closed"})
        assert response.status_code == 404

    def test_patch_without_body_not_found(self):
        response = client.patch("/api/bugs/nonexistent-id")
        assert response.status_code == 404

    def test_patch_without_body(self, created):
        response = client.patch(f"/api/bugs/{created['id']}")

        assert response.status_code == 400
        assert response.json()["detail"]["errors"][0]["field"] == "body"

    def test_patch_malformed_json(self, created):
        response = client.patch(
            f"/api/bugs/{created['id']}",
            content=b"{\"status\": ",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400

    def test_delete_twice(self, created):
        first = client.delete(f"/api/bugs/{created['id']}")
        assert first.status_code == 200
        assert first.json()["message"] == "Bug deleted"

        second = client.delete(f"/api/bugs/{created['id']}")
        assert second.status_code == 404

        listing = client.get("/api/bugs").json()
        assert created["id"] not in [b["id"] for b in listing]


class TestStatsEndpoint:
    """Tests for GET /api/bugs/stats."""

    def test_stats(self, make_payload):
        first = client.post("/api/bugs", json=make_payload()).json()
        client.post("/api/bugs", json=make_payload(title="Another", priority="low"))
        client.patch(f"/api/bugs/{first['id']}", json={"status": "resolved"})

        response = client.get("/api/bugs/stats")

        assert response.status_code == 200
        assert response.json() == {
            "total": 2,
            "open": 1,
            "inProgress": 0,
            "resolved": 1,
            "closed": 0,
            "critical": 1,
            "high": 0,
            "medium": 0,
            "low": 1,
            "resolvedPercentage": 50,
        }

    def test_stats_over_filtered_view(self, make_payload):
        client.post("/api/bugs", json=make_payload())
        client.post("/api/bugs", json=make_payload(priority="low"))

        data = client.get("/api/bugs/stats", params={"priority": "low"}).json()
        assert data["total"] == 1
        assert data["low"] == 1
