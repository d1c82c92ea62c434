"""
Tests for the listing registry HTTP API.

The registry dependency is overridden with one bound to the in-memory test
database, and callers identify themselves with the X-Principal header.
"""

import pytest
from fastapi.testclient import TestClient

from resource_registry.api import app
from resource_registry.registry.routes import get_registry

from conftest import DEPLOYER, NGO1, NGO2, VERIFIER


def as_principal(principal: str) -> dict:
    return {"X-Principal": principal}


@pytest.fixture
def client(registry):
    app.dependency_overrides[get_registry] = lambda: registry
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def listing_payload() -> dict:
    return {
        "resource_type": "food",
        "quantity": 1000,
        "unit": "kg",
        "location": "New York",
        "description": "Surplus canned goods",
        "category": "essentials",
        "tags": ["donation"],
    }


@pytest.fixture
def created(client, listing_payload) -> int:
    response = client.post(
        "/listings", json=listing_payload, headers=as_principal(NGO1)
    )
    return response.json()["listing_id"]


class TestCreateListingEndpoint:
    """Tests for POST /listings."""

    def test_create_returns_201(self, client, listing_payload):
        response = client.post(
            "/listings", json=listing_payload, headers=as_principal(NGO1)
        )

        assert response.status_code == 201
        assert response.json() == {"status": "success", "listing_id": 1}

    def test_missing_principal_is_401(self, client, listing_payload):
        response = client.post("/listings", json=listing_payload)

        assert response.status_code == 401

    def test_missing_required_field_is_422(self, client):
        response = client.post(
            "/listings",
            json={"resource_type": "food", "unit": "kg"},
            headers=as_principal(NGO1),
        )

        assert response.status_code == 422

    def test_too_many_tags(self, client, listing_payload):
        listing_payload["tags"] = [f"t{i}" for i in range(11)]

        response = client.post(
            "/listings", json=listing_payload, headers=as_principal(NGO1)
        )

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["error"] == "registry_violation"
        assert detail["code"] == "MaxTagsExceeded"
        assert detail["numeric_code"] == 106

    def test_created_listing_is_readable(self, client, created):
        response = client.get(f"/listings/{created}")

        assert response.status_code == 200
        data = response.json()
        assert data["owner"] == NGO1
        assert data["status"] == "active"
        assert data["location"] == "New York"

        categories = client.get(f"/listings/{created}/categories").json()
        assert categories["tags"] == ["donation"]

    def test_unknown_listing_is_404(self, client):
        assert client.get("/listings/42").status_code == 404


class TestUpdateAndCancelEndpoints:
    """Tests for PATCH /listings/{id} and POST /listings/{id}/cancel."""

    def test_partial_update(self, client, created):
        response = client.patch(
            f"/listings/{created}",
            json={"location": "Boston", "notes": "Moved"},
            headers=as_principal(NGO1),
        )

        assert response.status_code == 200
        update = response.json()["update"]
        assert update["update_id"] == 1
        assert update["changes"] == [
            {"field": "location", "old": "New York", "new": "Boston"}
        ]

        history = client.get(f"/listings/{created}/updates").json()
        assert [entry["notes"] for entry in history] == ["Moved"]
        assert client.get(f"/listings/{created}/updates/1").status_code == 200
        assert client.get(f"/listings/{created}/updates/2").status_code == 404

    def test_stranger_update_is_403(self, client, created):
        response = client.patch(
            f"/listings/{created}", json={"quantity": 1}, headers=as_principal(NGO2)
        )

        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "Unauthorized"

    def test_update_missing_listing_is_404(self, client):
        response = client.patch(
            "/listings/9", json={"quantity": 1}, headers=as_principal(NGO1)
        )

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "InvalidListing"

    def test_cancel_twice_is_409(self, client, created):
        first = client.post(f"/listings/{created}/cancel", headers=as_principal(NGO1))
        assert first.status_code == 200
        assert first.json()["listing"]["status"] == "cancelled"

        second = client.post(f"/listings/{created}/cancel", headers=as_principal(NGO1))
        assert second.status_code == 409
        assert second.json()["detail"]["code"] == "InvalidStatus"
        assert second.json()["detail"]["numeric_code"] == 109


class TestCollaboratorEndpoints:
    """Tests for collaborator grants and permission checks."""

    def test_grant_and_check(self, client, created):
        response = client.post(
            f"/listings/{created}/collaborators",
            json={"collaborator": NGO2, "role": "manager", "permissions": ["update"]},
            headers=as_principal(NGO1),
        )
        assert response.status_code == 201

        allowed = client.get(f"/listings/{created}/permissions/{NGO2}/update").json()
        denied = client.get(f"/listings/{created}/permissions/{NGO2}/cancel").json()
        assert allowed["allowed"] is True
        assert denied["allowed"] is False

        grants = client.get(f"/listings/{created}/collaborators").json()
        assert [g["principal"] for g in grants] == [NGO2]
        assert client.get(f"/listings/{created}/collaborators/{NGO2}").status_code == 200

    def test_non_owner_grant_is_403(self, client, created):
        response = client.post(
            f"/listings/{created}/collaborators",
            json={"collaborator": VERIFIER, "permissions": ["update"]},
            headers=as_principal(NGO2),
        )

        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "NotOwner"

    def test_duplicate_grant_is_409(self, client, created):
        body = {"collaborator": NGO2, "permissions": ["update"]}
        client.post(
            f"/listings/{created}/collaborators", json=body, headers=as_principal(NGO1)
        )

        response = client.post(
            f"/listings/{created}/collaborators", json=body, headers=as_principal(NGO1)
        )

        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "AlreadyExists"


class TestVerificationEndpoints:
    """Tests for listing verification."""

    def test_verify_and_read(self, client, created):
        response = client.post(
            f"/listings/{created}/verification",
            json={"notes": "Checked"},
            headers=as_principal(VERIFIER),
        )
        assert response.status_code == 200

        record = client.get(f"/listings/{created}/verification").json()
        assert record["verified_by"] == VERIFIER

    def test_unverified_listing_is_404(self, client, created):
        assert client.get(f"/listings/{created}/verification").status_code == 404


class TestRegistryEndpoints:
    """Tests for the admin gate endpoints."""

    def test_state(self, client):
        state = client.get("/registry/state").json()

        assert state["admin"] == DEPLOYER
        assert state["paused"] is False
        assert state["next_listing_id"] == 1

    def test_pause_blocks_creation(self, client, listing_payload):
        assert client.post("/registry/pause", headers=as_principal(DEPLOYER)).status_code == 200

        response = client.post(
            "/listings", json=listing_payload, headers=as_principal(NGO1)
        )

        assert response.status_code == 423
        assert response.json()["detail"]["code"] == "Paused"

    def test_non_admin_pause_is_403(self, client):
        response = client.post("/registry/pause", headers=as_principal(NGO1))

        assert response.status_code == 403

    def test_admin_transfer(self, client):
        response = client.put(
            "/registry/admin",
            json={"new_admin": NGO2},
            headers=as_principal(DEPLOYER),
        )

        assert response.status_code == 200
        assert client.get("/registry/state").json()["admin"] == NGO2
