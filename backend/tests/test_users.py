"""Tests for the users API and the X-User-Id requester resolution."""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from app.main import app


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


class TestUsersAPI:
    def test_create_user(self, client: TestClient):
        response = client.post("/v1/users/", json={"name": "Ana Buyer", "email": "ana@example.com"})
        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Ana Buyer"
        assert data["email"] == "ana@example.com"
        assert data["is_admin"] is False
        assert "id" in data

    def test_duplicate_email(self, client: TestClient):
        client.post("/v1/users/", json={"name": "Ana", "email": "ana@example.com"})
        response = client.post("/v1/users/", json={"name": "Ana 2", "email": "ana@example.com"})
        assert response.status_code == 409

    def test_invalid_email(self, client: TestClient):
        response = client.post("/v1/users/", json={"name": "Ana", "email": "not-an-email"})
        assert response.status_code == 422

    def test_get_user(self, client: TestClient):
        created = client.post(
            "/v1/users/", json={"name": "Ana", "email": "ana@example.com"}
        ).json()
        response = client.get(f"/v1/users/{created['id']}")
        assert response.status_code == 200
        assert response.json()["email"] == "ana@example.com"

    def test_get_unknown_user(self, client: TestClient):
        assert client.get(f"/v1/users/{uuid4()}").status_code == 404


class TestRequesterIdentity:
    def test_missing_header(self, client: TestClient):
        assert client.get("/v1/coupons/mine").status_code == 401

    def test_malformed_header(self, client: TestClient):
        response = client.get("/v1/coupons/mine", headers={"X-User-Id": "abc"})
        assert response.status_code == 401

    def test_unknown_user(self, client: TestClient):
        response = client.get("/v1/coupons/mine", headers={"X-User-Id": str(uuid4())})
        assert response.status_code == 401

    def test_non_admin_on_admin_route(self, client: TestClient):
        user = client.post("/v1/users/", json={"name": "Ana", "email": "ana@example.com"}).json()
        response = client.get("/v1/coupons/stats", headers={"X-User-Id": user["id"]})
        assert response.status_code == 403


def test_root(client: TestClient):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["app"] == "shop-rewards"
