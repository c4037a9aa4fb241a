"""
Task catalog API and authentication tests
"""
from datetime import datetime, timedelta, UTC

from jose import jwt

from housekeeping.config import settings


class TestCatalogApi:

    def test_get_catalog(self, client, maria_auth_headers):
        response = client.get("/housekeeping/catalog", headers=maria_auth_headers)
        data = response.json()
        assert data["version"] == 0
        assert list(data["categories"]) == ["washroom", "kitchen", "bedroom"]
        assert data["categories"]["washroom"]["tasks"][0]["task_id"] == "clean-mirror"

    def test_ingest(self, client, manager_auth_headers):
        response = client.put(
            "/housekeeping/catalog",
            json={"balcony": {"tasks": ["Sweep"], "roomTypes": ["Suite"]}, "laundry": ["Fold Towels"]},
            headers=manager_auth_headers,
        )
        assert response.status_code == 200
        assert response.json() == {"version": 1}

        suite = client.get("/housekeeping/rooms/r-102", headers=manager_auth_headers).json()
        king = client.get("/housekeeping/rooms/r-101", headers=manager_auth_headers).json()
        assert "balcony" in suite["applicable_categories"]
        assert "balcony" not in king["applicable_categories"]
        assert king["progress"]["total"] == 19

    def test_ingest_invalid(self, client, manager_auth_headers):
        response = client.put("/housekeeping/catalog", json={"kitchen": 5}, headers=manager_auth_headers)
        assert response.status_code == 422
        assert "kitchen" in response.json()["errors"]

    def test_ingest_requires_manager(self, client, maria_auth_headers):
        response = client.put("/housekeeping/catalog", json={"laundry": ["Fold"]}, headers=maria_auth_headers)
        assert response.status_code == 403


class TestAuth:

    def test_missing_token(self, client):
        response = client.get("/housekeeping/rooms")
        assert response.status_code in (401, 403)

    def test_invalid_token(self, client):
        response = client.get("/housekeeping/rooms", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401

    def test_expired_token(self, client):
        token = jwt.encode(
            {"sub": "hk-1", "role": "housekeeper", "exp": datetime.now(UTC) - timedelta(minutes=1)},
            settings.SECRET_KEY, algorithm=settings.ALGORITHM,
        )
        response = client.get("/housekeeping/rooms", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_unknown_role(self, client):
        token = jwt.encode({"sub": "x-1", "role": "guest"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
        response = client.get("/housekeeping/rooms", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_health_is_public(self, client):
        assert client.get("/health").json() == {"status": "healthy"}
