"""
==============================================================================
Cleaner Profile & Favorites Tests
==============================================================================
"""

from fastapi.testclient import TestClient


class TestOwnProfile:

    def test_get_own_profile(self, client: TestClient, cleaner_headers: dict, cleaner_user):
        response = client.get("/api/v1/cleaners/me", headers=cleaner_headers)
        assert response.status_code == 200
        profile = response.json()["profile"]
        assert profile["user_id"] == cleaner_user.id
        assert profile["service_areas"] == []
        assert profile["stripe_onboarded"] is False

    def test_partial_update(self, client: TestClient, cleaner_headers: dict):
        response = client.put(
            "/api/v1/cleaners/me",
            json={
                "bio": "Ten years mucking stalls.",
                "years_experience": 10,
                "service_areas": ["Southside", " Avondale ", "Southside", ""],
            },
            headers=cleaner_headers
        )
        assert response.status_code == 200
        profile = response.json()["profile"]
        assert profile["bio"] == "Ten years mucking stalls."
        assert profile["service_areas"] == ["Southside", "Avondale"]

        response = client.put(
            "/api/v1/cleaners/me",
            json={"has_transportation": True, "service_areas": None},
            headers=cleaner_headers
        )
        profile = response.json()["profile"]
        assert profile["has_transportation"] is True
        assert profile["bio"] == "Ten years mucking stalls."
        assert profile["years_experience"] == 10
        assert profile["service_areas"] == ["Southside", "Avondale"]

    def test_clients_have_no_profile(self, client: TestClient, client_headers: dict):
        response = client.get("/api/v1/cleaners/me", headers=client_headers)
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "CLEANER_REQUIRED"


class TestPublicProfile:

    def test_public_profile_hides_payout_details(
        self, client: TestClient, client_headers: dict, onboarded_cleaner
    ):
        response = client.get(f"/api/v1/cleaners/{onboarded_cleaner.id}", headers=client_headers)
        assert response.status_code == 200
        cleaner = response.json()["cleaner"]
        assert cleaner["name"] == "Carl Cleaner"
        assert cleaner["rating"] == {"average": None, "count": 0}
        assert "stripe_account_id" not in cleaner
        assert "email" not in cleaner

    def test_non_cleaner_not_found(self, client: TestClient, client_headers: dict, client_user):
        response = client.get(f"/api/v1/cleaners/{client_user.id}", headers=client_headers)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "PROFILE_NOT_FOUND"

    def test_disabled_cleaner_not_found(self, client: TestClient, client_headers: dict, cleaner_user, db):
        cleaner_user.is_active = False
        db.commit()
        response = client.get(f"/api/v1/cleaners/{cleaner_user.id}", headers=client_headers)
        assert response.status_code == 404


class TestFavorites:

    def test_add_list_remove(
        self,
        client: TestClient,
        client_headers: dict,
        cleaner_user,
        other_cleaner,
    ):
        for cleaner in (other_cleaner, cleaner_user):
            response = client.post(f"/api/v1/favorites/{cleaner.id}", headers=client_headers)
            assert response.status_code == 200
            assert response.json()["is_favorite"] is True

        response = client.get("/api/v1/favorites", headers=client_headers)
        data = response.json()
        assert data["total"] == 2
        assert [c["name"] for c in data["cleaners"]] == ["Carl Cleaner", "Hana Helper"]

        response = client.delete(f"/api/v1/favorites/{cleaner_user.id}", headers=client_headers)
        assert response.json()["is_favorite"] is False

        response = client.get(f"/api/v1/favorites/{cleaner_user.id}", headers=client_headers)
        assert response.json()["is_favorite"] is False
        response = client.get(f"/api/v1/favorites/{other_cleaner.id}", headers=client_headers)
        assert response.json()["is_favorite"] is True

    def test_add_is_idempotent(self, client: TestClient, client_headers: dict, cleaner_user):
        client.post(f"/api/v1/favorites/{cleaner_user.id}", headers=client_headers)
        client.post(f"/api/v1/favorites/{cleaner_user.id}", headers=client_headers)

        assert client.get("/api/v1/favorites", headers=client_headers).json()["total"] == 1

    def test_remove_unknown_is_noop(self, client: TestClient, client_headers: dict):
        response = client.delete("/api/v1/favorites/nobody", headers=client_headers)
        assert response.status_code == 200
        assert response.json()["is_favorite"] is False

    def test_only_cleaners_can_be_favorited(self, client: TestClient, client_headers: dict, other_client):
        response = client.post(f"/api/v1/favorites/{other_client.id}", headers=client_headers)
        assert response.status_code == 404

    def test_cleaners_have_no_favorites(self, client: TestClient, cleaner_headers: dict):
        response = client.get("/api/v1/favorites", headers=cleaner_headers)
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "CLIENT_REQUIRED"
