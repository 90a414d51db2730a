"""
==============================================================================
API Integration Tests
==============================================================================

Tests for health, authentication, user management and admin endpoints.

==============================================================================
"""

from fastapi.testclient import TestClient

from flockfur.db.models import User

from conftest import PASSWORD


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_health_check(self, client: TestClient):
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["components"]["payments"] == "configured"
        assert data["components"]["storage"] == "configured"

    def test_readiness_probe(self, client: TestClient):
        response = client.get("/api/v1/health/ready")
        assert response.status_code == 200
        assert response.json()["ready"] is True

    def test_liveness_probe(self, client: TestClient):
        response = client.get("/api/v1/health/live")
        assert response.status_code == 200
        assert response.json()["alive"] is True


class TestAuthEndpoints:
    """Tests for authentication endpoints."""

    def test_register_client(self, client: TestClient):
        response = client.post(
            "/api/v1/auth/register",
            json={"email": "New.Farmer@Example.com", "password": "barnyard1", "name": " Nora "}
        )
        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert data["access_token"]
        assert data["user"]["email"] == "new.farmer@example.com"
        assert data["user"]["name"] == "Nora"
        assert data["user"]["role"] == "client"

    def test_register_cleaner_creates_profile(self, client: TestClient, db):
        response = client.post(
            "/api/v1/auth/register",
            json={
                "email": "mucker@example.com",
                "password": "pitchfork",
                "name": "Max",
                "role": "cleaner"
            }
        )
        assert response.status_code == 201
        user = db.query(User).filter(User.email == "mucker@example.com").one()
        assert user.cleaner_profile is not None
        assert user.cleaner_profile.service_areas == []

    def test_register_duplicate_email(self, client: TestClient, client_user: User):
        response = client.post(
            "/api/v1/auth/register",
            json={"email": client_user.email, "password": "whatever1", "name": "Dup"}
        )
        assert response.status_code == 409
        error = response.json()["error"]
        assert error["code"] == "EMAIL_EXISTS"
        assert "timestamp" in error

    def test_register_admin_role_rejected(self, client: TestClient):
        response = client.post(
            "/api/v1/auth/register",
            json={"email": "sneaky@example.com", "password": "password1", "name": "S", "role": "admin"}
        )
        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "VALIDATION_ERROR"

    def test_register_short_password(self, client: TestClient):
        response = client.post(
            "/api/v1/auth/register",
            json={"email": "short@example.com", "password": "abc", "name": "Short"}
        )
        assert response.status_code == 422

    def test_login_success(self, client: TestClient, admin_user: User):
        response = client.post(
            "/api/v1/auth/login",
            json={"email": admin_user.email, "password": PASSWORD}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["token_type"] == "bearer"
        assert data["expires_in"] > 0
        assert "refresh_token" in data
        assert data["user"]["email"] == admin_user.email

    def test_login_invalid_password(self, client: TestClient, admin_user: User):
        response = client.post(
            "/api/v1/auth/login",
            json={"email": admin_user.email, "password": "wrongpassword"}
        )
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "INVALID_CREDENTIALS"

    def test_login_user_not_found(self, client: TestClient):
        response = client.post(
            "/api/v1/auth/login",
            json={"email": "nobody@example.com", "password": "password123"}
        )
        assert response.status_code == 401

    def test_login_disabled_account(self, client: TestClient, client_user: User, db):
        client_user.is_active = False
        db.commit()
        response = client.post(
            "/api/v1/auth/login",
            json={"email": client_user.email, "password": PASSWORD}
        )
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "ACCOUNT_DISABLED"

    def test_refresh_tokens(self, client: TestClient, client_user: User):
        login = client.post(
            "/api/v1/auth/login",
            json={"email": client_user.email, "password": PASSWORD}
        ).json()

        response = client.post(
            "/api/v1/auth/refresh",
            json={"refresh_token": login["refresh_token"]}
        )
        assert response.status_code == 200
        assert response.json()["user"]["id"] == client_user.id

    def test_access_token_cannot_refresh(self, client: TestClient, client_user: User):
        login = client.post(
            "/api/v1/auth/login",
            json={"email": client_user.email, "password": PASSWORD}
        ).json()

        response = client.post(
            "/api/v1/auth/refresh",
            json={"refresh_token": login["access_token"]}
        )
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "TOKEN_INVALID"

    def test_get_current_user(self, client: TestClient, cleaner_headers: dict, cleaner_user: User):
        response = client.get("/api/v1/auth/me", headers=cleaner_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["user"]["email"] == cleaner_user.email
        assert data["user"]["role"] == "cleaner"

    def test_get_current_user_no_token(self, client: TestClient):
        response = client.get("/api/v1/auth/me")
        assert response.status_code == 401

    def test_garbage_token(self, client: TestClient):
        response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "TOKEN_INVALID"

    def test_disabled_user_token_rejected(self, client: TestClient, client_user: User, client_headers: dict, db):
        client_user.is_active = False
        db.commit()
        response = client.get("/api/v1/auth/me", headers=client_headers)
        assert response.status_code == 403

    def test_change_password(self, client: TestClient, client_user: User, client_headers: dict):
        response = client.put(
            "/api/v1/auth/change-password",
            headers=client_headers,
            json={"current_password": PASSWORD, "new_password": "newsecret99"}
        )
        assert response.status_code == 200

        login = client.post(
            "/api/v1/auth/login",
            json={"email": client_user.email, "password": "newsecret99"}
        )
        assert login.status_code == 200

    def test_change_password_wrong_current(self, client: TestClient, client_headers: dict):
        response = client.put(
            "/api/v1/auth/change-password",
            headers=client_headers,
            json={"current_password": "not-it", "new_password": "newsecret99"}
        )
        assert response.status_code == 401


class TestUserEndpoints:
    """Tests for admin user management endpoints."""

    def test_list_users(self, client: TestClient, admin_headers: dict, client_user: User, cleaner_user: User):
        response = client.get("/api/v1/users", headers=admin_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["total"] == 3

    def test_list_users_filtered(self, client: TestClient, admin_headers: dict, client_user: User, cleaner_user: User):
        response = client.get("/api/v1/users?role=cleaner", headers=admin_headers)
        assert [u["email"] for u in response.json()["users"]] == [cleaner_user.email]

        response = client.get("/api/v1/users?search=fiona", headers=admin_headers)
        assert [u["email"] for u in response.json()["users"]] == [client_user.email]

    def test_list_users_as_client_fails(self, client: TestClient, client_headers: dict):
        response = client.get("/api/v1/users", headers=client_headers)
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "ADMIN_REQUIRED"

    def test_get_unknown_user(self, client: TestClient, admin_headers: dict):
        response = client.get("/api/v1/users/does-not-exist", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "USER_NOT_FOUND"

    def test_deactivate_and_reactivate(self, client: TestClient, admin_headers: dict, cleaner_user: User):
        response = client.patch(
            f"/api/v1/users/{cleaner_user.id}/status",
            headers=admin_headers,
            json={"is_active": False}
        )
        assert response.status_code == 200
        assert response.json()["user"]["is_active"] is False

        response = client.patch(
            f"/api/v1/users/{cleaner_user.id}/status",
            headers=admin_headers,
            json={"is_active": True}
        )
        assert response.json()["user"]["is_active"] is True

    def test_admin_cannot_deactivate_self(self, client: TestClient, admin_headers: dict, admin_user: User):
        response = client.patch(
            f"/api/v1/users/{admin_user.id}/status",
            headers=admin_headers,
            json={"is_active": False}
        )
        assert response.status_code == 403


class TestAdminStats:

    def test_stats(
        self,
        client: TestClient,
        market,
        admin_headers: dict,
        client_headers: dict,
        cleaner_headers: dict,
    ):
        market.create_job(client_headers)
        market.assigned_job(client_headers, cleaner_headers)

        response = client.get("/api/v1/admin/stats", headers=admin_headers)
        assert response.status_code == 200
        stats = response.json()["stats"]
        assert stats["users_by_role"] == {"client": 1, "cleaner": 1, "admin": 1}
        assert stats["jobs_by_status"]["open"] == 1
        assert stats["jobs_by_status"]["pending"] == 1
        assert stats["jobs_by_status"]["paid"] == 0
        assert stats["total_jobs"] == 2
        assert stats["open_disputes"] == 0
        assert stats["gross_revenue"] == "0.00"

    def test_stats_requires_admin(self, client: TestClient, cleaner_headers: dict):
        response = client.get("/api/v1/admin/stats", headers=cleaner_headers)
        assert response.status_code == 403
