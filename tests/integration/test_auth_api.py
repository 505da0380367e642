"""
Integration tests for the authentication endpoints.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from claimflow.application.use_cases.auth_use_cases import ForgotPasswordUseCase
from claimflow.infrastructure.container import ServiceContainer
from claimflow.infrastructure.db.models import UserSessionModel
from claimflow.main import create_application
from tests.helpers import TEST_PASSWORD, auth_headers, make_settings


API = "/api/v1/auth"


class TestRegisterAndLogin:
    """Test cases for registration and login."""

    def test_register_creates_admin_and_sets_cookies(self, client):
        response = client.post(f"{API}/register", json={
            "email": "Owner@Clinic.com",
            "password": TEST_PASSWORD,
            "firstName": "Olga",
            "lastName": "Owner",
            "organizationName": "Northside Clinic",
        })

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["user"]["role"] == "admin"
        assert body["data"]["user"]["email"] == "owner@clinic.com"
        assert body["data"]["organization"]["name"] == "Northside Clinic"
        assert "passwordHash" not in body["data"]["user"]
        assert body["data"]["token"] and body["data"]["refreshToken"]
        assert response.cookies.get("token") == body["data"]["token"]
        assert response.cookies.get("refreshToken") == body["data"]["refreshToken"]

    def test_register_duplicate_email(self, client, admin):
        response = client.post(f"{API}/register", json={
            "email": "admin@clinic.com",
            "password": TEST_PASSWORD,
            "firstName": "Ada",
            "lastName": "Again",
            "organizationName": "Other",
        })

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "Email already in use",
            "errors": [{"field": "email", "message": "Email already in use"}],
        }

    def test_register_validation(self, client):
        """Test weak passwords fail request validation with field errors."""
        response = client.post(f"{API}/register", json={
            "email": "not-an-email",
            "password": "short",
            "firstName": "A",
            "lastName": "B",
            "organizationName": "C",
        })

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Validation failed"
        fields = {error["field"] for error in body["errors"]}
        assert {"email", "password"} <= fields

    def test_login(self, client, admin):
        response = client.post(f"{API}/login", json={"email": "admin@clinic.com", "password": TEST_PASSWORD})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["id"] == admin["user"]["id"]
        assert data["user"]["lastLoginAt"] is not None

    @pytest.mark.parametrize("email, password", [
        ("admin@clinic.com", "Wrong-pass1"),
        ("nobody@clinic.com", TEST_PASSWORD),
    ])
    def test_login_failures_are_indistinguishable(self, client, admin, email, password):
        response = client.post(f"{API}/login", json={"email": email, "password": password})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    def test_me(self, client, admin):
        response = client.get(f"{API}/me", headers=auth_headers(admin["token"]))

        assert response.status_code == 200
        assert response.json()["data"]["email"] == "admin@clinic.com"

    def test_me_with_cookie(self, client, admin):
        """Test the access token cookie authenticates when no header is sent."""
        client.cookies.set("token", admin["token"])

        assert client.get(f"{API}/me").status_code == 200

    def test_header_wins_over_cookie(self, client, admin):
        """Test a bad Bearer header is not rescued by a valid cookie."""
        client.cookies.set("token", admin["token"])

        response = client.get(f"{API}/me", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token"

    def test_valid_header_ignores_revoked_cookie(self, client, admin):
        second = client.post(f"{API}/login", json={
            "email": admin["user"]["email"],
            "password": TEST_PASSWORD,
        }).json()["data"]
        client.cookies.clear()
        client.post(f"{API}/logout", headers=auth_headers(admin["token"]))
        client.cookies.set("token", admin["token"])

        response = client.get(f"{API}/me", headers=auth_headers(second["token"]))

        assert response.status_code == 200
        assert response.json()["data"]["email"] == admin["user"]["email"]

    @pytest.mark.parametrize("headers, message", [
        ({}, "No token provided"),
        ({"Authorization": "Bearer garbage"}, "Invalid token"),
    ])
    def test_me_unauthenticated(self, client, headers, message):
        response = client.get(f"{API}/me", headers=headers)

        assert response.status_code == 401
        assert response.json()["message"] == message

    def test_unauthorized_clears_cookies(self, client):
        response = client.get(f"{API}/me", headers={"Authorization": "Bearer garbage"})

        set_cookie = " ".join(response.headers.get_list("set-cookie"))
        assert "token=" in set_cookie
        assert "refreshToken=" in set_cookie


class TestSessions:
    """Test cases for refresh rotation, logout and session expiry."""

    def test_refresh_rotates_tokens(self, client, admin):
        response = client.post(f"{API}/refresh", json={"refreshToken": admin["refreshToken"]})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["refreshToken"] != admin["refreshToken"]
        assert data["token"] != admin["token"]
        client.cookies.clear()

        reused = client.post(f"{API}/refresh", json={"refreshToken": admin["refreshToken"]})
        assert reused.status_code == 401
        assert reused.json()["message"] == "Invalid refresh token"

    def test_refresh_cookie_wins_over_body(self, client, admin):
        client.cookies.set("refreshToken", admin["refreshToken"])

        response = client.post(f"{API}/refresh", json={"refreshToken": "bogus"})

        assert response.status_code == 200

    def test_refresh_without_token(self, client):
        response = client.post(f"{API}/refresh")

        assert response.status_code == 401
        assert response.json()["message"] == "Refresh token not found"

    def test_logout_revokes_access_token(self, client, admin):
        headers = auth_headers(admin["token"])

        response = client.post(f"{API}/logout", headers=headers, json={"refreshToken": admin["refreshToken"]})
        assert response.status_code == 200
        assert response.json()["message"] == "Logged out successfully"

        after = client.get(f"{API}/me", headers=headers)
        assert after.status_code == 401
        assert after.json()["message"] == "Token is invalid"

        refreshed = client.post(f"{API}/refresh", json={"refreshToken": admin["refreshToken"]})
        assert refreshed.status_code == 401

    def test_logout_without_tokens_still_succeeds(self, client):
        assert client.post(f"{API}/logout").status_code == 200

    def test_expired_session_rejects_valid_token(self, client, container, admin):
        """Test a signed token is refused once its session row is gone."""
        with container.database.session_scope() as session:
            session.query(UserSessionModel).delete()

        response = client.get(f"{API}/me", headers=auth_headers(admin["token"]))

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid session"


class TestPasswordReset:
    """Test cases for the forgot/reset password flow."""

    def test_forgot_password_is_generic(self, client, admin):
        known = client.post(f"{API}/forgot-password", json={"email": "admin@clinic.com"})
        unknown = client.post(f"{API}/forgot-password", json={"email": "ghost@clinic.com"})

        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json()

    def test_reset_password(self, client, container, admin):
        db = container.database.SessionLocal()
        try:
            token = asyncio.run(ForgotPasswordUseCase(db).execute("admin@clinic.com"))
        finally:
            db.close()

        response = client.post(f"{API}/reset-password/{token}", json={"password": "N3w-password"})
        assert response.status_code == 200
        assert response.json()["message"] == "Password has been reset successfully."

        assert client.post(f"{API}/login", json={
            "email": "admin@clinic.com", "password": "N3w-password"
        }).status_code == 200

        again = client.post(f"{API}/reset-password/{token}", json={"password": "An0ther-pass"})
        assert again.status_code == 400
        assert again.json()["message"] == "Token is invalid or has expired"


class TestAuthRateLimit:
    """Test cases for the authentication rate limit."""

    def test_login_is_limited(self, tmp_path):
        settings = make_settings(tmp_path, rate_limit_auth_requests=2)
        app = create_application(container=ServiceContainer(settings))

        with TestClient(app) as client:
            body = {"email": "someone@clinic.com", "password": "Wrong-pass1"}
            statuses = [client.post(f"{API}/login", json=body).status_code for _ in range(3)]
            limited = client.post(f"{API}/login", json=body)

        assert statuses == [401, 401, 429]
        assert limited.json()["message"] == "Too many login attempts, please try again later."
        assert limited.headers["X-RateLimit-Limit"] == "2"
        assert limited.headers["X-RateLimit-Remaining"] == "0"
        assert int(limited.headers["Retry-After"]) > 0
