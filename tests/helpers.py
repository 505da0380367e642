"""
Test helpers shared by the integration suites.
"""

from typing import Any, Dict

from fastapi.testclient import TestClient

from claimflow.config import Settings

API = "/api/v1"
TEST_PASSWORD = "Sup3rSecret!"
WEBHOOK_SECRET = "whsec_test_secret"


def make_settings(tmp_path, **overrides) -> Settings:
    values = dict(
        environment="testing",
        debug=False,
        database_url="sqlite:///:memory:",
        redis_url=None,
        jwt_secret_key="test-secret-key",
        bcrypt_rounds=4,
        job_worker_enabled=False,
        rate_limit_auth_requests=100,
        rate_limit_api_requests=1000,
        upload_dir=str(tmp_path / "uploads"),
        payment_webhook_secret=WEBHOOK_SECRET,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


def auth_headers(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def register(client: TestClient, email: str = "admin@clinic.com", organization: str = "Clinic") -> Dict[str, Any]:
    response = client.post(f"{API}/auth/register", json={
        "email": email,
        "password": TEST_PASSWORD,
        "firstName": "Ada",
        "lastName": "Admin",
        "organizationName": organization,
    })
    assert response.status_code == 201, response.text
    # Tests pass tokens explicitly; drop the cookies set by registration
    client.cookies.clear()
    return response.json()["data"]


def create_member(client: TestClient, admin_token: str, email: str, role: str = "biller") -> Dict[str, Any]:
    """Create a user through the admin API and sign them in."""
    response = client.post(f"{API}/users", headers=auth_headers(admin_token), json={
        "email": email,
        "firstName": "Bob",
        "lastName": "Biller",
        "role": role,
    })
    assert response.status_code == 201, response.text
    created = response.json()["data"]

    login = client.post(f"{API}/auth/login", json={
        "email": email,
        "password": created["temporaryPassword"],
    })
    assert login.status_code == 200, login.text
    client.cookies.clear()
    return login.json()["data"]


def create_claim(client: TestClient, token: str, **overrides) -> Dict[str, Any]:
    body = {
        "claimNumber": "CLM-1001",
        "patientName": "Jane Patient",
        "payerId": "PAYER-1",
        "payerName": "Acme Health",
        "dateOfService": "2026-09-01",
        "totalCharge": 250.5,
        "cptCodes": ["99213"],
        "denialCode": "co-16",
        "denialReason": "Missing documentation",
    }
    body.update(overrides)
    response = client.post(f"{API}/claims", headers=auth_headers(token), json=body)
    assert response.status_code == 201, response.text
    return response.json()["data"]
