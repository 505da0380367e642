"""
Integration tests for the websocket channel, payment webhooks and app-level endpoints.
"""

import json
import time

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from claimflow.infrastructure.container import ServiceContainer
from claimflow.infrastructure.web.routers.realtime import AUTH_FAILED_CLOSE_CODE, RATE_LIMITED_CLOSE_CODE
from claimflow.infrastructure.webhooks import SIGNATURE_HEADER, compute_signature
from claimflow.main import create_application
from tests.helpers import API, WEBHOOK_SECRET, auth_headers, create_claim, create_member, make_settings


WS = f"{API}/ws"
WEBHOOK = f"{API}/webhooks/payments"


class TestRealtimeChannel:
    """Test cases for the notification websocket."""

    def test_auth_and_ping(self, client, admin):
        with client.websocket_connect(WS) as ws:
            ws.send_json({"type": "auth", "token": admin["token"]})
            assert ws.receive_json() == {"type": "auth:success", "data": {"userId": admin["user"]["id"]}}

            ws.send_json({"type": "ping"})
            assert ws.receive_json() == {"type": "pong"}

    @pytest.mark.parametrize("message, error", [
        ({"type": "auth", "token": "garbage"}, "Invalid token"),
        ({"type": "auth"}, "No token provided"),
        ({"type": "hello"}, "Authentication required"),
    ])
    def test_auth_failure_closes_socket(self, client, message, error):
        with client.websocket_connect(WS) as ws:
            ws.send_json(message)
            assert ws.receive_json() == {"type": "auth:error", "data": {"message": error}}

            with pytest.raises(WebSocketDisconnect) as exc_info:
                ws.receive_json()

        assert exc_info.value.code == AUTH_FAILED_CLOSE_CODE

    def test_revoked_token_is_refused(self, client, admin):
        client.post(f"{API}/auth/logout", headers=auth_headers(admin["token"]))

        with client.websocket_connect(WS) as ws:
            ws.send_json({"type": "auth", "token": admin["token"]})
            assert ws.receive_json()["type"] == "auth:error"

    def test_assignment_is_pushed(self, client, container, admin):
        """Test the assignee's open socket receives the new notification."""
        biller = create_member(client, admin["token"], "biller@clinic.com")
        claim = create_claim(client, admin["token"])

        with client.websocket_connect(WS) as ws:
            ws.send_json({"type": "auth", "token": biller["token"]})
            assert ws.receive_json()["type"] == "auth:success"
            assert container.hub.connection_count(biller["user"]["id"]) == 1

            client.post(
                f"{API}/claims/{claim['id']}/assign",
                headers=auth_headers(admin["token"]),
                json={"userId": biller["user"]["id"]},
            )

            event = ws.receive_json()

        assert event["type"] == "notification:new"
        assert event["data"]["title"] == "New Claim Assigned"
        assert event["data"]["relatedClaimId"] == claim["id"]
        assert event["data"]["isRead"] is False


def signed_headers(body: bytes, secret: str = WEBHOOK_SECRET, timestamp: int = None):
    timestamp = int(time.time()) if timestamp is None else timestamp
    signature = compute_signature(body, timestamp, secret)
    return {SIGNATURE_HEADER: f"t={timestamp},v1={signature}", "Content-Type": "application/json"}


class TestPaymentWebhook:
    """Test cases for signed payment webhooks."""

    BODY = json.dumps({"type": "payment_intent.succeeded", "data": {"object": {"id": "pi_123"}}}).encode()

    def test_valid_signature(self, client):
        response = client.post(WEBHOOK, content=self.BODY, headers=signed_headers(self.BODY))

        assert response.status_code == 200
        assert response.json() == {"received": True}

    def test_missing_signature(self, client):
        response = client.post(WEBHOOK, content=self.BODY, headers={"Content-Type": "application/json"})

        assert response.status_code == 400
        assert response.json()["message"] == "Missing Payment-Signature header"

    def test_tampered_body(self, client):
        headers = signed_headers(self.BODY)

        response = client.post(WEBHOOK, content=self.BODY.replace(b"pi_123", b"pi_999"), headers=headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid signature"

    def test_stale_signature(self, client):
        headers = signed_headers(self.BODY, timestamp=int(time.time()) - 3600)

        response = client.post(WEBHOOK, content=self.BODY, headers=headers)

        assert response.status_code == 400

    def test_signature_checked_before_parsing(self, client):
        """Test an unsigned malformed body reports the signature, not the JSON error."""
        response = client.post(WEBHOOK, content=b"{not json", headers={SIGNATURE_HEADER: "t=1,v1=00"})

        assert response.status_code == 400
        assert response.json()["message"] != "Webhook body is not valid JSON"

    def test_signed_invalid_json(self, client):
        body = b"{not json"

        response = client.post(WEBHOOK, content=body, headers=signed_headers(body))

        assert response.status_code == 400
        assert response.json()["message"] == "Webhook body is not valid JSON"

    @pytest.mark.parametrize("event, message", [
        ({"type": "payment_intent.succeeded", "data": "oops"}, "Webhook data must be a JSON object"),
        ({"type": "payment_intent.succeeded", "data": {"object": ["pi_123"]}}, "Webhook data.object must be a JSON object"),
    ])
    def test_signed_event_with_wrong_shape(self, client, event, message):
        """Test a verified body with non-object data is a 400, not a server error."""
        body = json.dumps(event).encode()

        response = client.post(WEBHOOK, content=body, headers=signed_headers(body))

        assert response.status_code == 400
        assert response.json()["message"] == message

    def test_unconfigured_secret(self, tmp_path):
        app = create_application(container=ServiceContainer(make_settings(tmp_path, payment_webhook_secret=None)))

        with TestClient(app) as client:
            response = client.post(WEBHOOK, content=self.BODY, headers=signed_headers(self.BODY))

        assert response.status_code == 503


class TestApplication:
    """Test cases for app-level endpoints and the error envelope."""

    def test_root(self, client):
        data = client.get("/").json()["data"]

        assert data["name"] == "ClaimFlow"
        assert data["health"] == f"{API}/health"

    def test_health(self, client):
        response = client.get(f"{API}/health")

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "healthy"
        assert response.json()["data"]["keyValueStore"] == "up"

    def test_unknown_route(self, client):
        response = client.get(f"{API}/nothing-here")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Not Found"}

    def test_api_rate_limit(self, tmp_path):
        app = create_application(container=ServiceContainer(make_settings(tmp_path, rate_limit_api_requests=1)))

        with TestClient(app) as client:
            first = client.get(f"{API}/claims")
            second = client.get(f"{API}/claims")

        assert first.status_code == 401
        assert second.status_code == 429
        assert second.json()["success"] is False
        assert "Retry-After" in second.headers

    def test_store_outage_fails_open(self, tmp_path):
        """Test a broken key-value store degrades health without blocking requests."""
        container = ServiceContainer(make_settings(tmp_path))

        async def down(*args, **kwargs):
            raise ConnectionError("store down")

        container.store.incr_with_expiry = down
        container.store.ping = down
        app = create_application(container=container)

        with TestClient(app) as client:
            assert client.get(f"{API}/health").json()["data"]["status"] == "degraded"
            assert client.get(f"{API}/claims").status_code == 401


class TestApiRateLimitCoverage:
    """Test cases for the api limit applying to every route."""

    @pytest.mark.parametrize("method, path, kwargs", [
        ("get", f"{API}/auth/me", {}),
        ("post", f"{API}/auth/logout", {}),
        ("post", f"{API}/auth/reset-password/not-a-token", {"json": {"password": "N3wSecret!pass"}}),
        ("post", WEBHOOK, {"content": b"{}"}),
        ("get", f"{API}/health", {}),
        ("get", "/", {}),
    ])
    def test_route_is_limited(self, tmp_path, method, path, kwargs):
        app = create_application(container=ServiceContainer(make_settings(tmp_path, rate_limit_api_requests=3)))

        with TestClient(app) as client:
            statuses = [getattr(client, method)(path, **kwargs).status_code for _ in range(4)]

        assert 429 not in statuses[:3]
        assert statuses[3] == 429

    def test_websocket_handshake_is_limited(self, tmp_path):
        app = create_application(container=ServiceContainer(make_settings(tmp_path, rate_limit_api_requests=2)))

        with TestClient(app) as client:
            client.get(f"{API}/health")
            client.get(f"{API}/health")

            with pytest.raises(WebSocketDisconnect) as exc_info:
                with client.websocket_connect(WS):
                    pass

        assert exc_info.value.code == RATE_LIMITED_CLOSE_CODE
