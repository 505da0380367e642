"""
Unit tests for the notification hub and webhook signature verification.
"""

import pytest
from unittest.mock import AsyncMock

from claimflow.domain.models.base import ValidationError
from claimflow.infrastructure.realtime.hub import NotificationHub
from claimflow.infrastructure.webhooks import (
    WebhookSignatureError, compute_signature, verify_signature
)


class TestNotificationHub:
    """Test cases for NotificationHub."""

    @pytest.mark.asyncio
    async def test_emit_reaches_only_the_user(self):
        hub = NotificationHub()
        alice, bob = AsyncMock(), AsyncMock()
        await hub.join(alice, "alice")
        await hub.join(bob, "bob")

        delivered = await hub.emit_to_user("alice", "notification:new", {"id": "n1"})

        assert delivered == 1
        alice.send_json.assert_awaited_once_with({"type": "notification:new", "data": {"id": "n1"}})
        bob.send_json.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_multiple_connections_per_user(self):
        hub = NotificationHub()
        tab1, tab2 = AsyncMock(), AsyncMock()
        await hub.join(tab1, "alice")
        await hub.join(tab2, "alice")

        assert hub.connection_count("alice") == 2
        assert await hub.emit_to_user("alice", "ping", None) == 2

        await hub.leave(tab1, "alice")
        assert hub.connection_count("alice") == 1

    @pytest.mark.asyncio
    async def test_dead_connections_are_dropped(self):
        """Test a socket that fails to send is removed from its room."""
        hub = NotificationHub()
        dead = AsyncMock()
        dead.send_json.side_effect = RuntimeError("closed")
        await hub.join(dead, "alice")

        assert await hub.emit_to_user("alice", "notification:new", {}) == 0
        assert hub.connection_count("alice") == 0

    @pytest.mark.asyncio
    async def test_broadcast(self):
        hub = NotificationHub()
        alice, bob = AsyncMock(), AsyncMock()
        await hub.join(alice, "alice")
        await hub.join(bob, "bob")

        assert await hub.broadcast("maintenance", {"at": "now"}) == 2

    @pytest.mark.asyncio
    async def test_emit_without_connections(self):
        assert await NotificationHub().emit_to_user("nobody", "x", {}) == 0


class TestWebhookSignature:
    """Test cases for payment webhook signature checks."""

    SECRET = "whsec_unit"
    BODY = b'{"type":"payment_intent.succeeded"}'
    NOW = 1_700_000_000

    def header(self, timestamp=None, body=None, secret=None):
        timestamp = self.NOW if timestamp is None else timestamp
        signature = compute_signature(body or self.BODY, timestamp, secret or self.SECRET)
        return f"t={timestamp},v1={signature}"

    def test_valid_signature(self):
        assert verify_signature(self.BODY, self.header(), self.SECRET, now=self.NOW) == self.NOW

    def test_any_matching_v1_is_accepted(self):
        """Test rotated secrets: one of several v1 entries may match."""
        header = f"{self.header()},v1={'0' * 64}"

        assert verify_signature(self.BODY, header, self.SECRET, now=self.NOW) == self.NOW

    @pytest.mark.parametrize("header, message", [
        (None, "Missing Payment-Signature header"),
        ("", "Missing Payment-Signature header"),
        ("v1=abc", "Malformed signature header"),
        ("t=soon,v1=abc", "Malformed signature header"),
        ("t=1700000000", "No v1 signature in header"),
        ("t=1700000000,v1=\u00e9" + "0" * 63, "Malformed signature header"),
    ])
    def test_bad_headers(self, header, message):
        with pytest.raises(WebhookSignatureError) as exc_info:
            verify_signature(self.BODY, header, self.SECRET, now=self.NOW)

        assert exc_info.value.message == message

    def test_tampered_body(self):
        with pytest.raises(WebhookSignatureError, match="Invalid signature"):
            verify_signature(b'{"type":"refund"}', self.header(), self.SECRET, now=self.NOW)

    def test_wrong_secret(self):
        with pytest.raises(WebhookSignatureError, match="Invalid signature"):
            verify_signature(self.BODY, self.header(secret="other"), self.SECRET, now=self.NOW)

    def test_stale_timestamp(self):
        """Test replays outside the tolerance window are rejected."""
        header = self.header(timestamp=self.NOW - 301)

        with pytest.raises(WebhookSignatureError, match="tolerance"):
            verify_signature(self.BODY, header, self.SECRET, tolerance_seconds=300, now=self.NOW)

    def test_is_a_validation_error(self):
        """Test signature failures surface as 400 validation errors."""
        assert issubclass(WebhookSignatureError, ValidationError)
