"""
Payment webhook signatures.

Header format: ``Payment-Signature: t=<unix seconds>,v1=<hex>`` where the
hex digest is HMAC-SHA256 of ``"<t>.<raw body>"`` under the shared secret.
"""

import hashlib
import hmac
import time
from typing import Dict, List, Optional, Tuple

from claimflow.domain.models.base import ValidationError

SIGNATURE_HEADER = "Payment-Signature"


class WebhookSignatureError(ValidationError):
    """Raised when a webhook signature is missing, malformed, stale or wrong."""

    def __init__(self, message: str):
        super().__init__(message, "signature")


def compute_signature(payload: bytes, timestamp: int, secret: str) -> str:
    signed = str(timestamp).encode() + b"." + payload
    return hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()


def _parse_header(header: str) -> Tuple[int, List[str]]:
    parts: Dict[str, List[str]] = {}
    for item in header.split(","):
        key, sep, value = item.strip().partition("=")
        if sep:
            parts.setdefault(key, []).append(value)

    try:
        timestamp = int(parts["t"][0])
    except (KeyError, ValueError):
        raise WebhookSignatureError("Malformed signature header")

    signatures = parts.get("v1", [])
    if not signatures:
        raise WebhookSignatureError("No v1 signature in header")
    if not all(candidate.isascii() for candidate in signatures):
        raise WebhookSignatureError("Malformed signature header")
    return timestamp, signatures


def verify_signature(
    payload: bytes,
    header: Optional[str],
    secret: str,
    tolerance_seconds: int = 300,
    now: Optional[float] = None
) -> int:
    """
    Verify a raw webhook body against its signature header.

    Returns:
        The signed timestamp

    Raises:
        WebhookSignatureError: Missing header, malformed header, timestamp
            outside the tolerance or no matching signature
    """
    if not header:
        raise WebhookSignatureError(f"Missing {SIGNATURE_HEADER} header")

    timestamp, signatures = _parse_header(header)
    current = int(now if now is not None else time.time())
    if abs(current - timestamp) > tolerance_seconds:
        raise WebhookSignatureError("Signature timestamp outside the tolerance window")

    expected = compute_signature(payload, timestamp, secret)
    if not any(hmac.compare_digest(expected, candidate) for candidate in signatures):
        raise WebhookSignatureError("Invalid signature")
    return timestamp
