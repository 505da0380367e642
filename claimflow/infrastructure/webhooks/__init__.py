"""
Inbound webhook verification.
"""

from .signature import (
    SIGNATURE_HEADER,
    WebhookSignatureError,
    compute_signature,
    verify_signature,
)

__all__ = [
    "SIGNATURE_HEADER",
    "WebhookSignatureError",
    "compute_signature",
    "verify_signature",
]
