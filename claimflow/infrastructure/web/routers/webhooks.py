"""
Inbound webhooks from the payment processor.
The signature is checked against the raw body before anything is parsed.
"""

import json
import logging
from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends, Request

from claimflow.domain.models.base import ValidationError, ServiceUnavailableError
from claimflow.infrastructure.container import ServiceContainer, get_container
from claimflow.infrastructure.webhooks.signature import SIGNATURE_HEADER, verify_signature

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/payments")
async def payment_webhook(
    request: Request,
    container: Annotated[ServiceContainer, Depends(get_container)]
) -> Dict[str, Any]:
    """Receive a signed payment event."""
    settings = container.settings
    if not settings.payment_webhook_secret:
        raise ServiceUnavailableError("Payment webhooks are not configured")
    payload = await request.body()

    verify_signature(
        payload,
        request.headers.get(SIGNATURE_HEADER),
        settings.payment_webhook_secret,
        tolerance_seconds=settings.payment_webhook_tolerance_seconds,
    )

    try:
        event = json.loads(payload)
    except ValueError:
        raise ValidationError("Webhook body is not valid JSON", "body")
    if not isinstance(event, dict):
        raise ValidationError("Webhook body must be a JSON object", "body")

    event_type = event.get("type")
    data = event.get("data") or {}
    if not isinstance(data, dict):
        raise ValidationError("Webhook data must be a JSON object", "data")
    event_object = data.get("object") or {}
    if not isinstance(event_object, dict):
        raise ValidationError("Webhook data.object must be a JSON object", "data.object")
    if event_type == "payment_intent.succeeded":
        logger.info(f"Payment intent succeeded: {event_object.get('id')}")
    elif event_type == "payment_intent.payment_failed":
        logger.warning(f"Payment intent failed: {event_object.get('id')}")
    else:
        logger.info(f"Unhandled webhook event type {event_type}")

    return {"received": True}
