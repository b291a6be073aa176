"""Identity-provider webhook receiver."""

import logging

from fastapi import APIRouter, HTTPException, Request, status

from imprint.core.config import get_settings
from imprint.core.errors import ValidationError
from imprint.core.security import WebhookVerificationError, verify_webhook
from imprint.services.provisioning import handle_identity_event

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/identity")
async def receive_identity_event(request: Request) -> dict:
    """Verify and apply an organization/user lifecycle event.

    Returns 400 for unverifiable or malformed deliveries and 500 when
    processing fails so that the provider retries.
    """
    secret = get_settings().identity_provider_webhook_secret
    if not secret:
        logger.error("Identity webhook received but no signing secret is configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Webhook secret not configured",
        )

    body = await request.body()
    try:
        event = verify_webhook(secret, request.headers, body)
    except WebhookVerificationError as exc:
        logger.warning("Rejected identity webhook: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    event_type = event.get("type")
    try:
        result = await handle_identity_event(event)
    except ValidationError as exc:
        logger.warning("Malformed identity webhook %s: %s", event_type, exc.message)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.message,
        ) from exc
    except Exception as exc:
        logger.exception("Failed to process identity webhook %s", event_type)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Webhook processing failed",
        ) from exc

    response: dict = {"received": True, "type": event_type}
    if result is not None:
        response["tenant_id"] = str(result.tenant_id)
        response["created"] = result.created
    return response
