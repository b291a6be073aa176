"""Security utilities: webhook signature verification and session tokens."""

import base64
import hashlib
import hmac
import json
import time
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import jwt

from imprint.core.config import get_settings

settings = get_settings()

# ── Identity-provider webhooks (Svix signing scheme) ─────────

WEBHOOK_ID_HEADER = "svix-id"
WEBHOOK_TIMESTAMP_HEADER = "svix-timestamp"
WEBHOOK_SIGNATURE_HEADER = "svix-signature"
WEBHOOK_TOLERANCE_SECONDS = 5 * 60

_SECRET_PREFIX = "whsec_"


class WebhookVerificationError(Exception):
    """Webhook headers missing, stale, or signed with a different secret."""


def _secret_bytes(secret: str) -> bytes:
    if secret.startswith(_SECRET_PREFIX):
        secret = secret[len(_SECRET_PREFIX):]
    return base64.b64decode(secret)


def sign_webhook(secret: str, msg_id: str, timestamp: int, body: bytes) -> str:
    """Return the ``v1,<base64>`` signature for one delivery."""
    signed = f"{msg_id}.{timestamp}.".encode() + body
    digest = hmac.new(_secret_bytes(secret), signed, hashlib.sha256).digest()
    return "v1," + base64.b64encode(digest).decode()


def verify_webhook(
    secret: str,
    headers: Mapping[str, str],
    body: bytes,
    now: float | None = None,
) -> dict[str, Any]:
    """Verify a delivery and return its decoded JSON payload.

    The signature header may carry several space-separated entries (one per
    active signing secret during rotation); any matching ``v1`` entry passes.
    """
    msg_id = headers.get(WEBHOOK_ID_HEADER)
    timestamp = headers.get(WEBHOOK_TIMESTAMP_HEADER)
    signature_header = headers.get(WEBHOOK_SIGNATURE_HEADER)
    if not msg_id or not timestamp or not signature_header:
        raise WebhookVerificationError("Missing webhook signature headers")

    try:
        sent_at = int(timestamp)
    except ValueError:
        raise WebhookVerificationError("Invalid webhook timestamp") from None

    current = time.time() if now is None else now
    if abs(current - sent_at) > WEBHOOK_TOLERANCE_SECONDS:
        raise WebhookVerificationError("Webhook timestamp outside tolerance")

    expected = sign_webhook(secret, msg_id, sent_at, body)
    for candidate in signature_header.split():
        if candidate.startswith("v1,") and hmac.compare_digest(candidate, expected):
            break
    else:
        raise WebhookVerificationError("Invalid webhook signature")

    try:
        payload = json.loads(body)
    except ValueError:
        raise WebhookVerificationError("Webhook body is not valid JSON") from None
    if not isinstance(payload, dict):
        raise WebhookVerificationError("Webhook body must be a JSON object")
    return payload


# ── Session tokens (JWT) ─────────────────────────────────────

def _session_key() -> str:
    if not settings.session_token_key:
        raise RuntimeError("SESSION_TOKEN_KEY is not configured")
    return settings.session_token_key


def decode_session_token(token: str) -> dict:
    """Decode and verify a session token. Raises jose.JWTError on failure."""
    return jwt.decode(
        token,
        _session_key(),
        algorithms=[settings.session_token_algorithm],
        options={"verify_aud": False},
    )


def create_session_token(
    subject: str,
    org_id: str,
    roles: list[str],
    expires_delta: timedelta = timedelta(minutes=15),
) -> str:
    """Mint a session token with the configured key.

    Only usable with a symmetric algorithm; local development and tests use
    it in place of the identity provider.
    """
    payload = {
        "sub": subject,
        "org_id": org_id,
        "roles": roles,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(payload, _session_key(), algorithm=settings.session_token_algorithm)
