"""Transactional outbox: record side effects next to the data they describe.

Events are appended on the caller's session, so they commit or roll back
together with the tenant-scoped writes that produced them. Delivery happens
later in ``imprint.workers.outbox``.
"""

import uuid
from datetime import timedelta
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from imprint.models.outbox import OutboxEvent

INVITATION_SENT = "user.invitation.sent"
INVITATION_FAILED = "user.invitation.failed"


def enqueue(
    session: AsyncSession,
    event_type: str,
    payload: dict[str, Any],
    tenant_id: uuid.UUID | None = None,
) -> OutboxEvent:
    event = OutboxEvent(tenant_id=tenant_id, event_type=event_type, payload=payload)
    session.add(event)
    return event


def retry_delay(attempts: int, base_seconds: int, max_seconds: int) -> timedelta:
    """Exponential backoff after ``attempts`` failed deliveries (1-based)."""
    exponent = max(attempts - 1, 0)
    return timedelta(seconds=min(base_seconds * 2**exponent, max_seconds))
