"""Outbox delivery job.

Claims due events with ``FOR UPDATE SKIP LOCKED`` so several workers can run
side by side without delivering the same event twice.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from sqlmodel import select

from imprint.core.config import Settings, get_settings
from imprint.core.database import async_session_factory
from imprint.models.base import utcnow
from imprint.models.outbox import OutboxEvent, OutboxStatus
from imprint.services import notifications, outbox

logger = logging.getLogger(__name__)

Handler = Callable[[dict[str, Any]], Awaitable[None]]

HANDLERS: dict[str, Handler] = {
    outbox.INVITATION_SENT: notifications.send_invitation_email,
    outbox.INVITATION_FAILED: notifications.report_invitation_failure,
}


async def _deliver(event: OutboxEvent, settings: Settings) -> str:
    """Run one event's handler and record the outcome on the row."""
    handler = HANDLERS.get(event.event_type)
    try:
        if handler is None:
            raise LookupError(f"No handler for event type {event.event_type}")
        await handler(event.payload)
    except Exception as exc:
        event.attempts += 1
        event.last_error = str(exc)[:2000]
        event.touch()
        if event.attempts >= settings.outbox_max_attempts:
            event.status = OutboxStatus.FAILED
            logger.error(
                "Outbox event %s (%s) failed permanently after %d attempts: %s",
                event.id, event.event_type, event.attempts, exc,
            )
            return "failed"
        event.next_attempt_at = utcnow() + outbox.retry_delay(
            event.attempts,
            settings.outbox_backoff_seconds,
            settings.outbox_backoff_max_seconds,
        )
        logger.warning(
            "Outbox event %s (%s) attempt %d failed, retrying at %s: %s",
            event.id, event.event_type, event.attempts, event.next_attempt_at, exc,
        )
        return "retried"

    event.attempts += 1
    event.status = OutboxStatus.SENT
    event.sent_at = event.touch()
    return "sent"


async def process_outbox(ctx: dict) -> dict:
    """Deliver one batch of due events. Returns per-outcome counts."""
    settings = get_settings()
    counts = {"sent": 0, "retried": 0, "failed": 0}

    async with async_session_factory() as session:
        async with session.begin():
            stmt = (
                select(OutboxEvent)
                .where(
                    OutboxEvent.status == OutboxStatus.PENDING,
                    OutboxEvent.next_attempt_at <= utcnow(),
                )
                .order_by(OutboxEvent.next_attempt_at.asc())  # type: ignore[union-attr]
                .limit(settings.outbox_batch_size)
                .with_for_update(skip_locked=True)
            )
            result = await session.execute(stmt)
            events = result.scalars().all()

            for event in events:
                outcome = await _deliver(event, settings)
                counts[outcome] += 1
                if outcome == "failed" and event.event_type != outbox.INVITATION_FAILED:
                    outbox.enqueue(
                        session,
                        outbox.INVITATION_FAILED,
                        {**event.payload, "error": event.last_error},
                        tenant_id=event.tenant_id,
                    )
                session.add(event)

    if any(counts.values()):
        logger.info("Outbox batch processed: %s", counts)
    return counts
