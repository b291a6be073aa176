"""Invitation emails.

The email transport is outside this service; delivery is logged so the
worker's retry bookkeeping is exercised end to end.
"""

import html
import logging
from typing import Any

from imprint.core.permissions import role_display_name

logger = logging.getLogger(__name__)


def render_invitation_email(payload: dict[str, Any]) -> tuple[str, str]:
    """Return ``(subject, html_body)`` for an invitation event payload."""
    tenant_name = html.escape(payload.get("tenant_name") or "Your Organization")
    role_label = html.escape(role_display_name(payload.get("role", "")))
    url = html.escape(payload.get("invitation_url") or "", quote=True)

    subject = f"You're invited to join {payload.get('tenant_name') or 'Your Organization'}"
    body = (
        "<html><body>"
        f"<h1>Join {tenant_name}</h1>"
        f"<p>You have been invited to join <strong>{tenant_name}</strong> "
        f"as <strong>{role_label}</strong>.</p>"
    )
    if url:
        body += f'<p><a href="{url}">Accept invitation</a></p>'
    body += "</body></html>"
    return subject, body


async def send_invitation_email(payload: dict[str, Any]) -> None:
    email = payload.get("email")
    if not email:
        raise ValueError("Invitation payload has no recipient email")
    subject, _body = render_invitation_email(payload)
    logger.info(
        "Invitation email to %s for tenant %s: %s",
        email,
        payload.get("tenant_id"),
        subject,
    )


async def report_invitation_failure(payload: dict[str, Any]) -> None:
    logger.error(
        "Invitation email to %s for tenant %s permanently failed: %s",
        payload.get("email"),
        payload.get("tenant_id"),
        payload.get("error"),
    )
