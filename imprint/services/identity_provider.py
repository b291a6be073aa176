"""Admin client for the identity provider's backend API."""

import logging
from dataclasses import dataclass

import httpx

from imprint.core.config import get_settings
from imprint.models.user import UserRole

logger = logging.getLogger(__name__)


class IdentityProviderError(Exception):
    """The identity provider rejected or failed a backend call."""


@dataclass(frozen=True, slots=True)
class OrganizationInvitation:
    id: str
    url: str


async def create_organization_invitation(
    external_org_id: str,
    email: str,
    role: UserRole,
    inviter_user_id: str,
) -> OrganizationInvitation:
    """Ask the identity provider to invite ``email`` into the organization.

    The application role travels in the invitation's public metadata so the
    membership webhook can carry it back once the invitation is accepted.
    """
    settings = get_settings()
    if not settings.identity_provider_secret_key:
        raise IdentityProviderError("IDENTITY_PROVIDER_SECRET_KEY is not configured")

    url = (
        f"{settings.identity_provider_api_url.rstrip('/')}"
        f"/organizations/{external_org_id}/invitations"
    )
    body = {
        "email_address": email,
        "inviter_user_id": inviter_user_id,
        "role": "org:member",
        "public_metadata": {"role": str(role)},
        "redirect_url": settings.invitation_redirect_url,
    }
    try:
        async with httpx.AsyncClient(timeout=10) as client:
            resp = await client.post(
                url,
                json=body,
                headers={"Authorization": f"Bearer {settings.identity_provider_secret_key}"},
            )
            resp.raise_for_status()
    except httpx.HTTPError as exc:
        logger.warning(
            "Invitation request failed for org %s: %s", external_org_id, exc
        )
        raise IdentityProviderError(f"Invitation request failed: {exc}") from exc

    data = resp.json()
    invitation = OrganizationInvitation(
        id=str(data.get("id", "")),
        url=str(data.get("url") or data.get("public_metadata", {}).get("invitation_url") or ""),
    )
    logger.info(
        "Created invitation %s for org %s role %s", invitation.id, external_org_id, role
    )
    return invitation
