"""Invite a team member into the caller's tenant."""

import logging
import uuid
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError

from imprint.core.errors import (
    ActionResult,
    ConflictError,
    ErrorKind,
    first_validation_message,
)
from imprint.core.permissions import can_invite_users
from imprint.core.tenancy import tenant_scope
from imprint.models.user import UserInvite, UserRole
from imprint.services import identity_provider, outbox, registry, resolver

logger = logging.getLogger(__name__)


class InvitationData(BaseModel):
    user_id: uuid.UUID
    email: str
    role: UserRole


async def invite_user(
    *,
    inviter_id: str,
    external_org_id: str,
    roles: Iterable[UserRole],
    data: Mapping[str, Any] | UserInvite,
) -> ActionResult[InvitationData]:
    """Create a pending user, ask the identity provider to send the invite and
    queue the invitation email.

    The pending row, the identity-provider call and the outbox event share one
    tenant transaction. If the provider call fails the row is rolled back;
    the reverse (provider invite sent, commit failed) is possible and leaves an
    orphan invitation on the provider side.
    """
    try:
        invite = data if isinstance(data, UserInvite) else UserInvite.model_validate(data)
    except PydanticValidationError as exc:
        logger.info("Invalid invitation data from %s: %s", inviter_id, exc.errors())
        return ActionResult.fail(ErrorKind.VALIDATION, first_validation_message(exc))

    roles = list(roles)
    if not can_invite_users(roles):
        logger.warning(
            "Permission denied: %s (roles=%s) attempted to invite users", inviter_id, roles
        )
        return ActionResult.fail(
            ErrorKind.UNAUTHORIZED, "You do not have permission to invite users"
        )

    tenant_id = await resolver.resolve_tenant_id(external_org_id)
    if tenant_id is None:
        return ActionResult.fail(ErrorKind.NOT_FOUND, resolver.NOT_PROVISIONED_MESSAGE)

    try:
        async with tenant_scope(tenant_id) as scope:
            try:
                user = await registry.add_pending_user(scope, invite.email, invite.role)
            except IntegrityError:
                raise ConflictError("A user with this email already exists") from None

            invitation = await identity_provider.create_organization_invitation(
                external_org_id, invite.email, invite.role, inviter_id
            )

            tenant = await registry.get_tenant(scope)
            outbox.enqueue(
                scope.session,
                outbox.INVITATION_SENT,
                {
                    "email": invite.email,
                    "role": str(invite.role),
                    "tenant_id": str(tenant_id),
                    "tenant_name": tenant.name if tenant else "Your Organization",
                    "invitation_url": invitation.url,
                    "invited_by": inviter_id,
                },
                tenant_id=tenant_id,
            )
    except ConflictError as exc:
        logger.info("Duplicate invitation for %s in tenant %s", invite.email, tenant_id)
        return ActionResult.from_error(exc)
    except Exception:
        logger.exception(
            "Failed to invite %s as %s into tenant %s", invite.email, invite.role, tenant_id
        )
        return ActionResult.fail(
            ErrorKind.INTERNAL,
            "Failed to send invitation. Please try again or contact support.",
        )

    logger.info(
        "Invited %s as %s into tenant %s (user %s)", invite.email, invite.role, tenant_id, user.id
    )
    return ActionResult.ok(InvitationData(user_id=user.id, email=invite.email, role=invite.role))
