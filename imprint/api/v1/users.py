"""Tenant members and invitations."""

from typing import Any

from fastapi import APIRouter, Body, status

from imprint.api.deps import Auth, TenantId, raise_for_error
from imprint.core.tenancy import tenant_scope
from imprint.models.user import UserRead
from imprint.services import registry
from imprint.services.invitations import InvitationData, invite_user

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserRead])
async def list_users(tenant_id: TenantId) -> list[UserRead]:
    async with tenant_scope(tenant_id) as scope:
        users = await registry.list_users(scope)
        return [UserRead.model_validate(u) for u in users]


@router.post(
    "/invitations",
    response_model=InvitationData,
    status_code=status.HTTP_201_CREATED,
)
async def create_invitation(auth: Auth, body: dict[str, Any] = Body(...)) -> InvitationData:
    result = await invite_user(
        inviter_id=auth.user_id,
        external_org_id=auth.external_org_id,
        roles=auth.roles,
        data=body,
    )
    if not result.success or result.data is None:
        raise_for_error(result.error, result.message)
    return result.data
