"""Current-tenant profile, feature flags and settings."""

from typing import Any

from fastapi import APIRouter, Body, HTTPException, status

from imprint.api.deps import Auth, TenantId, raise_for_error
from imprint.core.tenancy import tenant_scope
from imprint.models.feature_flag import TenantFeatureRead
from imprint.models.tenant import TenantRead
from imprint.services import registry, tenant_settings

router = APIRouter(prefix="/tenants", tags=["tenants"])


@router.get("/me", response_model=TenantRead)
async def get_current_tenant(tenant_id: TenantId) -> TenantRead:
    async with tenant_scope(tenant_id) as scope:
        tenant = await registry.get_tenant(scope)
        data = TenantRead.model_validate(tenant) if tenant else None
    if data is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tenant not found")
    return data


@router.get("/me/features", response_model=list[TenantFeatureRead])
async def list_current_features(tenant_id: TenantId) -> list[TenantFeatureRead]:
    async with tenant_scope(tenant_id) as scope:
        flags = await registry.list_feature_flags(scope)
        return [TenantFeatureRead.model_validate(f) for f in flags]


@router.patch("/me/branding")
async def update_branding(auth: Auth, body: dict[str, Any] = Body(...)) -> dict:
    result = await tenant_settings.update_branding(
        external_org_id=auth.external_org_id, roles=auth.roles, data=body
    )
    if not result.success:
        raise_for_error(result.error, result.message)
    return result.data or {}


@router.patch("/me/locale")
async def update_locale(auth: Auth, body: dict[str, Any] = Body(...)) -> dict:
    result = await tenant_settings.update_locale(
        external_org_id=auth.external_org_id, roles=auth.roles, data=body
    )
    if not result.success:
        raise_for_error(result.error, result.message)
    return result.data or {}
