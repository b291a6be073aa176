"""Tenant registry: tenant-scoped repository functions.

Every function except ``lookup_tenant_id`` takes a ``TenantScope`` and
filters on ``scope.tenant_id`` explicitly, on top of the row-level security
policies that the scope's transaction is subject to.
"""

import logging
import uuid
from typing import Any

from sqlalchemy import func
from sqlmodel import select

from imprint.core.database import async_session_factory
from imprint.core.tenancy import TenantScope
from imprint.models.feature_flag import TenantFeature
from imprint.models.tenant import Tenant, TenantStatus
from imprint.models.user import User, UserRole, UserStatus

logger = logging.getLogger(__name__)


async def lookup_tenant_id(external_org_id: str) -> uuid.UUID | None:
    """Map an identity-provider organization handle to a tenant id.

    Runs outside any tenant scope through the ``resolve_tenant_id`` database
    function, which only ever returns the id. ``None`` means no tenant has
    been provisioned for the handle yet.
    """
    async with async_session_factory() as session:
        result = await session.execute(select(func.resolve_tenant_id(external_org_id)))
        value = result.scalar_one_or_none()
    if value is None:
        return None
    return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))


# ── Tenants ───────────────────────────────────────────────────

async def get_tenant(scope: TenantScope) -> Tenant | None:
    stmt = select(Tenant).where(
        Tenant.id == scope.tenant_id,
        Tenant.tenant_id == scope.tenant_id,
    )
    result = await scope.execute(stmt)
    return result.scalar_one_or_none()


async def get_tenant_by_external_org(
    scope: TenantScope, external_org_id: str
) -> Tenant | None:
    stmt = select(Tenant).where(
        Tenant.external_org_id == external_org_id,
        Tenant.tenant_id == scope.tenant_id,
    )
    result = await scope.execute(stmt)
    return result.scalar_one_or_none()


async def create_tenant(
    scope: TenantScope,
    name: str,
    external_org_id: str | None = None,
    settings: dict[str, Any] | None = None,
    status: TenantStatus = TenantStatus.ACTIVE,
) -> Tenant:
    """Insert the tenant row whose id is the scope's tenant id."""
    tenant = Tenant.create(
        name,
        tenant_id=scope.tenant_id,
        external_org_id=external_org_id,
        status=status,
        settings=settings,
    )
    scope.add(tenant)
    await scope.flush()
    return tenant


async def update_tenant_settings(
    scope: TenantScope, section: str, values: dict[str, Any]
) -> Tenant | None:
    """Merge ``values`` into one settings sub-document.

    Returns ``None`` when the scope's tenant row is not visible.
    """
    tenant = await get_tenant(scope)
    if tenant is None:
        return None

    merged = dict(tenant.settings or {})
    merged[section] = {**merged.get(section, {}), **values}
    # Reassign so the JSON column is flagged dirty
    tenant.settings = merged
    tenant.touch()
    scope.add(tenant)
    await scope.flush()
    return tenant


# ── Feature flags ─────────────────────────────────────────────

async def list_feature_flags(scope: TenantScope) -> list[TenantFeature]:
    stmt = (
        select(TenantFeature)
        .where(TenantFeature.tenant_id == scope.tenant_id)
        .order_by(TenantFeature.feature_key.asc())  # type: ignore[union-attr]
    )
    result = await scope.execute(stmt)
    return list(result.scalars().all())


async def add_feature_flag(
    scope: TenantScope,
    feature_key: str,
    enabled: bool = True,
    usage_limit: int | None = None,
) -> TenantFeature:
    flag = TenantFeature(
        tenant_id=scope.tenant_id,
        feature_key=feature_key,
        enabled=enabled,
        usage_limit=usage_limit,
    )
    scope.add(flag)
    await scope.flush()
    return flag


# ── Users ─────────────────────────────────────────────────────

async def list_users(scope: TenantScope) -> list[User]:
    stmt = (
        select(User)
        .where(User.tenant_id == scope.tenant_id)
        .order_by(User.email.asc())  # type: ignore[union-attr]
    )
    result = await scope.execute(stmt)
    return list(result.scalars().all())


async def add_pending_user(scope: TenantScope, email: str, role: UserRole) -> User:
    """Insert an invited user. Raises ``IntegrityError`` if the email is taken."""
    user = User(
        tenant_id=scope.tenant_id,
        email=email,
        role=role,
        status=UserStatus.PENDING,
    )
    scope.add(user)
    await scope.flush()
    return user
