"""Tenant provisioning from identity-provider lifecycle events."""

import logging
import uuid
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from imprint.core.errors import ValidationError
from imprint.core.tenancy import TenantScope, tenant_scope
from imprint.models.base import new_uuid
from imprint.models.feature_flag import TenantFeature
from imprint.services import registry

logger = logging.getLogger(__name__)


class SubscriptionTier(StrEnum):
    STARTER = "starter"
    PROFESSIONAL = "professional"
    ENTERPRISE = "enterprise"


# feature_key -> usage limit (None = unlimited)
TIER_LIMITS: dict[SubscriptionTier, dict[str, int | None]] = {
    SubscriptionTier.STARTER: {
        "titles_limit": 50,
        "users_limit": 5,
        "orders_per_month": 100,
    },
    SubscriptionTier.PROFESSIONAL: {
        "titles_limit": 500,
        "users_limit": 25,
        "orders_per_month": 5000,
    },
    SubscriptionTier.ENTERPRISE: {
        "titles_limit": None,
        "users_limit": None,
        "orders_per_month": None,
    },
}


@dataclass(frozen=True, slots=True)
class ProvisioningResult:
    tenant_id: uuid.UUID
    created: bool


async def seed_feature_flags(
    scope: TenantScope, tier: SubscriptionTier = SubscriptionTier.STARTER
) -> list[TenantFeature]:
    """Insert the tier's flags inside an already open scope."""
    limits = TIER_LIMITS[SubscriptionTier(tier)]
    return [
        await registry.add_feature_flag(scope, key, enabled=True, usage_limit=limit)
        for key, limit in limits.items()
    ]


async def initialize_feature_flags(
    tenant_id: uuid.UUID | str, tier: SubscriptionTier = SubscriptionTier.STARTER
) -> None:
    """Seed feature flags for an existing tenant in their own transaction."""
    logger.info("Initializing feature flags for tenant %s (tier=%s)", tenant_id, tier)
    try:
        async with tenant_scope(tenant_id) as scope:
            flags = await seed_feature_flags(scope, tier)
    except Exception:
        logger.exception("Failed to initialize feature flags for tenant %s", tenant_id)
        raise
    logger.info("Initialized %d feature flags for tenant %s", len(flags), tenant_id)


async def provision_tenant(
    external_org_id: str,
    name: str,
    tier: SubscriptionTier = SubscriptionTier.STARTER,
) -> ProvisioningResult:
    """Create the tenant for an organization unless it already exists.

    The tenant row and its feature flags are written in one transaction, so
    a failure leaves no partial tenant behind. Redelivered events find the
    existing tenant and change nothing.
    """
    existing = await registry.lookup_tenant_id(external_org_id)
    if existing is not None:
        logger.info(
            "Tenant already provisioned for org %s: %s", external_org_id, existing
        )
        return ProvisioningResult(tenant_id=existing, created=False)

    tenant_id = new_uuid()
    try:
        async with tenant_scope(tenant_id) as scope:
            await registry.create_tenant(scope, name, external_org_id=external_org_id)
            await seed_feature_flags(scope, tier)
    except Exception:
        logger.exception(
            "Provisioning failed for org %s (tenant %s)", external_org_id, tenant_id
        )
        raise

    logger.info(
        "Provisioned tenant %s for org %s (tier=%s)", tenant_id, external_org_id, tier
    )
    return ProvisioningResult(tenant_id=tenant_id, created=True)


# ── Webhook event dispatch ────────────────────────────────────

_LOGGED_ONLY_EVENTS = frozenset({
    "organization.updated",
    "organizationMembership.created",
    "user.created",
    "user.updated",
})


async def handle_identity_event(event: dict[str, Any]) -> ProvisioningResult | None:
    """Apply one verified identity-provider event.

    Only ``organization.created`` changes state today; the other lifecycle
    events are acknowledged and logged.
    """
    event_type = event.get("type")
    data = event.get("data") or {}

    if event_type == "organization.created":
        org_id = data.get("id")
        name = data.get("name")
        if not org_id or not name:
            raise ValidationError("organization.created event is missing id or name")
        return await provision_tenant(org_id, name)

    if event_type in _LOGGED_ONLY_EVENTS:
        logger.info("Received %s for %s (no action)", event_type, data.get("id"))
        return None

    logger.info("Ignoring unhandled identity event type %s", event_type)
    return None
