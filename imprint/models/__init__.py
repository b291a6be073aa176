"""Import all models so SQLModel.metadata picks them up."""

from imprint.models.feature_flag import TenantFeature, TenantFeatureRead
from imprint.models.outbox import OutboxEvent, OutboxStatus
from imprint.models.tenant import (
    BrandingSettings,
    LocaleSettings,
    Tenant,
    TenantRead,
    TenantStatus,
)
from imprint.models.user import User, UserInvite, UserRead, UserRole, UserStatus

__all__ = [
    "BrandingSettings",
    "LocaleSettings",
    "OutboxEvent",
    "OutboxStatus",
    "Tenant",
    "TenantFeature",
    "TenantFeatureRead",
    "TenantRead",
    "TenantStatus",
    "User",
    "UserInvite",
    "UserRead",
    "UserRole",
    "UserStatus",
]
