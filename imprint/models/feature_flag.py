"""Per-tenant feature flags and usage limits."""

import uuid

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from imprint.models.base import TimestampMixin, new_uuid


class TenantFeature(TimestampMixin, SQLModel, table=True):
    __tablename__ = "tenant_features"
    __table_args__ = (
        UniqueConstraint("tenant_id", "feature_key", name="uq_tenant_features_tenant_key"),
    )

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    tenant_id: uuid.UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    feature_key: str = Field(max_length=100, nullable=False)
    enabled: bool = Field(default=True, nullable=False)
    # None means unlimited
    usage_limit: int | None = Field(default=None, nullable=True)


# ── Pydantic schemas ─────────────────────────────────────────

class TenantFeatureRead(SQLModel):
    feature_key: str
    enabled: bool
    usage_limit: int | None
