"""Tenant model: top-level isolation boundary."""

import copy
import uuid
from datetime import datetime
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, Field as PydanticField, HttpUrl, field_validator
from sqlalchemy import CheckConstraint, Column, String
from sqlmodel import Field, SQLModel

from imprint.models.base import JSONDocument, TimestampMixin, new_uuid


class TenantStatus(StrEnum):
    ACTIVE = "active"
    TRIAL = "trial"
    SUSPENDED = "suspended"


DEFAULT_TENANT_SETTINGS: dict[str, Any] = {
    "branding": {
        "primary_color": "#1e3a8a",
        "secondary_color": "#d97706",
    },
    "locale": {
        "timezone": "America/New_York",
        "currency": "USD",
        "measurement_system": "imperial",
        "language": "en-US",
    },
    "onboarding": {
        "completed_steps": [],
        "current_step": "welcome",
    },
}


def default_tenant_settings() -> dict[str, Any]:
    return copy.deepcopy(DEFAULT_TENANT_SETTINGS)


class Tenant(TimestampMixin, SQLModel, table=True):
    __tablename__ = "tenants"
    # The tenants table is filtered like every other tenant-scoped table,
    # so each row's scope column points at itself.
    __table_args__ = (CheckConstraint("tenant_id = id", name="ck_tenants_self_scope"),)

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    tenant_id: uuid.UUID = Field(nullable=False, index=True)
    external_org_id: str | None = Field(
        default=None, max_length=255, unique=True, nullable=True
    )
    name: str = Field(max_length=255, nullable=False)
    status: TenantStatus = Field(
        default=TenantStatus.ACTIVE, sa_type=String(20), nullable=False
    )
    settings: dict[str, Any] = Field(
        default_factory=dict, sa_column=Column(JSONDocument, nullable=False)
    )

    @classmethod
    def create(
        cls,
        name: str,
        *,
        tenant_id: uuid.UUID | None = None,
        external_org_id: str | None = None,
        status: TenantStatus = TenantStatus.ACTIVE,
        settings: dict[str, Any] | None = None,
    ) -> "Tenant":
        """Build a tenant whose scope identifier equals its own id."""
        tid = tenant_id or new_uuid()
        return cls(
            id=tid,
            tenant_id=tid,
            name=name,
            external_org_id=external_org_id,
            status=status,
            settings=settings if settings is not None else default_tenant_settings(),
        )


# ── Pydantic schemas ─────────────────────────────────────────

_HEX_COLOR = r"^#[0-9a-fA-F]{6}$"


class BrandingSettings(BaseModel):
    logo_url: HttpUrl | Literal[""] | None = None
    primary_color: str = PydanticField(pattern=_HEX_COLOR)
    secondary_color: str = PydanticField(pattern=_HEX_COLOR)

    def to_document(self) -> dict[str, Any]:
        doc = self.model_dump(mode="json")
        if not doc.get("logo_url"):
            doc.pop("logo_url", None)
        return doc


class LocaleSettings(BaseModel):
    timezone: str = PydanticField(min_length=1)
    currency: str = PydanticField(min_length=3, max_length=3)
    measurement_system: Literal["imperial", "metric"]
    language: str = PydanticField(min_length=2)

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        if not value.isalpha():
            raise ValueError("Currency must be a 3-letter ISO code (e.g., USD)")
        return value.upper()

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class TenantRead(SQLModel):
    id: uuid.UUID
    external_org_id: str | None
    name: str
    status: TenantStatus
    settings: dict[str, Any]
    created_at: datetime
    updated_at: datetime
