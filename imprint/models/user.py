"""User model: belongs to exactly one tenant."""

import uuid
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, EmailStr, Field as PydanticField, field_validator
from sqlalchemy import String, UniqueConstraint
from sqlmodel import Field, SQLModel

from imprint.models.base import TimestampMixin, new_uuid


class UserRole(StrEnum):
    PUBLISHER_OWNER = "publisher_owner"
    MANAGING_EDITOR = "managing_editor"
    PRODUCTION_STAFF = "production_staff"
    SALES_MARKETING = "sales_marketing"
    WAREHOUSE_OPERATIONS = "warehouse_operations"
    ACCOUNTING = "accounting"
    AUTHOR = "author"
    ILLUSTRATOR = "illustrator"


class UserStatus(StrEnum):
    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"


class User(TimestampMixin, SQLModel, table=True):
    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("tenant_id", "email", name="uq_users_tenant_email"),
    )

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    tenant_id: uuid.UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    # Set when the invitation is accepted
    external_user_id: str | None = Field(
        default=None, max_length=255, unique=True, nullable=True
    )
    email: str = Field(max_length=320, nullable=False, index=True)
    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)
    role: UserRole = Field(sa_type=String(32), nullable=False)
    status: UserStatus = Field(default=UserStatus.PENDING, sa_type=String(20), nullable=False)
    last_login_at: datetime | None = Field(default=None)


# ── Pydantic schemas ─────────────────────────────────────────

class UserInvite(BaseModel):
    email: EmailStr = PydanticField(max_length=255)
    role: UserRole

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class UserRead(SQLModel):
    id: uuid.UUID
    tenant_id: uuid.UUID
    email: str
    first_name: str | None
    last_name: str | None
    role: UserRole
    status: UserStatus
    last_login_at: datetime | None
    created_at: datetime
