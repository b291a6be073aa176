"""Outbox event model: side effects handed off to the delivery worker."""

import uuid
from datetime import datetime
from enum import StrEnum
from typing import Any

from sqlalchemy import Column, Index, String, Text
from sqlmodel import Field, SQLModel

from imprint.models.base import JSONDocument, TimestampMixin, new_uuid, utcnow


class OutboxStatus(StrEnum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class OutboxEvent(TimestampMixin, SQLModel, table=True):
    __tablename__ = "outbox_events"
    __table_args__ = (
        Index("ix_outbox_events_due", "status", "next_attempt_at"),
    )

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    # Diagnostic only; the outbox is not a tenant-scoped table
    tenant_id: uuid.UUID | None = Field(default=None, nullable=True)
    event_type: str = Field(max_length=100, nullable=False)
    payload: dict[str, Any] = Field(
        default_factory=dict, sa_column=Column(JSONDocument, nullable=False)
    )
    status: OutboxStatus = Field(
        default=OutboxStatus.PENDING, sa_type=String(20), nullable=False
    )
    attempts: int = Field(default=0, nullable=False)
    next_attempt_at: datetime = Field(default_factory=utcnow, nullable=False)
    last_error: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    sent_at: datetime | None = Field(default=None)
