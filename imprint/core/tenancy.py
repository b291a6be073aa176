"""Tenant-scoped execution context.

All reads and writes of tenant-owned rows go through ``tenant_scope``. It
binds one pooled connection to one transaction, switches that transaction to
the restricted role and sets the ``app.current_tenant_id`` marker with
``set_config(..., is_local => true)`` so the marker dies with the transaction
and can never leak into the next borrower of the connection.
"""

import logging
import re
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, TypeVar

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from imprint.core.config import get_settings
from imprint.core.database import async_session_factory
from imprint.core.errors import TenantValidationError
from imprint.core.rls import TENANT_SETTING

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def validate_tenant_id(value: Any) -> uuid.UUID:
    """Return ``value`` as a UUID or raise ``TenantValidationError``.

    Runs before any connection is requested from the pool.
    """
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str) or not value.strip():
        raise TenantValidationError("tenant_id must be a non-empty string")
    if not _UUID_PATTERN.match(value):
        raise TenantValidationError("Invalid tenant_id format")
    return uuid.UUID(value)


@dataclass(frozen=True, slots=True)
class TenantScope:
    """Handle for work bound to one tenant's transaction.

    Repository functions take the scope explicitly instead of reading ambient
    state, so a call made without one fails at the call site.
    """

    tenant_id: uuid.UUID
    session: AsyncSession

    async def execute(self, statement, params: dict | None = None):
        return await self.session.execute(statement, params)

    def add(self, instance: Any) -> None:
        self.session.add(instance)

    async def flush(self) -> None:
        await self.session.flush()


async def _establish_marker(session: AsyncSession, tenant_id: uuid.UUID) -> None:
    role = get_settings().db_tenant_role
    await session.execute(text(f"SET LOCAL ROLE {role}"))
    await session.execute(
        text("SELECT set_config(:name, :value, true)"),
        {"name": TENANT_SETTING, "value": str(tenant_id)},
    )


@asynccontextmanager
async def tenant_scope(tenant_id: uuid.UUID | str) -> AsyncIterator[TenantScope]:
    """Open a transaction bound to ``tenant_id``.

    Commits when the block exits normally and rolls back on any exception,
    cancellation included. Failures are re-raised with their original type
    and a ``[Tenant: <id>]`` note attached.
    """
    tid = validate_tenant_id(tenant_id)

    try:
        async with async_session_factory() as session:
            async with session.begin():
                await _establish_marker(session, tid)
                yield TenantScope(tenant_id=tid, session=session)
    except Exception as exc:
        exc.add_note(f"[Tenant: {tid}]")
        logger.warning("Tenant-scoped work failed for tenant %s: %s", tid, exc)
        raise


async def run_with_tenant(
    tenant_id: uuid.UUID | str,
    work: Callable[[TenantScope], Awaitable[T]],
) -> T:
    """Await ``work(scope)`` inside ``tenant_scope`` and return its result."""
    async with tenant_scope(tenant_id) as scope:
        return await work(scope)


# ── Diagnostics (tests / debugging only) ─────────────────────

async def _read_marker(session: AsyncSession) -> uuid.UUID | None:
    result = await session.execute(
        text("SELECT current_setting(:name, true)"), {"name": TENANT_SETTING}
    )
    raw = result.scalar_one_or_none()
    if not raw:
        return None
    return uuid.UUID(raw)


async def get_tenant_marker(session: AsyncSession | None = None) -> uuid.UUID | None:
    """Current value of the tenant marker on ``session`` or a fresh connection."""
    if session is not None:
        return await _read_marker(session)
    async with async_session_factory() as fresh:
        return await _read_marker(fresh)


async def clear_tenant_marker(session: AsyncSession | None = None) -> None:
    """Reset the marker at session level. Test teardown only."""
    stmt = text("SELECT set_config(:name, '', false)")
    if session is not None:
        await session.execute(stmt, {"name": TENANT_SETTING})
        return
    async with async_session_factory() as fresh:
        await fresh.execute(stmt, {"name": TENANT_SETTING})
        await fresh.commit()
