"""Branding and locale updates for the caller's tenant."""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ValidationError as PydanticValidationError

from imprint.core.errors import (
    ActionResult,
    ErrorKind,
    NotFoundError,
    first_validation_message,
)
from imprint.core.permissions import can_manage_settings
from imprint.core.tenancy import tenant_scope
from imprint.models.tenant import BrandingSettings, LocaleSettings
from imprint.models.user import UserRole
from imprint.services import registry, resolver

logger = logging.getLogger(__name__)


async def _update_section(
    section: str,
    schema: type[BrandingSettings] | type[LocaleSettings],
    *,
    external_org_id: str,
    roles: Iterable[UserRole],
    data: Mapping[str, Any] | BaseModel,
) -> ActionResult[dict[str, Any]]:
    try:
        values = schema.model_validate(
            data.model_dump() if isinstance(data, BaseModel) else data
        )
    except PydanticValidationError as exc:
        return ActionResult.fail(ErrorKind.VALIDATION, first_validation_message(exc))

    if not can_manage_settings(roles):
        return ActionResult.fail(
            ErrorKind.UNAUTHORIZED, "You do not have permission to update company settings"
        )

    tenant_id = await resolver.resolve_tenant_id(external_org_id)
    if tenant_id is None:
        return ActionResult.fail(ErrorKind.NOT_FOUND, resolver.NOT_PROVISIONED_MESSAGE)

    try:
        async with tenant_scope(tenant_id) as scope:
            tenant = await registry.update_tenant_settings(
                scope, section, values.to_document()
            )
            if tenant is None:
                raise NotFoundError("Tenant not found")
            updated = dict(tenant.settings[section])
    except NotFoundError as exc:
        return ActionResult.from_error(exc)
    except Exception:
        logger.exception("Failed to update %s settings for tenant %s", section, tenant_id)
        return ActionResult.fail(ErrorKind.INTERNAL, f"Failed to update {section} settings")

    logger.info("Updated %s settings for tenant %s", section, tenant_id)
    return ActionResult.ok(updated)


async def update_branding(
    *,
    external_org_id: str,
    roles: Iterable[UserRole],
    data: Mapping[str, Any] | BaseModel,
) -> ActionResult[dict[str, Any]]:
    return await _update_section(
        "branding", BrandingSettings, external_org_id=external_org_id, roles=roles, data=data
    )


async def update_locale(
    *,
    external_org_id: str,
    roles: Iterable[UserRole],
    data: Mapping[str, Any] | BaseModel,
) -> ActionResult[dict[str, Any]]:
    return await _update_section(
        "locale", LocaleSettings, external_org_id=external_org_id, roles=roles, data=data
    )
