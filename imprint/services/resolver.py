"""Identity-to-tenant resolver.

Maps the organization handle carried by a session token to the internal
tenant id. Hits are cached per process; misses are not, so a request that
races provisioning resolves as soon as the tenant row exists.
"""

import logging
import uuid

from imprint.core.cache import TTLCache
from imprint.services import registry

logger = logging.getLogger(__name__)

NOT_PROVISIONED_MESSAGE = "Your organization is not yet set up"

_cache = TTLCache(ttl=300)


async def resolve_tenant_id(external_org_id: str) -> uuid.UUID | None:
    if not external_org_id:
        return None

    cached = _cache.get(external_org_id)
    if cached is not None:
        return cached

    tenant_id = await registry.lookup_tenant_id(external_org_id)
    if tenant_id is None:
        logger.info("No tenant provisioned for org %s", external_org_id)
        return None

    _cache.put(external_org_id, tenant_id)
    return tenant_id


def clear_cache() -> None:
    _cache.clear()
