"""Health check, configuration, resolver cache, log redaction."""

import logging
import uuid
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient
from pydantic import ValidationError

from imprint.core.cache import TTLCache
from imprint.core.config import Settings
from imprint.core.logging import REDACTED, RedactingFilter, redact
from imprint.services import resolver


@pytest.mark.asyncio
async def test_health_ok(client: AsyncClient):
    with patch("imprint.main.check_database", AsyncMock()):
        resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_health_database_down(client: AsyncClient):
    with patch("imprint.main.check_database", AsyncMock(side_effect=OSError("refused"))):
        resp = await client.get("/health")
    assert resp.status_code == 503
    assert resp.json()["status"] == "unhealthy"


# ── Settings ──────────────────────────────────────────────────

def test_tenant_role_must_be_identifier():
    with pytest.raises(ValidationError):
        Settings(db_tenant_role="authenticated; DROP TABLE tenants")


def test_environment_flags():
    prod = Settings(environment="production")
    assert prod.is_production and not prod.echo_sql
    dev = Settings(environment="development")
    assert dev.echo_sql and not dev.is_production


# ── Resolver ──────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_resolver_caches_hits():
    tid = uuid.uuid4()
    mock_lookup = AsyncMock(return_value=tid)
    with patch("imprint.services.registry.lookup_tenant_id", mock_lookup):
        assert await resolver.resolve_tenant_id("org_a") == tid
        assert await resolver.resolve_tenant_id("org_a") == tid
    mock_lookup.assert_awaited_once_with("org_a")


@pytest.mark.asyncio
async def test_resolver_does_not_cache_misses():
    tid = uuid.uuid4()
    mock_lookup = AsyncMock(side_effect=[None, tid])
    with patch("imprint.services.registry.lookup_tenant_id", mock_lookup):
        assert await resolver.resolve_tenant_id("org_racing") is None
        assert await resolver.resolve_tenant_id("org_racing") == tid


@pytest.mark.asyncio
async def test_resolver_empty_handle():
    mock_lookup = AsyncMock()
    with patch("imprint.services.registry.lookup_tenant_id", mock_lookup):
        assert await resolver.resolve_tenant_id("") is None
    mock_lookup.assert_not_awaited()


def test_ttl_cache_expiry_and_bound():
    now = [0.0]
    cache = TTLCache(ttl=10, max_entries=2, clock=lambda: now[0])
    cache.put("a", 1)
    cache.put("b", 2)
    cache.put("c", 3)
    assert cache.get("a") is None
    assert len(cache) == 2
    now[0] = 11
    assert cache.get("b") is None


# ── Logging ───────────────────────────────────────────────────

def test_redact_nested_secrets():
    data = {"email": "a@example.com", "auth": {"api_key": "k", "session_token": "t"}}
    assert redact(data) == {
        "email": "a@example.com",
        "auth": {"api_key": REDACTED, "session_token": REDACTED},
    }


def test_filter_masks_dict_arguments():
    record = logging.LogRecord(
        "imprint", logging.INFO, __file__, 1, "payload %s", ({"password": "hunter2"},), None
    )
    RedactingFilter().filter(record)
    assert "hunter2" not in record.getMessage()
