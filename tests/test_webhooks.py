"""Identity-provider webhook endpoint."""

import json
import time
import uuid
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from imprint.core.config import get_settings
from imprint.core.security import sign_webhook
from imprint.services.provisioning import ProvisioningResult

URL = "/v1/webhooks/identity"


def _delivery(event: dict, secret: str | None = None) -> tuple[bytes, dict]:
    body = json.dumps(event).encode()
    ts = int(time.time())
    secret = secret or get_settings().identity_provider_webhook_secret
    headers = {
        "content-type": "application/json",
        "svix-id": f"msg_{uuid.uuid4().hex[:8]}",
        "svix-timestamp": str(ts),
    }
    headers["svix-signature"] = sign_webhook(secret, headers["svix-id"], ts, body)
    return body, headers


ORG_CREATED = {
    "type": "organization.created",
    "data": {"id": "org_new", "name": "Northwind Press"},
}


@pytest.mark.asyncio
async def test_missing_signature_headers(client: AsyncClient):
    mock_handle = AsyncMock()
    with patch("imprint.api.v1.webhooks.handle_identity_event", mock_handle):
        resp = await client.post(URL, content=json.dumps(ORG_CREATED))
    assert resp.status_code == 400
    mock_handle.assert_not_awaited()


@pytest.mark.asyncio
async def test_bad_signature(client: AsyncClient):
    body, headers = _delivery(ORG_CREATED, secret="whsec_b3RoZXJzZWNyZXQ=")
    mock_handle = AsyncMock()
    with patch("imprint.api.v1.webhooks.handle_identity_event", mock_handle):
        resp = await client.post(URL, content=body, headers=headers)
    assert resp.status_code == 400
    assert "signature" in resp.json()["detail"].lower()
    mock_handle.assert_not_awaited()


@pytest.mark.asyncio
async def test_organization_created_provisions(client: AsyncClient):
    tid = uuid.uuid4()
    body, headers = _delivery(ORG_CREATED)
    mock_handle = AsyncMock(return_value=ProvisioningResult(tenant_id=tid, created=True))
    with patch("imprint.api.v1.webhooks.handle_identity_event", mock_handle):
        resp = await client.post(URL, content=body, headers=headers)

    assert resp.status_code == 200
    data = resp.json()
    assert data == {
        "received": True,
        "type": "organization.created",
        "tenant_id": str(tid),
        "created": True,
    }
    mock_handle.assert_awaited_once_with(ORG_CREATED)


@pytest.mark.asyncio
async def test_stub_event_is_acknowledged(client: AsyncClient):
    event = {"type": "user.created", "data": {"id": "user_9"}}
    body, headers = _delivery(event)
    resp = await client.post(URL, content=body, headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"received": True, "type": "user.created"}


@pytest.mark.asyncio
async def test_processing_failure_returns_500(client: AsyncClient):
    body, headers = _delivery(ORG_CREATED)
    mock_handle = AsyncMock(side_effect=RuntimeError("database unavailable"))
    with patch("imprint.api.v1.webhooks.handle_identity_event", mock_handle):
        resp = await client.post(URL, content=body, headers=headers)
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Webhook processing failed"


@pytest.mark.asyncio
async def test_unconfigured_secret_returns_500(client: AsyncClient, monkeypatch):
    body, headers = _delivery(ORG_CREATED)
    monkeypatch.setattr(get_settings(), "identity_provider_webhook_secret", "")
    resp = await client.post(URL, content=body, headers=headers)
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Webhook secret not configured"


@pytest.mark.asyncio
async def test_malformed_organization_event_returns_400(client: AsyncClient):
    event = {"type": "organization.created", "data": {"id": "org_x"}}
    body, headers = _delivery(event)
    mock_provision = AsyncMock()
    with patch("imprint.services.provisioning.provision_tenant", mock_provision):
        resp = await client.post(URL, content=body, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "organization.created event is missing id or name"
    mock_provision.assert_not_awaited()
