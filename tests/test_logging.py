"""
tests.test_logging

Structured log output: credential redaction, the `authz.rejected` event and
the per-request `request.completed` line.
"""

from __future__ import annotations

import httpx
import pytest
from structlog.testing import capture_logs

from logieventos.auth.models import Role
from logieventos.observability.logging import REDACTED, _redact_credentials


def _events(logs: list[dict], name: str) -> list[dict]:
    return [e for e in logs if e["event"] == name]


def test_credentials_never_reach_log_output() -> None:
    event = {"event": "auth.signin", "token": "eyJ...", "password": "secret123", "user_id": "u-1"}
    out = _redact_credentials(None, "info", dict(event))
    assert out["token"] == REDACTED
    assert out["password"] == REDACTED
    assert out["user_id"] == "u-1"
    assert out["event"] == "auth.signin"


@pytest.mark.asyncio
async def test_denied_request_logs_reject_and_access_line(
    client: httpx.AsyncClient, make_account
) -> None:
    admin = await make_account(Role.admin)
    coord = await make_account(Role.coordinador)
    r = await client.post("/api/resource-types", json={"name": "Sonido"}, headers=admin.headers)
    type_id = r.json()["data"]["id"]

    with capture_logs() as logs:
        r = await client.delete(f"/api/resource-types/{type_id}", headers=coord.headers)
    assert r.status_code == 403

    [rejected] = _events(logs, "authz.rejected")
    assert rejected["log_level"] == "warning"
    assert rejected["kind"] == "Forbidden"
    assert rejected["role"] == "coordinador"
    assert rejected["principal_id"] == coord.id
    assert rejected["resource"] == "resource_type"
    assert rejected["action"] == "delete"

    [completed] = _events(logs, "request.completed")
    assert completed["status"] == 403
    assert completed["duration_ms"] >= 0
    # The principal is only attached once the gate lets the request through.
    assert completed["principal_id"] is None


@pytest.mark.asyncio
async def test_missing_token_is_logged_without_a_principal(client: httpx.AsyncClient) -> None:
    with capture_logs() as logs:
        r = await client.get("/api/events")
    assert r.status_code == 401

    [rejected] = _events(logs, "authz.rejected")
    assert rejected["kind"] == "MissingCredential"
    assert rejected["role"] is None
    assert rejected["principal_id"] is None
    assert rejected["resource"] == "event"
    assert rejected["action"] == "read"


@pytest.mark.asyncio
async def test_allowed_request_logs_its_principal(
    client: httpx.AsyncClient, make_account
) -> None:
    admin = await make_account(Role.admin)

    with capture_logs() as logs:
        r = await client.get("/api/resource-types", headers=admin.headers)
    assert r.status_code == 200

    assert _events(logs, "authz.rejected") == []
    [completed] = _events(logs, "request.completed")
    assert completed["status"] == 200
    assert completed["principal_id"] == admin.id
    assert "token" not in completed
