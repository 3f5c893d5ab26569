"""
tests.test_smoke

Minimal smoke tests: the service boots and serves its health endpoints.
"""

from __future__ import annotations

import httpx
import pytest


@pytest.mark.asyncio
async def test_health_endpoints(client: httpx.AsyncClient) -> None:
    r = await client.get("/healthz")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"

    r = await client.get("/readyz")
    assert r.status_code == 200
    assert r.json()["status"] == "ready"


@pytest.mark.asyncio
async def test_unknown_route_uses_the_failure_envelope(client: httpx.AsyncClient) -> None:
    r = await client.get("/api/nowhere")
    assert r.status_code == 404
    assert r.json()["success"] is False


@pytest.mark.asyncio
async def test_openapi_lists_the_catalog(client: httpx.AsyncClient) -> None:
    paths = (await client.get("/openapi.json")).json()["paths"]
    for prefix in ("/api/events", "/api/contracts/search", "/api/event-types/active", "/api/users"):
        assert prefix in paths
