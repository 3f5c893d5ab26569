"""
tests.test_auth_api

Account endpoints and the gate as seen over HTTP.
"""

from __future__ import annotations

import httpx
import pytest

from logieventos.auth.models import Role

SIGNUP = {
    "document": 555001,
    "fullname": "Laura Lider",
    "username": "laura",
    "email": "Laura@Example.com",
    "password": "secret123",
}


@pytest.mark.asyncio
async def test_signup_creates_a_lider_and_returns_a_token(client: httpx.AsyncClient) -> None:
    r = await client.post("/api/auth/signup", json={**SIGNUP, "role": "admin"})
    assert r.status_code == 201
    data = r.json()["data"]
    assert data["user"]["role"] == "lider"
    assert data["user"]["email"] == "laura@example.com"
    assert "passwordHash" not in data["user"]

    me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
    assert me.status_code == 200
    assert me.json()["data"]["username"] == "laura"


@pytest.mark.asyncio
async def test_duplicate_signup_conflicts(client: httpx.AsyncClient) -> None:
    assert (await client.post("/api/auth/signup", json=SIGNUP)).status_code == 201
    r = await client.post("/api/auth/signup", json={**SIGNUP, "document": 555002})
    assert r.status_code == 409
    assert r.json()["success"] is False


@pytest.mark.asyncio
async def test_signup_validates_body(client: httpx.AsyncClient) -> None:
    r = await client.post("/api/auth/signup", json={**SIGNUP, "password": "123"})
    assert r.status_code == 422
    body = r.json()
    assert body["success"] is False
    assert body["errors"]


@pytest.mark.asyncio
async def test_signin_outcomes(client: httpx.AsyncClient, make_account) -> None:
    admin = await make_account(Role.admin)
    assert admin.token

    r = await client.post("/api/auth/signin", json={"email": admin.email, "password": "secret123"})
    assert r.status_code == 200
    assert r.json()["data"]["role"] == "admin"

    r = await client.post("/api/auth/signin", json={"email": admin.email, "password": "wrong-one"})
    assert r.status_code == 401

    r = await client.post(
        "/api/auth/signin", json={"email": "nobody@example.com", "password": "secret123"}
    )
    assert r.status_code == 404

    inactive = await make_account(Role.coordinador, active=False)
    r = await client.post(
        "/api/auth/signin", json={"email": inactive.email, "password": "secret123"}
    )
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_missing_and_malformed_tokens(client: httpx.AsyncClient) -> None:
    r = await client.get("/api/events")
    assert r.status_code == 401
    assert r.json() == {
        "success": False,
        "message": "Authentication token required",
        "kind": "MissingCredential",
    }

    r = await client.get("/api/events", headers={"Authorization": "Bearer nope"})
    assert r.status_code == 401
    assert r.json()["kind"] == "InvalidCredential"


@pytest.mark.asyncio
async def test_custom_token_header_is_accepted(client: httpx.AsyncClient, make_account) -> None:
    lider = await make_account(Role.lider)
    r = await client.get("/api/events", headers={"x-access-token": lider.token})
    assert r.status_code == 200
    assert r.json()["data"] == []


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: httpx.AsyncClient) -> None:
    r = await client.get("/healthz", headers={"x-request-id": "req-42"})
    assert r.headers["x-request-id"] == "req-42"


@pytest.mark.asyncio
async def test_change_password(client: httpx.AsyncClient, make_account) -> None:
    lider = await make_account(Role.lider)

    r = await client.post(
        "/api/auth/change-password",
        json={"currentPassword": "not-it", "newPassword": "brand-new-1"},
        headers=lider.headers,
    )
    assert r.status_code == 401

    r = await client.post(
        "/api/auth/change-password",
        json={"currentPassword": "secret123", "newPassword": "brand-new-1"},
        headers=lider.headers,
    )
    assert r.status_code == 200

    r = await client.post(
        "/api/auth/signin", json={"email": lider.email, "password": "brand-new-1"}
    )
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_password_reset_flow(client: httpx.AsyncClient, make_account) -> None:
    lider = await make_account(Role.lider)

    r = await client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})
    assert r.status_code == 200
    assert "data" not in r.json()

    r = await client.post("/api/auth/forgot-password", json={"email": lider.email})
    assert r.status_code == 200
    reset_token = r.json()["data"]["resetToken"]

    # Reset tokens never open protected routes.
    r = await client.get("/api/events", headers={"Authorization": f"Bearer {reset_token}"})
    assert r.status_code == 401
    assert r.json()["kind"] == "InvalidCredential"

    r = await client.post(
        "/api/auth/reset-password", json={"token": "garbage", "newPassword": "after-reset"}
    )
    assert r.status_code == 400

    r = await client.post(
        "/api/auth/reset-password", json={"token": reset_token, "newPassword": "after-reset"}
    )
    assert r.status_code == 200

    r = await client.post("/api/auth/signin", json={"email": lider.email, "password": "after-reset"})
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_me_reflects_deactivation_immediately(
    client: httpx.AsyncClient, make_account
) -> None:
    admin = await make_account(Role.admin)
    lider = await make_account(Role.lider)

    r = await client.patch(f"/api/users/{lider.id}", json={"active": False}, headers=admin.headers)
    assert r.status_code == 200

    r = await client.get("/api/auth/me", headers=lider.headers)
    assert r.status_code == 401
    assert r.json()["kind"] == "PrincipalNotFound"
