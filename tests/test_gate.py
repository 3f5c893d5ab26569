"""
tests.test_gate

Authorization gate ordering and failure classification, against an in-memory
user store.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

import pytest
from structlog.testing import capture_logs

from logieventos.auth.errors import (
    ExpiredCredential,
    Forbidden,
    IdentityLookupFailed,
    InvalidCredential,
    MissingCredential,
    PrincipalNotFound,
)
from logieventos.auth.gate import AuthorizationGate, RouteBinding, extract_token
from logieventos.auth.jwt import JwtConfig, issue_reset_token, issue_token
from logieventos.auth.models import Action, Role
from logieventos.auth.policy import ResourceClass, load_policy
from logieventos.auth.resolver import IdentityResolver
from logieventos.settings import Settings

HEADERS = ["authorization", "x-access-token"]


@dataclass
class FakeUser:
    role: str
    active: bool = True


class FakeStore:
    def __init__(self, users: dict[str, FakeUser] | None = None, error: Exception | None = None):
        self.users = users or {}
        self.error = error
        self.calls: list[str] = []

    async def find_by_id(self, user_id: str) -> FakeUser | None:
        self.calls.append(user_id)
        if self.error is not None:
            raise self.error
        return self.users.get(user_id)


@pytest.fixture
def cfg() -> JwtConfig:
    return JwtConfig.from_settings(Settings(jwt_secret="gate-test-secret-with-enough-bytes"))


@pytest.fixture
def gate(cfg: JwtConfig) -> AuthorizationGate:
    return AuthorizationGate(jwt_cfg=cfg, policy=load_policy(), token_headers=HEADERS)


def _bearer(token: str) -> dict[str, str]:
    return {"authorization": f"Bearer {token}"}


def test_extract_token_precedence() -> None:
    headers = {"authorization": "Bearer from-bearer", "x-access-token": "from-custom"}
    assert extract_token(headers, HEADERS) == "from-bearer"
    assert extract_token({"x-access-token": " raw "}, HEADERS) == "raw"
    # A non-bearer Authorization value does not shadow the custom header.
    assert extract_token({"authorization": "Basic abc", "x-access-token": "t"}, HEADERS) == "t"
    assert extract_token({"authorization": "Bearer   "}, HEADERS) is None
    assert extract_token({}, HEADERS) is None


@pytest.mark.asyncio
async def test_missing_token_never_reaches_the_store(gate: AuthorizationGate) -> None:
    store = FakeStore()
    with pytest.raises(MissingCredential):
        await gate.authorize(
            headers={},
            binding=RouteBinding(ResourceClass.event, Action.read, live=True),
            resolver=IdentityResolver(store),
        )
    assert store.calls == []


@pytest.mark.asyncio
async def test_invalid_token_never_reaches_the_store(gate: AuthorizationGate) -> None:
    store = FakeStore()
    with pytest.raises(InvalidCredential):
        await gate.authorize(
            headers=_bearer("abc.def.ghi"),
            binding=RouteBinding(ResourceClass.event, Action.read, live=True),
            resolver=IdentityResolver(store),
        )
    assert store.calls == []


@pytest.mark.asyncio
async def test_expired_token(gate: AuthorizationGate, cfg: JwtConfig) -> None:
    token = issue_token(cfg=cfg, principal_id="u-1", role=Role.admin, ttl=timedelta(seconds=-5))
    with pytest.raises(ExpiredCredential):
        await gate.authorize(
            headers=_bearer(token),
            binding=RouteBinding(ResourceClass.event, Action.read),
            resolver=IdentityResolver(FakeStore()),
        )


@pytest.mark.asyncio
async def test_claims_path_allows_without_store(gate: AuthorizationGate, cfg: JwtConfig) -> None:
    store = FakeStore()
    token = issue_token(cfg=cfg, principal_id="u-1", role=Role.coordinador)
    principal = await gate.authorize(
        headers={"x-access-token": token},
        binding=RouteBinding(ResourceClass.event, Action.create),
        resolver=IdentityResolver(store),
    )
    assert principal.role is Role.coordinador
    assert store.calls == []


@pytest.mark.asyncio
async def test_forbidden_lists_permitted_roles(gate: AuthorizationGate, cfg: JwtConfig) -> None:
    token = issue_token(cfg=cfg, principal_id="u-2", role=Role.coordinador)
    with pytest.raises(Forbidden) as excinfo:
        await gate.authorize(
            headers=_bearer(token),
            binding=RouteBinding(ResourceClass.event, Action.delete),
            resolver=IdentityResolver(FakeStore()),
        )
    body = excinfo.value.to_body()
    assert body["kind"] == "Forbidden"
    assert body["requiredRoles"] == ["admin"]
    assert body["currentRole"] == "coordinador"
    assert excinfo.value.status_code == 403


@pytest.mark.asyncio
async def test_lider_cannot_create(gate: AuthorizationGate, cfg: JwtConfig) -> None:
    token = issue_token(cfg=cfg, principal_id="u-3", role=Role.lider)
    with pytest.raises(Forbidden):
        await gate.authorize(
            headers=_bearer(token),
            binding=RouteBinding(ResourceClass.contract, Action.create),
            resolver=IdentityResolver(FakeStore()),
        )


@pytest.mark.asyncio
async def test_live_lookup_uses_stored_role(gate: AuthorizationGate, cfg: JwtConfig) -> None:
    # Demoted after the token was issued.
    store = FakeStore({"u-4": FakeUser(role="lider")})
    token = issue_token(cfg=cfg, principal_id="u-4", role=Role.admin)
    with pytest.raises(Forbidden) as excinfo:
        await gate.authorize(
            headers=_bearer(token),
            binding=RouteBinding(ResourceClass.event, Action.delete, live=True),
            resolver=IdentityResolver(store),
        )
    assert excinfo.value.current_role == "lider"
    assert store.calls == ["u-4"]


@pytest.mark.asyncio
@pytest.mark.parametrize("users", [{}, {"u-5": FakeUser(role="admin", active=False)}])
async def test_live_lookup_rejects_missing_or_inactive(
    gate: AuthorizationGate, cfg: JwtConfig, users: dict
) -> None:
    token = issue_token(cfg=cfg, principal_id="u-5", role=Role.admin)
    with pytest.raises(PrincipalNotFound):
        await gate.authorize(
            headers=_bearer(token),
            binding=RouteBinding(ResourceClass.event, Action.read, live=True),
            resolver=IdentityResolver(FakeStore(users)),
        )


@pytest.mark.asyncio
async def test_lookup_timeout_fails_closed(gate: AuthorizationGate, cfg: JwtConfig) -> None:
    token = issue_token(cfg=cfg, principal_id="u-6", role=Role.admin)
    with pytest.raises(PrincipalNotFound):
        await gate.authorize(
            headers=_bearer(token),
            binding=RouteBinding(ResourceClass.event, Action.read, live=True),
            resolver=IdentityResolver(FakeStore(error=TimeoutError())),
        )


@pytest.mark.asyncio
async def test_store_failure_is_an_internal_error(gate: AuthorizationGate, cfg: JwtConfig) -> None:
    token = issue_token(cfg=cfg, principal_id="u-7", role=Role.admin)
    with capture_logs() as logs, pytest.raises(IdentityLookupFailed) as excinfo:
        await gate.authorize(
            headers=_bearer(token),
            binding=RouteBinding(ResourceClass.event, Action.read, live=True),
            resolver=IdentityResolver(FakeStore(error=RuntimeError("db down"))),
        )
    assert excinfo.value.status_code == 500
    assert excinfo.value.to_body()["kind"] == "InternalError"
    # Logged once, as a lookup failure rather than an authorization reject.
    assert [e["event"] for e in logs] == ["authz.lookup_failed"]
    assert logs[0]["principal_id"] == "u-7"
    assert logs[0]["log_level"] == "error"


@pytest.mark.asyncio
async def test_policy_denial_is_logged_with_its_context(
    gate: AuthorizationGate, cfg: JwtConfig
) -> None:
    token = issue_token(cfg=cfg, principal_id="u-10", role=Role.lider)
    with capture_logs() as logs, pytest.raises(Forbidden):
        await gate.authorize(
            headers=_bearer(token),
            binding=RouteBinding(ResourceClass.provider, Action.update),
            resolver=IdentityResolver(FakeStore()),
        )
    assert logs == [
        {
            "event": "authz.rejected",
            "log_level": "warning",
            "kind": "Forbidden",
            "role": "lider",
            "principal_id": "u-10",
            "resource": "provider",
            "action": "update",
        }
    ]


@pytest.mark.asyncio
async def test_live_default_applies_when_route_does_not_decide(cfg: JwtConfig) -> None:
    gate = AuthorizationGate(
        jwt_cfg=cfg, policy=load_policy(), token_headers=HEADERS, live_default=True
    )
    store = FakeStore({"u-8": FakeUser(role="coordinador")})
    token = issue_token(cfg=cfg, principal_id="u-8", role=Role.coordinador)
    await gate.authorize(
        headers=_bearer(token),
        binding=RouteBinding(ResourceClass.event, Action.read),
        resolver=IdentityResolver(store),
    )
    assert store.calls == ["u-8"]


@pytest.mark.asyncio
async def test_authenticated_binding_skips_policy(gate: AuthorizationGate, cfg: JwtConfig) -> None:
    token = issue_token(cfg=cfg, principal_id="u-9", role=Role.lider)
    principal = await gate.authorize(
        headers=_bearer(token),
        binding=RouteBinding(None, Action.update),
        resolver=IdentityResolver(FakeStore()),
    )
    assert principal.role is Role.lider


@pytest.mark.asyncio
async def test_reset_token_is_rejected_by_gate(gate: AuthorizationGate, cfg: JwtConfig) -> None:
    token = issue_reset_token(cfg=cfg, user_id="u-1", email="a@example.com")
    with pytest.raises(InvalidCredential):
        await gate.authorize(
            headers=_bearer(token),
            binding=RouteBinding(ResourceClass.event, Action.read),
            resolver=IdentityResolver(FakeStore()),
        )
