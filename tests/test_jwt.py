"""
tests.test_jwt

Token issuing/verification: claims, expiry and failure classification.
"""

from __future__ import annotations

import time
from datetime import UTC, datetime, timedelta

import jwt
import pytest

from logieventos.auth.errors import ExpiredCredential, InvalidCredential
from logieventos.auth.jwt import (
    JwtConfig,
    decode_reset_token,
    issue_reset_token,
    issue_token,
    verify_token,
)
from logieventos.auth.models import Role
from logieventos.settings import Settings

SECRET = "test-secret-with-enough-bytes-for-hs256"


@pytest.fixture
def cfg() -> JwtConfig:
    return JwtConfig.from_settings(Settings(jwt_secret=SECRET, jwt_ttl_seconds=3600))


def _raw(claims: dict, *, secret: str = SECRET) -> str:
    now = int(datetime.now(tz=UTC).timestamp())
    return jwt.encode({"iat": now, "exp": now + 60, **claims}, secret, algorithm="HS256")


def test_round_trip(cfg: JwtConfig) -> None:
    token = issue_token(cfg=cfg, principal_id="u-1", role=Role.coordinador)
    principal = verify_token(cfg=cfg, token=token)
    assert principal.id == "u-1"
    assert principal.role is Role.coordinador


def test_claims_carry_expiry_from_configuration(cfg: JwtConfig) -> None:
    token = issue_token(cfg=cfg, principal_id="u-1", role=Role.admin)
    claims = jwt.decode(token, SECRET, algorithms=["HS256"])
    assert claims["exp"] - claims["iat"] == 3600
    assert claims["role"] == "admin"


def test_expired_token(cfg: JwtConfig) -> None:
    token = issue_token(cfg=cfg, principal_id="u-1", role=Role.admin, ttl=timedelta(milliseconds=1))
    time.sleep(0.01)
    with pytest.raises(ExpiredCredential):
        verify_token(cfg=cfg, token=token)


def test_wrong_signature_is_invalid(cfg: JwtConfig) -> None:
    token = _raw({"id": "u-1", "role": "admin"}, secret="another-secret-with-enough-bytes-x")
    with pytest.raises(InvalidCredential):
        verify_token(cfg=cfg, token=token)


def test_garbage_is_invalid(cfg: JwtConfig) -> None:
    with pytest.raises(InvalidCredential):
        verify_token(cfg=cfg, token="not-a-jwt")


def test_roles_list_falls_back_to_first_known_role(cfg: JwtConfig) -> None:
    token = _raw({"id": "u-1", "roles": ["auditor", "lider", "admin"]})
    assert verify_token(cfg=cfg, token=token).role is Role.lider


def test_explicit_role_wins_over_roles_list(cfg: JwtConfig) -> None:
    token = _raw({"id": "u-1", "role": "coordinador", "roles": ["admin"]})
    assert verify_token(cfg=cfg, token=token).role is Role.coordinador


@pytest.mark.parametrize(
    "claims",
    [
        {"id": "u-1"},
        {"id": "u-1", "role": "superuser"},
        {"id": "u-1", "roles": "admin"},
        {"id": "", "role": "admin"},
        {"role": "admin"},
    ],
)
def test_unusable_subject_or_role_is_invalid(cfg: JwtConfig, claims: dict) -> None:
    with pytest.raises(InvalidCredential):
        verify_token(cfg=cfg, token=_raw(claims))


def test_reset_token_is_not_an_access_token(cfg: JwtConfig) -> None:
    token = issue_reset_token(cfg=cfg, user_id="u-1", email="a@example.com")
    with pytest.raises(InvalidCredential):
        verify_token(cfg=cfg, token=token)

    claims = decode_reset_token(cfg=cfg, token=token)
    assert claims["id"] == "u-1"
    assert claims["email"] == "a@example.com"


def test_access_token_is_not_a_reset_token(cfg: JwtConfig) -> None:
    token = issue_token(cfg=cfg, principal_id="u-1", role=Role.admin)
    with pytest.raises(InvalidCredential):
        decode_reset_token(cfg=cfg, token=token)
