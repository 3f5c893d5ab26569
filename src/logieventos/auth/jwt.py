"""
logieventos.auth.jwt

JWT issuing and verification helpers.

Responsibilities:
- Issue access tokens at login/signup (`{id, role, iat, exp}`).
- Issue short-lived password-reset tokens with a distinct purpose.
- Verify access tokens into a `Principal`, classifying failures as
  expired vs. invalid.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import ExpiredSignatureError, InvalidTokenError

from logieventos.auth.errors import ExpiredCredential, InvalidCredential
from logieventos.auth.models import Principal, Role, primary_role
from logieventos.settings import Settings

ACCESS_PURPOSE = "access"
RESET_PURPOSE = "password_reset"


@dataclass(frozen=True, slots=True)
class JwtConfig:
    alg: str
    secret: str
    ttl: timedelta
    reset_ttl: timedelta

    @classmethod
    def from_settings(cls, settings: Settings) -> JwtConfig:
        return cls(
            alg=settings.jwt_alg,
            secret=settings.jwt_secret,
            ttl=timedelta(seconds=settings.jwt_ttl_seconds),
            reset_ttl=timedelta(seconds=settings.reset_token_ttl_seconds),
        )


def _encode(cfg: JwtConfig, claims: dict[str, Any], ttl: timedelta) -> str:
    now = datetime.now(tz=UTC)
    payload: dict[str, Any] = {
        **claims,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
    }
    return jwt.encode(payload, cfg.secret, algorithm=cfg.alg)


def _decode(cfg: JwtConfig, token: str, *, require: list[str]) -> dict[str, Any]:
    try:
        return jwt.decode(
            token,
            cfg.secret,
            algorithms=[cfg.alg],
            options={"require": ["exp", "iat", *require]},
        )
    except ExpiredSignatureError as e:
        raise ExpiredCredential() from e
    except InvalidTokenError as e:
        raise InvalidCredential(f"Invalid token: {e}") from e


def issue_token(
    *,
    cfg: JwtConfig,
    principal_id: str,
    role: Role | str,
    ttl: timedelta | None = None,
) -> str:
    # Expiry comes from configuration; callers only override it in tests.
    return _encode(
        cfg,
        {"id": str(principal_id), "role": str(role), "purpose": ACCESS_PURPOSE},
        ttl if ttl is not None else cfg.ttl,
    )


def verify_token(*, cfg: JwtConfig, token: str) -> Principal:
    payload = _decode(cfg, token, require=["id"])

    if payload.get("purpose", ACCESS_PURPOSE) != ACCESS_PURPOSE:
        raise InvalidCredential("Token not valid for API access")

    principal_id = str(payload.get("id") or "")
    if not principal_id:
        raise InvalidCredential("Invalid token subject")

    roles_raw = payload.get("roles")
    if roles_raw is not None and not isinstance(roles_raw, list):
        raise InvalidCredential("Invalid token roles")
    role = primary_role(payload.get("role"), roles_raw)
    if role is None:
        raise InvalidCredential("Invalid token role")

    return Principal(id=principal_id, role=role)


def issue_reset_token(*, cfg: JwtConfig, user_id: str, email: str) -> str:
    return _encode(
        cfg,
        {"id": str(user_id), "email": email, "purpose": RESET_PURPOSE},
        cfg.reset_ttl,
    )


def decode_reset_token(*, cfg: JwtConfig, token: str) -> dict[str, Any]:
    payload = _decode(cfg, token, require=["id", "email"])
    if payload.get("purpose") != RESET_PURPOSE:
        raise InvalidCredential("Token not valid for password reset")
    return payload


# --- Module Notes -----------------------------------------------------------
# Verification never touches storage; `auth.resolver` owns live lookups.
