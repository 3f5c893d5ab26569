"""
logieventos.api.routers.auth

Account endpoints under `/api/auth`.

Responsibilities:
- Public signup (always `lider`) and signin, both returning an access token.
- Own-profile and own-password endpoints for any authenticated principal.
- Password reset through short-lived reset tokens.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import (
    HTTP_201_CREATED,
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_404_NOT_FOUND,
)

from logieventos.api.deps import db_session, settings_dep
from logieventos.api.schemas import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    SigninRequest,
    SignupRequest,
    UserOut,
    dump,
)
from logieventos.auth.deps import authenticated
from logieventos.auth.errors import AuthError
from logieventos.auth.jwt import JwtConfig, decode_reset_token, issue_reset_token, issue_token
from logieventos.auth.models import Principal, Role
from logieventos.auth.passwords import hash_password, verify_password
from logieventos.db.models import User
from logieventos.db.repositories.users import UserRepo, parse_id
from logieventos.observability.logging import get_logger
from logieventos.settings import Settings

log = get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

FORGOT_PASSWORD_MESSAGE = "If the email is registered, a reset token has been issued"


def _access_token(settings: Settings, user: User) -> str:
    return issue_token(
        cfg=JwtConfig.from_settings(settings), principal_id=str(user.id), role=user.role
    )


async def _current_user(session: AsyncSession, principal: Principal) -> User:
    user = await UserRepo(session).find_by_id(principal.id)
    if user is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.post("/signup", status_code=HTTP_201_CREATED)
async def signup(
    body: SignupRequest,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    user = await UserRepo(session).create(
        document=body.document,
        fullname=body.fullname,
        username=body.username,
        email=str(body.email),
        password_hash=hash_password(body.password, rounds=settings.bcrypt_rounds),
        role=Role.lider,
    )
    await session.commit()
    log.info("auth.signup", user_id=str(user.id))
    return {
        "success": True,
        "message": "User registered",
        "data": {"token": _access_token(settings, user), "user": dump(UserOut, user)},
    }


@router.post("/signin")
async def signin(
    body: SigninRequest,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    user = await UserRepo(session).get_by_email(str(body.email))
    if user is None:
        log.info("auth.signin_failed", reason="unknown_email")
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="User not found")
    if not verify_password(body.password, user.password_hash):
        log.info("auth.signin_failed", reason="bad_password", user_id=str(user.id))
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid password")
    if not user.active:
        log.info("auth.signin_failed", reason="inactive", user_id=str(user.id))
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Account is inactive")

    log.info("auth.signin", user_id=str(user.id), role=user.role.value)
    return {
        "success": True,
        "data": {
            "token": _access_token(settings, user),
            "user": dump(UserOut, user),
            "role": user.role.value,
        },
    }


@router.get("/me")
async def me(
    principal: Principal = Depends(authenticated(live=True)),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    user = await _current_user(session, principal)
    return {"success": True, "data": dump(UserOut, user)}


@router.post("/change-password")
async def change_password(
    body: ChangePasswordRequest,
    principal: Principal = Depends(authenticated(live=True)),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    user = await _current_user(session, principal)
    if not verify_password(body.current_password, user.password_hash):
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Current password is incorrect")

    await UserRepo(session).set_password(
        user, hash_password(body.new_password, rounds=settings.bcrypt_rounds)
    )
    await session.commit()
    log.info("auth.password_changed", user_id=str(user.id))
    return {"success": True, "message": "Password updated"}


@router.post("/forgot-password")
async def forgot_password(
    body: ForgotPasswordRequest,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    user = await UserRepo(session).get_by_email(str(body.email))
    if user is None:
        log.info("auth.reset_requested", known=False)
        return {"success": True, "message": FORGOT_PASSWORD_MESSAGE}

    token = issue_reset_token(
        cfg=JwtConfig.from_settings(settings), user_id=str(user.id), email=user.email
    )
    log.info("auth.reset_requested", known=True, user_id=str(user.id))
    # No mail transport: the token is handed back to the caller.
    return {"success": True, "message": FORGOT_PASSWORD_MESSAGE, "data": {"resetToken": token}}


@router.post("/reset-password")
async def reset_password(
    body: ResetPasswordRequest,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    try:
        claims = decode_reset_token(cfg=JwtConfig.from_settings(settings), token=body.token)
    except AuthError as e:
        log.info("auth.reset_rejected", kind=e.kind)
        raise HTTPException(
            status_code=HTTP_400_BAD_REQUEST, detail="Invalid or expired reset token"
        ) from e

    repo = UserRepo(session)
    user_id = parse_id(str(claims["id"]))
    user = await repo.get(user_id) if user_id is not None else None
    if user is None or user.email != str(claims["email"]).strip().lower():
        log.info("auth.reset_rejected", kind="StaleToken")
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Invalid or expired reset token")

    await repo.set_password(user, hash_password(body.new_password, rounds=settings.bcrypt_rounds))
    await session.commit()
    log.info("auth.password_reset", user_id=str(user.id))
    return {"success": True, "message": "Password has been reset"}
