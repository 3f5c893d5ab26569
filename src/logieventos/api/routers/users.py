"""
logieventos.api.routers.users

User management endpoints.

Responsibilities:
- CRUD over accounts, gated by the `user` policy entry with live identity
  lookup (role changes and deactivation apply to the very next request).
- Row-level rules on top of the policy table:
  - lider only sees itself
  - coordinador never sees, creates or edits admins
  - only admin changes roles; nobody deletes their own account
"""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import (
    HTTP_201_CREATED,
    HTTP_400_BAD_REQUEST,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
)

from logieventos.api.deps import db_session, settings_dep
from logieventos.api.schemas import UserCreate, UserOut, UserUpdate, dump
from logieventos.auth.deps import authorize
from logieventos.auth.models import Action, Principal, Role
from logieventos.auth.passwords import hash_password
from logieventos.auth.policy import ResourceClass
from logieventos.db.models import User
from logieventos.db.repositories.users import UserRepo, parse_id
from logieventos.observability.logging import get_logger
from logieventos.settings import Settings

log = get_logger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


def _gate(action: Action):
    return authorize(ResourceClass.user, action, live=True)


async def _load(repo: UserRepo, user_id: uuid.UUID) -> User:
    user = await repo.get(user_id)
    if user is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("")
async def list_users(
    principal: Principal = Depends(_gate(Action.read)),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    repo = UserRepo(session)
    if principal.role is Role.lider:
        users = await repo.list_all(only_id=parse_id(principal.id))
    elif principal.role is Role.coordinador:
        users = await repo.list_all(exclude_role=Role.admin)
    else:
        users = await repo.list_all()
    return {"success": True, "data": [dump(UserOut, u) for u in users]}


@router.get("/{user_id}")
async def get_user(
    user_id: uuid.UUID,
    principal: Principal = Depends(_gate(Action.read)),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    user = await _load(UserRepo(session), user_id)
    if principal.role is Role.lider and str(user.id) != principal.id:
        raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="You can only view your own profile")
    if principal.role is Role.coordinador and user.role is Role.admin:
        raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="You cannot view admin users")
    return {"success": True, "data": dump(UserOut, user)}


@router.post("", status_code=HTTP_201_CREATED)
async def create_user(
    body: UserCreate,
    principal: Principal = Depends(_gate(Action.create)),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    if principal.role is Role.coordinador and body.role is Role.admin:
        raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="You cannot create admin users")

    user = await UserRepo(session).create(
        document=body.document,
        fullname=body.fullname,
        username=body.username,
        email=str(body.email),
        password_hash=hash_password(body.password, rounds=settings.bcrypt_rounds),
        role=body.role,
        active=body.active,
    )
    await session.commit()
    log.info("user.created", user_id=str(user.id), role=user.role.value, by=principal.id)
    return {"success": True, "message": "User created", "data": dump(UserOut, user)}


async def update_user(
    user_id: uuid.UUID,
    body: UserUpdate,
    principal: Principal = Depends(_gate(Action.update)),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    repo = UserRepo(session)
    user = await _load(repo, user_id)

    if principal.role is Role.coordinador and user.role is Role.admin:
        raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="You cannot update admin users")

    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if "role" in changes and not principal.is_admin:
        raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Only admins can change roles")
    if "email" in changes:
        changes["email"] = str(changes["email"]).strip().lower()
    if "password" in changes:
        changes["password_hash"] = hash_password(
            changes.pop("password"), rounds=settings.bcrypt_rounds
        )

    user = await repo.update(user, changes)
    await session.commit()
    log.info("user.updated", user_id=str(user.id), fields=sorted(changes), by=principal.id)
    return {"success": True, "message": "User updated", "data": dump(UserOut, user)}


router.add_api_route("/{user_id}", update_user, methods=["PUT"], name="replace_user")
router.add_api_route("/{user_id}", update_user, methods=["PATCH"], name="patch_user")


@router.delete("/{user_id}")
async def delete_user(
    user_id: uuid.UUID,
    principal: Principal = Depends(_gate(Action.delete)),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    if str(user_id) == principal.id:
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="You cannot delete yourself")
    repo = UserRepo(session)
    user = await _load(repo, user_id)
    await repo.delete(user)
    await session.commit()
    log.info("user.deleted", user_id=str(user_id), by=principal.id)
    return {"success": True, "message": "User deleted"}
