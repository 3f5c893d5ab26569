"""
logieventos.db.repositories.users

Repository for `User` entities; also the user store behind identity resolution.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from logieventos.auth.models import Role
from logieventos.db.base import utcnow
from logieventos.db.models import User


def parse_id(value: str | uuid.UUID) -> uuid.UUID | None:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        document: int,
        fullname: str,
        username: str,
        email: str,
        password_hash: str,
        role: Role = Role.lider,
        active: bool = True,
    ) -> User:
        user = User(
            document=document,
            fullname=fullname.strip(),
            username=username.strip(),
            email=email.strip().lower(),
            password_hash=password_hash,
            role=role,
            active=active,
        )
        self._session.add(user)
        await self._session.flush()
        return user

    async def get(self, user_id: uuid.UUID) -> User | None:
        return await self._session.get(User, user_id)

    async def find_by_id(self, user_id: str) -> User | None:
        # User store contract for `auth.resolver.IdentityResolver`.
        parsed = parse_id(user_id)
        if parsed is None:
            return None
        return await self.get(parsed)

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email.strip().lower())
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list_all(
        self,
        *,
        exclude_role: Role | None = None,
        only_id: uuid.UUID | None = None,
    ) -> list[User]:
        stmt = select(User).order_by(User.created_at)
        if exclude_role is not None:
            stmt = stmt.where(User.role != exclude_role)
        if only_id is not None:
            stmt = stmt.where(User.id == only_id)
        return list((await self._session.execute(stmt)).scalars().all())

    async def update(self, user: User, changes: dict[str, Any]) -> User:
        for field, value in changes.items():
            setattr(user, field, value)
        user.updated_at = utcnow()
        await self._session.flush()
        return user

    async def set_password(self, user: User, password_hash: str) -> None:
        user.password_hash = password_hash
        user.updated_at = utcnow()
        await self._session.flush()

    async def delete(self, user: User) -> None:
        await self._session.delete(user)
        await self._session.flush()
