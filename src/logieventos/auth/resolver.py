"""
logieventos.auth.resolver

Identity resolution: token claims vs. the live user record.

Responsibilities:
- Pass the token-derived principal through when the route does not need
  live state.
- Otherwise re-read the user and build the effective principal from the
  persisted record (role changes and deactivation take effect immediately).
"""

from __future__ import annotations

from typing import Protocol

from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from logieventos.auth.errors import PrincipalNotFound
from logieventos.auth.models import Principal, parse_role


class UserRecord(Protocol):
    role: str
    active: bool


class UserStore(Protocol):
    async def find_by_id(self, user_id: str) -> UserRecord | None: ...


class IdentityResolver:
    def __init__(self, store: UserStore) -> None:
        self._store = store

    async def resolve(self, principal: Principal, *, live: bool) -> Principal:
        if not live:
            return principal

        try:
            user = await self._store.find_by_id(principal.id)
        except (TimeoutError, PoolTimeoutError) as e:
            # Fail closed: a lookup that cannot complete is a missing principal.
            raise PrincipalNotFound("User lookup timed out") from e

        if user is None or not user.active:
            raise PrincipalNotFound()

        role = parse_role(user.role)
        if role is None:
            raise PrincipalNotFound("User has no valid role")
        return Principal(id=principal.id, role=role)


# --- Module Notes -----------------------------------------------------------
# Read-only by contract: nothing here may mutate the user record.
