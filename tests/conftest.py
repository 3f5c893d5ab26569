"""
tests.conftest

Shared fixtures: an app bound to a throwaway SQLite file, an ASGI client and
a helper that seeds a user with a given role and signs it in.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from itertools import count

import httpx
import pytest_asyncio
from fastapi import FastAPI

from logieventos.api.app import create_app
from logieventos.auth.models import Role
from logieventos.auth.passwords import hash_password
from logieventos.db.repositories.users import UserRepo
from logieventos.settings import Settings

PASSWORD = "secret123"


@dataclass(frozen=True)
class Account:
    id: str
    email: str
    role: Role
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@pytest_asyncio.fixture
async def app(tmp_path) -> AsyncIterator[FastAPI]:
    settings = Settings(
        env="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'logieventos.db'}",
        jwt_secret="api-test-secret-with-enough-bytes-1",
        bcrypt_rounds=4,
        log_level="WARNING",
    )
    app = create_app(settings=settings)
    # httpx's ASGITransport does not run lifespan events; drive them here.
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def make_account(
    app: FastAPI, client: httpx.AsyncClient
) -> Callable[..., Awaitable[Account]]:
    seq = count(1)

    async def _make(role: Role, *, active: bool = True) -> Account:
        n = next(seq)
        email = f"{role.value}{n}@example.com"
        async with app.state.sessionmaker() as session:
            user = await UserRepo(session).create(
                document=100_000 + n,
                fullname=f"{role.value.title()} {n}",
                username=f"{role.value}{n}",
                email=email,
                password_hash=hash_password(PASSWORD, rounds=4),
                role=role,
                active=active,
            )
            await session.commit()
            user_id = str(user.id)

        r = await client.post("/api/auth/signin", json={"email": email, "password": PASSWORD})
        token = r.json()["data"]["token"] if r.status_code == 200 else ""
        return Account(id=user_id, email=email, role=role, token=token)

    return _make
