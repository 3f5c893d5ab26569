"""
logieventos.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings, DB sessions and paging.
- Encapsulate app.state access patterns (engine/sessionmaker).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass

from fastapi import Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from logieventos.settings import Settings


def settings_dep(request: Request) -> Settings:
    # The settings instance handed to `create_app`, not a fresh env read.
    return request.app.state.settings  # type: ignore[attr-defined]


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    # Created in the lifespan of `logieventos.api.app.create_app`.
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Handlers commit explicitly.
    async with session_factory() as session:
        yield session


@dataclass(frozen=True, slots=True)
class Paging:
    page: int
    limit: int


def paging(
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1, le=500),
    settings: Settings = Depends(settings_dep),
) -> Paging:
    return Paging(page=page, limit=limit or settings.page_size)


# --- Module Notes -----------------------------------------------------------
# Authorization dependencies live in `logieventos.auth.deps`; they reuse
# `db_session` so the identity read shares the handler's session.
