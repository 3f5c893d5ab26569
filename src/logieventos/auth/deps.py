"""
logieventos.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Bind a route to its static `(resource_class, action)` declaration.
- Run the shared `AuthorizationGate` and attach the effective principal to
  `request.state.principal`.
"""

from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from logieventos.api.deps import db_session
from logieventos.auth.gate import AuthorizationGate, RouteBinding
from logieventos.auth.models import Action, Principal
from logieventos.auth.resolver import IdentityResolver
from logieventos.db.repositories.users import UserRepo


def gate_from_app(request: Request) -> AuthorizationGate:
    # Built once at startup in `logieventos.api.app.create_app`.
    return request.app.state.gate  # type: ignore[attr-defined]


def _gate_dependency(binding: RouteBinding):
    async def _dep(
        request: Request,
        gate: AuthorizationGate = Depends(gate_from_app),
        session: AsyncSession = Depends(db_session),
    ) -> Principal:
        principal = await gate.authorize(
            headers=request.headers,
            binding=binding,
            resolver=IdentityResolver(UserRepo(session)),
        )
        request.state.principal = principal
        return principal

    return _dep


def authorize(resource_class: str, action: Action, *, live: bool | None = None):
    """
    Dependency factory: `Depends(authorize(ResourceClass.event, Action.delete))`.
    """

    return _gate_dependency(RouteBinding(resource_class=resource_class, action=action, live=live))


def authenticated(*, live: bool = True):
    """
    Any valid principal, no policy check (own profile, own password).
    """

    return _gate_dependency(RouteBinding(resource_class=None, action=Action.read, live=live))


# --- Module Notes -----------------------------------------------------------
# Handlers must read the role from the principal returned here, never from the
# request body.
