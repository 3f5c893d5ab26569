"""
logieventos.auth.models

Auth domain models.

Responsibilities:
- Define the closed role and action enumerations.
- Define the authenticated identity type (`Principal`) attached to requests.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass


class Role(enum.StrEnum):
    admin = "admin"
    coordinador = "coordinador"
    lider = "lider"


class Action(enum.StrEnum):
    read = "read"
    create = "create"
    update = "update"
    delete = "delete"


def parse_role(value: object) -> Role | None:
    try:
        return Role(str(value))
    except ValueError:
        return None


def primary_role(role: object, roles: Iterable[object] | None = None) -> Role | None:
    """
    Pick the single effective role.

    An explicit `role` claim wins; otherwise the first known entry of `roles`.
    Returns None when nothing usable is present.
    """

    if role is not None:
        return parse_role(role)
    for candidate in roles or ():
        parsed = parse_role(candidate)
        if parsed is not None:
            return parsed
    return None


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated caller identity, request-scoped.
    """

    id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.admin


# --- Module Notes -----------------------------------------------------------
# Keep this model minimal; handlers must take the role from here, never from
# request bodies.
