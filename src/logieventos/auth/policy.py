"""
logieventos.auth.policy

The role policy table: the single source of truth for who may do what.

Responsibilities:
- Hold per-role global restrictions (`lider` read-only, `coordinador` never
  deletes) and per-resource allow-sets as plain data.
- Answer `is_permitted(role, resource_class, action)` as a pure function.
- Load the table once at startup, from the built-in default or a JSON file.

Evaluation order is fixed: the global restriction for the role is checked
first and can only narrow the resource allow-set. Anything the table does not
mention (unknown role, resource class or action) is not permitted.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict

from logieventos.auth.models import Action, Role


class ResourceClass(enum.StrEnum):
    user = "user"
    event = "event"
    contract = "contract"
    resource = "resource"
    provider = "provider"
    personnel = "personnel"
    report = "report"
    event_type = "event_type"
    resource_type = "resource_type"
    provider_type = "provider_type"
    personnel_type = "personnel_type"


_ALL = ["admin", "coordinador", "lider"]
_WRITERS = ["admin", "coordinador"]
_ADMIN = ["admin"]

_CATALOG_RULES = {"read": _ALL, "create": _WRITERS, "update": _WRITERS, "delete": _ADMIN}

DEFAULT_POLICY: dict[str, Any] = {
    "role_actions": {
        "admin": ["read", "create", "update", "delete"],
        "coordinador": ["read", "create", "update"],
        "lider": ["read"],
    },
    "resources": {
        "event": _CATALOG_RULES,
        "contract": _CATALOG_RULES,
        "resource": _CATALOG_RULES,
        "provider": _CATALOG_RULES,
        "personnel": _CATALOG_RULES,
        "event_type": _CATALOG_RULES,
        "resource_type": _CATALOG_RULES,
        "provider_type": _CATALOG_RULES,
        "personnel_type": _CATALOG_RULES,
        "report": {"read": _ALL, "create": _WRITERS, "update": _ADMIN, "delete": _ADMIN},
        "user": {"read": _ALL, "create": _WRITERS, "update": _WRITERS, "delete": _ADMIN},
    },
}


class PolicyDocument(BaseModel):
    """
    On-disk/in-memory shape of the table. Unknown roles or actions fail
    validation, so a malformed file stops the process at startup.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    role_actions: dict[Role, frozenset[Action]]
    resources: dict[str, dict[Action, frozenset[Role]]]


class PolicyTable:
    def __init__(
        self,
        *,
        role_actions: Mapping[Role, frozenset[Action]],
        resources: Mapping[str, Mapping[Action, frozenset[Role]]],
    ) -> None:
        self._role_actions = dict(role_actions)
        self._resources = {cls: dict(rules) for cls, rules in resources.items()}

    @classmethod
    def from_document(cls, doc: PolicyDocument) -> PolicyTable:
        return cls(role_actions=doc.role_actions, resources=doc.resources)

    @property
    def resource_classes(self) -> list[str]:
        return sorted(self._resources)

    def globally_allows(self, role: Role | str, action: Action | str) -> bool:
        try:
            role, action = Role(role), Action(action)
        except ValueError:
            return False
        return action in self._role_actions.get(role, frozenset())

    def is_permitted(self, role: Role | str, resource_class: str, action: Action | str) -> bool:
        # The global role restriction can only narrow.
        if not self.globally_allows(role, action):
            return False
        # Resource-specific allow-set.
        rules = self._resources.get(str(resource_class))
        if rules is None:
            return False
        return Role(role) in rules.get(Action(action), frozenset())

    def required_roles(self, resource_class: str, action: Action | str) -> list[str]:
        """
        Roles that would be granted `action` on `resource_class`, after global
        restrictions. Used for denial messages only.
        """

        return [
            role.value
            for role in Role
            if self.is_permitted(role, resource_class, action)
        ]


def load_policy(path: str | Path | None = None) -> PolicyTable:
    if path is None:
        doc = PolicyDocument.model_validate(DEFAULT_POLICY)
    else:
        doc = PolicyDocument.model_validate_json(Path(path).read_text(encoding="utf-8"))
    return PolicyTable.from_document(doc)


# --- Module Notes -----------------------------------------------------------
# The table is built once in `api.app.create_app` and stored on app.state;
# it is never mutated afterwards.
