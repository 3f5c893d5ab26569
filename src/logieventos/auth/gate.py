"""
logieventos.auth.gate

The authorization gate: the one enforcement point in front of every
protected handler.

Responsibilities:
- Extract the bearer credential from an ordered list of header shapes.
- Verify it, resolve the effective principal and consult the policy table.
- Emit a structured `authz.rejected` event for every credential or policy reject.

The gate keeps no per-request state; one instance is shared by all requests.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from logieventos.auth.errors import (
    AuthError,
    Forbidden,
    IdentityLookupFailed,
    MissingCredential,
)
from logieventos.auth.jwt import JwtConfig, verify_token
from logieventos.auth.models import Action, Principal
from logieventos.auth.policy import PolicyTable
from logieventos.auth.resolver import IdentityResolver
from logieventos.observability.logging import get_logger

log = get_logger(__name__)

BEARER_HEADER = "authorization"


@dataclass(frozen=True, slots=True)
class RouteBinding:
    """
    Static policy declaration attached to a route at registration time.

    `resource_class=None` means "any authenticated principal".
    `live=None` defers to the `live_identity_lookup` setting.
    """

    resource_class: str | None
    action: Action
    live: bool | None = None


def extract_token(headers: Mapping[str, str], sources: Sequence[str]) -> str | None:
    for name in sources:
        raw = headers.get(name) or headers.get(name.lower())
        if not raw or not raw.strip():
            continue
        if name.lower() == BEARER_HEADER:
            scheme, _, value = raw.strip().partition(" ")
            if scheme.lower() != "bearer" or not value.strip():
                continue
            return value.strip()
        return raw.strip()
    return None


class AuthorizationGate:
    def __init__(
        self,
        *,
        jwt_cfg: JwtConfig,
        policy: PolicyTable,
        token_headers: Sequence[str],
        live_default: bool = False,
    ) -> None:
        self._jwt_cfg = jwt_cfg
        self._policy = policy
        self._token_headers = tuple(token_headers)
        self._live_default = live_default

    async def authorize(
        self,
        *,
        headers: Mapping[str, str],
        binding: RouteBinding,
        resolver: IdentityResolver,
    ) -> Principal:
        principal: Principal | None = None
        try:
            token = extract_token(headers, self._token_headers)
            if token is None:
                raise MissingCredential()

            principal = verify_token(cfg=self._jwt_cfg, token=token)

            live = self._live_default if binding.live is None else binding.live
            try:
                principal = await resolver.resolve(principal, live=live)
            except AuthError:
                raise
            except Exception as e:
                log.exception("authz.lookup_failed", principal_id=principal.id)
                raise IdentityLookupFailed() from e

            if binding.resource_class is not None and not self._policy.is_permitted(
                principal.role, binding.resource_class, binding.action
            ):
                raise Forbidden(
                    required_roles=self._policy.required_roles(
                        binding.resource_class, binding.action
                    ),
                    current_role=principal.role.value,
                )
        except IdentityLookupFailed:
            # Already logged with its traceback as `authz.lookup_failed`.
            raise
        except AuthError as e:
            log.warning(
                "authz.rejected",
                kind=e.kind,
                role=principal.role.value if principal else None,
                principal_id=principal.id if principal else None,
                resource=binding.resource_class,
                action=binding.action.value,
            )
            raise

        return principal


# --- Module Notes -----------------------------------------------------------
# FastAPI wiring (request.state, per-request sessions) lives in `auth.deps`.
