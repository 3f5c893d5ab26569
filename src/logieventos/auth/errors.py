"""
logieventos.auth.errors

Authorization failure taxonomy.

Responsibilities:
- One exception type per failure kind, each carrying its HTTP status.
- Render a failure into the JSON denial body returned to clients.
"""

from __future__ import annotations

from typing import Any

from starlette.status import (
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_500_INTERNAL_SERVER_ERROR,
)


class AuthError(Exception):
    kind: str = "AuthError"
    status_code: int = HTTP_401_UNAUTHORIZED
    default_message: str = "Authentication failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_body(self) -> dict[str, Any]:
        return {"success": False, "message": self.message, "kind": self.kind}


class MissingCredential(AuthError):
    kind = "MissingCredential"
    default_message = "Authentication token required"


class ExpiredCredential(AuthError):
    kind = "ExpiredCredential"
    default_message = "Token expired"


class InvalidCredential(AuthError):
    kind = "InvalidCredential"
    default_message = "Invalid token"


class PrincipalNotFound(AuthError):
    kind = "PrincipalNotFound"
    default_message = "User not found or inactive"


class IdentityLookupFailed(AuthError):
    """The identity store failed for a reason other than a timeout."""

    kind = "InternalError"
    status_code = HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

class Forbidden(AuthError):
    kind = "Forbidden"
    status_code = HTTP_403_FORBIDDEN
    default_message = "Insufficient permissions for this action"

    def __init__(
        self,
        *,
        required_roles: list[str],
        current_role: str,
        message: str | None = None,
    ) -> None:
        super().__init__(message)
        self.required_roles = required_roles
        self.current_role = current_role

    def to_body(self) -> dict[str, Any]:
        body = super().to_body()
        # Informational only; clients must not use these for enforcement.
        body["requiredRoles"] = self.required_roles
        body["currentRole"] = self.current_role
        return body


# --- Module Notes -----------------------------------------------------------
# The exception handler in `api.app` renders these. Only the password-reset
# endpoint catches them, to report a bad reset token as a 400.
