"""
logieventos.auth.passwords

Password hashing for stored user credentials.

Responsibilities:
- Hash new passwords with bcrypt at the configured cost (`bcrypt_rounds`).
- Check a candidate password against a stored hash without raising.
"""

from __future__ import annotations

import bcrypt


def hash_password(password: str, *, rounds: int = 10) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash; treat as a mismatch.
        return False


# --- Module Notes -----------------------------------------------------------
# bcrypt reads at most 72 bytes; the request schemas reject longer passwords
# before they reach `hash_password`.
