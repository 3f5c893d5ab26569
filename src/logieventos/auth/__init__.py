"""
logieventos.auth

Authentication/authorization package.

Responsibilities:
- JWT issuing and verification.
- Identity resolution against the user store.
- The role policy table and the authorization gate built on top of it.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Route modules should depend on `auth.deps` only; the other modules are
# framework-free and unit-tested on their own.
