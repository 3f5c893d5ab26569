"""
logieventos.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (e.g., JWT secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Env-driven configuration (prefix `LOGI_`), defaults safe for local dev.
    """

    model_config = SettingsConfigDict(env_prefix="LOGI_", case_sensitive=False)

    # Environment controls toggle behavior like auto-init DB tables.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "logieventos-api"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 3000

    # Auth
    jwt_alg: str = "HS256"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)
    jwt_ttl_seconds: float = 24 * 60 * 60
    reset_token_ttl_seconds: float = 60 * 60
    # Checked in order; the first header carrying a token wins.
    token_headers: list[str] = Field(default_factory=lambda: ["authorization", "x-access-token"])
    # Routes that do not declare `live` fall back to this.
    live_identity_lookup: bool = False
    # Optional JSON document replacing the built-in policy table.
    policy_file: str | None = None
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./logieventos.db"

    # Listing
    page_size: int = Field(default=20, ge=1, le=500)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Tests build `Settings(...)` directly and hand it to `create_app`; the app
# overrides `get_settings` so every dependency sees the same instance.
