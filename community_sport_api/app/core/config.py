"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
API starts without any configuration; override them via environment
variables in a real deployment.  Tests build their own ``Settings``
instance and pass it to ``create_app``.
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Community Sport API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: Optional[str] = os.getenv("LOG_FILE") or None
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))

    # Optional static token for privileged access.  Requests carrying this
    # token may read and assign roles for any user.  Leave empty to
    # disable the privileged path entirely.
    admin_token: str = os.getenv("ADMIN_TOKEN", "")

    # Path to the SQLite file backing the catalog store.  Relative paths
    # are resolved against the project root by ``core.db``.
    database_url: str = os.getenv("DATABASE_URL", "community_sport.db")

    # Freshness window of the programs and FAQ caches, in seconds.
    cache_ttl_seconds: float = float(os.getenv("CACHE_TTL_SECONDS", "300"))

    featured_limit: int = int(os.getenv("FEATURED_LIMIT", "6"))


# Default settings for ``uvicorn community_sport_api.app.main:app``.
# Environment variables must be set before this module is imported.
settings = Settings()
