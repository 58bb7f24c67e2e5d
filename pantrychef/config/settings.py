# pantrychef/config/settings.py
"""
Application configuration using pydantic-settings (pydantic v2 style).

This centralizes environment-driven configuration. Prefer reading values
from environment variables; do not rely on os.getenv inline defaults which
can silently hide missing configuration.
"""
from __future__ import annotations

import logging
from typing import List, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application configuration loaded from environment.

    Relevant environment variables:
      - SUPABASE_URL
      - SUPABASE_SERVICE_ROLE_KEY
      - DATABASE_URL
      - STORAGE_BACKEND            ("supabase" or "sql")
      - ALLOW_HEADER_AUTH          (dev only: trust X-User-Id)
      - RECOMMENDATION_CACHE_TTL   (seconds, 0 disables)
      - RECOMMENDATION_CACHE_SIZE
      - HEALTH_CHECK_TIMEOUT
      - FAIL_ON_DB_STARTUP
      - CREATE_SCHEMA_ON_STARTUP
      - CORS_ORIGINS               (JSON list, e.g. ["https://app.example.com"])
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Supabase
    supabase_url: Optional[str] = None
    supabase_service_role_key: Optional[str] = None

    # SQLAlchemy backend
    database_url: Optional[str] = None

    storage_backend: Literal["supabase", "sql"] = "supabase"

    # Auth
    allow_header_auth: bool = False

    # Recommendations
    recommendation_cache_ttl: float = Field(default=0.0, ge=0)
    recommendation_cache_size: int = Field(default=1024, ge=1)

    # Startup / health
    health_check_timeout: float = 5.0
    fail_on_db_startup: bool = False
    create_schema_on_startup: bool = False

    # HTTP
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    # --- validators / post-init checks ---
    @field_validator("supabase_url", "supabase_service_role_key", "database_url")
    @classmethod
    def maybe_strip(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    def model_post_init(self, __context) -> None:  # pydantic v2 hooks
        """
        Light-weight validation/notice that runs after model is constructed.
        Uses logging (not print) so messages show up in server logs.
        """
        if self.storage_backend == "supabase" and not (
            self.supabase_url and self.supabase_service_role_key
        ):
            logger.warning(
                "Supabase credentials are not configured. "
                "Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY to enable DB features."
            )
        if self.storage_backend == "sql" and not self.database_url:
            logger.warning("STORAGE_BACKEND=sql but DATABASE_URL is not set.")

        if self.allow_header_auth:
            logger.warning(
                "ALLOW_HEADER_AUTH enabled: X-User-Id is trusted without verification. "
                "Never enable this in production."
            )


# single exporter
settings = Settings()
