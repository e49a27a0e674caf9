"""
Storefront Edge API — Application Configuration
================================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by main.py (wiring) and by the services that need limits.
When:  Loaded once at module import time; validated before app starts.

Remote store credentials:
    Two keys are configured for the same Supabase project:
    - anon key:         used for every read path (edge tier)
    - service role key: used only for writes and admin listings
    Both ship with local-development defaults pointing at `supabase start`
    on localhost. Deployments override them through the environment.
"""

from typing import List

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings

LOCAL_DEV_ANON_KEY = "local-dev-anon-key"
LOCAL_DEV_SERVICE_ROLE_KEY = "local-dev-service-role-key"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have defaults suitable for local development against
    a locally running Supabase stack. Production deployments MUST override
    the Supabase URL and both keys.
    """

    # ── Remote Store (Supabase) ───────────────────────────────────────────
    # What: Base URL of the Supabase project (PostgREST + Storage live under it)
    # The NEXT_PUBLIC_* names are accepted so an existing frontend .env can be reused
    supabase_url: str = Field(
        default="http://localhost:54321",
        validation_alias=AliasChoices("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL"),
        description="Supabase project URL",
    )
    supabase_anon_key: str = Field(
        default=LOCAL_DEV_ANON_KEY,
        validation_alias=AliasChoices("SUPABASE_ANON_KEY", "NEXT_PUBLIC_SUPABASE_ANON_KEY"),
        description="Anonymous (read-only) API key",
    )
    supabase_service_role_key: str = Field(
        default=LOCAL_DEV_SERVICE_ROLE_KEY,
        validation_alias=AliasChoices("SUPABASE_SERVICE_ROLE_KEY"),
        description="Service role (elevated) API key used for writes",
    )

    # What: Sent as X-Client-Info on every remote request; the admin handle appends "-admin"
    client_info: str = Field(default="storefront-edge")

    # What: Upper bound on how long an edge read waits for the remote store
    # A read that loses this race is answered from fallback data instead
    edge_timeout_seconds: float = Field(default=10.0, gt=0, le=60)

    # What: Transport-level timeout for the underlying httpx client
    remote_timeout_seconds: float = Field(default=30.0, gt=0, le=300)

    # ── Uploads ───────────────────────────────────────────────────────────
    # What: Cache lifetime (seconds) stamped on uploaded blobs by Supabase Storage
    upload_cache_control: str = Field(default="3600")

    # Default: 10MB = 10 * 1024 * 1024 = 10485760
    max_upload_size: int = Field(default=10_485_760, ge=1_048_576, le=52_428_800)

    # What: Page size used when listing the generic assets bucket
    asset_list_limit: int = Field(default=100, ge=1, le=1000)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated URLs (parsed by the property below)
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("supabase_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Public URLs are built by string concatenation; keep the base clean."""
        return v.rstrip("/")

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "populate_by_name": True,
        "extra": "ignore",
    }

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that remote store credentials are configured.
        When:  Called during app startup (lifespan).
        How:   Checks each credential and raises ValueError listing every problem.
        """
        errors = []
        if self.supabase_anon_key == LOCAL_DEV_ANON_KEY:
            errors.append("SUPABASE_ANON_KEY is not set; using the local development key.")
        if self.supabase_service_role_key == LOCAL_DEV_SERVICE_ROLE_KEY:
            errors.append(
                "SUPABASE_SERVICE_ROLE_KEY is not set; using the local development key."
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Process-wide settings instance
settings = Settings()
