"""
QR History Backend - Application Configuration
================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or a .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time.

Missing store credentials are NOT an import-time failure: the serverless
function must still answer with a "not configured" envelope, while the process
server refuses to start (see `validate_required`).
"""

from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from qrhistory.exceptions import ConfigurationError


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Only the two Supabase variables are required; everything else has a
    development-friendly default.
    """

    # ── Store (Supabase) ──────────────────────────────────────────────────
    # Format: https://<project-ref>.supabase.co
    supabase_url: str = Field(default="", description="Supabase project URL")
    supabase_anon_key: str = Field(default="", description="Supabase anon (public) key")

    # The table is owned by the store, not by this service (no migrations)
    history_table: str = Field(default="qr_history")

    # Fixed cap for GET /history; there is no pagination beyond it
    history_limit: int = Field(default=50, ge=1, le=1000)

    # ── HTTP ──────────────────────────────────────────────────────────────
    api_prefix: str = Field(default="/api")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=1, le=65535)

    # Frontend bundle served at "/" by the process server (skipped if absent)
    static_dir: str = Field(default="public")

    # ── Presentation ──────────────────────────────────────────────────────
    # IANA zone name used for the `time` field of history items.
    # None = the server's local timezone.
    display_timezone: Optional[str] = Field(default=None)

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

    @field_validator("api_prefix")
    @classmethod
    def normalize_api_prefix(cls, v: str) -> str:
        """'api/' and '/api' both become '/api'; '' and '/' mean no prefix."""
        stripped = v.strip().strip("/")
        return f"/{stripped}" if stripped else ""

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @property
    def missing_required(self) -> List[str]:
        missing = []
        if not self.supabase_url.strip():
            missing.append("SUPABASE_URL")
        if not self.supabase_anon_key.strip():
            missing.append("SUPABASE_ANON_KEY")
        return missing

    @property
    def is_configured(self) -> bool:
        return not self.missing_required

    def validate_required(self) -> None:
        """
        What:  Validates that the store credentials are configured.
        When:  Called by the process server before it starts listening, and
               lazily by the store factory on the first request.
        Raises:
            ConfigurationError: listing every missing variable.
        """
        missing = self.missing_required
        if missing:
            raise ConfigurationError(missing=missing)


# Singleton instance - imported throughout the application
settings = Settings()
