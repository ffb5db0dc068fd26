"""Application settings using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """HypurrSpot configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars
    )

    # Application
    app_name: str = Field(default="HypurrSpot", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Minimum log level"
    )

    # Server
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=3000, ge=1, le=65535, description="Server port")
    cors_origin: str | None = Field(
        default=None, description="Allowed CORS origin for the frontend"
    )

    # Database - Supabase
    supabase_url: str = Field(description="Supabase project URL")
    supabase_key: SecretStr = Field(description="Supabase API key")
    postgres_schema: str = Field(
        default="hypurrspot", description="PostgreSQL schema for HypurrSpot tables"
    )

    # Upstream APIs
    hyperliquid_api_url: str = Field(
        default="https://api.hyperliquid.xyz/info",
        description="Hyperliquid info endpoint (spotMeta, tokenDetails)",
    )
    hypurrscan_api_url: str = Field(
        default="https://api.hypurrscan.io/pastAuctionsSpot",
        description="Hypurrscan spot deploy listing endpoint",
    )
    upstream_timeout_seconds: float = Field(
        default=30.0, gt=0, description="Per-request timeout for upstream calls"
    )

    # Request weight budget (shared by all upstream calls)
    rate_limit_weight_per_interval: int = Field(
        default=1200, ge=1, description="Request weight allowed per interval"
    )
    rate_limit_interval_seconds: float = Field(
        default=60.0, gt=0, description="Length of the weight budget window"
    )
    upstream_request_weight: int = Field(
        default=20, ge=1, description="Weight charged for each upstream call"
    )
    upstream_max_concurrency: int = Field(
        default=5, ge=1, description="Max simultaneous in-flight upstream calls"
    )
    upstream_max_retries: int = Field(
        default=5, ge=0, description="Retries after a rate-limited response"
    )
    upstream_backoff_base_seconds: float = Field(
        default=1.0, ge=0, description="Base delay for exponential backoff"
    )

    # Token sync job
    sync_enabled: bool = Field(default=True, description="Schedule the recurring token sync")
    sync_interval_seconds: int = Field(
        default=60, ge=5, description="Seconds between token sync passes"
    )
    sync_run_on_startup: bool = Field(
        default=True, description="Run the first sync pass immediately on startup"
    )
    sync_pass_timeout_seconds: float = Field(
        default=300.0, gt=0, description="Deadline for a single sync pass"
    )

    # Admin session
    session_secret: SecretStr = Field(description="HMAC key for admin session tokens")
    session_ttl_seconds: int = Field(
        default=3600, ge=60, description="Admin session lifetime in seconds"
    )
    session_cookie_name: str = Field(default="token", description="Session cookie name")
    admin_username: str = Field(default="admin", description="Admin account username")
    cron_secret: SecretStr = Field(
        default=SecretStr(""), description="Bearer secret for external sync triggers"
    )

    @field_validator("supabase_url", "hyperliquid_api_url", "hypurrscan_api_url")
    @classmethod
    def validate_http_url(cls, v: str) -> str:
        """Validate URL scheme."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept lowercase log level names."""
        return v.upper() if isinstance(v, str) else v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()  # type: ignore[call-arg]  # Values from env
