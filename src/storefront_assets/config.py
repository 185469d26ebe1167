"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    admin_token: str
    supabase_url: str
    supabase_service_key: str
    aws_region: str
    aws_s3_bucket: str
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    aws_endpoint_url: str | None = None
    temp_prefix: str = "temp-uploads/"
    max_upload_bytes: int = 10 * 1024 * 1024
    sweep_interval_seconds: int = 300
    session_idle_seconds: int = 600
    temp_asset_ttl_seconds: int = 3600
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def normalize_prefix(raw: str) -> str:
    """Return a key prefix without a leading slash and with one trailing slash."""
    cleaned = raw.strip().strip("/")
    if not cleaned:
        raise ValueError("Key prefix must not be empty")
    return f"{cleaned}/"
