"""
Configuration and settings for the feedback backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")

    # Document store (any SQLAlchemy URL; Postgres expected in production)
    database_url: Optional[str] = Field(default=None)

    # S3-compatible storage for certificate templates
    s3_endpoint: Optional[str] = Field(default=None)
    s3_region: Optional[str] = Field(default=None)
    s3_bucket: Optional[str] = Field(default=None)
    aws_access_key_id: Optional[str] = Field(default=None)
    aws_secret_access_key: Optional[str] = Field(default=None)

    # Feedback sessions (Redis)
    redis_url: Optional[str] = Field(default=None)
    session_ttl_seconds: int = Field(default=3600, ge=60)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    # Admin API access. Unset means the admin API is open (local development).
    admin_api_key: Optional[str] = Field(default=None)

    # Used to build the public feedback URL shown to administrators.
    public_base_url: str = Field(default="http://localhost:5173")

    # Verification codes
    verification_cooldown_seconds: int = Field(default=60, ge=0)
    code_delivery_mode: Literal["fixed", "memory", "webhook"] = Field(
        default="fixed"
    )
    verification_code_ttl_seconds: int = Field(default=600, gt=0)
    fixed_verification_code: str = Field(default="123456")
    delivery_webhook_url: Optional[str] = Field(default=None)
    delivery_timeout_seconds: float = Field(default=5.0, gt=0)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
