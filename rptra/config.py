"""
Configuration and settings for the RPTRA backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_prefix: str = Field(default="/api")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # MongoDB. Without a URI the app runs on in-memory backends.
    mongodb_uri: Optional[str] = Field(default=None)
    mongodb_database: Optional[str] = Field(default=None)
    mongodb_timeout_ms: int = Field(default=5000)
    gridfs_bucket: str = Field(default="uploads")

    # Auth
    jwt_secret: str = Field(default="rptra-dev-secret")
    jwt_algorithm: str = Field(default="HS256")
    jwt_expires_hours: int = Field(default=24)
    cookie_name: str = Field(default="admin-token", alias="AUTH_COOKIE_NAME")
    cookie_secure: bool = Field(default=False, alias="AUTH_COOKIE_SECURE")
    bcrypt_rounds: int = Field(default=12)

    max_upload_bytes: int = Field(default=50 * 1024 * 1024)

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, alias="RPTRA_USE_IN_MEMORY_BACKENDS"
    )
    log_level: str = Field(default="INFO")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
