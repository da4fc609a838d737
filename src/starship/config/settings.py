"""Application settings for starship-server.

All runtime configuration comes from environment variables (optionally
through a ``.env`` file) and is validated by pydantic-settings.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class StarshipSettings(BaseSettings):
    """Settings shared by the GraphQL API, the download endpoint and the workers."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Core Application Settings
    app_name: str = Field(default="starship-server")
    app_version: str = Field(default="0.9.0")
    environment: str = Field(default="development")
    debug: bool = Field(default=False)

    # Server Configuration
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=4000)

    # Document store (PostgreSQL jsonb collections)
    database_url: str = Field(default="postgresql://localhost:5432/starship")
    db_pool_min_size: int = Field(default=5)
    db_pool_max_size: int = Field(default=20)
    db_command_timeout: int = Field(default=60)

    # Event transport; Redis pub/sub is used when a URL is configured
    redis_url: Optional[str] = Field(default=None)
    subscriber_queue_size: int = Field(default=256)

    # Session tokens
    jwt_secret: SecretStr = Field(default="change-me-in-production")
    jwt_algorithm: str = Field(default="HS256")
    jwt_expire_days: int = Field(default=30)

    # Object storage (any S3 compatible endpoint)
    bucket_name: str = Field(default="starship")
    bucket_endpoint: Optional[str] = Field(default=None)
    bucket_access_key: Optional[str] = Field(default=None)
    bucket_access_secret: Optional[SecretStr] = Field(default=None)
    bucket_region: str = Field(default="us-east-1")
    bucket_force_path_style: bool = Field(default=False)

    # Pre-signed URL validity windows, in seconds
    upload_url_ttl: int = Field(default=120)
    download_url_ttl: int = Field(default=3600)
    preview_url_ttl: int = Field(default=86400)

    # Storage quota ceiling per user, in bytes
    upload_cap_bytes: int = Field(default=26843531856)

    # Used in mention notifications
    site_url: str = Field(default="http://localhost:3000")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"

    @property
    def uses_distributed_events(self) -> bool:
        """Whether events fan out through Redis instead of in-process queues."""
        return bool(self.redis_url)


@lru_cache()
def get_settings() -> StarshipSettings:
    """Get cached settings instance."""
    return StarshipSettings()
