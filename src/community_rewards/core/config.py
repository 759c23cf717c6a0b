"""Application configuration management using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="community-rewards", description="Application name")
    environment: Literal["development", "testing", "staging", "production"] = Field(
        default="development", description="Runtime environment"
    )
    debug: bool = Field(default=False, description="Debug mode flag")
    secret_key: str = Field(
        default="dev-secret-key-change-in-production",
        description="Secret key for signing access tokens",
    )

    # API
    api_v1_prefix: str = Field(default="/api/v1", description="API v1 prefix")
    allowed_origins: list[str] = Field(
        default=["http://localhost:3000"],
        description="CORS allowed origins",
    )

    # Database
    db_host: str = Field(default="localhost", description="PostgreSQL host")
    db_port: int = Field(default=5432, description="PostgreSQL port")
    db_user: str = Field(default="postgres", description="PostgreSQL user")
    db_password: str = Field(default="postgres", description="PostgreSQL password")
    db_name: str = Field(default="community_rewards", description="PostgreSQL database name")
    db_url: str | None = Field(
        default=None, description="Full async database URL, overrides the components"
    )
    db_pool_size: int = Field(default=10, description="Connection pool size")
    db_max_overflow: int = Field(default=20, description="Connections allowed above pool size")
    db_pool_timeout: int = Field(
        default=30, description="Seconds to wait for a pooled connection"
    )

    # Store
    store_lock_timeout_ms: int = Field(
        default=5000,
        ge=1,
        description="Maximum wait for a row lock inside a redemption transaction",
    )

    # Redemption rules
    redemption_min_quantity: int = Field(default=1, ge=1, description="Minimum quantity per redemption")
    redemption_max_quantity: int = Field(default=10, ge=1, description="Maximum quantity per redemption")
    shipping_notes_max_length: int = Field(
        default=500, ge=1, description="Shipping notes are truncated to this length"
    )

    # Notifications
    notification_link_url: str = Field(
        default="/rewards-app/status",
        description="Link attached to redemption notifications",
    )
    notification_webhook_url: str | None = Field(
        default=None, description="Optional webhook receiving every member notification"
    )
    notification_timeout_seconds: float = Field(
        default=10.0, description="Webhook request timeout"
    )

    # JWT Authentication
    access_token_expire_minutes: int = Field(
        default=60, description="Access token expiration in minutes"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["json", "console"] = Field(
        default="json", description="Log output format"
    )

    @computed_field
    @property
    def database_url(self) -> str:
        """Construct async database URL from components."""
        if self.db_url:
            return self.db_url
        return (
            f"postgresql+asyncpg://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
