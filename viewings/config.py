"""Application configuration using pydantic-settings pattern."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Property Viewing Scheduler"
    app_version: str = "0.1.0"
    app_env: str = Field(default="development")
    log_level: str = Field(default="INFO")

    # Database (libSQL / Turso)
    database_url: str | None = Field(default=None)
    database_auth_token: str | None = Field(default=None)

    # Identity tokens (issued by the external auth service)
    jwt_secret_key: str = Field(default="change-me")
    jwt_algorithm: str = Field(default="HS256")
    jwt_access_token_expire_minutes: int = Field(default=60 * 24 * 7)

    # Outbound email
    smtp_host: str | None = Field(default=None)
    smtp_port: int = Field(default=587)
    smtp_username: str | None = Field(default=None)
    smtp_password: str | None = Field(default=None)
    smtp_use_tls: bool = Field(default=True)
    mail_from_name: str = Field(default="SandraImmobiliere")
    mail_from_address: str | None = Field(default=None)
    client_url: str = Field(
        default="http://localhost:3000",
        description="Front-end base URL, linked from admin emails",
    )

    # Scheduling rules
    timezone: str = Field(
        default="UTC",
        description="Business timezone for naive dates and calendar-day stats",
    )
    conflict_window_minutes: int = Field(
        default=60,
        ge=0,
        description="Active meetings of one requester must be further apart than this",
    )
    upcoming_limit: int = Field(default=10, ge=1, le=100)
    notify_on_cancel: bool = Field(
        default=False,
        description="Email the requester when a meeting is cancelled",
    )

    # Admin account created on startup when set
    seed_admin_email: str | None = Field(default=None)
    seed_admin_name: str = Field(default="Administrator")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
