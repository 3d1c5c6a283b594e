"""Configuration settings for the bootcamp tracker worker."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Worker settings loaded from environment variables."""

    # Database Configuration
    postgres_db: str = Field(default="bootcamp_db")
    postgres_user: str = Field(default="bootcamp_user")
    postgres_password: str = Field(default="dev_password")
    postgres_host: str = Field(default="postgres")
    postgres_port: int = Field(default=5432)

    @property
    def database_url(self) -> str:
        """Construct async database URL from components."""
        return f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

    # Application Configuration
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    job_scheduler_enabled: bool = Field(
        default=True,
        description="Disable to run the worker without scheduling any jobs",
    )

    # Upstream credentials
    riot_api_key: str = Field(default="", description="Riot Games API key")
    twitch_client_id: str = Field(default="", description="Twitch application id")
    twitch_client_secret: str = Field(
        default="", description="Twitch application secret"
    )

    # Riot API rate limiting (application limiter wraps the per-call limiter)
    riot_app_rate_limit: int = Field(
        default=20, description="Requests allowed per window by the app limiter"
    )
    riot_app_max_concurrent: int = Field(default=10)
    riot_method_rate_limit: int = Field(
        default=10, description="Requests allowed per window by the per-call limiter"
    )
    riot_method_max_concurrent: int = Field(default=5)
    riot_rate_limit_window_seconds: float = Field(default=1.0)

    http_timeout_seconds: float = Field(default=10.0)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix for environment variables
        extra="forbid",  # Forbid extra fields for better type safety
    )


def get_settings() -> Settings:
    """Get application settings instance."""
    return Settings()


# Create a global settings instance lazily
settings: Settings | None = None


def get_global_settings() -> Settings:
    """Get or create the global settings instance."""
    global settings
    if settings is None:
        settings = get_settings()
    return settings
