"""
Application configuration and settings.
Centralized configuration management using Pydantic Settings.
"""
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Allow extra fields from .env files that aren't defined here
    model_config = SettingsConfigDict(
        extra="ignore",
        case_sensitive=False,
        env_file=[".env", ".env.local"],  # .env.local overrides .env
    )

    # Application settings
    app_name: str = "OpenRouter Relay"
    environment: str = Field(default="local", description="local, staging or production")
    debug: bool = Field(default=False, description="Emit debug-level relay logs")

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000

    # Upstream settings
    openrouter_api_key: str = Field(default="", description="Bearer key sent upstream")
    openrouter_url: str = "https://openrouter.ai/api/v1/chat/completions"
    default_model: str = "google/gemini-2.0-pro-exp-02-05:free"
    default_referer: str = Field(
        default="https://localhost",
        description="HTTP-Referer sent upstream when the caller has no Origin header",
    )
    client_title: str = Field(default="OpenRouter Relay", description="X-Title sent upstream")
    upstream_timeout: Optional[float] = Field(
        default=None, description="Seconds; None disables the upstream timeout"
    )

    # Seconds to let in-flight relays finish on shutdown before cancelling them
    shutdown_grace_period: float = 5.0

    # Logging settings
    log_level: str = "INFO"
    enable_request_logging: bool = True

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_local(self) -> bool:
        """Check if running in local development environment."""
        return self.environment == "local"


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
