"""
Application configuration settings.

Loads configuration from environment variables using pydantic-settings.
Provides a single shared instance for application-wide access.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Loads and stores application configuration from environment variables."""

    # Application
    app_name: str = "Conversation Proxy API"
    environment: str = "development"
    debug: bool = True

    # Database
    database_url: str

    # Redis (per-user mutation lock)
    redis_url: str
    lock_ttl_seconds: int = 30

    # OpenAI
    openai_api_key: str
    openai_model: str = "gpt-4o-mini"
    openai_timeout_seconds: int = 20
    openai_temperature: float = 0.7
    openai_max_tokens: int = 500
    system_prompt: Optional[str] = None

    # Header forwarded by the authenticating gateway; unset means only
    # upstream middleware can set the caller id
    identity_header: Optional[str] = None

    # pydantic-settings configuration:
    # - Load variables from a .env file
    # - Ignore extra variables to avoid validation errors
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Singleton settings instance for application-wide use
settings = Settings()
