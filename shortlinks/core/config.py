"""Application configuration settings."""

from typing import Optional
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"
    public_base_url: Optional[str] = None

    # Application
    app_title: str = "URL Shortener Service"
    app_version: str = "0.1.0"
    app_description: str = "In-memory URL shortening service with access analytics"

    # URL Shortener
    default_validity_minutes: int = 30
    default_short_code_length: int = 6
    max_short_code_length: int = 10
    min_short_code_length: int = 3
    max_generation_attempts: int = 100
    access_history_limit: int = 10

    # Log collector
    log_collector_url: str = "http://localhost:3000"
    log_stack: str = "backend"
    log_timeout_seconds: float = 5.0
    log_retry_attempts: int = 3
    log_retry_delay_seconds: float = 1.0


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
