"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PLACEHOLDER_KEYS = {"demo_key", "changeme", "change-me"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_env: Literal["development", "production", "test"] = "development"
    app_name: str = "Tastelog"

    # Database
    database_url: str = "sqlite+aiosqlite:///./tastelog.db"

    # Generative model
    gemini_api_key: str = ""
    gemini_model: str = "gemini-1.5-flash"
    generative_timeout: float = 8.0

    # Discovery APIs
    tmdb_api_key: str = ""
    lastfm_api_key: str = ""
    foursquare_api_key: str = ""
    foursquare_near: str = "Istanbul,Turkey"
    discovery_timeout: float = 5.0

    @field_validator("gemini_api_key", "tmdb_api_key", "lastfm_api_key", "foursquare_api_key")
    @classmethod
    def drop_placeholder_keys(cls, v: str) -> str:
        """Treat template placeholders as missing credentials."""
        v = v.strip()
        if v.lower() in PLACEHOLDER_KEYS:
            return ""
        if v.lower().startswith("your_") and v.lower().endswith("_here"):
            return ""
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"

    @property
    def database_url_async(self) -> str:
        """Get async database URL (postgresql+asyncpg for Postgres)."""
        url = str(self.database_url)
        return url.replace("postgresql://", "postgresql+asyncpg://")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
