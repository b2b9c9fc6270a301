# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# Gameplay constants (XP rewards, level threshold, daily budget) live here too
# so they can be tuned per environment without a deploy.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str = Field(
        ...,
        description="Supabase anon/public API key"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_JWT_SECRET: str = Field(
        ...,
        description="Legacy HS256 JWT secret used to verify Supabase access tokens"
    )

    STORAGE_BUCKET: str = Field(
        default="lucky-love-images",
        description="Supabase Storage bucket holding couple photos"
    )

    # -------------------------------------------------------------------------
    # Redis Configuration (for Celery)
    # -------------------------------------------------------------------------

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for Celery broker"
    )

    # -------------------------------------------------------------------------
    # Gameplay
    # -------------------------------------------------------------------------

    CHALLENGE_XP_REWARD: int = Field(
        default=5,
        ge=0,
        description="XP granted to the couple when a challenge is approved"
    )

    DAILY_CHALLENGE_XP_REWARD: int = Field(
        default=1,
        ge=0,
        description="XP granted to the couple when a daily challenge is completed"
    )

    COUPLE_LEVEL_XP_THRESHOLD: int = Field(
        default=20,
        ge=1,
        description="XP needed to reach the next couple level"
    )

    DAILY_CHALLENGE_MAX_ITEMS: int = Field(
        default=4,
        ge=1,
        description="Maximum daily challenges per couple per day"
    )

    DAILY_CHALLENGE_STAR_BUDGET: int = Field(
        default=5,
        ge=1,
        description="Stars a couple can distribute across one day's challenges"
    )

    NOTIFICATION_FEED_LIMIT: int = Field(
        default=60,
        ge=1,
        le=500,
        description="How many recent events are aggregated into the activity feed"
    )

    DAILY_MESSAGE_CACHE_TTL_SECONDS: int = Field(
        default=86400,
        ge=1,
        description="How long the message of the day stays memoized"
    )

    QUESTION_HISTORY_LIMIT: int = Field(
        default=30,
        ge=1,
        le=500,
        description="How many past questions GET /home/questions returns"
    )

    STORE_MAX_RETRIES: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Attempts for compare-and-swap writes before giving up"
    )

    # -------------------------------------------------------------------------
    # Push Notifications
    # -------------------------------------------------------------------------

    PUSH_NOTIFICATIONS_ENABLED: bool = Field(
        default=True,
        description="Enqueue Expo push notifications for partner activity"
    )

    EXPO_PUSH_URL: str = Field(
        default="https://exp.host/--/api/v2/push/send",
        description="Expo push API endpoint"
    )

    PUSH_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        gt=0,
        le=60,
        description="HTTP timeout for a single push delivery"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:8081",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:8081, https://app.example.com" -> ["http://localhost:8081", "https://app.example.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
