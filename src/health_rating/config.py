"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    products_table: str = "products"
    batch_size: int = 50
    batch_interval_hours: float = 6
    stale_after_hours: float = 24
    neutral_recheck_after_hours: float = 12
    significant_change_threshold: float = 0.5
    rating_cache_ttl_seconds: int = 24 * 60 * 60
    cache_max_size: int = 5000
    cache_sweep_interval_seconds: int = 3600
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
