"""
Application configuration using Pydantic Settings for type safety and validation.
Loads from environment variables with sensible defaults for development.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for the Mobility Dashboard API."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Mobility Dashboard API"
    app_version: str = "1.0.0"
    debug: bool = Field(default=False, description="Enable debug mode")

    # API
    api_prefix: str = "/api"
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:3001"]

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Outbound HTTP
    user_agent: str = "MobilityDashboard/1.0"
    upstream_timeout: float = Field(default=10.0, ge=5, le=60, description="Seconds per upstream request")

    # GBFS
    gbfs_cache_ttl: int = Field(default=30, ge=0, description="Seconds a GBFS document is reused; 0 disables")
    operator_fanout_limit: int = Field(default=3, ge=1, le=20)
    gbfs_default_language: str = "en"

    # Parking dataset (NYC Open Data, SODA 2.x)
    parking_dataset_url: str = "https://data.cityofnewyork.us/resource/7cgt-uhhz.json"
    parking_row_limit: int = Field(default=1000, ge=1)
    parking_result_limit: int = Field(default=50, ge=1)
    parking_default_radius_miles: float = Field(default=0.5, gt=0)
    parking_max_radius_miles: float = Field(default=10.0, gt=0)
    parking_prefilter_multiplier: float = Field(default=2.0, ge=1)
    parking_prefilter_min_miles: float = Field(default=2.0, ge=0)
    parking_sqft_per_space: float = Field(default=300.0, gt=0)

    # Reverse geocoding
    geocode_url: str = "https://nominatim.openstreetmap.org/reverse"
    geocode_batch_limit: int = Field(default=20, ge=1)


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance to avoid repeated parsing."""
    return Settings()
