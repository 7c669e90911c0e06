"""
Application configuration via pydantic-settings.
All config read from environment variables with sensible defaults for local dev.
"""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # App
    app_name: str = "forecast-api"
    app_version: str = "0.1.0"
    environment: str = Field(default="development", pattern=r"^(development|staging|production)$")
    debug: bool = False
    log_level: str = Field(default="INFO", pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")

    # Redis
    redis_url: str = Field(default="redis://localhost:6379/0")
    redis_connect_timeout_s: float = Field(default=5.0, gt=0)

    # Sentry
    sentry_dsn: str = ""
    sentry_traces_sample_rate: float = Field(default=0.1, ge=0.0, le=1.0)

    # Upstreams (Open-Meteo, no API key required)
    geocoding_url: str = "https://geocoding-api.open-meteo.com/v1/search"
    forecast_url: str = "https://api.open-meteo.com/v1/forecast"
    upstream_timeout_s: float = Field(default=5.0, gt=0)

    # Forecast cache
    # 15 minutes: upstream data is hourly, so staleness stays well under one step.
    cache_ttl_seconds: int = Field(default=900, ge=1)
    cache_key_prefix: str = "weather:"
    coalesce_cache_misses: bool = False

    # Chart
    chart_width_px: int = Field(default=800, ge=100, le=4000)
    chart_height_px: int = Field(default=600, ge=100, le=4000)

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}


settings = Settings()
