from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # App
    app_name: str = "weather-activities"
    log_level: str = "INFO"

    # Provider
    openmeteo_base_url: str = "https://api.open-meteo.com/v1"
    openmeteo_geocoding_url: str = "https://geocoding-api.open-meteo.com/v1"
    openmeteo_timeout_seconds: float = 5.0

    # Cache backend
    cache_backend: Literal["memory", "redis"] = "memory"
    redis_url: str = "redis://localhost:6379/0"

    # Cache tuning
    cache_ttl_forecast_seconds: int = 1800
    cache_ttl_city_search_seconds: int = 3600
    cache_sweep_interval_seconds: float = 300.0
    cache_sweep_threshold: int = 1000

    # Forecast
    default_forecast_days: int = 7


settings = Settings()
