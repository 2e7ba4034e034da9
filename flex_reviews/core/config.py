from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "flex-reviews-api"
    environment: str = "dev"
    log_level: str = "INFO"
    hostaway_base_url: str = "https://api.hostaway.com/v1"
    hostaway_account_id: str | None = None
    hostaway_api_key: str | None = None
    hostaway_scope: str = "general"
    token_buffer_seconds: float = 60.0
    token_store_backend: Literal["memory", "file"] = "memory"
    token_store_path: str | None = None
    upstream_timeout_seconds: float = 10.0
    seed_reviews_enabled: bool = True
    google_places_api_key: str | None = None
    google_places_base_url: str = "https://maps.googleapis.com/maps/api/place"
    places_cache_ttl_seconds: float = 24 * 60 * 60
    database_url: str | None = None
    database_pool_min_size: int = 1
    database_pool_max_size: int = 10
    otel_enabled: bool = True
    otel_service_name: str = "flex-reviews-api"
    otel_exporter_otlp_endpoint: str | None = None
    # JSON object, e.g. FR_OTEL_EXPORTER_OTLP_HEADERS='{"x-api-key": "..."}'
    otel_exporter_otlp_headers: dict[str, str] = Field(default_factory=dict)
    otel_trace_sample_ratio: float = 1.0
    otel_log_correlation: bool = True

    model_config = SettingsConfigDict(env_prefix="FR_", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
