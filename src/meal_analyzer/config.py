"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from meal_analyzer.domain.analysis import FailurePolicy, TransportMode

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    openai_api_key: str
    openai_model: str = "gpt-4o"
    openai_max_tokens: int = 1000
    openai_timeout_seconds: float = 30.0
    storage_bucket: str = "meals"
    signed_url_ttl_seconds: int = 60
    transport_mode: TransportMode = TransportMode.INLINE
    failure_policy: FailurePolicy = FailurePolicy.FALLBACK
    jpeg_quality: int = 80
    default_confidence: float = 0.85
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
