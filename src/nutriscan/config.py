"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    openai_api_key: str
    openai_model: str = "gpt-5.2"
    openai_text_model: str = "gpt-5-mini"
    openai_reasoning_effort: str | None = "medium"
    openai_store: bool = False
    off_base_url: str = "https://world.openfoodfacts.org/api/v2"
    off_user_agent: str = "NutriScan/0.1 (nutriscan@example.com)"
    product_cache_ttl_seconds: int = 86400
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
