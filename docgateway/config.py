# ABOUTME: Application configuration and settings
# ABOUTME: Loads gateway, AI endpoint, and validation limits from environment variables using pydantic-settings

from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    model_config = SettingsConfigDict(env_file=".env")

    environment: str = "development"
    database_url: str = "sqlite:///./data/docgateway.db"

    # AI inference endpoint (OpenAI-compatible chat completions)
    ai_api_key: str | None = None
    ai_gateway_url: str = "https://ai.gateway.lovable.dev/v1/chat/completions"
    ai_model: str = "google/gemini-2.5-flash"
    ai_timeout_seconds: float = 30.0
    ai_max_content_chars: int = 10000

    # Input bounds for POST /analyze
    max_content_bytes: int = 100000
    max_content_words: int = 10000
    max_title_length: int = 255

    documents_list_limit: int = 100
    upgrade_url: str = "/settings/subscription"

    log_level: str = "INFO"
    log_json: bool = True


@lru_cache
def get_settings() -> Settings:
    """Returns cached settings instance."""
    return Settings()
