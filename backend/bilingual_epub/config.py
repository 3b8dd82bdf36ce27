"""Application configuration."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # LLM API keys
    openai_api_key: Optional[str] = None
    gemini_api_key: Optional[str] = None

    # Models and endpoints
    openai_model: str = "gpt-4o"
    gemini_model: str = "gemini-1.5-flash"
    openai_base_url: Optional[str] = None
    gemini_base_url: Optional[str] = None

    # Translation settings
    chunk_lines: int = Field(default=20, ge=1)  # lines per request
    max_concurrent_requests: int = Field(default=5, ge=1)
    max_retry_depth: int = Field(default=4, ge=0)  # 5 attempts per chunk lineage

    # Pacing (seconds)
    openai_fallback_cooldown: float = Field(default=1.0, ge=0.0)
    gemini_cooldown: float = Field(default=30.0, ge=0.0)

    # HTTP 429 handling inside a single backend call
    rate_limit_max_attempts: int = Field(default=5, ge=1)
    request_timeout: float = Field(default=600.0, gt=0.0)

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
