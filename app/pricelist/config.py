"""
Application configuration using Pydantic Settings.

Automatically loads environment variables from .env files.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Server
    port: int = 3000

    # Shared secret for the Authorization: Bearer header
    bearer_token: str | None = None

    # OpenAI
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o"
    openai_max_tokens: int = 4096
    openai_timeout_seconds: float = 120.0

    # "text" sends the extracted PDF text, "file" embeds the PDF itself
    extraction_mode: Literal["text", "file"] = "text"

    # Temporary documents
    upload_dir: Path = Path("uploads")
    max_upload_bytes: int = 50 * 1024 * 1024

    # Rate limiting (per client address)
    rate_limit_max_requests: int = 100
    rate_limit_window_seconds: int = 15 * 60

    # Timeouts
    navigation_timeout_ms: int = 30_000
    pipeline_timeout_seconds: float = 300.0

    model_config = SettingsConfigDict(
        env_file=Path(__file__).parent / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application configuration loaded from environment.
    """
    return Settings()
