"""Configuration management using pydantic-settings."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Image API credentials (optional: the studio can run prompt-only)
    gemini_api_key: str = ""
    gcp_project_id: str = ""
    vertex_ai_location: str = "us-central1"

    # Generation settings
    default_model: str = "imagen-3.0-generate-001"
    request_timeout_seconds: float = 120.0
    max_sessions: int = 256

    # Persisted credential store (API key + project id)
    credentials_file: str = "data/credentials.json"

    # Server settings
    backend_host: str = "localhost"
    backend_port: int = 8000
    frontend_port: int = 5173


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
