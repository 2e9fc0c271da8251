"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    editor_api_base_url: str = "http://localhost:5000"
    editor_api_token: str | None = None
    editor_api_timeout_seconds: float = 15
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    cache_db_path: str | None = None
    cache_capacity_bytes: int = 5 * 1024 * 1024
    cache_key_prefix: str = "photo_editor_state_"
    last_active_key: str = "photo_editor_last_active_image"
    draft_debounce_seconds: float = 0.5
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def uses_supabase(self) -> bool:
        """Whether edit history is read from Supabase instead of the REST API."""
        return bool(self.supabase_url and self.supabase_service_key)
