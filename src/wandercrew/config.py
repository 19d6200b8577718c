"""
WanderCrew - Configuration and settings.

Settings are read from the environment and an optional .env file.
Supabase credentials are only needed by the Supabase-backed onboarding
adapters and the web auth dependency.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    wandercrew_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Supabase (optional until a Supabase-backed adapter is used)
    supabase_url: str | None = None
    supabase_service_role_key: str | None = None

    # Onboarding progress storage
    onboarding_store: Literal["memory", "file", "supabase"] = "file"
    onboarding_storage_key: str = "wandercrew-onboarding-progress"
    onboarding_progress_dir: Path = Path(".onboarding_progress")

    # Auto-save
    onboarding_autosave: bool = True
    onboarding_autosave_interval_seconds: float = 3.0

    # HTTP host: wizards kept in memory before the least recently used is evicted
    onboarding_max_active_wizards: int = 1000

    @property
    def is_development(self) -> bool:
        return self.wandercrew_env == "development"

    @property
    def is_production(self) -> bool:
        return self.wandercrew_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


class _SettingsProxy:
    """Lazy proxy for settings to avoid loading .env at import time."""

    _instance: Settings | None = None

    def __getattr__(self, name: str):
        if self._instance is None:
            self._instance = get_settings()
        return getattr(self._instance, name)


settings = _SettingsProxy()
