"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from health_ledger.services.ledger import PersistenceMode

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    timezone: str = "UTC"
    supabase_url: str
    supabase_service_key: str
    persistence_mode: PersistenceMode = PersistenceMode.WRITE_AFTER
    suggestion_limit: int = 5
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
