"""
entity_store.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for persistence and logging.
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ENTITY_STORE_", case_sensitive=False)

    # dev/test create tables on startup; prod expects an externally managed schema.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "entity-store"
    log_level: str = "INFO"

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./entity_store.db"
    database_echo: bool = False


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()
