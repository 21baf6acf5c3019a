from __future__ import annotations

import pytest

from entity_store.settings import Settings, get_settings


def test_defaults() -> None:
    s = Settings()
    assert s.env == "dev"
    assert s.database_url.startswith("sqlite+aiosqlite://")
    assert s.database_echo is False


def test_env_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENTITY_STORE_ENV", "prod")
    monkeypatch.setenv("ENTITY_STORE_DATABASE_URL", "postgresql+asyncpg://db/app")
    monkeypatch.setenv("ENTITY_STORE_LOG_LEVEL", "debug")

    s = Settings()

    assert s.env == "prod"
    assert s.database_url == "postgresql+asyncpg://db/app"
    assert s.log_level == "debug"


def test_get_settings_is_cached() -> None:
    assert get_settings() is get_settings()
