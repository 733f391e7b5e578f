"""
Settings from the environment and the startup credential check.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from config import ConfigurationError, DEFAULT_CORS_ORIGINS, Settings, require_provider_credentials


def test_settings_from_env(monkeypatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "key-1")
    monkeypatch.setenv("GEMINI_MODEL", "gemini-custom")
    monkeypatch.setenv("DATABASE_URL", "sqlite:///./other.db")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")
    monkeypatch.setenv("RENDER", "true")

    settings = Settings.from_env()

    assert settings.gemini_api_key == "key-1"
    assert settings.gemini_model == "gemini-custom"
    assert settings.database_url == "sqlite:///./other.db"
    assert settings.cors_origins == ["http://a.test", "http://b.test"]
    assert settings.is_production is True


def test_settings_google_key_fallback_and_defaults(monkeypatch) -> None:
    for key in ("GEMINI_API_KEY", "GEMINI_MODEL", "CORS_ORIGINS"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("GOOGLE_API_KEY", "key-2")

    settings = Settings.from_env()

    assert settings.gemini_api_key == "key-2"
    assert settings.gemini_model == "gemini-2.0-flash-lite"
    assert settings.cors_origins == DEFAULT_CORS_ORIGINS


def test_missing_credential_is_fatal() -> None:
    with pytest.raises(ConfigurationError):
        require_provider_credentials(Settings(gemini_api_key=None))

    require_provider_credentials(Settings(gemini_api_key="present"))


def test_app_startup_aborts_without_credential(monkeypatch) -> None:
    import main

    monkeypatch.setattr(main, "settings", Settings(gemini_api_key=None, log_file=""))

    with pytest.raises(ConfigurationError):
        with TestClient(main.app):
            pass
