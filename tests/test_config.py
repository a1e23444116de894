import pytest
from pydantic import ValidationError

from orderdesk.core.config import EnvironmentMode, Settings, get_settings


def test_defaults():
    settings = get_settings()

    assert settings.is_development
    assert settings.session_ttl_minutes == 15
    assert settings.session_ttl_ms == 900_000
    assert settings.session_storage_key == "userSession"
    assert settings.cart_storage_key == "selectedItems"
    assert settings.validate_production_config() == []


def test_env_mode_is_case_insensitive(monkeypatch):
    monkeypatch.setenv("ENV_MODE", "STAGING")
    settings = Settings()
    assert settings.env_mode == EnvironmentMode.STAGING
    assert settings.use_real_services


def test_invalid_env_mode(monkeypatch):
    monkeypatch.setenv("ENV_MODE", "qa")
    with pytest.raises(ValidationError):
        Settings()


def test_session_lifetime_must_be_positive(monkeypatch):
    monkeypatch.setenv("SESSION_TTL_MINUTES", "0")
    with pytest.raises(ValidationError):
        Settings()


def test_production_reports_missing_settings(monkeypatch):
    monkeypatch.setenv("ENV_MODE", "production")
    monkeypatch.delenv("API_TOKEN", raising=False)
    monkeypatch.delenv("EVENT_CHANNEL_URL", raising=False)

    missing = Settings().validate_production_config()
    assert missing == ["API_TOKEN", "EVENT_CHANNEL_URL"]


def test_setup_logging_returns_the_package_logger():
    from orderdesk.core import config

    logger = config.setup_logging()
    assert logger.name == "orderdesk"
    assert not hasattr(config, "get_logger")
