"""Tests for configuration defaults and validation"""
import importlib
import pytest

from gamepass import config
from gamepass.exceptions import ConfigurationError


def test_game_rule_defaults():
    assert config.DEFAULT_SEASON == 1
    assert config.DAILY_BONUS_XP == 100
    assert config.DAILY_COOLDOWN_HOURS == 24
    assert config.EVIDENCE_MAX_LENGTH == 2000
    assert config.NOTE_MAX_LENGTH == 1000


def test_validate_config_accepts_configured_settings():
    config.validate_config()


def test_missing_database_url(monkeypatch):
    monkeypatch.setattr(config, "DATABASE_URL", "")

    with pytest.raises(ConfigurationError) as exc_info:
        config.validate_config()

    assert exc_info.value.config_key == "DATABASE_URL"


def test_missing_jwt_secret(monkeypatch):
    monkeypatch.setattr(config, "JWT_SECRET_KEY", "")

    with pytest.raises(ConfigurationError) as exc_info:
        config.validate_config()

    assert exc_info.value.config_key == "JWT_SECRET_KEY"


def test_non_positive_default_season(monkeypatch):
    monkeypatch.setattr(config, "DEFAULT_SEASON", 0)

    with pytest.raises(ConfigurationError):
        config.validate_config()


def test_jwt_secret_has_no_default(monkeypatch):
    monkeypatch.delenv("JWT_SECRET_KEY", raising=False)
    try:
        importlib.reload(config)

        assert config.JWT_SECRET_KEY == ""
        with pytest.raises(ConfigurationError) as exc_info:
            config.validate_config()
        assert exc_info.value.config_key == "JWT_SECRET_KEY"
    finally:
        monkeypatch.undo()
        importlib.reload(config)
