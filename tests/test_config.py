"""
Tests for environment-driven settings.
"""

import pytest
from pydantic import ValidationError

from api.config import Settings


def test_defaults(monkeypatch):
    for key in ("DATABASE_URL", "MATCH_BATCH_LIMIT", "DEFAULT_CONFIRM_WINDOW_SECONDS", "LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)

    settings = Settings(_env_file=None)

    assert settings.match_batch_limit == 30
    assert settings.default_confirm_window_seconds == 90
    assert settings.log_level == "info"


def test_values_read_from_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://db/nanny")
    monkeypatch.setenv("API_PORT", "9000")
    monkeypatch.setenv("LOG_LEVEL", " DEBUG ")
    monkeypatch.setenv("MATCH_BATCH_LIMIT", "5")

    settings = Settings(_env_file=None)

    assert settings.database_url == "postgresql://db/nanny"
    assert settings.api_port == 9000
    assert settings.log_level == "debug"
    assert settings.match_batch_limit == 5


def test_values_read_from_env_file(monkeypatch, tmp_path):
    monkeypatch.delenv("CORS_ORIGIN", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("CORS_ORIGIN=https://app.example.com\n")

    settings = Settings(_env_file=env_file)

    assert settings.cors_origin == "https://app.example.com"


@pytest.mark.parametrize("seconds", ["10", "181"])
def test_default_window_must_be_in_range(monkeypatch, seconds):
    monkeypatch.setenv("DEFAULT_CONFIRM_WINDOW_SECONDS", seconds)

    with pytest.raises(ValidationError):
        Settings(_env_file=None)
