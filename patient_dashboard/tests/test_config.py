"""
Tests for settings validation.
"""

import pytest
from pydantic import ValidationError

from patient_dashboard.config import Settings, get_settings, load_settings_or_exit

SECRET = "config-test-secret-key-with-enough-bytes"


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in Settings.model_fields:
        monkeypatch.delenv(name, raising=False)


def build(**overrides):
    values = {"JWT_SECRET": SECRET}
    values.update(overrides)
    return Settings(_env_file=None, **values)


def test_defaults():
    settings = build()

    assert settings.ENV == "development"
    assert settings.PORT == 8000
    assert settings.API_PREFIX == "/api/v1"
    assert settings.JWT_EXPIRES_IN == "1h"
    assert settings.REFRESH_TOKEN_EXPIRES_IN == "7d"
    assert settings.BCRYPT_SALT_ROUNDS == 12
    assert settings.rate_limit_period == 900
    assert settings.allowed_origins == ["http://localhost:8080", "http://localhost:5173"]
    assert settings.SHIPMENTS_ADMIN_ONLY is False
    assert settings.ALLOW_ROLE_SELF_ASSIGNMENT is False


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", SECRET)
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.setenv("ENABLE_SHIPMENT_TRACKING", "false")

    settings = Settings(_env_file=None)

    assert settings.PORT == 9000
    assert settings.ENABLE_SHIPMENT_TRACKING is False


def test_missing_secret_rejected(monkeypatch):
    monkeypatch.delenv("JWT_SECRET", raising=False)

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


@pytest.mark.parametrize("overrides", [
    {"JWT_SECRET": "   "},
    {"JWT_EXPIRES_IN": "1 hour"},
    {"REFRESH_TOKEN_EXPIRES_IN": "7w"},
    {"BCRYPT_SALT_ROUNDS": 9},
    {"BCRYPT_SALT_ROUNDS": 16},
    {"PORT": 0},
    {"PORT": 70000},
    {"ENV": "staging"},
    {"LOG_LEVEL": "verbose"},
    {"DATABASE_URL": ""},
])
def test_invalid_values_rejected(overrides):
    with pytest.raises(ValidationError):
        build(**overrides)


def test_log_level_normalized():
    assert build(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"


def test_origins_list_trims_entries():
    settings = build(ALLOWED_ORIGINS=" https://a.example , ,https://b.example")

    assert settings.allowed_origins == ["https://a.example", "https://b.example"]


def test_load_settings_or_exit_exits_on_invalid_environment(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", SECRET)
    monkeypatch.setenv("JWT_EXPIRES_IN", "soon")
    get_settings.cache_clear()

    try:
        with pytest.raises(SystemExit) as exc_info:
            load_settings_or_exit()
        assert exc_info.value.code == 1
    finally:
        get_settings.cache_clear()
