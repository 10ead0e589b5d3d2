from __future__ import annotations

import pytest

from coursehub.core.config import load_settings

_VARS = (
    "APP_ENV",
    "LOG_LEVEL",
    "LOG_JSON",
    "PORT",
    "DATABASE_URL",
    "CORS_ORIGINS",
    "PUBLIC_BASE_URL",
    "PASSWORD_RESET_TTL_MIN",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


# ---- valid values ----


def test_load_settings_defaults() -> None:
    settings = load_settings()
    assert settings.app_env == "dev"
    assert settings.log_level == "info"
    assert settings.log_json is False
    assert settings.port == 8000
    assert settings.database_url is None
    assert settings.cors_origins == ("http://localhost:3000",)
    assert settings.password_reset_ttl_min == 60
    assert settings.is_dev


def test_load_settings_respects_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.setenv("LOG_LEVEL", "error")
    monkeypatch.setenv("LOG_JSON", "yes")
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://u:p@db/coursehub")
    settings = load_settings()
    assert settings.app_env == "prod"
    assert settings.is_prod
    assert settings.log_level == "error"
    assert settings.log_json is True
    assert settings.port == 9000
    assert settings.database_url == "postgresql+asyncpg://u:p@db/coursehub"


def test_load_settings_normalizes_case_and_whitespace(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("APP_ENV", "  TEST  ")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    settings = load_settings()
    assert settings.app_env == "test"
    assert settings.is_test
    assert settings.log_level == "debug"


def test_blank_database_url_means_in_memory(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "   ")
    assert load_settings().database_url is None


def test_cors_origins_split_on_commas(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example.com, https://b.example.com,,")
    assert load_settings().cors_origins == (
        "https://a.example.com",
        "https://b.example.com",
    )


def test_public_base_url_trailing_slash_dropped(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PUBLIC_BASE_URL", "https://coursehub.example.com/")
    assert load_settings().public_base_url == "https://coursehub.example.com"


# ---- invalid values ----


def test_load_settings_rejects_invalid_app_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "staging")
    with pytest.raises(ValueError, match="APP_ENV must be dev|test|prod"):
        load_settings()


def test_load_settings_rejects_invalid_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "verbose")
    with pytest.raises(ValueError, match="LOG_LEVEL must be"):
        load_settings()


def test_load_settings_rejects_non_integer_port(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PORT", "eighty")
    with pytest.raises(ValueError, match="PORT must be an integer"):
        load_settings()


def test_load_settings_rejects_bad_boolean(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_JSON", "maybe")
    with pytest.raises(ValueError, match="LOG_JSON must be a boolean"):
        load_settings()


@pytest.mark.parametrize("raw", ["0", "-5", "soon"])
def test_load_settings_rejects_bad_reset_ttl(
    monkeypatch: pytest.MonkeyPatch, raw: str
) -> None:
    monkeypatch.setenv("PASSWORD_RESET_TTL_MIN", raw)
    with pytest.raises(ValueError, match="PASSWORD_RESET_TTL_MIN"):
        load_settings()
