from __future__ import annotations

import pytest

from learnhub.core.config import load_settings

# ---- valid values ----


def test_load_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "APP_ENV",
        "LOG_LEVEL",
        "LOG_JSON",
        "PORT",
        "DATABASE_URL",
        "REDIS_URL",
        "ACCESS_TOKEN_TTL_MIN",
        "CORS_ORIGINS",
        "PUBLIC_BASE_URL",
    ):
        monkeypatch.delenv(name, raising=False)
    settings = load_settings()
    assert settings.app_env == "dev"
    assert settings.log_level == "info"
    assert settings.log_json is False
    assert settings.port == 8000
    assert settings.database_url is None
    assert settings.redis_url is None
    assert settings.access_token_ttl_min == 60
    assert settings.cors_origins == ("http://localhost:5173",)
    assert settings.public_base_url == "http://localhost:8000"
    assert settings.is_dev


def test_load_settings_respects_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.setenv("LOG_LEVEL", "error")
    monkeypatch.setenv("LOG_JSON", "true")
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.setenv("ACCESS_TOKEN_TTL_MIN", "15")
    monkeypatch.setenv("REDIS_URL", "redis://cache:6379/0")
    settings = load_settings()
    assert settings.is_prod
    assert settings.log_level == "error"
    assert settings.log_json is True
    assert settings.port == 9000
    assert settings.access_token_ttl_min == 15
    assert settings.redis_url == "redis://cache:6379/0"


def test_load_settings_normalizes_case_and_whitespace(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("APP_ENV", "  TEST ")
    monkeypatch.setenv("LOG_LEVEL", " Warning ")
    settings = load_settings()
    assert settings.app_env == "test"
    assert settings.log_level == "warning"


def test_cors_origins_split_and_trimmed(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CORS_ORIGINS", "https://a.dev , https://b.dev,,")
    assert load_settings().cors_origins == ("https://a.dev", "https://b.dev")


def test_public_base_url_trailing_slash_dropped(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("PUBLIC_BASE_URL", "https://learnhub.example/")
    assert load_settings().public_base_url == "https://learnhub.example"


# ---- invalid values ----


_INVALID = [
    ("APP_ENV", "staging", "APP_ENV must be dev|test|prod"),
    ("APP_ENV", "", "APP_ENV must be dev|test|prod"),
    ("LOG_LEVEL", "verbose", "LOG_LEVEL must be debug|info|warning|error"),
    ("PORT", "eighty", "PORT must be an integer"),
    ("ACCESS_TOKEN_TTL_MIN", "soon", "ACCESS_TOKEN_TTL_MIN must be an integer"),
    ("ACCESS_TOKEN_TTL_MIN", "0", "ACCESS_TOKEN_TTL_MIN must be positive"),
    ("LOG_JSON", "maybe", "LOG_JSON must be a boolean"),
]


@pytest.mark.parametrize(
    "name,value,message",
    _INVALID,
    ids=[f"{n}={v!r}" for n, v, _ in _INVALID],
)
def test_load_settings_rejects_invalid(
    monkeypatch: pytest.MonkeyPatch, name: str, value: str, message: str
) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError) as exc_info:
        load_settings()
    assert message in str(exc_info.value)
