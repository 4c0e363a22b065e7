from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal, get_args

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})


def _env(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


def _choice(name: str, default: str, allowed: tuple[str, ...]) -> str:
    value = _env(name, default).lower()
    if value not in allowed:
        raise ValueError(f"{name} must be {'|'.join(allowed)} (got {value!r})")
    return value


def _int(name: str, default: str, *, positive: bool = False) -> int:
    raw = _env(name, default)
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer (got {raw!r})") from None
    if positive and value <= 0:
        raise ValueError(f"{name} must be positive (got {value})")
    return value


def _flag(name: str, default: str) -> bool:
    raw = _env(name, default)
    if raw.lower() in _TRUE:
        return True
    if raw.lower() in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")


def _csv(name: str, default: str) -> tuple[str, ...]:
    parts = (part.strip() for part in _env(name, default).split(","))
    return tuple(part for part in parts if part)


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    database_url: str | None
    redis_url: str | None
    access_token_ttl_min: int = 60
    cors_origins: tuple[str, ...] = ("http://localhost:5173",)
    public_base_url: str = "http://localhost:8000"

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"


def load_settings() -> Settings:
    """Read and validate the environment; raises ValueError on bad values."""
    return Settings(
        app_env=_choice("APP_ENV", "dev", get_args(AppEnv)),  # type: ignore[arg-type]
        log_level=_choice(
            "LOG_LEVEL", "info", get_args(LogLevel)
        ),  # type: ignore[arg-type]
        log_json=_flag("LOG_JSON", "false"),
        port=_int("PORT", "8000"),
        database_url=_env("DATABASE_URL", "") or None,
        redis_url=_env("REDIS_URL", "") or None,
        access_token_ttl_min=_int("ACCESS_TOKEN_TTL_MIN", "60", positive=True),
        cors_origins=_csv("CORS_ORIGINS", "http://localhost:5173"),
        public_base_url=_env("PUBLIC_BASE_URL", "http://localhost:8000").rstrip("/"),
    )


SETTINGS = load_settings()
