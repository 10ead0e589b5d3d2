from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]


def _getenv(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


def _getbool(name: str, default: bool) -> bool:
    raw = _getenv(name, "true" if default else "false").lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    database_url: str | None
    cors_origins: tuple[str, ...] = ("http://localhost:3000",)
    public_base_url: str = "http://localhost:3000"
    password_reset_ttl_min: int = 60

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
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    port_raw = _getenv("PORT", "8000")
    ttl_raw = _getenv("PASSWORD_RESET_TTL_MIN", "60")

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError(f"PORT must be an integer (got {port_raw!r})") from None

    try:
        reset_ttl = int(ttl_raw)
    except ValueError:
        raise ValueError(
            f"PASSWORD_RESET_TTL_MIN must be an integer (got {ttl_raw!r})"
        ) from None
    if reset_ttl <= 0:
        raise ValueError("PASSWORD_RESET_TTL_MIN must be positive")

    origins = tuple(
        o.strip()
        for o in _getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
        if o.strip()
    )

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=_getbool("LOG_JSON", False),
        port=port,
        database_url=_getenv("DATABASE_URL", "") or None,
        cors_origins=origins,
        public_base_url=_getenv("PUBLIC_BASE_URL", "http://localhost:3000").rstrip(
            "/"
        ),
        password_reset_ttl_min=reset_ttl,
    )


SETTINGS = load_settings()
