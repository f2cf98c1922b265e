"""Environment-driven configuration for the member portal.

Every setting the portal reads lives on ``AppSettings``. Values come from the
process environment first, then ``.env``/``.env.local`` files, then the
defaults below, so a fresh checkout boots without any setup.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Iterable

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class AppSettings(BaseSettings):
    """Environment-driven application configuration."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "Member Portal"
    APP_ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    BASE_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parent.parent)
    DATA_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parents[2] / "data")
    TEMPLATES_DIR: Path | None = None
    STATIC_DIR: Path | None = None
    # IANA zone for displayed dates; empty follows the host's local zone.
    TZ: str = ""
    # Empty means the numeric M/D/YYYY style browsers use for en-US.
    DATE_FORMAT: str = ""

    # Signs the cookie session (itsdangerous). MUST be long & random in production.
    APP_SECRET: str = "dev-insecure-secret-change-me"
    # Signs the session JWT stored inside the cookie session.
    AUTH_SECRET: str = "dev-insecure-auth-secret-change-me"
    SESSION_COOKIE_NAME: str = "portal_session"
    SESSION_MAX_AGE: int = 60 * 60 * 24 * 30
    SESSION_HTTPS_ONLY: bool = False

    DB_URL: str = Field(default="sqlite:///data/portal.db", validation_alias="DATABASE_URL")

    HOST: str = "0.0.0.0"
    PORT: int = 8089

    PROTECTED_PREFIXES: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["/dashboard"])
    SIGNIN_PATH: str = "/signin"
    SIGNOUT_REDIRECT: str = "/"

    @field_validator("PROTECTED_PREFIXES", mode="before")
    @classmethod
    def parse_protected_prefixes(cls, value: Any) -> list[str]:
        if value in (None, "", []):
            return []
        if isinstance(value, str):
            items: Iterable[Any] = value.split(",")
        elif isinstance(value, Iterable):
            items = value
        else:
            raise TypeError("PROTECTED_PREFIXES must be a comma separated string or list")
        prefixes = []
        for item in items:
            prefix = str(item).strip().rstrip("/")
            if prefix:
                prefixes.append(prefix if prefix.startswith("/") else f"/{prefix}")
        return prefixes

    @property
    def templates_dir(self) -> Path:
        return self.TEMPLATES_DIR or self.BASE_DIR / "templates"

    @property
    def static_dir(self) -> Path:
        return self.STATIC_DIR or self.BASE_DIR / "static"


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    settings = AppSettings()
    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
    if settings.TEMPLATES_DIR is None:
        settings.TEMPLATES_DIR = settings.BASE_DIR / "templates"
    if settings.STATIC_DIR is None:
        settings.STATIC_DIR = settings.BASE_DIR / "static"
    return settings


settings = get_settings()
