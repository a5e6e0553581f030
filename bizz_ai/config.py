"""Configuration helpers for the Bizz AI backend."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping

from dotenv import load_dotenv

DEFAULT_DATABASE_URL = "sqlite:///./bizz_ai.db"
DEFAULT_OPENAI_MODEL = "gpt-4o"
DEFAULT_EMAIL_FROM = "noreply@bizzai.com"
DEFAULT_FRONTEND_URL = "http://localhost:5000"

load_dotenv(override=False)


@dataclass(frozen=True)
class Settings:
    """Settings container for the external services the backend talks to.

    Every integration is optional at load time: a missing OpenAI key makes
    generation fail per request, a missing Stripe key disables checkout and
    missing SMTP credentials turn email delivery into a logged no-op.
    """

    openai_api_key: str | None = None
    openai_model: str = DEFAULT_OPENAI_MODEL
    database_url: str = DEFAULT_DATABASE_URL
    stripe_secret_key: str | None = None
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: str | None = None
    smtp_use_tls: bool = True
    email_from: str = DEFAULT_EMAIL_FROM
    frontend_url: str = DEFAULT_FRONTEND_URL
    log_level: str = "INFO"

    @property
    def payments_enabled(self) -> bool:
        """True when a Stripe secret key is configured."""

        return bool(self.stripe_secret_key)

    @property
    def email_enabled(self) -> bool:
        """True when enough SMTP settings exist to attempt delivery."""

        return bool(self.smtp_host and self.email_from)


def _env_flag(environ: Mapping[str, str], key: str, default: bool) -> bool:
    raw = environ.get(key)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _normalize_database_url(url: str | None) -> str:
    """Return a SQLAlchemy-compatible URL, defaulting to a local SQLite file."""

    if not url:
        return DEFAULT_DATABASE_URL
    if url.startswith("postgres://"):
        # SQLAlchemy dropped the legacy scheme alias.
        return "postgresql://" + url[len("postgres://") :]
    return url


def settings_from_env(environ: Mapping[str, str]) -> Settings:
    """Build settings from an arbitrary mapping of environment variables."""

    return Settings(
        openai_api_key=environ.get("OPENAI_API_KEY") or environ.get("OPENAI_API_KEY_ENV_VAR"),
        openai_model=environ.get("BIZZAI_OPENAI_MODEL") or DEFAULT_OPENAI_MODEL,
        database_url=_normalize_database_url(environ.get("DATABASE_URL")),
        stripe_secret_key=environ.get("STRIPE_SECRET_KEY") or None,
        smtp_host=environ.get("SMTP_HOST") or None,
        smtp_port=int(environ.get("SMTP_PORT") or 587),
        smtp_user=environ.get("SMTP_USER") or environ.get("EMAIL_USER") or None,
        smtp_password=environ.get("SMTP_PASSWORD") or environ.get("EMAIL_PASSWORD") or None,
        smtp_use_tls=_env_flag(environ, "SMTP_USE_TLS", True),
        email_from=environ.get("EMAIL_FROM") or environ.get("EMAIL_USER") or DEFAULT_EMAIL_FROM,
        frontend_url=(environ.get("FRONTEND_URL") or DEFAULT_FRONTEND_URL).rstrip("/"),
        log_level=(environ.get("BIZZAI_LOG_LEVEL") or "INFO").upper(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Read environment variables and return cached settings."""

    return settings_from_env(os.environ)
