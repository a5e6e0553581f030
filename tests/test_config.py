import pytest

from bizz_ai.config import DEFAULT_DATABASE_URL, get_settings, settings_from_env


@pytest.fixture(autouse=True)
def clear_settings_cache() -> None:
    """Ensure cached settings do not leak between tests."""

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_get_settings_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "test-openai")
    monkeypatch.setenv("STRIPE_SECRET_KEY", "sk_test_123")
    monkeypatch.setenv("DATABASE_URL", "sqlite://")

    settings = get_settings()

    assert settings.openai_api_key == "test-openai"
    assert settings.payments_enabled is True
    assert settings.database_url == "sqlite://"


def test_openai_key_falls_back_to_legacy_variable() -> None:
    settings = settings_from_env({"OPENAI_API_KEY_ENV_VAR": "legacy-key"})

    assert settings.openai_api_key == "legacy-key"


def test_defaults_when_environment_is_empty() -> None:
    settings = settings_from_env({})

    assert settings.openai_api_key is None
    assert settings.openai_model == "gpt-4o"
    assert settings.database_url == DEFAULT_DATABASE_URL
    assert settings.payments_enabled is False
    assert settings.email_enabled is False
    assert settings.smtp_port == 587
    assert settings.smtp_use_tls is True


def test_postgres_scheme_is_rewritten() -> None:
    settings = settings_from_env({"DATABASE_URL": "postgres://u:p@db:5432/bizz"})

    assert settings.database_url == "postgresql://u:p@db:5432/bizz"


def test_smtp_settings_accept_email_aliases() -> None:
    settings = settings_from_env(
        {
            "SMTP_HOST": "smtp.example.com",
            "SMTP_PORT": "2525",
            "EMAIL_USER": "mailer@example.com",
            "EMAIL_PASSWORD": "secret",
            "SMTP_USE_TLS": "false",
            "FRONTEND_URL": "https://bizz.example.com/",
        }
    )

    assert settings.email_enabled is True
    assert settings.smtp_port == 2525
    assert settings.smtp_user == "mailer@example.com"
    assert settings.smtp_password == "secret"
    assert settings.email_from == "mailer@example.com"
    assert settings.smtp_use_tls is False
    assert settings.frontend_url == "https://bizz.example.com"
