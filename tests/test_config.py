import pydantic
import pytest

from bistro.core.config import (
    EnvironmentMode,
    Settings,
    get_settings,
    load_settings_or_exit,
)

REQUIRED = ("PORT", "CORS_ORIGIN", "SESSION_SECRET", "DATABASE_URL")


@pytest.fixture
def clean_env(monkeypatch):
    for name in REQUIRED + ("ENV_MODE", "DEBUG"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


@pytest.fixture
def full_env(clean_env):
    clean_env.setenv("PORT", "8080")
    clean_env.setenv("CORS_ORIGIN", "https://bistro.example.com/")
    clean_env.setenv("SESSION_SECRET", "environment-secret-value")
    clean_env.setenv("DATABASE_URL", "sqlite+aiosqlite:///./bistro.db")
    return clean_env


def test_missing_required_values_fail(clean_env):
    with pytest.raises(pydantic.ValidationError) as exc_info:
        Settings(_env_file=None)

    missing = {err["loc"][0] for err in exc_info.value.errors()}
    assert missing == {"port", "cors_origin", "session_secret", "database_url"}


def test_load_settings_or_exit_terminates_process(clean_env):
    with pytest.raises(SystemExit) as exc_info:
        load_settings_or_exit()
    assert exc_info.value.code == 1


def test_reads_environment(full_env):
    settings = Settings(_env_file=None)

    assert settings.port == 8080
    assert settings.cors_origin == "https://bistro.example.com"
    assert settings.env_mode is EnvironmentMode.DEVELOPMENT
    assert settings.session_cookie_name == "session"
    assert not settings.secure_cookies
    assert settings.cookie_samesite == "lax"


def test_production_uses_secure_cross_site_cookies(full_env):
    full_env.setenv("ENV_MODE", "PRODUCTION")
    settings = Settings(_env_file=None)

    assert settings.is_production
    assert settings.secure_cookies
    assert settings.cookie_samesite == "none"


def test_short_session_secret_is_rejected(full_env):
    full_env.setenv("SESSION_SECRET", "short")
    with pytest.raises(pydantic.ValidationError):
        Settings(_env_file=None)


def test_invalid_env_mode_is_rejected(full_env):
    full_env.setenv("ENV_MODE", "qa")
    with pytest.raises(pydantic.ValidationError):
        Settings(_env_file=None)
