from core.config import Settings, _normalize_database_url, load_settings
from db.session import _needs_ssl


def test_normalize_database_url():
    assert _normalize_database_url(" postgres://u:p@host:5432/db ") == "postgresql://u:p@host:5432/db"
    assert _normalize_database_url("sqlite:///./x.db") == "sqlite:///./x.db"


def test_load_settings_from_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgres://u:p@db.internal:5432/tasksmith")
    monkeypatch.setenv("DATABASE_SSL", "true")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("CORS_ORIGINS", "http://localhost:5173, https://tasksmith.app")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("UPDATE_RETRIES", "0")

    settings = load_settings()

    assert settings.database_url == "postgresql://u:p@db.internal:5432/tasksmith"
    assert settings.is_postgres
    assert settings.database_ssl is True
    assert settings.port == 8080
    assert settings.cors_origins == ["http://localhost:5173", "https://tasksmith.app"]
    assert settings.log_level == "DEBUG"
    assert settings.update_retries == 1


def test_defaults_carry_no_credentials(monkeypatch):
    for name in ("DATABASE_URL", "DATABASE_SSL", "PORT", "CORS_ORIGINS"):
        monkeypatch.delenv(name, raising=False)

    settings = load_settings()

    assert settings.is_sqlite
    assert "@" not in settings.database_url
    assert settings.database_ssl is False
    assert settings.port == 3001
    assert settings.cors_origins == ["*"]


def test_managed_hosts_need_ssl():
    assert _needs_ssl("postgresql://u:p@x.rds.amazonaws.com/db")
    assert _needs_ssl("postgresql://u:p@ep-1.us-east-2.aws.neon.tech/db")
    assert not _needs_ssl("postgresql://u:p@localhost/db")


def test_settings_dialect_flags():
    assert Settings(database_url="sqlite://").is_sqlite
    assert not Settings(database_url="sqlite://").is_postgres
