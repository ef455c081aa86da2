"""Tests for environment-driven settings."""

from transaction_table.config import DEFAULT_DATABASE_URL, Settings


def test_defaults_when_env_is_empty(monkeypatch) -> None:
    for name in ("DATABASE_URL", "CORS_ALLOW_ORIGINS", "MAX_PAGE_LIMIT", "QUERY_WORKERS", "CREATE_TABLES", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env()

    assert settings.database_url == DEFAULT_DATABASE_URL
    assert settings.cors_allow_origins == ["*"]
    assert settings.max_page_limit == 100
    assert settings.create_tables is True
    assert settings.log_level == "INFO"


def test_values_from_env(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgresql://db/txns")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test")
    monkeypatch.setenv("MAX_PAGE_LIMIT", "50")
    monkeypatch.setenv("CREATE_TABLES", "false")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings.from_env()

    assert settings.database_url == "postgresql://db/txns"
    assert settings.cors_allow_origins == ["http://a.test", "http://b.test"]
    assert settings.max_page_limit == 50
    assert settings.create_tables is False
    assert settings.log_level == "DEBUG"


def test_malformed_integers_fall_back(monkeypatch) -> None:
    monkeypatch.setenv("MAX_PAGE_LIMIT", "lots")
    monkeypatch.setenv("QUERY_WORKERS", "0")

    settings = Settings.from_env()

    assert settings.max_page_limit == 100
    assert settings.query_workers == 4
