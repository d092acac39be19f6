import pytest

from app.crm import create_app
from app.crm.config import is_production, load_config, load_settings


def _clear_env(monkeypatch):
    for k in ("SECRET_KEY", "ENV", "DATABASE_URL", "LOG_LEVEL"):
        monkeypatch.delenv(k, raising=False)


def test_defaults(monkeypatch):
    _clear_env(monkeypatch)
    s = load_settings()
    assert s.secret_key == "change-me"
    assert s.env == "development"
    assert s.database_url == "sqlite:///crm.db"
    assert s.log_level == "INFO"


def test_env_values_are_stripped(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("DATABASE_URL", "  sqlite:///other.db  ")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    cfg = load_config()
    assert cfg["DATABASE_URL"] == "sqlite:///other.db"
    assert cfg["LOG_LEVEL"] == "DEBUG"
    assert cfg["MAX_CONTENT_LENGTH"] == 1024 * 1024


@pytest.mark.parametrize("env,expected", [("prod", True), ("Production", True), ("test", False), ("", False), (None, False)])
def test_is_production(env, expected):
    assert is_production(env) is expected


def test_production_refuses_sqlite(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("ENV", "production")
    monkeypatch.setenv("SECRET_KEY", "a-strong-secret")
    monkeypatch.setenv("DATABASE_URL", "sqlite:///prod.db")
    with pytest.raises(RuntimeError, match="Postgres"):
        create_app()


def test_production_refuses_default_secret(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("ENV", "production")
    monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@localhost/crm")
    with pytest.raises(RuntimeError, match="SECRET_KEY"):
        create_app()


def test_app_config_mapped(tmp_path, monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    app = create_app()
    assert app.config["ENV"] == "test"
    assert app.config["DATABASE_URL"].endswith("test.db")
