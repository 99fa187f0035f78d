from __future__ import annotations

from sqlalchemy.pool import StaticPool

from tracker.core.settings import Settings
from tracker.db.session import APPLICATION_NAME, engine_options


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def test_in_memory_sqlite_shares_one_connection():
    options = engine_options(_settings(database_url="sqlite+pysqlite://"))

    assert options["poolclass"] is StaticPool
    assert options["connect_args"] == {"check_same_thread": False}


def test_file_sqlite_uses_default_pool():
    options = engine_options(_settings(database_url="sqlite:///./tracker.db"))

    assert "poolclass" not in options
    assert "pool_size" not in options


def test_postgres_sessions_are_read_only_by_default(monkeypatch):
    monkeypatch.delenv("TRACKER_DB_READ_ONLY", raising=False)
    monkeypatch.delenv("DB_READ_ONLY", raising=False)

    options = engine_options(
        _settings(database_url="postgresql+psycopg2://reader@db:5432/tracker", db_pool_size=3)
    )

    assert options["pool_size"] == 3
    assert options["pool_pre_ping"] is True
    assert options["connect_args"] == {
        "application_name": APPLICATION_NAME,
        "options": "-c default_transaction_read_only=on",
    }


def test_read_only_can_be_disabled(monkeypatch):
    monkeypatch.setenv("TRACKER_DB_READ_ONLY", "false")

    options = engine_options(_settings(database_url="postgresql+psycopg2://owner@db:5432/tracker"))

    assert options["connect_args"] == {"application_name": APPLICATION_NAME}
