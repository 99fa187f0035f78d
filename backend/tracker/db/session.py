"""Engine and session factory for the tracker's read-only store access."""

from __future__ import annotations

from typing import Any, Dict, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from tracker.core.settings import Settings, settings

APPLICATION_NAME = "tracker-insights"


def engine_options(config: Settings) -> Dict[str, Any]:
    """Keyword arguments for ``create_engine`` given the configured database."""
    url = make_url(config.database_url)

    if url.get_backend_name() == "sqlite":
        options: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        # An in-memory database exists per connection; share one across threads.
        if url.database in (None, "", ":memory:"):
            options["poolclass"] = StaticPool
        return options

    connect_args: Dict[str, Any] = {}
    if url.get_backend_name() == "postgresql":
        connect_args["application_name"] = APPLICATION_NAME
        if config.db_read_only:
            # This service never writes; refuse writes at the session level.
            connect_args["options"] = "-c default_transaction_read_only=on"
    return {
        "pool_pre_ping": True,
        "pool_size": config.db_pool_size,
        "max_overflow": config.db_max_overflow,
        "pool_timeout": config.db_pool_timeout,
        "pool_recycle": config.db_pool_recycle,
        "connect_args": connect_args,
    }


engine = create_engine(settings.database_url, **engine_options(settings))

# Rows are only read and serialized, never flushed back.
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, class_=Session)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
