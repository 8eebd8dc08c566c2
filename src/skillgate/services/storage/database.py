"""Engine construction and schema setup."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
from sqlalchemy import Engine, event
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import make_url
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel, create_engine

# Register tables on SQLModel.metadata
import skillgate.models  # noqa: F401

logger = structlog.get_logger()

SQLITE_BUSY_TIMEOUT_SECONDS = 30


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for the given URL.

    SQLite files get their parent directory created, a busy timeout so
    concurrent writers wait instead of failing, and NullPool so each
    worker thread opens its own connection.
    """
    url = make_url(database_url)
    kwargs: dict[str, Any] = {"echo": echo}

    if url.get_backend_name() == "sqlite":
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        kwargs["connect_args"] = {
            "check_same_thread": False,
            "timeout": SQLITE_BUSY_TIMEOUT_SECONDS,
        }
        kwargs["poolclass"] = NullPool

    engine = create_engine(database_url, **kwargs)

    if url.get_backend_name() == "sqlite":

        @event.listens_for(engine, "connect")
        def _enable_wal(dbapi_connection: Any, _record: Any) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()

    logger.debug("engine_created", backend=url.get_backend_name())
    return engine


def init_db(engine: Engine) -> None:
    """Create all tables if they don't exist."""
    SQLModel.metadata.create_all(engine)
    logger.info("db_initialized", url=engine.url.render_as_string(hide_password=True))


def upsert_insert(engine: Engine, table: Any) -> Any:
    """Dialect-specific INSERT supporting ``on_conflict_do_update``.

    SQLite and PostgreSQL share the same ON CONFLICT construct.
    """
    if engine.dialect.name == "sqlite":
        return sqlite.insert(table)
    return postgresql.insert(table)
