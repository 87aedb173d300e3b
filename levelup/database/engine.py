"""
levelup.database.engine — Database Connection & Session Helpers
================================================================

The engine is created once per process (see :func:`levelup.api.deps.get_engine`),
warmed up by the API lifespan hook and disposed at shutdown.  Everything else
receives it, or a :class:`Session` bound to it, as an argument; nothing in
the codebase reaches for a module-level connection pool.

Usage::

    from levelup.database.engine import create_db_engine, init_db, get_session

    engine = create_db_engine()          # reads DATABASE_URL from .env
    init_db(engine)                      # CREATE TABLE IF NOT EXISTS + seed

    with get_session(engine) as session:
        session.add(...)
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from contextlib import contextmanager
from typing import ParamSpec, TypeVar

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session

from levelup.database.models import Base

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


# ---------------------------------------------------------------------------
# Engine creation
# ---------------------------------------------------------------------------
def create_db_engine() -> Engine:
    """Build a SQLAlchemy :class:`Engine` from the ``DATABASE_URL`` env var.

    PostgreSQL gets a pool sized for a single community's API (5 persistent
    connections, 10 overflow, 10 s checkout timeout, hourly recycle).  A
    ``sqlite:///`` URL is accepted for local development and may be
    used from the worker threads :func:`run_db` dispatches to.

    Raises
    ------
    RuntimeError
        If ``DATABASE_URL`` is not set.
    """
    url = os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError(
            "DATABASE_URL is not set.  "
            "Copy .env.example → .env and set a valid PostgreSQL URL."
        )

    if url.startswith("sqlite"):
        engine = create_engine(url, connect_args={"check_same_thread": False})
        enable_sqlite_savepoints(engine)
    else:
        engine = create_engine(
            url,
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,
            pool_timeout=10,
            pool_recycle=3600,
        )
    logger.info(
        "Database engine created (%s, %s)",
        engine.dialect.name, engine.url.host or engine.url.database,
    )
    return engine


# ---------------------------------------------------------------------------
# SQLite transactions
# ---------------------------------------------------------------------------
def enable_sqlite_savepoints(engine: Engine) -> None:
    """Let SQLAlchemy own BEGIN on a pysqlite engine.

    The sqlite3 driver defers BEGIN until the first write, so a SAVEPOINT
    opened before any write runs outside a transaction and its RELEASE
    commits on its own.  The driver's implicit transactions are switched
    off and the engine emits BEGIN itself, which keeps nested blocks inside
    the outer transaction.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


# ---------------------------------------------------------------------------
# Schema initialization
# ---------------------------------------------------------------------------
def init_db(engine: Engine) -> None:
    """Create all tables and seed the default catalogs.

    Safe to call on every startup.  In production the schema is managed by
    Alembic (``alembic upgrade head``); ``create_all`` covers dev/test
    environments where migrations have not run.
    """
    Base.metadata.create_all(engine)
    logger.info("Database tables verified / created.")

    from levelup.database.seed import seed_catalog

    seed_catalog(engine)


# ---------------------------------------------------------------------------
# Session helper
# ---------------------------------------------------------------------------
@contextmanager
def get_session(engine: Engine):
    """Yield a :class:`Session` that auto-commits on success and rolls back
    on exception.
    """
    session = Session(engine)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# ---------------------------------------------------------------------------
# Async bridge
# ---------------------------------------------------------------------------
async def run_db(func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T:
    """Run a **synchronous** database function on a background thread.

    Used by the async OAuth routes so that SQLAlchemy calls never block the
    event loop::

        created = await run_db(store_state, engine, state)
    """
    return await asyncio.to_thread(func, *args, **kwargs)
