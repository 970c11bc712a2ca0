"""SQLAlchemy engine construction and transaction scoping.

The service targets PostgreSQL in production but supports SQLite for local
development and tests. No declarative models are defined here; this module
only manages connection lifecycle. The Engine built here is the datastore
handle passed explicitly into `botaniq/logic/` components.
"""

from __future__ import annotations

import logging
import threading
import weakref
from contextlib import contextmanager, nullcontext
from typing import ContextManager, Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.pool import StaticPool

from botaniq.config import DatabaseConfig

logger = logging.getLogger(__name__)

# One lock per single-connection engine; requests on such an engine share a
# DBAPI connection and must not interleave their transactions
_SERIAL_LOCKS: "weakref.WeakKeyDictionary[Engine, threading.RLock]" = weakref.WeakKeyDictionary()
_SERIAL_LOCKS_GUARD = threading.Lock()


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def build_engine(db_config: DatabaseConfig | None = None, url: str | None = None) -> Engine:
    """Create a new Engine for the configured DSN.

    For SQLite in-memory URLs, use a StaticPool to keep a single connection
    alive across sessions and threads (TestClient runs handlers in a worker
    thread). PostgreSQL connections honour `ssl_required` and the optional
    per-statement timeout.
    """
    resolved_url = url or (db_config.dsn if db_config else None)
    if not resolved_url:
        raise ValueError("A database URL is required to build the engine")
    kwargs: dict = {"future": True, "pool_pre_ping": True}
    connect_args: dict = {}
    if _is_sqlite(resolved_url):
        connect_args["check_same_thread"] = False
        if ":memory:" in resolved_url or resolved_url.rstrip("/").endswith("sqlite:"):
            kwargs["poolclass"] = StaticPool
    elif db_config is not None:
        if db_config.ssl_required:
            connect_args["sslmode"] = "require"
        if db_config.statement_timeout_ms:
            connect_args["options"] = f"-c statement_timeout={int(db_config.statement_timeout_ms)}"
    if connect_args:
        kwargs["connect_args"] = connect_args
    engine = create_engine(resolved_url, **kwargs)
    logger.info("db.engine_created dialect=%s", engine.dialect.name)
    return engine


def _serial_lock(engine: Engine) -> ContextManager:
    """Return the lock guarding a single-connection engine, or a no-op."""
    if not isinstance(engine.pool, StaticPool):
        return nullcontext()
    with _SERIAL_LOCKS_GUARD:
        lock = _SERIAL_LOCKS.get(engine)
        if lock is None:
            lock = threading.RLock()
            _SERIAL_LOCKS[engine] = lock
    return lock


@contextmanager
def connect(engine: Engine) -> Iterator[Connection]:
    """Yield a connection for reads outside an explicit transaction."""
    with _serial_lock(engine):
        with engine.connect() as conn:
            yield conn


@contextmanager
def transaction(engine: Engine, name: str = "transaction") -> Iterator[Connection]:
    """Yield a connection inside one atomic transaction.

    Commits when the block exits normally. Any exception rolls the
    transaction back (logged) before it propagates, and the connection is
    returned to the pool in every case.
    """
    with _serial_lock(engine):
        conn = engine.connect()
        trans = conn.begin()
        try:
            yield conn
            trans.commit()
        except Exception:
            if trans.is_active:
                trans.rollback()
            logger.warning("%s rolled back", name)
            raise
        finally:
            conn.close()


def ping(engine: Engine) -> bool:
    """Return True when the datastore answers a trivial query."""
    from sqlalchemy import text as sql_text
    from sqlalchemy.exc import SQLAlchemyError

    try:
        with connect(engine) as conn:
            conn.execute(sql_text("SELECT 1"))
        return True
    except SQLAlchemyError:
        logger.error("db.ping_failed", exc_info=True)
        return False
