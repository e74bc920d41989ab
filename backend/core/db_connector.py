"""
Database connector — SQLAlchemy engine factory and per-connection deadlines.
Supports SQLite and PostgreSQL. Deadlines are enforced by the database itself:
PostgreSQL via SET LOCAL statement_timeout, SQLite via a progress handler
that interrupts the running statement.
"""
import logging
import time
from contextlib import contextmanager
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import DBAPIError

logger = logging.getLogger(__name__)

PG_QUERY_CANCELED = "57014"
_SQLITE_PROGRESS_OPS = 1000


def create_engine_from_url(url: str) -> Engine:
    """Build a pooled SQLAlchemy engine. Connections are opened lazily."""
    connect_args = {}
    if url.startswith("sqlite"):
        # Requests are served from a threadpool.
        connect_args["check_same_thread"] = False
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


def default_schema(engine: Engine, configured: Optional[str] = None) -> Optional[str]:
    if configured:
        return configured
    if engine.dialect.name == "postgresql":
        return "public"
    return None   # SQLite has no schema concept


@contextmanager
def statement_deadline(conn: Connection, seconds: Optional[float]):
    """Bound every statement run on `conn` inside the block by `seconds`."""
    if not seconds or seconds <= 0:
        yield conn
        return

    dialect = conn.dialect.name
    if dialect == "postgresql":
        conn.exec_driver_sql(f"SET LOCAL statement_timeout = {int(seconds * 1000)}")
        yield conn
    elif dialect == "sqlite":
        dbapi_conn = conn.connection.dbapi_connection
        deadline = time.monotonic() + seconds
        dbapi_conn.set_progress_handler(lambda: int(time.monotonic() > deadline), _SQLITE_PROGRESS_OPS)
        try:
            yield conn
        finally:
            dbapi_conn.set_progress_handler(None, 0)
    else:
        logger.debug("No statement deadline support for dialect %s", dialect)
        yield conn


def is_timeout_error(exc: BaseException) -> bool:
    """True when a driver error means the statement deadline fired."""
    orig = getattr(exc, "orig", exc) if isinstance(exc, DBAPIError) else exc
    if getattr(orig, "pgcode", None) == PG_QUERY_CANCELED:
        return True
    msg = str(orig).lower()
    return "interrupted" in msg or "statement timeout" in msg
