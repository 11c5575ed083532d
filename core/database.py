"""
core/database.py -- Engine construction shared by the account and post stores.

SQLAlchemy Core provides a database-agnostic abstraction: swapping SQLite for
PostgreSQL is a connection string change, not a rewrite. Each store owns its
own Engine and tables; they may point at the same URL.
"""

from datetime import datetime, timezone

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers do not block during writes.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def make_engine(db_url: str) -> Engine:
    """Create an Engine for db_url.

    check_same_thread=False: route handlers run in FastAPI's thread pool.
    WAL is skipped for in-memory databases, which do not support it.
    """
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite") and "memory" not in db_url:
        event.listen(engine, "connect", _set_wal_mode)
    return engine


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
