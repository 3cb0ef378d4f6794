"""Database connection and session management.

This module builds engines and session factories and provides utility
functions for database operations.  Callers own the engine and pass it in.
"""

from typing import Any

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from goblinwar.config import get_settings
from goblinwar.models import Base

_IN_MEMORY_URLS = {"sqlite://", "sqlite:///:memory:"}


def _configure_sqlite(
    dbapi_connection: Any, connection_record: Any  # noqa: ARG001
) -> None:
    """Configure SQLite pragmas on every new connection.

    Args:
        dbapi_connection: The DBAPI connection
        connection_record: Connection record (required by SQLAlchemy event API)

    Note:
        WAL mode lets readers and the single writer operate simultaneously;
        foreign keys are off by default in SQLite.
    """
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(database_url: str | None = None, *, echo: bool | None = None) -> Engine:
    """Create and configure the database engine.

    Args:
        database_url: URL to connect to; defaults to ``settings.database_url``
        echo: Override ``settings.database_echo``

    Returns:
        Engine: Configured SQLAlchemy engine

    Note:
        In-memory SQLite URLs share one connection so every session sees the
        same database.
    """
    settings = get_settings()
    url = database_url or settings.database_url
    echo = settings.database_echo if echo is None else echo

    if url.startswith("sqlite"):
        # SQLite engine: sessions are used from FastAPI's worker threads
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if url in _IN_MEMORY_URLS:
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, echo=echo, pool_pre_ping=True, **kwargs)
        event.listen(engine, "connect", _configure_sqlite)
    else:
        # Non-SQLite (e.g., PostgreSQL): honor pool settings for production use
        engine = create_engine(
            url,
            echo=echo,
            pool_pre_ping=True,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )

    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Build a session factory bound to ``engine``."""

    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Initialize the database by creating all tables."""

    Base.metadata.create_all(bind=engine)


def check_database_health(engine: Engine) -> bool:
    """Check if the database is accessible.

    Returns:
        bool: True if database is healthy, False otherwise
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


def get_table_names(engine: Engine) -> list[str]:
    """Get list of all table names in the database."""

    inspector = inspect(engine)
    return inspector.get_table_names()
