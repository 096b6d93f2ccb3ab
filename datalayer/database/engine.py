"""SQLAlchemy engine configuration."""

from typing import Any, Optional

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import sessionmaker

from datalayer.settings import get_settings


def _set_sqlite_pragmas(dbapi_connection: Any, connection_record: Any) -> None:
    """Set SQLite pragmas on each new connection.

    Args:
        dbapi_connection: The raw DBAPI connection.
        connection_record: The connection record (unused but required by event signature).
    """
    cursor = dbapi_connection.cursor()
    # Enable foreign key constraint enforcement
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def create_database_engine(url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """Create and configure the SQLAlchemy engine.

    Args:
        url: Database URL; defaults to the configured ``database_url``.
        echo: Echo SQL; defaults to the configured ``echo_sql``.

    Returns:
        Configured SQLAlchemy Engine instance.
    """
    settings = get_settings()
    url = url or settings.database_url
    echo = settings.echo_sql if echo is None else echo

    connect_args = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    engine = create_engine(url, connect_args=connect_args, echo=echo)

    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _set_sqlite_pragmas)

    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to ``engine``."""
    return sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
