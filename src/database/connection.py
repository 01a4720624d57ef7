"""Database connection and session management."""

import os
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

DEFAULT_DATABASE_NAME = "taskflow"

# Seconds a single statement may run before Postgres cancels it
DEFAULT_STATEMENT_TIMEOUT_SECONDS = 30


def get_database_url() -> str:
    """Build the PostgreSQL database URL from environment variables.

    DATABASE_URL takes precedence when set, otherwise the URL is assembled
    from DATABASE_HOST, DATABASE_PORT, DATABASE_NAME and APP_DB_PASSWORD.

    :returns: The database connection URL.
    :raises KeyError: If required environment variables are not set.
    """
    url = os.environ.get("DATABASE_URL")
    if url:
        return url

    host = os.environ["DATABASE_HOST"]
    port = os.environ.get("DATABASE_PORT", "5432")
    name = os.environ.get("DATABASE_NAME", DEFAULT_DATABASE_NAME)
    password = os.environ["APP_DB_PASSWORD"]

    return f"postgresql://app:{password}@{host}:{port}/{name}"


def create_db_engine(*, echo: bool = False) -> Engine:
    """Create a SQLAlchemy engine for the database.

    Statements are bounded by a server-side timeout so a hung store call
    surfaces as an error instead of blocking a reminder run.

    :param echo: If True, log all SQL statements.
    :returns: A configured SQLAlchemy engine.
    """
    timeout_ms = int(
        os.environ.get("DATABASE_STATEMENT_TIMEOUT", DEFAULT_STATEMENT_TIMEOUT_SECONDS)
    ) * 1000
    return create_engine(
        get_database_url(),
        echo=echo,
        pool_pre_ping=True,
        connect_args={"options": f"-c statement_timeout={timeout_ms}"},
    )


@dataclass
class _DatabaseState:
    """Container for database connection state."""

    engine: Engine | None = field(default=None)
    session_factory: sessionmaker[Session] | None = field(default=None)


_state = _DatabaseState()


def get_engine() -> Engine:
    """Get or create the database engine singleton.

    :returns: The database engine.
    """
    if _state.engine is None:
        _state.engine = create_db_engine()
    return _state.engine


def get_session_factory() -> sessionmaker[Session]:
    """Get or create the session factory singleton.

    :returns: A sessionmaker bound to the database engine.
    """
    if _state.session_factory is None:
        _state.session_factory = sessionmaker(bind=get_engine(), expire_on_commit=False)
    return _state.session_factory


@contextmanager
def get_session() -> Iterator[Session]:
    """Create a new database session with automatic cleanup.

    Commits on successful completion, rolls back on exception.

    :yields: A database session.
    """
    session = get_session_factory()()
    try:
        yield session
        session.commit()

    except Exception:
        session.rollback()
        raise

    finally:
        session.close()
