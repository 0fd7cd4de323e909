"""SQLAlchemy plumbing for the object store.

Engines default to the URL from settings. SQLite databases get their
parent directory created on first use so a fresh machine works without
setup.
"""

from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from osbuild_operator.config import get_settings

SQLITE_PREFIX = "sqlite:///"


class Base(DeclarativeBase):
    """Declarative base of the object store tables."""


def sqlite_path(db_url: str) -> Path | None:
    """Return the file behind a SQLite URL, or None for memory/other URLs."""
    if not db_url.startswith(SQLITE_PREFIX):
        return None
    path = db_url.removeprefix(SQLITE_PREFIX)
    if not path or path == ":memory:":
        return None
    return Path(path)


def get_engine(db_url: str | None = None) -> Engine:
    """Create an engine for the object store database.

    Args:
        db_url: Database URL; the configured one when omitted.

    Returns:
        SQLAlchemy Engine.
    """
    url = db_url or get_settings().db_url

    connect_args: dict[str, Any] = {}
    if url.startswith("sqlite"):
        # Web handlers run in a threadpool
        connect_args["check_same_thread"] = False
        path = sqlite_path(url)
        if path is not None:
            path.parent.mkdir(parents=True, exist_ok=True)

    return create_engine(url, connect_args=connect_args)


def get_session_factory(engine: Engine | None = None) -> sessionmaker[Session]:
    """Build a session factory bound to an engine.

    Autoflush is off; the store flushes explicitly so uniqueness
    violations surface at create time.
    """
    return sessionmaker(
        bind=engine if engine is not None else get_engine(),
        autoflush=False,
        expire_on_commit=False,
    )


@contextmanager
def get_session(
    session_factory: sessionmaker[Session] | None = None,
) -> Generator[Session, None, None]:
    """Yield a session that commits on success and rolls back on error."""
    session = (session_factory or get_session_factory())()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def create_all_tables(engine: Engine | None = None) -> None:
    """Create the object store tables if they do not exist."""
    from osbuild_operator.store import models  # noqa: F401

    Base.metadata.create_all(bind=engine if engine is not None else get_engine())


__all__ = [
    "Base",
    "create_all_tables",
    "get_engine",
    "get_session",
    "get_session_factory",
    "sqlite_path",
]
