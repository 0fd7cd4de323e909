"""FastAPI dependencies for the object store.

Each request gets its own session; the request's writes commit together
when the handler returns and roll back if it raises.
"""

from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session, sessionmaker

from osbuild_operator.store.service import SqlObjectStore


def get_session_factory(request: Request) -> sessionmaker[Session]:
    """Return the session factory installed on app state at startup."""
    factory: sessionmaker[Session] = request.app.state.session_factory
    return factory


def get_db(
    session_factory: sessionmaker[Session] = Depends(get_session_factory),
) -> Generator[Session, None, None]:
    """Yield a per-request session wrapped in one transaction."""
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_store(db: Session = Depends(get_db)) -> SqlObjectStore:
    """Provide an ObjectStore bound to the request's session."""
    return SqlObjectStore(db)
