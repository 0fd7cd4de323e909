"""Object store service.

The reconciler only needs get/list/create against some store of
resources. ``ObjectStore`` is that capability; ``SqlObjectStore`` is the
SQLAlchemy-backed implementation used by the CLI, the web API and tests.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from osbuild_operator.db import (
    create_all_tables,
    get_engine,
    get_session,
    get_session_factory,
)
from osbuild_operator.errors import AlreadyExistsError, NotFoundError
from osbuild_operator.resources.meta import Resource
from osbuild_operator.store.models import StoredObject
from osbuild_operator.types import ObjectKey

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Resource)


class ObjectStore(Protocol):
    """Store of namespaced resources."""

    def get(self, kind: type[R], key: ObjectKey) -> R:
        """Fetch a resource, raising NotFoundError if absent."""
        ...

    def list(self, kind: type[R], namespace: str | None = None) -> list[R]:
        """List resources of a kind, in all namespaces when none is given."""
        ...

    def create(self, resource: R) -> R:
        """Persist a new resource, raising AlreadyExistsError on collision."""
        ...

    def delete(self, kind: type[R], key: ObjectKey) -> None:
        """Remove a resource, raising NotFoundError if absent."""
        ...


class SqlObjectStore:
    """ObjectStore persisting manifests through a SQLAlchemy session.

    The store never commits; transaction boundaries belong to whoever
    owns the session (see ``osbuild_operator.db.get_session``).
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def _get_row(self, kind: str, key: ObjectKey) -> StoredObject | None:
        stmt = select(StoredObject).where(
            StoredObject.kind == kind,
            StoredObject.namespace == key.namespace,
            StoredObject.name == key.name,
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def get(self, kind: type[R], key: ObjectKey) -> R:
        """Fetch a resource by key.

        Args:
            kind: Resource class.
            key: Namespaced name.

        Returns:
            Validated resource instance.

        Raises:
            NotFoundError: If no such resource exists.
        """
        row = self._get_row(kind.kind, key)
        if row is None:
            raise NotFoundError(kind.kind, key)
        return kind.model_validate(_body(row.manifest))

    def list(self, kind: type[R], namespace: str | None = None) -> list[R]:
        """List resources of a kind ordered by namespace and name.

        Args:
            kind: Resource class.
            namespace: Restrict to one namespace; None lists all namespaces.

        Returns:
            List of resource instances.
        """
        stmt = select(StoredObject).where(StoredObject.kind == kind.kind)
        if namespace is not None:
            stmt = stmt.where(StoredObject.namespace == namespace)
        stmt = stmt.order_by(StoredObject.namespace, StoredObject.name)
        rows = self.session.execute(stmt).scalars().all()
        return [kind.model_validate(_body(row.manifest)) for row in rows]

    def create(self, resource: R) -> R:
        """Persist a new resource.

        Args:
            resource: Resource to store.

        Returns:
            The stored resource.

        Raises:
            AlreadyExistsError: If a resource with the same kind, namespace
                and name exists.
        """
        key = resource.key
        if self._get_row(resource.kind, key) is not None:
            raise AlreadyExistsError(resource.kind, key)

        row = StoredObject(
            api_version=resource.api_version,
            kind=resource.kind,
            namespace=key.namespace,
            name=key.name,
            manifest=resource.to_manifest(),
        )
        self.session.add(row)
        try:
            self.session.flush()
        except IntegrityError as e:
            raise AlreadyExistsError(resource.kind, key) from e

        logger.debug("Created %s %s", resource.kind, key)
        return resource

    def delete(self, kind: type[R], key: ObjectKey) -> None:
        """Delete a resource by key.

        Args:
            kind: Resource class.
            key: Namespaced name.

        Raises:
            NotFoundError: If no such resource exists.
        """
        row = self._get_row(kind.kind, key)
        if row is None:
            raise NotFoundError(kind.kind, key)
        self.session.delete(row)
        self.session.flush()
        logger.debug("Deleted %s %s", kind.kind, key)


def _body(manifest: dict[str, object]) -> dict[str, object]:
    """Strip apiVersion/kind from a stored manifest."""
    return {k: v for k, v in manifest.items() if k not in ("apiVersion", "kind")}


@contextmanager
def open_store(db_url: str | None = None) -> Iterator[SqlObjectStore]:
    """Open a SqlObjectStore in its own transaction.

    Tables are created on first use. The transaction commits when the
    block exits normally and rolls back on exception.

    Args:
        db_url: Database URL. If not provided, uses settings default.

    Yields:
        SqlObjectStore bound to a fresh session.
    """
    engine = get_engine(db_url)
    create_all_tables(engine)
    try:
        with get_session(get_session_factory(engine)) as session:
            yield SqlObjectStore(session)
    finally:
        engine.dispose()


__all__ = ["ObjectStore", "SqlObjectStore", "open_store"]
