"""Object store ORM models.

Each stored resource is one row holding its full manifest as JSON,
addressed by kind, namespace and name.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from osbuild_operator.db import Base


class StoredObject(Base):
    """ORM model for a persisted resource manifest.

    Attributes:
        id: Primary key.
        api_version: Manifest apiVersion.
        kind: Resource kind (e.g. 'ConfigMap').
        namespace: Resource namespace.
        name: Resource name, unique per kind and namespace.
        manifest: Full manifest as JSON.
        created_at: Timestamp of creation.
    """

    __tablename__ = "objects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    api_version: Mapped[str] = mapped_column(String(100), nullable=False)
    kind: Mapped[str] = mapped_column(String(63), nullable=False, index=True)
    namespace: Mapped[str] = mapped_column(String(253), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(253), nullable=False)

    manifest: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("kind", "namespace", "name", name="uq_objects_identity"),
    )

    def __repr__(self) -> str:
        """Return string representation of StoredObject."""
        return (
            f"<StoredObject(id={self.id}, kind='{self.kind}', "
            f"namespace='{self.namespace}', name='{self.name}')>"
        )


__all__ = ["StoredObject"]
