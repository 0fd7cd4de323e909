"""Object store module.

This module handles:
- ORM model for stored resource manifests
- The ObjectStore capability passed to the reconciler
- SQLAlchemy-backed get/list/create/delete
"""

from osbuild_operator.store.models import StoredObject
from osbuild_operator.store.service import ObjectStore, SqlObjectStore, open_store

__all__ = ["ObjectStore", "SqlObjectStore", "StoredObject", "open_store"]
