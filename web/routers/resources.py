"""Resource endpoints.

- POST /resources - Create one resource from a manifest
- GET /resources/{kind} - List resources of a kind
- GET /resources/{kind}/{namespace}/{name} - Get one resource
- DELETE /resources/{kind}/{namespace}/{name} - Delete one resource
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from osbuild_operator.config import get_settings
from osbuild_operator.errors import (
    AlreadyExistsError,
    ManifestError,
    NotFoundError,
    OperatorError,
)
from osbuild_operator.resources.io import parse_manifest, resolve_kind
from osbuild_operator.resources.meta import Resource
from osbuild_operator.store.service import SqlObjectStore
from osbuild_operator.types import ObjectKey
from web.deps import get_store

router = APIRouter()


def _http_error(status_code: int, error: OperatorError) -> HTTPException:
    return HTTPException(status_code=status_code, detail=error.to_dict())


def _kind(kind: str) -> type[Resource]:
    try:
        return resolve_kind(kind)
    except ManifestError as e:
        raise _http_error(status.HTTP_404_NOT_FOUND, e) from None


@router.post("", status_code=status.HTTP_201_CREATED)
def create_resource_endpoint(
    manifest: dict[str, Any] = Body(...),
    store: SqlObjectStore = Depends(get_store),
) -> dict[str, Any]:
    """Create a resource from a manifest.

    Args:
        manifest: Resource manifest with apiVersion, kind and metadata.
        store: Object store.

    Returns:
        Stored manifest.

    Raises:
        HTTPException: 422 if the manifest is invalid, 409 if it exists.
    """
    try:
        resource = parse_manifest(manifest, get_settings().default_namespace)
    except ManifestError as e:
        raise _http_error(status.HTTP_422_UNPROCESSABLE_ENTITY, e) from None

    try:
        store.create(resource)
    except AlreadyExistsError as e:
        raise _http_error(status.HTTP_409_CONFLICT, e) from None
    return resource.to_manifest()


@router.get("/{kind}")
def list_resources_endpoint(
    kind: str,
    namespace: str | None = Query(None, description="Filter by namespace"),
    store: SqlObjectStore = Depends(get_store),
) -> list[dict[str, Any]]:
    """List resources of a kind.

    Args:
        kind: Resource kind.
        namespace: Restrict to one namespace; all namespaces if omitted.
        store: Object store.

    Returns:
        List of manifests.
    """
    cls = _kind(kind)
    return [r.to_manifest() for r in store.list(cls, namespace)]


@router.get("/{kind}/{namespace}/{name}")
def get_resource_endpoint(
    kind: str,
    namespace: str,
    name: str,
    store: SqlObjectStore = Depends(get_store),
) -> dict[str, Any]:
    """Get a resource by kind and namespaced name.

    Raises:
        HTTPException: 404 if the kind or the resource is unknown.
    """
    cls = _kind(kind)
    try:
        return store.get(cls, ObjectKey(namespace, name)).to_manifest()
    except NotFoundError as e:
        raise _http_error(status.HTTP_404_NOT_FOUND, e) from None


@router.delete("/{kind}/{namespace}/{name}")
def delete_resource_endpoint(
    kind: str,
    namespace: str,
    name: str,
    store: SqlObjectStore = Depends(get_store),
) -> dict[str, str]:
    """Delete a resource by kind and namespaced name.

    Raises:
        HTTPException: 404 if the kind or the resource is unknown.
    """
    cls = _kind(kind)
    try:
        store.delete(cls, ObjectKey(namespace, name))
    except NotFoundError as e:
        raise _http_error(status.HTTP_404_NOT_FOUND, e) from None
    return {
        "kind": cls.kind,
        "namespace": namespace,
        "name": name,
        "status": "deleted",
    }
