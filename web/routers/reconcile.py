"""Reconciliation trigger endpoint.

An external watcher calls POST /reconcile/{namespace}/{name} whenever an
ImageBuilderImage is created or updated.
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from osbuild_operator.config import get_settings
from osbuild_operator.controller.reconciler import reconcile
from osbuild_operator.errors import (
    AlreadyExistsError,
    ManifestError,
    NotFoundError,
    TemplateError,
)
from osbuild_operator.store.service import SqlObjectStore
from osbuild_operator.types import ObjectKey
from web.deps import get_store

router = APIRouter()


@router.post("/{namespace}/{name}")
def reconcile_endpoint(
    namespace: str,
    name: str,
    store: SqlObjectStore = Depends(get_store),
) -> dict[str, Any]:
    """Run one reconciliation pass for an ImageBuilderImage.

    A missing request or builder is not an error: the outcome says why
    nothing was created.

    Args:
        namespace: Request namespace.
        name: Request name.
        store: Object store.

    Returns:
        Reconcile result with outcome and created objects.

    Raises:
        HTTPException: 404 if a referenced ImageBuilder is missing, 422 if
            a blueprint template or a generated name is invalid, 409 if an
            object exists.
    """
    try:
        result = reconcile(store, ObjectKey(namespace, name), get_settings())
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=e.to_dict()
        ) from None
    except (TemplateError, ManifestError) as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.to_dict()
        ) from None
    except AlreadyExistsError as e:
        # Objects created before the collision stay, as in the CLI
        store.session.commit()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=e.to_dict()
        ) from None
    return result.to_dict()
