"""ImageBuilder and compose endpoint resolution."""

from __future__ import annotations

import logging

from osbuild_operator.errors import AmbiguousBuilderError, NotFoundError
from osbuild_operator.resources.core import Service
from osbuild_operator.resources.image import ImageBuilder, ImageBuilderImage
from osbuild_operator.store.service import ObjectStore
from osbuild_operator.types import ObjectKey

logger = logging.getLogger(__name__)

API_PATH = "/api/v1"


def resolve_builder(store: ObjectStore, request: ImageBuilderImage) -> ImageBuilder:
    """Pick the ImageBuilder serving a request.

    An explicit ``spec.builderRef`` is looked up in the request's
    namespace. Without one, exactly one ImageBuilder must exist across
    all namespaces.

    Args:
        store: Object store.
        request: The ImageBuilderImage being reconciled.

    Returns:
        The selected ImageBuilder.

    Raises:
        NotFoundError: If the referenced ImageBuilder does not exist.
        AmbiguousBuilderError: If no reference is given and zero or
            several ImageBuilders exist.
    """
    ref = request.spec.builder_ref
    if ref:
        key = ObjectKey(request.metadata.namespace, ref)
        try:
            return store.get(ImageBuilder, key)
        except NotFoundError:
            logger.error("Could not get ImageBuilder %s", key)
            raise

    logger.info(
        "ImageBuilder not specified in %s, trying to find default", request.key
    )
    builders = store.list(ImageBuilder)
    if len(builders) != 1:
        raise AmbiguousBuilderError(len(builders))
    builder = builders[0]
    logger.info("Using %s ImageBuilder", builder.key)
    return builder


def service_api_endpoint(service: Service) -> str:
    """Build the compose API base URL of a Service.

    Returns:
        ``http://<name>.<namespace>:<port>/api/v1`` using the first port,
        or an empty string when the Service exposes no ports.
    """
    if not service.spec.ports:
        return ""
    port = service.spec.ports[0].port
    return (
        f"http://{service.metadata.name}.{service.metadata.namespace}:{port}{API_PATH}"
    )


def resolve_api_endpoint(store: ObjectStore, builder: ImageBuilder) -> str:
    """Resolve the compose API endpoint of an ImageBuilder.

    The endpoint is the Service with the builder's name and namespace. A
    missing Service is logged, not raised: the generated task then
    carries an empty endpoint and fails when it runs.

    Args:
        store: Object store.
        builder: Selected ImageBuilder.

    Returns:
        API base URL, or an empty string if it cannot be resolved.
    """
    try:
        service = store.get(Service, builder.key)
    except NotFoundError:
        logger.error("Could not get image service %s", builder.key)
        return ""

    endpoint = service_api_endpoint(service)
    if not endpoint:
        logger.error("Image service %s exposes no ports", builder.key)
    return endpoint


__all__ = [
    "API_PATH",
    "resolve_api_endpoint",
    "resolve_builder",
    "service_api_endpoint",
]
