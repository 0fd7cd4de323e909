"""ImageBuilderImage reconciliation.

A pass turns one ImageBuilderImage into:
- ConfigMaps ``<name>`` and ``<name>-iso`` holding the rendered blueprints
- Task ``generate-commit`` running the compose
- Pipeline ``<request>-pipeline`` wrapping the task
- PipelineRun ``<request>-pipeline-run`` binding the workspaces

Passes are stateless and create-only: every object is created exactly
once and a second pass for the same request fails on the first existing
object. Retries are the caller's business.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from osbuild_operator.blueprints.render import generate_blueprints
from osbuild_operator.config import Settings, get_settings
from osbuild_operator.controller.resolver import resolve_api_endpoint, resolve_builder
from osbuild_operator.errors import (
    AlreadyExistsError,
    AmbiguousBuilderError,
    ManifestError,
    NotFoundError,
)
from osbuild_operator.pipelines.pipeline import image_pipeline, pipeline_run
from osbuild_operator.pipelines.task import COMMIT_TASK_NAME, commit_task
from osbuild_operator.resources.core import ConfigMap
from osbuild_operator.resources.image import (
    API_GROUP,
    ImageBuilderImage,
    ImageBuilderImageSpec,
)
from osbuild_operator.resources.meta import ObjectMeta, Resource
from osbuild_operator.store.service import ObjectStore
from osbuild_operator.types import ObjectKey, ReconcileOutcome, ReconcileResult

logger = logging.getLogger(__name__)

# Label pointing generated objects back at their ImageBuilderImage
IMAGE_LABEL = f"{API_GROUP}/image"


def default_spec(request: ImageBuilderImage) -> ImageBuilderImageSpec:
    """Fill defaults into a copy of the request spec.

    ``name`` defaults to the request name and ``sharedStorageRef`` to
    ``<request>-data``. The request itself is not modified.
    """
    spec = request.spec
    updates: dict[str, str] = {}
    if not spec.name:
        updates["name"] = request.metadata.name
    if not spec.shared_storage_ref:
        logger.info("No PVC name specified, using default")
        updates["shared_storage_ref"] = f"{request.metadata.name}-data"
    return spec.model_copy(update=updates)


def pipeline_name(key: ObjectKey) -> str:
    """Name of the Pipeline generated for a request."""
    return f"{key.name}-pipeline"


def pipeline_run_name(key: ObjectKey) -> str:
    """Name of the PipelineRun generated for a request."""
    return f"{key.name}-pipeline-run"


def _metadata(name: str, namespace: str, labels: dict[str, str]) -> ObjectMeta:
    try:
        return ObjectMeta(name=name, namespace=namespace, labels=labels)
    except ValidationError as e:
        raise ManifestError(f"Cannot name generated object '{name}': {e}") from e


def _create(store: ObjectStore, resource: Resource, result: ReconcileResult) -> None:
    try:
        store.create(resource)
    except AlreadyExistsError:
        logger.error("Could not create %s %s", resource.kind, resource.key)
        raise
    result.created.append((resource.kind, resource.key))
    logger.info("Created %s %s", resource.kind, resource.key)


def reconcile(
    store: ObjectStore,
    key: ObjectKey,
    settings: Settings | None = None,
) -> ReconcileResult:
    """Run one reconciliation pass for an ImageBuilderImage.

    Args:
        store: Object store to read the request from and write objects to.
        key: Namespaced name of the ImageBuilderImage.
        settings: Application settings (step images, poll interval).

    Returns:
        ReconcileResult. A vanished request or an unresolvable default
        builder ends the pass quietly with nothing created.

    Raises:
        NotFoundError: If an explicitly referenced ImageBuilder is missing.
        TemplateError: If a blueprint template is malformed; nothing is
            created in that case.
        ManifestError: If a generated object name is not a valid name,
            for example because the request name is too long; nothing is
            created in that case.
        AlreadyExistsError: If a generated object already exists; objects
            created earlier in the pass are kept.
    """
    if settings is None:
        settings = get_settings()

    try:
        request = store.get(ImageBuilderImage, key)
    except NotFoundError:
        logger.info("ImageBuilderImage %s not found, nothing to do", key)
        return ReconcileResult(
            outcome=ReconcileOutcome.NOT_FOUND,
            message=f"ImageBuilderImage not found: {key}",
        )

    try:
        builder = resolve_builder(store, request)
    except AmbiguousBuilderError as e:
        logger.error("No suitable ImageBuilder found or too many: %s", e)
        return ReconcileResult(outcome=ReconcileOutcome.NO_BUILDER, message=str(e))

    api_endpoint = resolve_api_endpoint(store, builder)
    spec = default_spec(request)

    # Every generated name is checked before anything is written
    namespace = key.namespace
    labels = {IMAGE_LABEL: key.name}
    iso_name = f"{spec.name}-iso"
    blueprint_meta = _metadata(spec.name, namespace, labels)
    iso_meta = _metadata(iso_name, namespace, labels)
    task_meta = _metadata(COMMIT_TASK_NAME, namespace, labels)
    pipeline_meta = _metadata(pipeline_name(key), namespace, labels)
    run_meta = _metadata(pipeline_run_name(key), namespace, labels)

    blueprints = generate_blueprints(spec)

    result = ReconcileResult(
        outcome=ReconcileOutcome.CREATED,
        message=f"Started {run_meta.name} on {builder.key}",
    )

    blueprint_config_map = ConfigMap(
        metadata=blueprint_meta, data={spec.name: blueprints.base}
    )
    iso_config_map = ConfigMap(metadata=iso_meta, data={iso_name: blueprints.iso})
    _create(store, blueprint_config_map, result)
    _create(store, iso_config_map, result)

    task = commit_task(
        task_meta,
        api_endpoint,
        spec.name,
        step_image=settings.step_image,
        wait_image=settings.wait_image,
        poll_interval=settings.poll_interval,
    )
    _create(store, task, result)

    pipeline = image_pipeline(pipeline_meta, [task])
    _create(store, pipeline, result)

    run = pipeline_run(
        run_meta,
        pipeline_name=pipeline.metadata.name,
        blueprints_config_map=blueprint_config_map.metadata.name,
        shared_volume_claim=spec.shared_storage_ref,
    )
    _create(store, run, result)

    return result


__all__ = [
    "IMAGE_LABEL",
    "default_spec",
    "pipeline_name",
    "pipeline_run_name",
    "reconcile",
]
