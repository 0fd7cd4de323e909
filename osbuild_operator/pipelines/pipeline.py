"""Pipeline and PipelineRun generation."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from osbuild_operator.resources.meta import ObjectMeta
from osbuild_operator.resources.tekton import (
    ConfigMapVolumeSource,
    PersistentVolumeClaimVolumeSource,
    Pipeline,
    PipelineRef,
    PipelineRun,
    PipelineRunSpec,
    PipelineSpec,
    PipelineTask,
    PipelineWorkspaceDeclaration,
    Task,
    TaskRef,
    WorkspaceBinding,
    WorkspacePipelineTaskBinding,
)
from osbuild_operator.types import BLUEPRINTS_WORKSPACE, SHARED_VOLUME_WORKSPACE

logger = logging.getLogger(__name__)

WORKSPACES = (BLUEPRINTS_WORKSPACE, SHARED_VOLUME_WORKSPACE)


def image_pipeline(metadata: ObjectMeta, tasks: Sequence[Task]) -> Pipeline:
    """Wrap tasks into a Pipeline sharing the blueprints and shared-volume workspaces.

    Each pipeline task references its Task by name and binds both
    workspaces to the pipeline's workspaces of the same name. Tasks run
    in list order: every task after the first runs after its predecessor.

    Args:
        metadata: Pipeline name and namespace.
        tasks: Tasks in execution order.

    Returns:
        Pipeline instance.
    """
    pipeline_tasks: list[PipelineTask] = []
    previous: str | None = None
    for task in tasks:
        name = task.metadata.name
        logger.debug("Adding task %s to pipeline %s", name, metadata.name)
        pipeline_tasks.append(
            PipelineTask(
                name=name,
                task_ref=TaskRef(name=name),
                workspaces=[
                    WorkspacePipelineTaskBinding(name=ws, workspace=ws)
                    for ws in WORKSPACES
                ],
                run_after=[previous] if previous else None,
            )
        )
        previous = name

    return Pipeline(
        metadata=metadata,
        spec=PipelineSpec(
            workspaces=[PipelineWorkspaceDeclaration(name=ws) for ws in WORKSPACES],
            tasks=pipeline_tasks,
        ),
    )


def pipeline_run(
    metadata: ObjectMeta,
    pipeline_name: str,
    blueprints_config_map: str,
    shared_volume_claim: str,
) -> PipelineRun:
    """Build a PipelineRun binding the pipeline workspaces to real storage.

    Args:
        metadata: PipelineRun name and namespace.
        pipeline_name: Name of the Pipeline to run.
        blueprints_config_map: ConfigMap holding the base blueprint.
        shared_volume_claim: PersistentVolumeClaim used as scratch space.

    Returns:
        PipelineRun instance.
    """
    return PipelineRun(
        metadata=metadata,
        spec=PipelineRunSpec(
            pipeline_ref=PipelineRef(name=pipeline_name),
            workspaces=[
                WorkspaceBinding(
                    name=BLUEPRINTS_WORKSPACE,
                    config_map=ConfigMapVolumeSource(name=blueprints_config_map),
                ),
                WorkspaceBinding(
                    name=SHARED_VOLUME_WORKSPACE,
                    persistent_volume_claim=PersistentVolumeClaimVolumeSource(
                        claim_name=shared_volume_claim
                    ),
                ),
            ],
        ),
    )


__all__ = ["WORKSPACES", "image_pipeline", "pipeline_run"]
