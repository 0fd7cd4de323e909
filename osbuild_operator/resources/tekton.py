"""Tekton resource kinds: Task, Pipeline and PipelineRun.

Only the subset of the Tekton v1 schema the generators emit is modelled.
"""

from __future__ import annotations

from typing import ClassVar

from pydantic import Field

from osbuild_operator.resources.meta import CamelModel, Resource

TEKTON_API_VERSION = "tekton.dev/v1"


class EnvVar(CamelModel):
    """Environment variable of a step."""

    name: str
    value: str


class Step(CamelModel):
    """One container step of a Task.

    A step runs either ``command`` or ``script``, never both.
    """

    name: str
    image: str
    command: list[str] | None = None
    script: str | None = None
    env: list[EnvVar] | None = None


class WorkspaceDeclaration(CamelModel):
    """Workspace slot declared by a Task."""

    name: str
    read_only: bool | None = None


class TaskSpec(CamelModel):
    """Task body."""

    workspaces: list[WorkspaceDeclaration] = Field(default_factory=list)
    steps: list[Step] = Field(default_factory=list)


class Task(Resource):
    """Ordered list of container steps."""

    api_version: ClassVar[str] = TEKTON_API_VERSION
    kind: ClassVar[str] = "Task"

    spec: TaskSpec = Field(default_factory=TaskSpec)


class TaskRef(CamelModel):
    """Reference to a Task by name."""

    name: str


class WorkspacePipelineTaskBinding(CamelModel):
    """Binds a task workspace to a pipeline workspace."""

    name: str
    workspace: str


class PipelineTask(CamelModel):
    """A node of the pipeline graph."""

    name: str
    task_ref: TaskRef
    workspaces: list[WorkspacePipelineTaskBinding] = Field(default_factory=list)
    run_after: list[str] | None = None


class PipelineWorkspaceDeclaration(CamelModel):
    """Workspace slot declared by a Pipeline."""

    name: str


class PipelineSpec(CamelModel):
    """Pipeline body."""

    workspaces: list[PipelineWorkspaceDeclaration] = Field(default_factory=list)
    tasks: list[PipelineTask] = Field(default_factory=list)


class Pipeline(Resource):
    """Graph of tasks sharing workspaces."""

    api_version: ClassVar[str] = TEKTON_API_VERSION
    kind: ClassVar[str] = "Pipeline"

    spec: PipelineSpec = Field(default_factory=PipelineSpec)


class PipelineRef(CamelModel):
    """Reference to a Pipeline by name."""

    name: str


class ConfigMapVolumeSource(CamelModel):
    """ConfigMap backing a workspace."""

    name: str


class PersistentVolumeClaimVolumeSource(CamelModel):
    """PersistentVolumeClaim backing a workspace."""

    claim_name: str


class WorkspaceBinding(CamelModel):
    """Concrete resource bound to a pipeline workspace."""

    name: str
    config_map: ConfigMapVolumeSource | None = None
    persistent_volume_claim: PersistentVolumeClaimVolumeSource | None = None


class PipelineRunSpec(CamelModel):
    """PipelineRun body."""

    pipeline_ref: PipelineRef
    workspaces: list[WorkspaceBinding] = Field(default_factory=list)


class PipelineRun(Resource):
    """One execution of a Pipeline."""

    api_version: ClassVar[str] = TEKTON_API_VERSION
    kind: ClassVar[str] = "PipelineRun"

    spec: PipelineRunSpec


__all__ = [
    "TEKTON_API_VERSION",
    "ConfigMapVolumeSource",
    "EnvVar",
    "PersistentVolumeClaimVolumeSource",
    "Pipeline",
    "PipelineRef",
    "PipelineRun",
    "PipelineRunSpec",
    "PipelineSpec",
    "PipelineTask",
    "PipelineWorkspaceDeclaration",
    "Step",
    "Task",
    "TaskRef",
    "TaskSpec",
    "WorkspaceBinding",
    "WorkspaceDeclaration",
    "WorkspacePipelineTaskBinding",
]
