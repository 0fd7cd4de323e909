"""Tekton pipeline generation module.

This module handles:
- The edge-commit build Task and its polling script
- Pipelines wrapping tasks with shared workspaces
- PipelineRuns binding workspaces to ConfigMaps and PVCs
"""

from osbuild_operator.pipelines.pipeline import image_pipeline, pipeline_run
from osbuild_operator.pipelines.task import COMMIT_TASK_NAME, commit_task, wait_script

__all__ = [
    "COMMIT_TASK_NAME",
    "commit_task",
    "image_pipeline",
    "pipeline_run",
    "wait_script",
]
