"""Resource kinds handled by the operator.

This module handles:
- Pydantic models for requests, builders and services
- Generated ConfigMaps and Tekton Task/Pipeline/PipelineRun objects
- Manifest parsing from YAML/JSON
"""

from osbuild_operator.resources.core import ConfigMap, Service, ServicePort, ServiceSpec
from osbuild_operator.resources.image import (
    ImageBuilder,
    ImageBuilderImage,
    ImageBuilderImageSpec,
)
from osbuild_operator.resources.io import (
    RESOURCE_KINDS,
    load_manifests,
    parse_manifest,
    parse_manifests,
    resolve_kind,
)
from osbuild_operator.resources.meta import ObjectMeta, Resource
from osbuild_operator.resources.tekton import Pipeline, PipelineRun, Task

__all__ = [
    # Base
    "ObjectMeta",
    "Resource",
    # Kinds
    "ConfigMap",
    "ImageBuilder",
    "ImageBuilderImage",
    "ImageBuilderImageSpec",
    "Pipeline",
    "PipelineRun",
    "Service",
    "ServicePort",
    "ServiceSpec",
    "Task",
    # IO
    "RESOURCE_KINDS",
    "load_manifests",
    "parse_manifest",
    "parse_manifests",
    "resolve_kind",
]
