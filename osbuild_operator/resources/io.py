"""Resource manifest loading.

This module provides helpers for parsing resource manifests from YAML
(single or multi-document) and JSON files into typed resource models.
"""

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from osbuild_operator.errors import ManifestError
from osbuild_operator.resources.core import ConfigMap, Service
from osbuild_operator.resources.image import ImageBuilder, ImageBuilderImage
from osbuild_operator.resources.meta import Resource
from osbuild_operator.resources.tekton import Pipeline, PipelineRun, Task

RESOURCE_KINDS: dict[str, type[Resource]] = {
    cls.kind: cls
    for cls in (
        ConfigMap,
        ImageBuilder,
        ImageBuilderImage,
        Pipeline,
        PipelineRun,
        Service,
        Task,
    )
}


def resolve_kind(kind: str) -> type[Resource]:
    """Look up a resource class by kind, case-insensitively.

    Args:
        kind: Kind name (e.g. 'ImageBuilderImage' or 'imagebuilderimage').

    Returns:
        Resource class.

    Raises:
        ManifestError: If the kind is unknown.
    """
    if kind in RESOURCE_KINDS:
        return RESOURCE_KINDS[kind]
    lowered = kind.lower()
    for name, cls in RESOURCE_KINDS.items():
        if name.lower() == lowered or f"{name.lower()}s" == lowered:
            return cls
    raise ManifestError(
        f"Unknown kind '{kind}', expected one of {sorted(RESOURCE_KINDS)}"
    )


def parse_manifest(
    data: dict[str, Any], default_namespace: str | None = None
) -> Resource:
    """Parse and validate a single manifest.

    Args:
        data: Manifest dictionary with ``kind`` and ``metadata``.
        default_namespace: Namespace applied when the manifest has none.

    Returns:
        Validated resource instance.

    Raises:
        ManifestError: If the kind is missing/unknown or validation fails.
    """
    if not isinstance(data, dict):
        raise ManifestError(f"Expected a mapping, got {type(data).__name__}")
    kind = data.get("kind")
    if not kind:
        raise ManifestError("Manifest has no 'kind'")
    cls = resolve_kind(kind)

    body = dict(data)
    body["kind"] = cls.kind
    metadata = body.get("metadata")
    if (
        default_namespace is not None
        and isinstance(metadata, dict)
        and not metadata.get("namespace")
    ):
        body["metadata"] = {**metadata, "namespace": default_namespace}

    try:
        return cls.from_manifest(body)
    except ValidationError as e:
        raise ManifestError(f"Invalid {cls.kind} manifest: {e}") from e


def parse_manifests(
    text: str, default_namespace: str | None = None
) -> list[Resource]:
    """Parse all manifests from YAML or JSON text.

    JSON is a subset of YAML, so one loader handles both. Empty documents
    are skipped.

    Args:
        text: Manifest text.
        default_namespace: Namespace applied to manifests without one.

    Returns:
        List of validated resources in document order.

    Raises:
        ManifestError: If the text cannot be parsed or a manifest is invalid.
    """
    try:
        documents = list(yaml.safe_load_all(text))
    except yaml.YAMLError as e:
        raise ManifestError(f"Could not parse manifest: {e}") from e

    resources: list[Resource] = []
    for doc in documents:
        if doc is None:
            continue
        if isinstance(doc, dict) and doc.get("kind") == "List":
            resources.extend(
                parse_manifest(item, default_namespace)
                for item in doc.get("items", [])
            )
        else:
            resources.append(parse_manifest(doc, default_namespace))
    return resources


def load_manifests(path: Path, default_namespace: str | None = None) -> list[Resource]:
    """Load manifests from a YAML or JSON file.

    Args:
        path: Path to the manifest file.
        default_namespace: Namespace applied to manifests without one.

    Returns:
        List of validated resources.

    Raises:
        FileNotFoundError: If the file does not exist.
        ManifestError: If the file content is invalid.
    """
    with open(path, encoding="utf-8") as f:
        text = f.read()
    return parse_manifests(text, default_namespace)


def manifest_to_json_string(resource: Resource) -> str:
    """Render a resource manifest as JSON."""
    return json.dumps(resource.to_manifest(), indent=2)


def manifest_to_yaml_string(resource: Resource) -> str:
    """Render a resource manifest as YAML."""
    return yaml.safe_dump(
        resource.to_manifest(),
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )


__all__ = [
    "RESOURCE_KINDS",
    "load_manifests",
    "manifest_to_json_string",
    "manifest_to_yaml_string",
    "parse_manifest",
    "parse_manifests",
    "resolve_kind",
]
