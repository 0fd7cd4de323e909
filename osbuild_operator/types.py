"""Shared type definitions for osbuild_operator.

This module contains dataclasses, enums, and constants shared across
subpackages to avoid circular imports.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

# Workspace (data channel) names shared by tasks, pipelines and runs
BLUEPRINTS_WORKSPACE = "blueprints"
SHARED_VOLUME_WORKSPACE = "shared-volume"

# Compose job type started by the build task
COMPOSE_TYPE = "edge-commit"


@dataclass(frozen=True, order=True)
class ObjectKey:
    """Namespaced name addressing a resource in the object store."""

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"

    @classmethod
    def parse(cls, value: str, default_namespace: str = "default") -> ObjectKey:
        """Parse ``namespace/name`` or a bare ``name``.

        Args:
            value: Key string.
            default_namespace: Namespace used when none is given.

        Returns:
            ObjectKey instance.

        Raises:
            ValueError: If the string has an empty part or too many slashes.
        """
        parts = value.split("/")
        if len(parts) == 1:
            namespace, name = default_namespace, parts[0]
        elif len(parts) == 2:
            namespace, name = parts
        else:
            raise ValueError(f"Invalid object key: {value!r}")
        if not namespace or not name:
            raise ValueError(f"Invalid object key: {value!r}")
        return cls(namespace=namespace, name=name)


class ReconcileOutcome(str, Enum):
    """Outcome of a single reconciliation pass."""

    CREATED = "created"
    NOT_FOUND = "not_found"
    NO_BUILDER = "no_builder"


@dataclass
class ReconcileResult:
    """Result of a reconciliation pass.

    A pass never asks to be requeued: retries come from the trigger
    that invoked it.
    """

    outcome: ReconcileOutcome
    message: str
    created: list[tuple[str, ObjectKey]] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Whether the pass created the pipeline objects."""
        return self.outcome == ReconcileOutcome.CREATED

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "outcome": self.outcome.value,
            "message": self.message,
            "created": [
                {"kind": kind, "namespace": key.namespace, "name": key.name}
                for kind, key in self.created
            ],
        }


__all__ = [
    "BLUEPRINTS_WORKSPACE",
    "COMPOSE_TYPE",
    "SHARED_VOLUME_WORKSPACE",
    "ObjectKey",
    "ReconcileOutcome",
    "ReconcileResult",
]
