"""Base Pydantic models shared by all resource kinds.

Resources follow the Kubernetes object layout: ``apiVersion``, ``kind``,
``metadata`` and a kind-specific body. Manifests use camelCase keys,
Python attributes use snake_case.
"""

from __future__ import annotations

import re
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from osbuild_operator.types import ObjectKey

# RFC 1123 label/subdomain names as accepted for object names
NAME_PATTERN = re.compile(r"^[a-z0-9]([-a-z0-9.]*[a-z0-9])?$")


class CamelModel(BaseModel):
    """Base model serializing to camelCase manifest keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class ObjectMeta(CamelModel):
    """Identity and labels of a resource.

    Attributes:
        name: Object name, unique per kind and namespace.
        namespace: Namespace the object lives in.
        labels: Free-form string labels.
    """

    name: str = Field(description="Object name")
    namespace: str = Field(default="default", description="Object namespace")
    labels: dict[str, str] = Field(default_factory=dict)

    @field_validator("name", "namespace")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate names are DNS-compatible."""
        if len(v) > 253 or not NAME_PATTERN.match(v):
            raise ValueError(
                f"must be a lowercase RFC 1123 name (e.g. 'edge-image'), got '{v}'"
            )
        return v


class Resource(CamelModel):
    """Base class for all resource kinds stored in the object store."""

    api_version: ClassVar[str] = "v1"
    kind: ClassVar[str] = "Resource"

    metadata: ObjectMeta

    @property
    def key(self) -> ObjectKey:
        """Namespaced name of this resource."""
        return ObjectKey(self.metadata.namespace, self.metadata.name)

    def to_manifest(self) -> dict[str, Any]:
        """Render this resource as a manifest dictionary."""
        body = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        return {"apiVersion": self.api_version, "kind": self.kind, **body}

    @classmethod
    def from_manifest(cls, data: dict[str, Any]) -> Resource:
        """Validate a manifest dictionary of this kind.

        ``apiVersion`` and ``kind`` are checked and stripped before the
        remaining body is validated.

        Raises:
            ValueError: If the manifest kind does not match.
            pydantic.ValidationError: If the body does not match the schema.
        """
        body = dict(data)
        kind = body.pop("kind", cls.kind)
        body.pop("apiVersion", None)
        if kind != cls.kind:
            raise ValueError(f"Expected kind {cls.kind}, got {kind}")
        return cls.model_validate(body)


__all__ = ["NAME_PATTERN", "CamelModel", "ObjectMeta", "Resource"]
