"""ImageBuilderImage and ImageBuilder resource kinds.

An ImageBuilderImage is the user's build request. An ImageBuilder is an
osbuild-composer backend, reachable through the Service of the same name.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import AliasChoices, Field, field_validator

from osbuild_operator.resources.meta import NAME_PATTERN, CamelModel, Resource

API_GROUP = "osbuild.rh-ecosystem-edge.io"
API_VERSION = f"{API_GROUP}/v1alpha1"


class ImageBuilderImageSpec(CamelModel):
    """Desired image of an ImageBuilderImage.

    Every field is optional; empty strings mean "use the default".

    Attributes:
        name: Blueprint name (defaults to the request's own name).
        builder_ref: Name of the ImageBuilder to use.
        ssh_key: Public key injected for ``user_name``.
        user_name: User receiving ``ssh_key``.
        installation_device: Target disk of the ISO installer.
        fdo_manufacturing_server_url: FDO manufacturing server of the ISO.
        blueprint_template: Override for the base blueprint template.
        blueprint_iso_template: Override for the ISO blueprint template.
        shared_storage_ref: Existing PVC shared by the task steps.
    """

    name: str = ""
    builder_ref: str = Field(
        default="",
        validation_alias=AliasChoices("builderRef", "imageBuilder", "builder_ref"),
        serialization_alias="builderRef",
    )
    ssh_key: str = ""
    user_name: str = ""
    installation_device: str = ""
    fdo_manufacturing_server_url: str = Field(
        default="", alias="fdoManufacturingServerURL"
    )
    blueprint_template: str = ""
    blueprint_iso_template: str = ""
    shared_storage_ref: str = Field(
        default="",
        validation_alias=AliasChoices(
            "sharedStorageRef", "sharedVolume", "shared_storage_ref"
        ),
        serialization_alias="sharedStorageRef",
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate a non-empty name can also name the blueprint ConfigMaps."""
        if v and (len(v) > 249 or not NAME_PATTERN.match(v)):
            raise ValueError(
                f"name must be a lowercase RFC 1123 name (e.g. 'edge1'), got '{v}'"
            )
        return v


class ImageBuilderImage(Resource):
    """Request to build an edge image through an ImageBuilder."""

    api_version: ClassVar[str] = API_VERSION
    kind: ClassVar[str] = "ImageBuilderImage"

    spec: ImageBuilderImageSpec = Field(default_factory=ImageBuilderImageSpec)


class ImageBuilder(Resource):
    """An osbuild-composer backend.

    The spec is opaque here; only the identity is used to find the
    backend's Service.
    """

    api_version: ClassVar[str] = API_VERSION
    kind: ClassVar[str] = "ImageBuilder"

    spec: dict[str, Any] = Field(default_factory=dict)


__all__ = [
    "API_GROUP",
    "API_VERSION",
    "ImageBuilder",
    "ImageBuilderImage",
    "ImageBuilderImageSpec",
]
