"""Core resource kinds: ConfigMap and Service."""

from __future__ import annotations

from typing import ClassVar

from pydantic import Field

from osbuild_operator.resources.meta import CamelModel, Resource


class ConfigMap(Resource):
    """Key/value text artifact, used to hold rendered blueprints."""

    api_version: ClassVar[str] = "v1"
    kind: ClassVar[str] = "ConfigMap"

    data: dict[str, str] = Field(default_factory=dict)


class ServicePort(CamelModel):
    """A port exposed by a Service."""

    port: int = Field(ge=1, le=65535)
    name: str | None = None
    target_port: int | None = Field(default=None, ge=1, le=65535)


class ServiceSpec(CamelModel):
    """Service body; only ports are used."""

    ports: list[ServicePort] = Field(default_factory=list)


class Service(Resource):
    """Network endpoint in front of an ImageBuilder's compose API."""

    api_version: ClassVar[str] = "v1"
    kind: ClassVar[str] = "Service"

    spec: ServiceSpec = Field(default_factory=ServiceSpec)


__all__ = ["ConfigMap", "Service", "ServicePort", "ServiceSpec"]
