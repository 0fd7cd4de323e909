"""Blueprint rendering.

This module provides:
- render_template(): Jinja2 rendering with strict undefined handling
- generate_blueprints(): base and ISO blueprints for a defaulted spec

Rendering is a pure function of the template text and the spec values,
so the same request always yields the same blueprints.
"""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Mapping
from typing import Any, NamedTuple

import jinja2
from jinja2.sandbox import SandboxedEnvironment

from osbuild_operator.blueprints.templates import (
    DEFAULT_BLUEPRINT_TEMPLATE,
    DEFAULT_ISO_BLUEPRINT_TEMPLATE,
)
from osbuild_operator.errors import INVALID_BLUEPRINT, TemplateError
from osbuild_operator.resources.image import ImageBuilderImageSpec

logger = logging.getLogger(__name__)

# Spec fields that are templates themselves and not template values
_TEMPLATE_FIELDS = {"blueprint_template", "blueprint_iso_template"}


class Blueprints(NamedTuple):
    """Rendered base and ISO blueprint texts."""

    base: str
    iso: str


def _environment() -> jinja2.Environment:
    # Templates come from requests; only field substitution is allowed
    env = SandboxedEnvironment(  # noqa: S701
        undefined=jinja2.StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )
    env.globals.clear()
    return env


def render_template(
    template_text: str,
    values: Mapping[str, Any],
    template_name: str | None = None,
) -> str:
    """Render a template against a mapping of values.

    Args:
        template_text: Jinja2 template source.
        values: Template variables.
        template_name: Optional name used in error messages.

    Returns:
        Rendered text.

    Raises:
        TemplateError: If the template cannot be parsed, references an
            undefined value, touches an unsafe attribute or fails while
            rendering.
    """
    label = template_name or "template"
    try:
        template = _environment().from_string(template_text)
        return template.render(**values)
    except jinja2.TemplateSyntaxError as e:
        raise TemplateError(
            f"Could not parse {label} (line {e.lineno}): {e.message}",
            template_name=template_name,
        ) from e
    except Exception as e:
        raise TemplateError(
            f"Could not render {label}: {e}",
            template_name=template_name,
        ) from e


def template_values(spec: ImageBuilderImageSpec) -> dict[str, Any]:
    """Return the template variables exposed for a spec."""
    return spec.model_dump(exclude=_TEMPLATE_FIELDS)


def validate_blueprint(text: str, template_name: str | None = None) -> None:
    """Check a rendered blueprint is well-formed TOML.

    Raises:
        TemplateError: With code 'invalid_blueprint' if parsing fails.
    """
    try:
        tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise TemplateError(
            f"Rendered {template_name or 'blueprint'} is not valid TOML: {e}",
            template_name=template_name,
            code=INVALID_BLUEPRINT,
        ) from e


def render_blueprint(
    template_text: str,
    spec: ImageBuilderImageSpec,
    template_name: str | None = None,
) -> str:
    """Render and validate one blueprint."""
    text = render_template(template_text, template_values(spec), template_name)
    validate_blueprint(text, template_name)
    return text


def generate_blueprints(spec: ImageBuilderImageSpec) -> Blueprints:
    """Render the base and ISO blueprints for a spec.

    Empty template overrides fall back to the built-in templates.

    Args:
        spec: Defaulted ImageBuilderImage spec.

    Returns:
        Blueprints with base and ISO texts.

    Raises:
        TemplateError: If either template fails to render or does not
            produce valid TOML.
    """
    base_template = spec.blueprint_template
    if not base_template:
        logger.info("No spec.blueprintTemplate defined, using default")
        base_template = DEFAULT_BLUEPRINT_TEMPLATE

    iso_template = spec.blueprint_iso_template
    if not iso_template:
        logger.info("No spec.blueprintIsoTemplate defined, using default")
        iso_template = DEFAULT_ISO_BLUEPRINT_TEMPLATE

    return Blueprints(
        base=render_blueprint(base_template, spec, "blueprintTemplate"),
        iso=render_blueprint(iso_template, spec, "blueprintIsoTemplate"),
    )


__all__ = [
    "Blueprints",
    "generate_blueprints",
    "render_blueprint",
    "render_template",
    "template_values",
    "validate_blueprint",
]
