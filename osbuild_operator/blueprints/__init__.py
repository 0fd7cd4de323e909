"""Blueprint generation module.

This module handles:
- Built-in base and ISO blueprint templates
- Template rendering against an ImageBuilderImage spec
- TOML validation of rendered blueprints
"""

from osbuild_operator.blueprints.render import (
    Blueprints,
    generate_blueprints,
    render_template,
)
from osbuild_operator.blueprints.templates import (
    DEFAULT_BLUEPRINT_TEMPLATE,
    DEFAULT_ISO_BLUEPRINT_TEMPLATE,
)

__all__ = [
    "DEFAULT_BLUEPRINT_TEMPLATE",
    "DEFAULT_ISO_BLUEPRINT_TEMPLATE",
    "Blueprints",
    "generate_blueprints",
    "render_template",
]
