"""ImageBuilderImage controller module.

This module handles:
- Selecting the ImageBuilder for a request
- Resolving the compose API endpoint from the builder's Service
- The reconciliation pass creating blueprints, task, pipeline and run
"""

from osbuild_operator.controller.reconciler import default_spec, reconcile
from osbuild_operator.controller.resolver import resolve_api_endpoint, resolve_builder

__all__ = ["default_spec", "reconcile", "resolve_api_endpoint", "resolve_builder"]
