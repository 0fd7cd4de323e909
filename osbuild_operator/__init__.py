"""osbuild-operator - Image build pipelines for osbuild-composer.

This package turns declarative ImageBuilderImage requests into blueprints,
Tekton tasks and pipelines that drive an osbuild-composer compose API.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
