"""FastAPI web application for the osbuild operator.

This module provides the HTTP API an external watcher calls to store
resources and trigger reconciliation passes.

All business logic is delegated to core modules in osbuild_operator/.
"""

from web.app import app, create_app

__all__ = ["app", "create_app"]
