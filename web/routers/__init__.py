"""Router modules for FastAPI web API."""

from web.routers import config, health, reconcile, resources

__all__ = ["config", "health", "reconcile", "resources"]
