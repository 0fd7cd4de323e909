"""FastAPI application factory and main app.

This module creates the FastAPI application with all routers and
dependency injection configured. Routes are thin proxies to core APIs.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from osbuild_operator import __version__
from osbuild_operator.db import create_all_tables, get_engine, get_session_factory
from web.routers import config, health, reconcile, resources


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager.

    Initializes database tables on startup.
    """
    engine = get_engine()
    create_all_tables(engine)
    app.state.session_factory = get_session_factory(engine)
    yield
    engine.dispose()


def include_routers(application: FastAPI) -> None:
    """Mount all routers on an application."""
    application.include_router(health.router, tags=["health"])
    application.include_router(config.router, prefix="/config", tags=["config"])
    application.include_router(
        resources.router, prefix="/resources", tags=["resources"]
    )
    application.include_router(
        reconcile.router, prefix="/reconcile", tags=["reconcile"]
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application.
    """
    application = FastAPI(
        title="osbuild operator API",
        description="HTTP API for storing ImageBuilderImage requests and "
        "triggering their reconciliation into Tekton pipelines",
        version=__version__,
        lifespan=lifespan,
    )
    include_routers(application)
    return application


# Create the default application instance
app = create_app()
