"""Configuration endpoints."""

from typing import Any

from fastapi import APIRouter

from osbuild_operator.config import get_settings

router = APIRouter()


@router.get("")
def get_config() -> dict[str, Any]:
    """Get effective configuration.

    Returns:
        Current configuration as JSON.
    """
    settings = get_settings()
    return {
        "db_url": settings.db_url,
        "default_namespace": settings.default_namespace,
        "log_level": settings.log_level,
        "step_image": settings.step_image,
        "wait_image": settings.wait_image,
        "poll_interval": settings.poll_interval,
        "http_timeout": settings.http_timeout,
    }
