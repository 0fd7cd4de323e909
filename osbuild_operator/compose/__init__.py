"""Compose API module.

This module handles:
- HTTPX client creation for an osbuild-composer API endpoint
- Blueprint push and compose start
- Compose status lookup and waiting
"""

from osbuild_operator.compose.client import (
    ComposeApiError,
    ComposeFailedError,
    ComposeJob,
    ComposeStatus,
    ComposeTimeoutError,
    compose_status,
    create_client,
    push_blueprint,
    start_compose,
    wait_for_compose,
)

__all__ = [
    "ComposeApiError",
    "ComposeFailedError",
    "ComposeJob",
    "ComposeStatus",
    "ComposeTimeoutError",
    "compose_status",
    "create_client",
    "push_blueprint",
    "start_compose",
    "wait_for_compose",
]
