"""Compose API client.

This module speaks the osbuild-composer HTTP API the generated build
task talks to, so compose jobs can be started and inspected from the
operator side:
- Blueprint push and compose start
- Queue/failed/finished listings
- Waiting for a compose to leave the queue
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

from osbuild_operator.types import COMPOSE_TYPE

logger = logging.getLogger(__name__)

# Timeout for API requests (seconds)
REQUEST_TIMEOUT = 30.0

# Seconds between queue checks while waiting
DEFAULT_POLL_INTERVAL = 30


class ComposeApiError(Exception):
    """Raised when a compose API request fails."""

    def __init__(self, message: str, code: str = "compose_api_error") -> None:
        """Initialize ComposeApiError.

        Args:
            message: Error description.
            code: Error code for structured error handling.
        """
        super().__init__(message)
        self.code = code


class ComposeFailedError(Exception):
    """Raised when a compose job ends in the failed state."""

    def __init__(self, build_id: str, code: str = "compose_failed") -> None:
        super().__init__(f"Compose {build_id} failed")
        self.build_id = build_id
        self.code = code


class ComposeTimeoutError(Exception):
    """Raised when a compose job is still queued after the wait timeout."""

    def __init__(
        self, build_id: str, timeout: float, code: str = "compose_timeout"
    ) -> None:
        super().__init__(f"Compose {build_id} still queued after {timeout}s")
        self.build_id = build_id
        self.timeout = timeout
        self.code = code


class ComposeStatus(str, Enum):
    """Where a compose job currently appears."""

    QUEUED = "queued"
    FAILED = "failed"
    FINISHED = "finished"
    UNKNOWN = "unknown"


@dataclass
class ComposeJob:
    """Descriptor returned when a compose is started."""

    build_id: str
    raw: dict[str, Any]


def create_client(api_endpoint: str, timeout: float = REQUEST_TIMEOUT) -> httpx.Client:
    """Create an HTTPX client rooted at a compose API endpoint.

    Args:
        api_endpoint: API base URL (e.g. http://svc.ns:8080/api/v1).
        timeout: Request timeout in seconds.

    Returns:
        HTTPX client with ``base_url`` set.

    Raises:
        ValueError: If the endpoint is empty.
    """
    if not api_endpoint:
        raise ValueError("api_endpoint must be provided")
    return httpx.Client(base_url=api_endpoint, timeout=timeout)


def _request(
    client: httpx.Client,
    method: str,
    path: str,
    **kwargs: Any,
) -> dict[str, Any]:
    """Send a request and return the decoded JSON body.

    Raises:
        ComposeApiError: On HTTP, network or decoding errors, or when the
            API answers with ``"status": false``.
    """
    logger.debug("%s %s", method, path)
    try:
        response = client.request(method, path, **kwargs)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPStatusError as e:
        raise ComposeApiError(
            f"HTTP error on {method} {path}: "
            f"{e.response.status_code} {e.response.reason_phrase}",
            code="http_error",
        ) from e
    except httpx.TimeoutException as e:
        raise ComposeApiError(
            f"Timeout on {method} {path}",
            code="timeout",
        ) from e
    except httpx.RequestError as e:
        raise ComposeApiError(
            f"Network error on {method} {path}: {e}",
            code="network_error",
        ) from e
    except ValueError as e:
        raise ComposeApiError(
            f"Invalid JSON from {method} {path}",
            code="invalid_response",
        ) from e

    if not isinstance(data, dict):
        raise ComposeApiError(
            f"Unexpected response from {method} {path}: {data!r}",
            code="invalid_response",
        )
    if data.get("status") is False:
        errors = data.get("errors") or []
        messages = ", ".join(
            str(err.get("msg", err)) if isinstance(err, dict) else str(err)
            for err in errors
        )
        raise ComposeApiError(
            f"{method} {path} rejected: {messages or 'unknown error'}",
            code="api_error",
        )
    return data


def _job_ids(entries: Any) -> set[str]:
    if not isinstance(entries, list):
        return set()
    return {
        str(entry["id"])
        for entry in entries
        if isinstance(entry, dict) and "id" in entry
    }


def push_blueprint(client: httpx.Client, blueprint_text: str) -> None:
    """Register or update a blueprint.

    Args:
        client: Client from create_client().
        blueprint_text: Blueprint TOML.
    """
    _request(
        client,
        "POST",
        "/blueprints/new",
        content=blueprint_text.encode("utf-8"),
        headers={"Content-Type": "text/x-toml"},
    )


def start_compose(
    client: httpx.Client,
    blueprint_name: str,
    compose_type: str = COMPOSE_TYPE,
) -> ComposeJob:
    """Start a compose of a pushed blueprint.

    Args:
        client: Client from create_client().
        blueprint_name: Name of the blueprint to compose.
        compose_type: Compose type, edge-commit unless overridden.

    Returns:
        ComposeJob with the new build id.

    Raises:
        ComposeApiError: If the request fails or no build id is returned.
    """
    data = _request(
        client,
        "POST",
        "/compose",
        json={"blueprint_name": blueprint_name, "compose_type": compose_type},
    )
    build_id = data.get("build_id")
    if not build_id:
        raise ComposeApiError(
            f"No build_id in compose response: {data!r}",
            code="invalid_response",
        )
    logger.info("Started compose %s of blueprint %s", build_id, blueprint_name)
    return ComposeJob(build_id=str(build_id), raw=data)


def queued_ids(client: httpx.Client) -> set[str]:
    """Return ids of composes waiting or running."""
    data = _request(client, "GET", "/compose/queue")
    return _job_ids(data.get("new")) | _job_ids(data.get("run"))


def failed_ids(client: httpx.Client) -> set[str]:
    """Return ids of failed composes."""
    data = _request(client, "GET", "/compose/failed")
    return _job_ids(data.get("failed"))


def finished(client: httpx.Client, build_id: str) -> dict[str, Any] | None:
    """Return the finished entry of a compose, or None if not finished."""
    data = _request(client, "GET", "/compose/finished")
    for entry in data.get("finished") or []:
        if isinstance(entry, dict) and str(entry.get("id")) == build_id:
            return entry
    return None


def compose_status(client: httpx.Client, build_id: str) -> ComposeStatus:
    """Locate a compose in the queue, failed or finished listings."""
    if build_id in queued_ids(client):
        return ComposeStatus.QUEUED
    if build_id in failed_ids(client):
        return ComposeStatus.FAILED
    if finished(client, build_id) is not None:
        return ComposeStatus.FINISHED
    return ComposeStatus.UNKNOWN


def wait_for_compose(
    client: httpx.Client,
    build_id: str,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    timeout: float | None = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> dict[str, Any] | None:
    """Block until a compose leaves the queue.

    Same protocol as the build task's wait step: poll the queue until the
    id disappears, fail if the id is listed as failed, then look it up in
    the finished listing.

    Args:
        client: Client from create_client().
        build_id: Compose id.
        poll_interval: Seconds between queue checks.
        timeout: Give up after this many seconds; None waits forever.
        sleep: Sleep function (injectable for tests).
        clock: Monotonic clock (injectable for tests).

    Returns:
        The finished entry, or None if the id is in no listing.

    Raises:
        ComposeFailedError: If the compose failed.
        ComposeTimeoutError: If the timeout elapsed first.
        ComposeApiError: If a request fails.
    """
    start = clock()
    while build_id in queued_ids(client):
        if timeout is not None and clock() - start >= timeout:
            raise ComposeTimeoutError(build_id, timeout)
        logger.debug("Compose %s still queued", build_id)
        sleep(poll_interval)

    if build_id in failed_ids(client):
        raise ComposeFailedError(build_id)

    entry = finished(client, build_id)
    if entry is None:
        logger.warning("Compose %s not found in finished listing", build_id)
    else:
        logger.info("Compose %s finished", build_id)
    return entry


__all__ = [
    "DEFAULT_POLL_INTERVAL",
    "REQUEST_TIMEOUT",
    "ComposeApiError",
    "ComposeFailedError",
    "ComposeJob",
    "ComposeStatus",
    "ComposeTimeoutError",
    "compose_status",
    "create_client",
    "failed_ids",
    "finished",
    "push_blueprint",
    "queued_ids",
    "start_compose",
    "wait_for_compose",
]
