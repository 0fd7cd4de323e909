"""Build task generation.

The commit task pushes a blueprint to the compose API, starts an
edge-commit compose and waits for it to leave the queue. Steps share
state through files in the shared-volume workspace, so their order is
fixed:

1. push-blueprint      POST the blueprint to /blueprints/new
2. clear-compose-file  remove a stale compose.json
3. start-compose       POST /compose, write the job descriptor to compose.json
4. wait-for-finish     poll /compose/queue, then check /compose/failed
"""

from __future__ import annotations

import json

from osbuild_operator.config import DEFAULT_STEP_IMAGE, DEFAULT_WAIT_IMAGE
from osbuild_operator.resources.meta import ObjectMeta
from osbuild_operator.resources.tekton import (
    EnvVar,
    Step,
    Task,
    TaskSpec,
    WorkspaceDeclaration,
)
from osbuild_operator.types import (
    BLUEPRINTS_WORKSPACE,
    COMPOSE_TYPE,
    SHARED_VOLUME_WORKSPACE,
)

COMMIT_TASK_NAME = "generate-commit"
DEFAULT_POLL_INTERVAL = 30

# Tekton mounts each workspace under /workspace/<name>
BLUEPRINTS_PATH = f"/workspace/{BLUEPRINTS_WORKSPACE}"
SHARED_VOLUME_PATH = f"/workspace/{SHARED_VOLUME_WORKSPACE}"
COMPOSE_STATUS_FILE = f"{SHARED_VOLUME_PATH}/compose.json"

# Environment variable carrying the compose API base URL
API_ENV_VAR = "api"


def wait_script(poll_interval: int = DEFAULT_POLL_INTERVAL) -> str:
    """Return the bash script of the wait-for-finish step.

    The script reads ``build_id`` from the compose status file and exits 1
    with the saved response when there is none, as happens when the API
    rejects the compose request. It then sleeps while the id is listed as
    queued or running, exits 1 if the id is listed as failed and finally
    prints the finished entry for the id.
    There is no upper bound on the wait.

    Args:
        poll_interval: Seconds between queue checks.

    Returns:
        Script text.
    """
    return f"""\
#!/bin/bash
compose_id=$(jq -r '.build_id' {COMPOSE_STATUS_FILE})
if [ -z "${{compose_id}}" ] || [ "${{compose_id}}" = null ]; then
  echo "Compose was not started: $(cat {COMPOSE_STATUS_FILE})"
  exit 1
fi
while /usr/bin/curl --silent "${{{API_ENV_VAR}}}/compose/queue" |
    jq -r '(.new[]?, .run[]?) | .id' | grep -qx "${{compose_id}}"; do
  sleep {poll_interval}
done
if /usr/bin/curl --silent "${{{API_ENV_VAR}}}/compose/failed" |
    jq -r '.failed[]?.id' | grep -qx "${{compose_id}}"; then
  echo "Compose ${{compose_id}} failed!"
  exit 1
fi
/usr/bin/curl --silent "${{{API_ENV_VAR}}}/compose/finished" |
  jq -r --arg id "${{compose_id}}" '.finished[]? | select(.id == $id)'
"""


def commit_task(
    metadata: ObjectMeta,
    api_endpoint: str,
    blueprint_name: str,
    *,
    step_image: str = DEFAULT_STEP_IMAGE,
    wait_image: str = DEFAULT_WAIT_IMAGE,
    poll_interval: int = DEFAULT_POLL_INTERVAL,
) -> Task:
    """Build the Task that composes an edge commit from a blueprint.

    Args:
        metadata: Task name and namespace.
        api_endpoint: Compose API base URL (e.g. http://svc.ns:8080/api/v1).
        blueprint_name: Blueprint name; also the file name in the
            blueprints workspace.
        step_image: Image running the curl/rm steps.
        wait_image: Image running the polling script (needs curl and jq).
        poll_interval: Seconds between queue checks.

    Returns:
        Task with four ordered steps.
    """
    compose_request = json.dumps(
        {"blueprint_name": blueprint_name, "compose_type": COMPOSE_TYPE},
        separators=(",", ":"),
    )
    steps = [
        Step(
            name="push-blueprint",
            image=step_image,
            command=[
                "/usr/bin/curl",
                "-H",
                "Content-Type: text/x-toml",
                "--data-binary",
                f"@{BLUEPRINTS_PATH}/{blueprint_name}",
                f"{api_endpoint}/blueprints/new",
                "--silent",
            ],
        ),
        Step(
            name="clear-compose-file",
            image=step_image,
            command=["/usr/bin/rm", "-f", COMPOSE_STATUS_FILE],
        ),
        Step(
            name="start-compose",
            image=step_image,
            command=[
                "/usr/bin/curl",
                "-H",
                "Content-Type: application/json",
                "--data",
                compose_request,
                f"{api_endpoint}/compose",
                "--output",
                COMPOSE_STATUS_FILE,
                "--silent",
            ],
        ),
        Step(
            name="wait-for-finish",
            image=wait_image,
            script=wait_script(poll_interval),
            env=[EnvVar(name=API_ENV_VAR, value=api_endpoint)],
        ),
    ]
    return Task(
        metadata=metadata,
        spec=TaskSpec(
            workspaces=[
                WorkspaceDeclaration(name=BLUEPRINTS_WORKSPACE, read_only=True),
                WorkspaceDeclaration(name=SHARED_VOLUME_WORKSPACE),
            ],
            steps=steps,
        ),
    )


__all__ = [
    "API_ENV_VAR",
    "BLUEPRINTS_PATH",
    "COMMIT_TASK_NAME",
    "COMPOSE_STATUS_FILE",
    "DEFAULT_POLL_INTERVAL",
    "SHARED_VOLUME_PATH",
    "commit_task",
    "wait_script",
]
