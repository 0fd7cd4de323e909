"""Tests for task, pipeline and pipeline run generation."""

import json

import pytest

from osbuild_operator.config import DEFAULT_STEP_IMAGE, DEFAULT_WAIT_IMAGE
from osbuild_operator.pipelines.pipeline import image_pipeline, pipeline_run
from osbuild_operator.pipelines.task import (
    COMMIT_TASK_NAME,
    COMPOSE_STATUS_FILE,
    commit_task,
    wait_script,
)
from osbuild_operator.resources.meta import ObjectMeta
from osbuild_operator.resources.tekton import EnvVar, Task

API = "http://svc.ns:8080/api/v1"


@pytest.fixture
def task() -> Task:
    """The commit task for blueprint edge1."""
    return commit_task(
        ObjectMeta(name=COMMIT_TASK_NAME, namespace="edge"), API, "edge1"
    )


def _step(task: Task, name: str):
    (step,) = [s for s in task.spec.steps if s.name == name]
    return step


class TestCommitTask:
    """Tests for commit_task."""

    def test_step_order(self, task) -> None:
        """Steps run in a fixed order."""
        assert [s.name for s in task.spec.steps] == [
            "push-blueprint",
            "clear-compose-file",
            "start-compose",
            "wait-for-finish",
        ]

    def test_metadata(self, task) -> None:
        """The task keeps the given identity."""
        assert task.metadata.name == "generate-commit"
        assert task.metadata.namespace == "edge"

    def test_workspaces(self, task) -> None:
        """Blueprints are mounted read-only, the shared volume read-write."""
        manifest = task.to_manifest()
        assert manifest["spec"]["workspaces"] == [
            {"name": "blueprints", "readOnly": True},
            {"name": "shared-volume"},
        ]

    def test_push_blueprint(self, task) -> None:
        """The blueprint file is posted as TOML to /blueprints/new."""
        step = _step(task, "push-blueprint")
        assert step.image == DEFAULT_STEP_IMAGE
        assert step.command == [
            "/usr/bin/curl",
            "-H",
            "Content-Type: text/x-toml",
            "--data-binary",
            "@/workspace/blueprints/edge1",
            f"{API}/blueprints/new",
            "--silent",
        ]

    def test_clear_compose_file(self, task) -> None:
        """A stale status file is removed before starting."""
        step = _step(task, "clear-compose-file")
        assert step.command == ["/usr/bin/rm", "-f", COMPOSE_STATUS_FILE]
        assert COMPOSE_STATUS_FILE == "/workspace/shared-volume/compose.json"

    def test_start_compose(self, task) -> None:
        """An edge-commit compose is started and its descriptor saved."""
        command = _step(task, "start-compose").command
        body = command[command.index("--data") + 1]
        assert json.loads(body) == {
            "blueprint_name": "edge1",
            "compose_type": "edge-commit",
        }
        assert f"{API}/compose" in command
        assert command[command.index("--output") + 1] == COMPOSE_STATUS_FILE

    def test_wait_for_finish(self, task) -> None:
        """The wait step runs a script with the API in its environment."""
        step = _step(task, "wait-for-finish")
        assert step.image == DEFAULT_WAIT_IMAGE
        assert step.command is None
        assert step.env == [EnvVar(name="api", value=API)]
        assert step.script == wait_script()

    def test_custom_images_and_interval(self) -> None:
        """Images and polling interval are configurable."""
        task = commit_task(
            ObjectMeta(name=COMMIT_TASK_NAME),
            API,
            "edge1",
            step_image="example.com/curl:1",
            wait_image="example.com/jq:1",
            poll_interval=5,
        )
        images = [s.image for s in task.spec.steps]
        assert images == ["example.com/curl:1"] * 3 + ["example.com/jq:1"]
        assert "sleep 5" in _step(task, "wait-for-finish").script

    def test_empty_endpoint(self) -> None:
        """An unresolved endpoint still yields a task with relative URLs."""
        task = commit_task(ObjectMeta(name=COMMIT_TASK_NAME), "", "edge1")
        assert "/blueprints/new" in _step(task, "push-blueprint").command
        assert _step(task, "wait-for-finish").env == [EnvVar(name="api", value="")]

    def test_deterministic(self) -> None:
        """The same inputs always produce the same manifest."""
        meta = ObjectMeta(name=COMMIT_TASK_NAME)
        first = commit_task(meta, API, "edge1").to_manifest()
        second = commit_task(meta, API, "edge1").to_manifest()
        assert first == second


class TestWaitScript:
    """Tests for the wait-for-finish script."""

    def test_reads_build_id(self) -> None:
        """The compose id comes from the status file."""
        assert f"jq -r '.build_id' {COMPOSE_STATUS_FILE}" in wait_script()

    def test_stops_when_compose_not_started(self) -> None:
        """A missing or null build id exits 1 before any polling."""
        lines = wait_script().splitlines()
        guard = lines.index(
            'if [ -z "${compose_id}" ] || [ "${compose_id}" = null ]; then'
        )
        assert lines[guard + 1] == (
            f'  echo "Compose was not started: $(cat {COMPOSE_STATUS_FILE})"'
        )
        assert lines[guard + 2] == "  exit 1"
        assert guard < next(i for i, line in enumerate(lines) if "queue" in line)

    def test_polls_queue(self) -> None:
        """The queue check covers new and running composes."""
        script = wait_script()
        assert '"${api}/compose/queue"' in script
        assert "(.new[]?, .run[]?) | .id" in script
        assert "sleep 30" in script

    def test_fails_on_failed_compose(self) -> None:
        """A failed compose exits non-zero."""
        script = wait_script()
        assert '"${api}/compose/failed"' in script
        assert 'echo "Compose ${compose_id} failed!"' in script
        assert "exit 1" in script

    def test_prints_finished_entry(self) -> None:
        """The finished entry of the compose is printed last."""
        script = wait_script()
        last = script.rstrip().splitlines()[-1]
        assert "select(.id == $id)" in last
        assert '"${api}/compose/finished"' in script

    def test_shebang(self) -> None:
        """The script runs under bash."""
        assert wait_script().startswith("#!/bin/bash\n")


class TestImagePipeline:
    """Tests for image_pipeline."""

    def test_single_task(self, task) -> None:
        """One task is referenced by name and bound to both workspaces."""
        pipeline = image_pipeline(
            ObjectMeta(name="edge-request-pipeline", namespace="edge"), [task]
        )
        manifest = pipeline.to_manifest()
        assert manifest["kind"] == "Pipeline"
        assert manifest["spec"] == {
            "workspaces": [{"name": "blueprints"}, {"name": "shared-volume"}],
            "tasks": [
                {
                    "name": "generate-commit",
                    "taskRef": {"name": "generate-commit"},
                    "workspaces": [
                        {"name": "blueprints", "workspace": "blueprints"},
                        {"name": "shared-volume", "workspace": "shared-volume"},
                    ],
                }
            ],
        }

    def test_tasks_chained_in_order(self) -> None:
        """Each task after the first runs after its predecessor."""
        tasks = [
            commit_task(ObjectMeta(name=name), API, name)
            for name in ("first", "second", "third")
        ]
        pipeline = image_pipeline(ObjectMeta(name="p"), tasks)
        assert [t.run_after for t in pipeline.spec.tasks] == [
            None,
            ["first"],
            ["second"],
        ]

    def test_no_tasks(self) -> None:
        """An empty task list still declares the workspaces."""
        pipeline = image_pipeline(ObjectMeta(name="p"), [])
        assert pipeline.spec.tasks == []
        assert [w.name for w in pipeline.spec.workspaces] == [
            "blueprints",
            "shared-volume",
        ]


class TestPipelineRun:
    """Tests for pipeline_run."""

    def test_workspace_bindings(self) -> None:
        """Blueprints bind to the ConfigMap, the shared volume to the PVC."""
        run = pipeline_run(
            ObjectMeta(name="edge-request-pipeline-run", namespace="edge"),
            pipeline_name="edge-request-pipeline",
            blueprints_config_map="edge1",
            shared_volume_claim="edge1-data",
        )
        manifest = run.to_manifest()
        assert manifest["apiVersion"] == "tekton.dev/v1"
        assert manifest["kind"] == "PipelineRun"
        assert manifest["spec"] == {
            "pipelineRef": {"name": "edge-request-pipeline"},
            "workspaces": [
                {"name": "blueprints", "configMap": {"name": "edge1"}},
                {
                    "name": "shared-volume",
                    "persistentVolumeClaim": {"claimName": "edge1-data"},
                },
            ],
        }
