"""Tests for the CLI.

Each test points the CLI at a fresh SQLite file through the
environment, so commands run against a real object store.
"""

import json

import httpx
import pytest
import respx
from typer.testing import CliRunner

from osbuild_operator import __version__
from osbuild_operator.cli import app

runner = CliRunner()

API = "http://svc.ns:8080/api/v1"

MANIFESTS = """\
apiVersion: v1
kind: Service
metadata:
  name: svc
  namespace: ns
spec:
  ports:
    - port: 8080
---
apiVersion: osbuild.rh-ecosystem-edge.io/v1alpha1
kind: ImageBuilder
metadata:
  name: svc
  namespace: ns
---
apiVersion: osbuild.rh-ecosystem-edge.io/v1alpha1
kind: ImageBuilderImage
metadata:
  name: edge-request
spec:
  name: edge1
  userName: admin
  sshKey: ssh-rsa AAA...
"""


@pytest.fixture(autouse=True)
def env(tmp_path, monkeypatch):
    """Use a per-test database and keep logging quiet."""
    monkeypatch.setenv("OSBUILD_OP_DB_URL", f"sqlite:///{tmp_path / 'store.sqlite'}")
    monkeypatch.setenv("OSBUILD_OP_LOG_LEVEL", "CRITICAL")
    monkeypatch.delenv("OSBUILD_OP_DEFAULT_NAMESPACE", raising=False)


@pytest.fixture
def manifest_file(tmp_path):
    """Write the sample manifests to disk."""
    path = tmp_path / "manifests.yaml"
    path.write_text(MANIFESTS)
    return path


class TestCLIHelp:
    """Test CLI help and version commands."""

    def test_help_returns_zero(self) -> None:
        """CLI --help should return exit code 0."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "osbuild operator" in result.stdout

    def test_version_flag(self) -> None:
        """CLI --version should print version and exit 0."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_subcommand_help(self) -> None:
        """Each command should have help."""
        for command in ("config", "apply", "get", "delete", "reconcile", "render"):
            result = runner.invoke(app, [command, "--help"])
            assert result.exit_code == 0, command


class TestConfigCommand:
    """Test the config command."""

    def test_config_text(self) -> None:
        """config should show the effective settings."""
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "Database URL" in result.stdout
        assert "store.sqlite" in result.stdout

    def test_config_json(self) -> None:
        """config --json should output valid JSON."""
        result = runner.invoke(app, ["config", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["log_level"] == "CRITICAL"
        assert data["poll_interval"] == 30


class TestApplyAndGet:
    """Test apply, get and delete."""

    def test_apply(self, manifest_file) -> None:
        """apply should create every manifest."""
        result = runner.invoke(app, ["apply", str(manifest_file)])
        assert result.exit_code == 0
        assert "Service ns/svc created" in result.stdout
        assert "ImageBuilderImage default/edge-request created" in result.stdout

    def test_apply_json(self, manifest_file) -> None:
        """apply --json should list created objects."""
        result = runner.invoke(app, ["apply", str(manifest_file), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [item["kind"] for item in data["created"]] == [
            "Service",
            "ImageBuilder",
            "ImageBuilderImage",
        ]

    def test_apply_twice_fails(self, manifest_file) -> None:
        """Applying existing objects again should fail."""
        runner.invoke(app, ["apply", str(manifest_file)])
        result = runner.invoke(app, ["apply", str(manifest_file), "--json"])
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["created"] == []
        assert data["error"]["code"] == "already_exists"

    def test_apply_missing_file(self, tmp_path) -> None:
        """A missing file should exit 1."""
        result = runner.invoke(app, ["apply", str(tmp_path / "nope.yaml")])
        assert result.exit_code == 1
        assert "File not found" in result.stdout

    def test_apply_invalid_manifest(self, tmp_path) -> None:
        """Unknown kinds should exit 1 with the error code."""
        path = tmp_path / "bad.yaml"
        path.write_text("kind: Deployment\nmetadata:\n  name: x\n")
        result = runner.invoke(app, ["apply", str(path), "--json"])
        assert result.exit_code == 1
        assert json.loads(result.stdout)["code"] == "invalid_manifest"

    def test_get_list(self, manifest_file) -> None:
        """get KIND should list names in the namespace."""
        runner.invoke(app, ["apply", str(manifest_file)])
        result = runner.invoke(app, ["get", "imagebuilders", "-n", "ns"])
        assert result.exit_code == 0
        assert "ns/svc" in result.stdout

    def test_get_list_default_namespace_empty(self, manifest_file) -> None:
        """Listing defaults to the default namespace."""
        runner.invoke(app, ["apply", str(manifest_file)])
        result = runner.invoke(app, ["get", "Service"])
        assert result.exit_code == 0
        assert "No Service resources found" in result.stdout

    def test_get_all_namespaces_json(self, manifest_file) -> None:
        """-A --json should list across namespaces."""
        runner.invoke(app, ["apply", str(manifest_file)])
        result = runner.invoke(app, ["get", "Service", "-A", "--json"])
        assert result.exit_code == 0
        (service,) = json.loads(result.stdout)
        assert service["metadata"]["namespace"] == "ns"

    def test_get_one_yaml(self, manifest_file) -> None:
        """get KIND NAME should print the manifest as YAML."""
        runner.invoke(app, ["apply", str(manifest_file)])
        result = runner.invoke(app, ["get", "ImageBuilderImage", "edge-request"])
        assert result.exit_code == 0
        assert "kind: ImageBuilderImage" in result.stdout
        assert "userName: admin" in result.stdout

    def test_get_missing(self) -> None:
        """get of a missing object should exit 1."""
        result = runner.invoke(app, ["get", "ConfigMap", "missing", "--json"])
        assert result.exit_code == 1
        assert json.loads(result.stdout)["code"] == "not_found"

    def test_delete(self, manifest_file) -> None:
        """delete should remove the object."""
        runner.invoke(app, ["apply", str(manifest_file)])
        result = runner.invoke(app, ["delete", "Service", "ns/svc"])
        assert result.exit_code == 0
        assert "deleted" in result.stdout

        result = runner.invoke(app, ["get", "Service", "svc", "-n", "ns"])
        assert result.exit_code == 1

    def test_bad_key(self) -> None:
        """Malformed keys are rejected as bad parameters."""
        result = runner.invoke(app, ["delete", "Service", "a/b/c"])
        assert result.exit_code == 2


class TestReconcileCommand:
    """Test the reconcile command."""

    def test_reconcile(self, manifest_file) -> None:
        """reconcile should create the pipeline objects."""
        runner.invoke(app, ["apply", str(manifest_file)])
        result = runner.invoke(app, ["reconcile", "edge-request", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["outcome"] == "created"
        assert [item["name"] for item in data["created"]] == [
            "edge1",
            "edge1-iso",
            "generate-commit",
            "edge-request-pipeline",
            "edge-request-pipeline-run",
        ]

        result = runner.invoke(app, ["get", "Task", "generate-commit", "--json"])
        task = json.loads(result.stdout)
        assert task["spec"]["steps"][3]["env"] == [{"name": "api", "value": API}]

    def test_reconcile_text(self, manifest_file) -> None:
        """Text output lists created objects."""
        runner.invoke(app, ["apply", str(manifest_file)])
        result = runner.invoke(app, ["reconcile", "default/edge-request"])
        assert result.exit_code == 0
        assert "PipelineRun default/edge-request-pipeline-run created" in result.stdout

    def test_reconcile_twice(self, manifest_file) -> None:
        """A second pass fails and keeps the first pass's objects."""
        runner.invoke(app, ["apply", str(manifest_file)])
        runner.invoke(app, ["reconcile", "edge-request"])
        result = runner.invoke(app, ["reconcile", "edge-request", "--json"])
        assert result.exit_code == 1
        assert json.loads(result.stdout)["code"] == "already_exists"

        result = runner.invoke(app, ["get", "ConfigMap", "--json"])
        assert len(json.loads(result.stdout)) == 2

    def test_reconcile_missing(self) -> None:
        """A missing request is not an error."""
        result = runner.invoke(app, ["reconcile", "gone", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["outcome"] == "not_found"


class TestRenderCommand:
    """Test the render command."""

    def test_render_both(self, manifest_file) -> None:
        """render prints the base and ISO blueprints."""
        result = runner.invoke(app, ["render", str(manifest_file)])
        assert result.exit_code == 0
        assert "# default/edge-request (base)" in result.stdout
        assert 'name = "edge1"' in result.stdout
        assert 'key = "ssh-rsa AAA..."' in result.stdout
        assert "[customizations.fdo]" in result.stdout

    def test_render_base_only(self, manifest_file) -> None:
        """--base omits the ISO blueprint."""
        result = runner.invoke(app, ["render", str(manifest_file), "--base"])
        assert result.exit_code == 0
        assert "edge1-iso" not in result.stdout

    def test_render_template_error(self, tmp_path) -> None:
        """Template errors exit 1."""
        path = tmp_path / "bad.yaml"
        path.write_text(
            "kind: ImageBuilderImage\n"
            "metadata:\n"
            "  name: bad\n"
            "spec:\n"
            "  blueprintTemplate: '{{ nope }}'\n"
        )
        result = runner.invoke(app, ["render", str(path)])
        assert result.exit_code == 1
        assert "template_error" in result.stdout

    def test_render_no_request(self, tmp_path) -> None:
        """A file without requests exits 1."""
        path = tmp_path / "cm.yaml"
        path.write_text("kind: ConfigMap\nmetadata:\n  name: x\n")
        result = runner.invoke(app, ["render", str(path)])
        assert result.exit_code == 1


class TestComposeCommands:
    """Test the compose subcommands."""

    @respx.mock(assert_all_called=False)
    def test_status(self, respx_mock) -> None:
        """compose status reports where the job is."""
        respx_mock.get(f"{API}/compose/queue").mock(
            return_value=httpx.Response(200, json={"new": [{"id": "abc"}], "run": []})
        )
        result = runner.invoke(
            app, ["compose", "status", "abc", "--api", API, "--json"]
        )
        assert result.exit_code == 0
        assert json.loads(result.stdout) == {"build_id": "abc", "status": "queued"}

    @respx.mock
    def test_wait_failed(self) -> None:
        """compose wait exits 1 for a failed job."""
        respx.get(f"{API}/compose/queue").mock(
            return_value=httpx.Response(200, json={"new": [], "run": []})
        )
        respx.get(f"{API}/compose/failed").mock(
            return_value=httpx.Response(200, json={"failed": [{"id": "abc"}]})
        )
        result = runner.invoke(app, ["compose", "wait", "abc", "--api", API])
        assert result.exit_code == 1
        assert "compose_failed" in result.stdout
