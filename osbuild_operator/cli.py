"""Thin CLI wrapper for osbuild_operator.

This module provides the command-line interface using Typer.
All business logic is delegated to core modules.
"""

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from osbuild_operator import __version__
from osbuild_operator.config import get_settings, print_settings_json
from osbuild_operator.errors import OperatorError
from osbuild_operator.types import ObjectKey

app = typer.Typer(
    name="osbuild-operator",
    help="osbuild operator - turn ImageBuilderImage requests into Tekton pipelines",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def configure_logging(level: str) -> None:
    """Route log records to stderr through Rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"osbuild-operator version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """osbuild operator - turn ImageBuilderImage requests into Tekton pipelines."""
    configure_logging(get_settings().log_level)


def _key(name: str, namespace: str | None) -> ObjectKey:
    """Parse a NAME or NAMESPACE/NAME argument."""
    default_namespace = namespace or get_settings().default_namespace
    try:
        return ObjectKey.parse(name, default_namespace)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from None


def _print_raw(text: str, end: str = "\n") -> None:
    """Print text verbatim: no markup, highlighting or wrapping."""
    console.print(text, end=end, markup=False, highlight=False, soft_wrap=True)


def _print_json(data: object) -> None:
    _print_raw(json.dumps(data, indent=2))


def _print_error(error: OperatorError, json_output: bool) -> None:
    if json_output:
        _print_json(error.to_dict())
    else:
        console.print(f"[red]Error ({error.code}): {escape(str(error))}[/red]")


@app.command()
def config(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show effective configuration."""
    settings = get_settings()
    if json_output:
        _print_raw(print_settings_json(settings))
    else:
        console.print("[bold]Effective Configuration:[/bold]")
        console.print()
        console.print("[bold]Object store:[/bold]")
        console.print(f"  Database URL:        {settings.db_url}")
        console.print(f"  Default namespace:   {settings.default_namespace}")
        console.print(f"  Log level:           {settings.log_level}")
        console.print()
        console.print("[bold]Build task:[/bold]")
        console.print(f"  Step image:          {settings.step_image}")
        console.print(f"  Wait image:          {settings.wait_image}")
        console.print(f"  Poll interval (s):   {settings.poll_interval}")
        console.print()
        console.print("[bold]Compose API:[/bold]")
        console.print(f"  HTTP timeout (s):    {settings.http_timeout}")


@app.command()
def apply(
    path: Annotated[Path, typer.Argument(help="YAML or JSON manifest file")],
    namespace: Annotated[
        str | None,
        typer.Option("--namespace", "-n", help="Namespace for manifests without one"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Create the resources of a manifest file in the object store."""
    from osbuild_operator.resources.io import load_manifests
    from osbuild_operator.store.service import open_store

    settings = get_settings()
    if not path.exists():
        console.print(f"[red]File not found: {path}[/red]")
        raise typer.Exit(code=1)

    try:
        resources = load_manifests(path, namespace or settings.default_namespace)
    except OperatorError as e:
        _print_error(e, json_output)
        raise typer.Exit(code=1) from None

    created: list[dict[str, str]] = []
    failure: OperatorError | None = None
    with open_store(settings.db_url) as store:
        for resource in resources:
            try:
                store.create(resource)
            except OperatorError as e:
                failure = e
                break
            created.append(
                {
                    "kind": resource.kind,
                    "namespace": resource.metadata.namespace,
                    "name": resource.metadata.name,
                }
            )

    if json_output:
        output: dict[str, object] = {"created": created}
        if failure is not None:
            output["error"] = failure.to_dict()
        _print_json(output)
    else:
        for item in created:
            label = f"{item['kind']} {item['namespace']}/{item['name']}"
            console.print(f"[green]{label} created[/green]")
        if failure is not None:
            _print_error(failure, json_output=False)

    if failure is not None:
        raise typer.Exit(code=1)


@app.command()
def get(
    kind: Annotated[str, typer.Argument(help="Resource kind (e.g. ImageBuilderImage)")],
    name: Annotated[
        str | None, typer.Argument(help="Resource name (NAME or NAMESPACE/NAME)")
    ] = None,
    namespace: Annotated[
        str | None,
        typer.Option("--namespace", "-n", help="Namespace"),
    ] = None,
    all_namespaces: Annotated[
        bool,
        typer.Option("--all-namespaces", "-A", help="List across all namespaces"),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """List resources of a kind, or show one resource as YAML/JSON."""
    from osbuild_operator.resources.io import manifest_to_yaml_string, resolve_kind
    from osbuild_operator.store.service import open_store

    settings = get_settings()
    try:
        cls = resolve_kind(kind)
    except OperatorError as e:
        _print_error(e, json_output)
        raise typer.Exit(code=1) from None

    if name is not None:
        key = _key(name, namespace)
        with open_store(settings.db_url) as store:
            try:
                resource = store.get(cls, key)
            except OperatorError as e:
                _print_error(e, json_output)
                raise typer.Exit(code=1) from None
        if json_output:
            _print_json(resource.to_manifest())
        else:
            _print_raw(manifest_to_yaml_string(resource), end="")
        return

    scope = None if all_namespaces else namespace or settings.default_namespace
    with open_store(settings.db_url) as store:
        resources = store.list(cls, scope)

    if json_output:
        _print_json([r.to_manifest() for r in resources])
        return
    if not resources:
        console.print(f"[yellow]No {cls.kind} resources found[/yellow]")
        return
    console.print(f"[bold]Found {len(resources)} {cls.kind}(s):[/bold]")
    for resource in resources:
        console.print(f"  [green]{resource.key}[/green]")


@app.command()
def delete(
    kind: Annotated[str, typer.Argument(help="Resource kind")],
    name: Annotated[str, typer.Argument(help="Resource name (NAME or NAMESPACE/NAME)")],
    namespace: Annotated[
        str | None,
        typer.Option("--namespace", "-n", help="Namespace"),
    ] = None,
) -> None:
    """Delete a resource from the object store."""
    from osbuild_operator.resources.io import resolve_kind
    from osbuild_operator.store.service import open_store

    settings = get_settings()
    try:
        cls = resolve_kind(kind)
    except OperatorError as e:
        _print_error(e, json_output=False)
        raise typer.Exit(code=1) from None

    key = _key(name, namespace)
    failure: OperatorError | None = None
    with open_store(settings.db_url) as store:
        try:
            store.delete(cls, key)
        except OperatorError as e:
            failure = e

    if failure is not None:
        _print_error(failure, json_output=False)
        raise typer.Exit(code=1)
    console.print(f"[green]{cls.kind} {key} deleted[/green]")


@app.command()
def reconcile(
    name: Annotated[
        str, typer.Argument(help="ImageBuilderImage name (NAME or NAMESPACE/NAME)")
    ],
    namespace: Annotated[
        str | None,
        typer.Option("--namespace", "-n", help="Namespace"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Run one reconciliation pass for an ImageBuilderImage.

    Objects created before a failure are kept, as in the object store
    the pass normally writes to.
    """
    from osbuild_operator.controller.reconciler import reconcile as reconcile_image
    from osbuild_operator.store.service import open_store

    settings = get_settings()
    key = _key(name, namespace)

    failure: OperatorError | None = None
    with open_store(settings.db_url) as store:
        try:
            result = reconcile_image(store, key, settings)
        except OperatorError as e:
            failure = e

    if failure is not None:
        _print_error(failure, json_output)
        raise typer.Exit(code=1)

    if json_output:
        _print_json(result.to_dict())
        return

    if not result.success:
        console.print(f"[yellow]{result.message}[/yellow]")
        return
    for kind, created_key in result.created:
        console.print(f"[green]{kind} {created_key} created[/green]")
    console.print(f"[bold]{result.message}[/bold]")


@app.command()
def render(
    path: Annotated[Path, typer.Argument(help="ImageBuilderImage manifest file")],
    iso: Annotated[
        bool,
        typer.Option("--iso", help="Print only the ISO blueprint"),
    ] = False,
    base: Annotated[
        bool,
        typer.Option("--base", help="Print only the base blueprint"),
    ] = False,
) -> None:
    """Render the blueprints of ImageBuilderImage manifests without storing them."""
    from osbuild_operator.blueprints.render import generate_blueprints
    from osbuild_operator.controller.reconciler import default_spec
    from osbuild_operator.resources.image import ImageBuilderImage
    from osbuild_operator.resources.io import load_manifests

    if not path.exists():
        console.print(f"[red]File not found: {path}[/red]")
        raise typer.Exit(code=1)

    try:
        resources = load_manifests(path, get_settings().default_namespace)
        requests = [r for r in resources if isinstance(r, ImageBuilderImage)]
        if not requests:
            console.print(f"[yellow]No ImageBuilderImage in {path}[/yellow]")
            raise typer.Exit(code=1)
        for request in requests:
            blueprints = generate_blueprints(default_spec(request))
            if not iso:
                _print_raw(f"# {request.key} (base)")
                _print_raw(blueprints.base, end="")
            if not base:
                _print_raw(f"# {request.key} (iso)")
                _print_raw(blueprints.iso, end="")
    except OperatorError as e:
        _print_error(e, json_output=False)
        raise typer.Exit(code=1) from None


compose_app = typer.Typer(help="Inspect compose jobs on a compose API")
app.add_typer(compose_app, name="compose")


@compose_app.command("status")
def compose_status_cmd(
    build_id: Annotated[str, typer.Argument(help="Compose build id")],
    api: Annotated[
        str,
        typer.Option("--api", help="Compose API base URL (…/api/v1)"),
    ],
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show whether a compose is queued, failed or finished."""
    from osbuild_operator.compose.client import (
        ComposeApiError,
        compose_status,
        create_client,
    )

    settings = get_settings()
    try:
        with create_client(api, timeout=settings.http_timeout) as client:
            status = compose_status(client, build_id)
    except ComposeApiError as e:
        console.print(f"[red]Error ({e.code}): {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from None

    if json_output:
        _print_json({"build_id": build_id, "status": status.value})
    else:
        console.print(f"Compose {build_id}: [bold]{status.value}[/bold]")


@compose_app.command("wait")
def compose_wait_cmd(
    build_id: Annotated[str, typer.Argument(help="Compose build id")],
    api: Annotated[
        str,
        typer.Option("--api", help="Compose API base URL (…/api/v1)"),
    ],
    interval: Annotated[
        int | None,
        typer.Option("--interval", help="Seconds between queue checks"),
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", help="Give up after this many seconds"),
    ] = None,
) -> None:
    """Wait until a compose leaves the queue; exit 1 if it failed."""
    from osbuild_operator.compose.client import (
        ComposeApiError,
        ComposeFailedError,
        ComposeTimeoutError,
        create_client,
        wait_for_compose,
    )

    settings = get_settings()
    poll_interval = interval if interval is not None else settings.poll_interval
    try:
        with create_client(api, timeout=settings.http_timeout) as client:
            entry = wait_for_compose(
                client, build_id, poll_interval=poll_interval, timeout=timeout
            )
    except (ComposeApiError, ComposeFailedError, ComposeTimeoutError) as e:
        console.print(f"[red]Error ({e.code}): {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from None

    if entry is None:
        console.print(f"[yellow]Compose {build_id} is not listed as finished[/yellow]")
    else:
        console.print(f"[green]Compose {build_id} finished[/green]")
        _print_json(entry)


if __name__ == "__main__":
    app()
